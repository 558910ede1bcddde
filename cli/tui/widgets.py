"""
Custom Textual widgets for the FounderHub TUI.

Widgets render session state; they never mutate sessions themselves.
"""

from pathlib import Path
from typing import Iterable, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, DirectoryTree, Label, Static

from founderhub.models import DashboardSummary, StagedEntry
from founderhub.utils.formatting import display_file_name, format_file_size

from .constants import (
    ALL_SUPPORTED_EXTENSIONS,
    COLOR_DOCUMENT,
    COLOR_VIDEO,
    DOCUMENT_EXTENSIONS,
    VIDEO_EXTENSIONS,
)


# =============================================================================
# FILE EXPLORER
# =============================================================================

class FilteredDirectoryTree(DirectoryTree):
    """DirectoryTree filtered to show only pitch-deck formats."""

    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        """Filter to show only supported file types."""
        return [p for p in paths if p.is_dir() or p.suffix.lower() in ALL_SUPPORTED_EXTENSIONS]

    def render_label(self, node, base_style, style) -> Text:
        """Color-code files by type."""
        label = super().render_label(node, base_style, style)
        if node.data and hasattr(node.data, 'path') and node.data.path.is_file():
            ext = node.data.path.suffix.lower()
            if ext in VIDEO_EXTENSIONS:
                label.stylize(f"bold {COLOR_VIDEO}")
            elif ext in DOCUMENT_EXTENSIONS:
                label.stylize(f"bold {COLOR_DOCUMENT}")
        return label


class FileExplorer(Container):
    """Directory tree rooted at the working directory."""

    DEFAULT_CSS = """
    FileExplorer {
        height: 1fr;
        background: #0f172a;
    }

    FileExplorer FilteredDirectoryTree {
        height: 1fr;
        scrollbar-color: #38bdf8;
        scrollbar-background: #1e293b;
        background: #0f172a;
    }
    """

    def __init__(self, base_path: str = ".", **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_path = Path(base_path).resolve()

    def compose(self) -> ComposeResult:
        yield FilteredDirectoryTree(str(self.base_path), id="tree")

    def reload(self) -> None:
        self.query_one("#tree", FilteredDirectoryTree).reload()


# =============================================================================
# STAGED FILES
# =============================================================================

class StagedFileTable(DataTable):
    """One row per staged entry, in deck order."""

    DEFAULT_CSS = """
    StagedFileTable {
        height: 1fr;
        background: #0c1322;
        border: solid #1e3a5f;
        margin: 0 1;
    }
    """

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.zebra_stripes = True
        self.add_columns("#", "File", "Type", "Size", "Preview")

    def show_entries(self, entries: Iterable[StagedEntry]) -> None:
        self.clear()
        for i, entry in enumerate(entries):
            staged = entry.file
            thumb = entry.thumbnail
            self.add_row(
                str(i + 1),
                f"{thumb.icon.glyph} {display_file_name(staged.name)}",
                (staged.extension or "?").upper(),
                format_file_size(staged.size_bytes) if staged.size_bytes else "-",
                "icon" if thumb.is_generic else thumb.kind.value.replace("_", " "),
                key=str(i),
            )

    @property
    def selected_index(self) -> Optional[int]:
        if self.row_count == 0:
            return None
        return self.cursor_row


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardPanel(Static):
    """Read-only summary of the founder's profile."""

    DEFAULT_CSS = """
    DashboardPanel {
        height: auto;
        padding: 1;
        background: #1e293b;
        border: solid #334155;
        margin: 1;
    }
    """

    summary: reactive[Optional[DashboardSummary]] = reactive(None)

    def watch_summary(self, summary: Optional[DashboardSummary]) -> None:
        if summary is None:
            self.update("No profile loaded")
            return

        info = Text()
        info.append(f"{summary.company_name or 'Your startup'}\n", style="bold #38bdf8")
        if summary.tagline:
            info.append(f"{summary.tagline}\n", style="italic #94a3b8")
        info.append("\n")
        self._row(info, "Profile", f"{summary.profile_completion:.0f}%")
        if summary.funding_goal:
            self._row(info, "Funding", f"${summary.funding_goal:,} {summary.funding_phase or ''}")
        deck = f"{summary.pitch_deck_file_count} file(s)"
        if summary.pitch_deck_submitted and summary.pitch_deck_submitted_at:
            deck += f" ✓ {summary.pitch_deck_submitted_at:%Y-%m-%d}"
        self._row(info, "Pitch deck", deck)
        self._row(info, "Team", f"{summary.team_member_count} ({summary.team_completion:.0f}%)")
        self._row(info, "Canvas", f"{summary.canvas_completed_sections}/9")
        self.update(info)

    @staticmethod
    def _row(text: Text, label: str, value: str) -> None:
        text.append(f"{label:<11}", style="#64748b")
        text.append(f"{value}\n", style="white")


# =============================================================================
# CONFIRMATION
# =============================================================================

class ConfirmRemoveScreen(ModalScreen[bool]):
    """Yes/no prompt before a staged file is removed."""

    DEFAULT_CSS = """
    ConfirmRemoveScreen {
        align: center middle;
    }

    ConfirmRemoveScreen > Vertical {
        width: 50;
        height: auto;
        padding: 1 2;
        background: #1e293b;
        border: thick #ef4444;
    }

    ConfirmRemoveScreen Horizontal {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    ConfirmRemoveScreen Button {
        margin: 0 1;
    }
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, file_name: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.file_name = file_name

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(f"Remove [b]{self.file_name}[/b] from the pitch deck?")
            with Horizontal():
                yield Button("Remove", variant="error", id="confirm-yes")
                yield Button("Keep", variant="primary", id="confirm-no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def action_cancel(self) -> None:
        self.dismiss(False)
