"""
FounderHub TUI - Pitch Deck Application

Terminal front end for the staged pitch-deck workflow with a dashboard panel.
Long operations run in worker threads; the deck panel shows a loading
indicator while one is outstanding.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional

from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Button,
    DirectoryTree,
    Footer,
    Header,
    Input,
    RichLog,
    Static,
)

from founderhub.models import SelectionResult, SubmissionOutcome
from founderhub.services.implementations import PresetFileChooser
from founderhub.utils.exceptions import FounderHubError, OperationInProgressError
from founderhub.workspace import Workspace, open_workspace

from .constants import OPERATION_LABELS, STATUS_BUSY, STATUS_READY, STATUS_SUBMITTED
from .messages import (
    DeckChanged,
    LogMessage,
    OperationFailed,
    OperationFinished,
    OperationStarted,
)
from .widgets import (
    ConfirmRemoveScreen,
    DashboardPanel,
    FileExplorer,
    StagedFileTable,
)


class FounderHubApp(App):
    """
    TUI for building and submitting a pitch deck.

    Features:
    - File browser filtered to pitch-deck formats
    - Staged file list with previews and removal confirmation
    - Submission with a blocking loading indicator
    - Dashboard panel summarizing the whole profile
    """

    CSS = """
    Screen {
        background: #0a0e1a;
        color: #e2e8f0;
    }

    Header {
        background: #0f172a;
        color: #38bdf8;
    }

    #main-container {
        height: 1fr;
    }

    #left-panel {
        width: 30%;
        background: #0f172a;
        border: solid #1e3a5f;
        margin: 0 0 0 1;
    }

    #center-panel {
        width: 42%;
        background: #0f172a;
        border: solid #1e3a5f;
        margin: 0 1;
    }

    #right-panel {
        width: 28%;
        background: #0f172a;
        border: solid #1e3a5f;
        margin: 0 1 0 0;
    }

    .panel-header {
        text-style: bold;
        color: #818cf8;
        padding: 1;
        background: #1e293b;
        text-align: center;
        border-bottom: solid #334155;
    }

    #path-input {
        margin: 1;
    }

    #deck-buttons {
        height: auto;
        padding: 1;
    }

    #deck-buttons Button {
        margin: 0 1 0 0;
    }

    #activity-log {
        height: 1fr;
        background: #0c1322;
        border: solid #1e3a5f;
        margin: 1;
        padding: 0 1;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: #1e293b;
        color: #94a3b8;
        padding: 0 2;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("a", "add_files", "Add"),
        Binding("d", "remove_file", "Remove"),
        Binding("s", "submit", "Submit"),
        Binding("f5", "reload", "Reload"),
    ]

    TITLE = "FOUNDERHUB"
    SUB_TITLE = "Pitch Deck"

    def __init__(self, workspace: Optional[Workspace] = None, base_path: str = ".", **kwargs) -> None:
        super().__init__(**kwargs)
        self.workspace = workspace
        self.base_path = base_path

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="main-container"):
            with Vertical(id="left-panel"):
                yield Static("◆ FILES", classes="panel-header")
                yield FileExplorer(self.base_path, id="file-explorer")
                yield Input(placeholder="Paths to add, comma separated", id="path-input")

            with Vertical(id="center-panel"):
                yield Static("◆ PITCH DECK", classes="panel-header")
                with Vertical(id="deck-panel"):
                    yield StagedFileTable(id="deck-table")
                    with Horizontal(id="deck-buttons"):
                        yield Button("Add", id="btn-add", variant="primary")
                        yield Button("Remove", id="btn-remove", variant="warning")
                        yield Button("Submit", id="btn-submit", variant="success")

            with Vertical(id="right-panel"):
                yield Static("◆ DASHBOARD", classes="panel-header")
                yield DashboardPanel(id="dashboard")
                yield Static("◆ ACTIVITY", classes="panel-header")
                yield RichLog(id="activity-log", highlight=True, markup=True, wrap=True)

        yield Static(STATUS_READY, id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        if self.workspace is None:
            self.workspace = open_workspace()
        self.workspace.pitch_deck.add_listener(self._on_deck_notified)
        self._log("✦ FounderHub TUI initialized", "bold cyan")
        self._log("Pick files in the tree or type paths, then press [A] to add", "dim")
        self.action_reload()

    def on_unmount(self) -> None:
        if self.workspace is not None:
            self.workspace.pitch_deck.remove_listener(self._on_deck_notified)

    def _on_deck_notified(self) -> None:
        # Called from whichever thread mutated the session
        self.post_message(DeckChanged())

    # ─────────────────────────────────────────────────────────────────────────
    # Event Handlers
    # ─────────────────────────────────────────────────────────────────────────

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        """Append the chosen file to the path input."""
        field = self.query_one("#path-input", Input)
        current = [p.strip() for p in field.value.split(",") if p.strip()]
        if str(event.path) not in current:
            current.append(str(event.path))
        field.value = ", ".join(current)
        self._log(f"Picked: [cyan]{event.path.name}[/]")

    @on(Button.Pressed, "#btn-add")
    def on_add_pressed(self) -> None:
        self.action_add_files()

    @on(Button.Pressed, "#btn-remove")
    def on_remove_pressed(self) -> None:
        self.action_remove_file()

    @on(Button.Pressed, "#btn-submit")
    def on_submit_pressed(self) -> None:
        self.action_submit()

    @on(Input.Submitted, "#path-input")
    def on_path_submitted(self) -> None:
        self.action_add_files()

    def on_deck_changed(self, msg: DeckChanged) -> None:
        self._refresh_views()

    def on_log_message(self, msg: LogMessage) -> None:
        self._log(msg.text, msg.style)

    def on_operation_started(self, msg: OperationStarted) -> None:
        self.query_one("#deck-panel").loading = True
        self._update_status(OPERATION_LABELS.get(msg.operation, msg.operation))

    def on_operation_finished(self, msg: OperationFinished) -> None:
        self.query_one("#deck-panel").loading = False
        result = msg.result

        if isinstance(result, SelectionResult):
            for failure in result.errors:
                self._log(f"✗ {failure.file_name}: {failure.reason}", "red")
            if result.accepted:
                self._log(f"✓ Added {len(result.accepted)} file(s)", "green")
                self.query_one("#path-input", Input).value = ""
            elif result.cancelled:
                self._log("No files chosen", "dim")
        elif isinstance(result, SubmissionOutcome):
            style = "bold green" if result.submitted else "yellow"
            self._log(result.message, style)
            if result.submitted:
                self.notify(result.message, title="Pitch deck")
        elif msg.operation == "loading":
            self._log("Profile loaded", "dim")

        self._refresh_views()

    def on_operation_failed(self, msg: OperationFailed) -> None:
        self.query_one("#deck-panel").loading = False
        if msg.error_type == OperationInProgressError.__name__:
            self._log(f"⚠ {msg.error}", "yellow")
        else:
            self._log(f"✗ {msg.error}", "bold red")
            self.notify(msg.error, title="Error", severity="error")
        self._refresh_views()

    # ─────────────────────────────────────────────────────────────────────────
    # Actions
    # ─────────────────────────────────────────────────────────────────────────

    def action_add_files(self) -> None:
        raw = self.query_one("#path-input", Input).value
        paths = [Path(p.strip()).expanduser() for p in raw.split(",") if p.strip()]
        if not paths:
            self._log("⚠ Pick or type at least one file first", "yellow")
            return
        deck = self.workspace.pitch_deck
        self.run_operation("selecting", lambda: deck.add_files(PresetFileChooser(paths)))

    def action_remove_file(self) -> None:
        deck = self.workspace.pitch_deck
        index = self.query_one("#deck-table", StagedFileTable).selected_index
        if index is None or index >= deck.file_count:
            self._log("⚠ Select a staged file first", "yellow")
            return
        if deck.is_submitted:
            self._log("⚠ Pitch deck has been submitted; files are read-only", "yellow")
            return

        name = deck.files[index].name

        def _confirmed(confirmed: bool | None) -> None:
            if not confirmed:
                self._log(f"Kept {name}", "dim")
                return
            # The deck may have changed while the dialog was open
            if index >= deck.file_count or deck.files[index].name != name:
                self._log(f"⚠ {name} is no longer at that position; nothing removed", "yellow")
                self._refresh_views()
                return
            try:
                deck.remove_file(index)
                self._log(f"Removed {name}", "green")
            except FounderHubError as e:
                self._log(f"✗ {e.message}", "bold red")

        self.push_screen(ConfirmRemoveScreen(name), _confirmed)

    def action_submit(self) -> None:
        deck = self.workspace.pitch_deck
        self.run_operation("submitting", deck.submit)

    def action_reload(self) -> None:
        workspace = self.workspace

        def _load() -> bool:
            user_id = workspace.ensure_signed_in()
            self.post_message(LogMessage(f"Signed in as {user_id}", "dim"))
            workspace.load()
            return True

        self.run_operation("loading", _load)

    # ─────────────────────────────────────────────────────────────────────────
    # Background Worker
    # ─────────────────────────────────────────────────────────────────────────

    @work(thread=True, group="operations")
    def run_operation(self, operation: str, func: Callable[[], Any]) -> None:
        """Run one session operation off the UI thread and report back."""
        self.post_message(OperationStarted(operation))
        try:
            result = func()
        except FounderHubError as e:
            self.post_message(OperationFailed(operation, e.message, type(e).__name__))
            return
        except Exception as e:
            self.post_message(OperationFailed(operation, str(e), type(e).__name__))
            return
        self.post_message(OperationFinished(operation, result))

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _log(self, text: str, style: str = "") -> None:
        ts = datetime.now().strftime("%H:%M:%S")
        msg = Text()
        msg.append(f"[{ts}] ", style="dim")
        if "[" in text and "/" in text:
            msg.append_text(Text.from_markup(text))
        else:
            msg.append(text, style=style)
        self.query_one("#activity-log", RichLog).write(msg)

    def _refresh_views(self) -> None:
        deck = self.workspace.pitch_deck
        self.query_one("#deck-table", StagedFileTable).show_entries(deck.entries)
        self.query_one("#dashboard", DashboardPanel).summary = self.workspace.dashboard()

        submitted = deck.is_submitted
        self.query_one("#btn-add", Button).disabled = submitted
        self.query_one("#btn-remove", Button).disabled = submitted
        self.query_one("#btn-submit", Button).disabled = not deck.can_submit
        self._update_status()

    def _update_status(self, busy_label: str = "") -> None:
        deck = self.workspace.pitch_deck
        parts: List[str] = []
        if busy_label:
            parts.append(f"[#38bdf8]{STATUS_BUSY}[/] {busy_label}")
        elif deck.is_submitted:
            parts.append(f"[#22c55e]{STATUS_SUBMITTED}[/]")
        else:
            parts.append(f"[#22c55e]{STATUS_READY}[/]")
        parts.append(f"{deck.file_count} file(s)")
        if deck.submitted_at:
            parts.append(f"[dim]submitted {deck.submitted_at:%Y-%m-%d %H:%M}[/]")
        self.query_one("#status-bar", Static).update(Text.from_markup(" │ ".join(parts)))


# =============================================================================
# ENTRY POINT
# =============================================================================

def run(workspace: Optional[Workspace] = None) -> None:
    """Launch the FounderHub TUI."""
    app = FounderHubApp(workspace)
    app.run()


if __name__ == "__main__":
    run()
