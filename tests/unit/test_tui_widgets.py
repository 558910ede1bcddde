"""
Unit tests for TUI widget classes.
Tests the custom Textual widgets for the FounderHub TUI.
"""
import pytest
from pathlib import Path


class TestFilteredDirectoryTree:
    """Test FilteredDirectoryTree widget logic."""

    def test_supported_extensions(self):
        from cli.tui.constants import ALL_SUPPORTED_EXTENSIONS

        for ext in (".pdf", ".mp4", ".mov", ".avi", ".mkv", ".wmv"):
            assert ext in ALL_SUPPORTED_EXTENSIONS
        assert ".txt" not in ALL_SUPPORTED_EXTENSIONS

    def test_filter_paths_keeps_directories(self, temp_dir):
        from cli.tui.widgets import FilteredDirectoryTree

        subdir = temp_dir / "decks"
        subdir.mkdir()
        tree = FilteredDirectoryTree(str(temp_dir))

        assert list(tree.filter_paths([subdir])) == [subdir]

    def test_filter_paths_keeps_supported_files(self, deck_files):
        from cli.tui.widgets import FilteredDirectoryTree

        tree = FilteredDirectoryTree(str(deck_files["pdf"].parent))
        paths = [deck_files["pdf"], deck_files["mp4"], deck_files["mov"]]

        assert list(tree.filter_paths(paths)) == paths

    def test_filter_paths_excludes_unsupported_files(self, deck_files, temp_dir):
        from cli.tui.widgets import FilteredDirectoryTree

        upper = temp_dir / "DECK.PDF"
        upper.write_bytes(b"%PDF")
        tree = FilteredDirectoryTree(str(temp_dir))

        result = list(tree.filter_paths([deck_files["txt"], upper]))

        assert result == [upper]


class TestFileExplorer:

    def test_base_path_resolved(self, temp_dir):
        from cli.tui.widgets import FileExplorer

        explorer = FileExplorer(str(temp_dir))
        assert explorer.base_path == Path(temp_dir).resolve()


class TestStagedFileTable:

    def test_no_selection_when_empty(self):
        from cli.tui.widgets import StagedFileTable

        assert StagedFileTable().selected_index is None


class TestConfirmRemoveScreen:

    def test_keeps_file_name(self):
        from cli.tui.widgets import ConfirmRemoveScreen

        screen = ConfirmRemoveScreen("deck.pdf")
        assert screen.file_name == "deck.pdf"

    def test_escape_bound_to_cancel(self):
        from cli.tui.widgets import ConfirmRemoveScreen

        assert ("escape", "cancel", "Cancel") in ConfirmRemoveScreen.BINDINGS


class TestConstants:

    def test_every_operation_has_label(self):
        from cli.tui.constants import OPERATION_LABELS
        from founderhub.models import OperationState

        for state in OperationState:
            if state is not OperationState.IDLE:
                assert state.value in OPERATION_LABELS
