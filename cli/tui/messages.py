"""
Custom Textual messages for thread-safe UI communication.

These messages enable background workers to safely update the UI
by posting messages that are handled on the main thread.
"""

from typing import Any, Optional

from textual.message import Message


class LogMessage(Message):
    """Add a log entry to the activity log."""

    def __init__(self, text: str, style: str = "", level: str = "info") -> None:
        self.text = text
        self.style = style
        self.level = level  # info, warning, error, success
        super().__init__()


class DeckChanged(Message):
    """The pitch-deck session notified a state change."""


class OperationStarted(Message):
    """A pitch-deck operation began in a worker."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__()


class OperationFinished(Message):
    """A pitch-deck operation completed."""

    def __init__(self, operation: str, result: Optional[Any] = None) -> None:
        self.operation = operation
        self.result = result
        super().__init__()


class OperationFailed(Message):
    """A pitch-deck operation raised an error."""

    def __init__(self, operation: str, error: str, error_type: str = "") -> None:
        self.operation = operation
        self.error = error
        self.error_type = error_type
        super().__init__()
