"""
FounderHub TUI - Textual-based Terminal User Interface

Pitch-deck staging and submission with a dashboard panel.

Usage:
    from cli.tui import run
    run()
"""

from .app import FounderHubApp, run
from .widgets import ConfirmRemoveScreen, DashboardPanel, StagedFileTable

__all__ = [
    "FounderHubApp",
    "ConfirmRemoveScreen",
    "DashboardPanel",
    "StagedFileTable",
    "run",
]
