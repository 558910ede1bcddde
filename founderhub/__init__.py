"""founderhub - Startup profile workspace: pitch deck staging, team, canvas and dashboard."""

__version__ = "0.1.0"

from .pitch_deck import PitchDeckSession
from .workspace import Workspace, open_workspace

__all__ = [
    "PitchDeckSession",
    "Workspace",
    "open_workspace",
]
