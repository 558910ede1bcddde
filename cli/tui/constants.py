"""
TUI Constants and Configuration.

Centralizes colors, icons and file-type sets for the Textual TUI.
"""

from founderhub.models import DOCUMENT_EXTENSIONS as _DOCUMENT, VIDEO_EXTENSIONS as _VIDEO

# =============================================================================
# FILE TYPE EXTENSIONS (with dot, as Path.suffix returns them)
# =============================================================================

DOCUMENT_EXTENSIONS = frozenset(f".{ext}" for ext in _DOCUMENT)
VIDEO_EXTENSIONS = frozenset(f".{ext}" for ext in _VIDEO)
ALL_SUPPORTED_EXTENSIONS = DOCUMENT_EXTENSIONS | VIDEO_EXTENSIONS


# =============================================================================
# COLORS
# =============================================================================

COLOR_DOCUMENT = "#f472b6"
COLOR_VIDEO = "#22d3ee"


# =============================================================================
# UI TEXT
# =============================================================================

STATUS_READY = "● Ready"
STATUS_BUSY = "● Working"
STATUS_SUBMITTED = "✓ Submitted"

OPERATION_LABELS = {
    "loading": "Loading pitch deck...",
    "selecting": "Checking files...",
    "staging": "Generating previews...",
    "removing": "Removing file...",
    "submitting": "Uploading pitch deck...",
}
