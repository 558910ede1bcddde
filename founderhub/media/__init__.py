"""Preview generation for staged pitch-deck files."""
from .thumbnails import ThumbnailGenerator

__all__ = ["ThumbnailGenerator"]
