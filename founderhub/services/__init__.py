"""Service layer for dependency injection."""
from .interfaces import (
    AuthInterface,
    DatabaseInterface,
    DocumentRendererInterface,
    FileChooserInterface,
    ObjectStorageInterface,
    VideoFrameExtractorInterface,
)
from .container import ServiceContainer
from .implementations import (
    FFmpegFrameExtractor,
    LocalAuth,
    LocalDatabase,
    LocalObjectStorage,
    Pdf2ImageRenderer,
    PresetFileChooser,
    PromptFileChooser,
    SupabaseAuth,
    SupabaseDatabase,
    SupabaseObjectStorage,
    register_default_services,
)

__all__ = [
    "AuthInterface",
    "DatabaseInterface",
    "DocumentRendererInterface",
    "FileChooserInterface",
    "ObjectStorageInterface",
    "VideoFrameExtractorInterface",
    "ServiceContainer",
    "FFmpegFrameExtractor",
    "LocalAuth",
    "LocalDatabase",
    "LocalObjectStorage",
    "Pdf2ImageRenderer",
    "PresetFileChooser",
    "PromptFileChooser",
    "SupabaseAuth",
    "SupabaseDatabase",
    "SupabaseObjectStorage",
    "register_default_services",
]
