"""
Application configuration using Pydantic Settings.
Manages environment variables and default settings for FounderHub.
"""
from __future__ import annotations

import shutil
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pathlib import Path


# Allowed FFmpeg binary names for security validation
ALLOWED_FFMPEG_BINARIES = frozenset({
    "ffmpeg", "ffmpeg.exe",
})

# Allowed paths where FFmpeg binaries can be located (in addition to PATH)
ALLOWED_FFMPEG_PATHS = frozenset({
    r"C:\ffmpeg\bin\ffmpeg.exe",
    r"C:\Program Files\ffmpeg\bin\ffmpeg.exe",
    "/usr/bin/ffmpeg",
    "/usr/local/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
})

STORAGE_MODES = frozenset({"auto", "local", "supabase"})


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    All settings can be overridden with environment variables using the aliases
    or the field names in uppercase (e.g., SUPABASE_URL, MAX_PITCH_DECK_MB).
    """
    # Backend
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_key: str | None = Field(default=None, alias="SUPABASE_KEY")
    storage_mode: str = Field("auto", alias="FOUNDERHUB_STORAGE_MODE")
    user_email: str | None = Field(default=None, alias="FOUNDERHUB_EMAIL")
    user_password: str | None = Field(default=None, alias="FOUNDERHUB_PASSWORD")
    local_user_id: str = Field("local-founder", alias="FOUNDERHUB_LOCAL_USER")

    # Buckets
    pitch_deck_bucket: str = Field("pitch-deck-files", alias="PITCH_DECK_BUCKET")
    avatar_bucket: str = Field("avatars", alias="AVATAR_BUCKET")

    # Upload limits
    max_pitch_deck_mb: int = Field(100, alias="MAX_PITCH_DECK_MB")
    max_avatar_mb: int = Field(5, alias="MAX_AVATAR_MB")
    pitch_deck_extensions: List[str] = Field(
        default_factory=lambda: ["pdf", "mp4", "avi", "mov", "mkv", "wmv"]
    )
    avatar_extensions: List[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "gif", "webp"]
    )

    # Thumbnails
    ffmpeg_bin: str = "ffmpeg"
    thumbnail_max_width: int = Field(200, alias="THUMBNAIL_MAX_WIDTH")
    thumbnail_quality: int = Field(75, alias="THUMBNAIL_QUALITY")

    # Data Organization
    data_dir: Path = Path("data")
    thumbnail_dir: Path = Field(default_factory=lambda: Path("data/thumbnails"))
    local_storage_dir: Path = Field(default_factory=lambda: Path("data/storage"))
    local_tables_dir: Path = Field(default_factory=lambda: Path("data/tables"))

    # Environment Settings
    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator('storage_mode', mode='after')
    @classmethod
    def validate_storage_mode(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in STORAGE_MODES:
            raise ValueError(f"storage mode must be one of: {', '.join(sorted(STORAGE_MODES))}")
        return v

    @field_validator('thumbnail_quality', mode='after')
    @classmethod
    def validate_quality(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("thumbnail quality must be between 1 and 100")
        return v

    @field_validator('ffmpeg_bin', mode='after')
    @classmethod
    def validate_ffmpeg_binary(cls, v: str) -> str:
        """
        Validate FFmpeg binary path for security.

        Prevents command injection by validating the binary is either:
        1. A simple binary name that will be found in PATH
        2. A known safe absolute path
        """
        if not v:
            raise ValueError("FFmpeg binary path cannot be empty")

        # Binary name is valid even when not found; extraction then degrades
        if v in ALLOWED_FFMPEG_BINARIES:
            return v

        if v in ALLOWED_FFMPEG_PATHS:
            return v

        if '/' in v or '\\' in v:
            try:
                resolved = str(Path(v).resolve())
                if resolved in ALLOWED_FFMPEG_PATHS:
                    return v
            except (OSError, ValueError):
                pass

            raise ValueError(
                f"FFmpeg binary path '{v}' is not in the allowed paths list. "
                f"Use a simple binary name like 'ffmpeg' or add the path to ALLOWED_FFMPEG_PATHS."
            )

        raise ValueError(
            f"Unknown FFmpeg binary name '{v}'. "
            f"Allowed binary names: {', '.join(sorted(ALLOWED_FFMPEG_BINARIES))}"
        )

    @property
    def max_pitch_deck_bytes(self) -> int:
        return self.max_pitch_deck_mb * 1024 * 1024

    @property
    def max_avatar_bytes(self) -> int:
        return self.max_avatar_mb * 1024 * 1024

    @property
    def use_supabase(self) -> bool:
        """Resolve the effective backend from the configured mode."""
        if self.storage_mode == "supabase":
            return True
        if self.storage_mode == "local":
            return False
        return bool(self.supabase_url and self.supabase_key)


# Global settings instance - automatically loads from environment and .env file
SETTINGS = Settings()


def ffmpeg_available() -> bool:
    return shutil.which(SETTINGS.ffmpeg_bin) is not None


def mask_api_key(api_key: str | None) -> str:
    """
    Mask a Supabase key for safe display.

    Shows only the key family (``sb_publishable_``, ``sb_secret_`` or a JWT
    marker) followed by ``***configured***``. Never reveals key material.

    Args:
        api_key: Key to mask

    Returns:
        Masked key string
    """
    if not api_key:
        return "Not configured"

    for prefix in ("sb_publishable_", "sb_secret_"):
        if api_key.startswith(prefix):
            return f"{prefix}***configured***"

    if api_key.count(".") == 2 and api_key.startswith("eyJ"):
        return "jwt ***configured***"

    return "***configured***"


def get_configuration_summary() -> dict:
    """
    Get a summary of all configuration for display.

    Returns:
        Dictionary with all configuration values (sensitive values masked)
    """
    return {
        'backend': 'supabase' if SETTINGS.use_supabase else 'local',
        'storage_mode': SETTINGS.storage_mode,
        'supabase_url': SETTINGS.supabase_url or 'Not configured',
        'supabase_key': mask_api_key(SETTINGS.supabase_key),
        'user_email': SETTINGS.user_email or 'Not configured',
        'pitch_deck_bucket': SETTINGS.pitch_deck_bucket,
        'avatar_bucket': SETTINGS.avatar_bucket,
        'max_pitch_deck_mb': SETTINGS.max_pitch_deck_mb,
        'max_avatar_mb': SETTINGS.max_avatar_mb,
        'pitch_deck_extensions': ", ".join(SETTINGS.pitch_deck_extensions),
        'thumbnail_max_width': SETTINGS.thumbnail_max_width,
        'thumbnail_quality': SETTINGS.thumbnail_quality,
        'ffmpeg_binary': SETTINGS.ffmpeg_bin,
        'ffmpeg_available': ffmpeg_available(),
        'data_directory': str(SETTINGS.data_dir),
        'thumbnail_directory': str(SETTINGS.thumbnail_dir),
    }
