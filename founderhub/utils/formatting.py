"""Display and naming helpers shared by the CLI, the TUI and storage."""
from datetime import datetime
from typing import Optional

from .validation import get_extension

CONTENT_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
    'pdf': 'application/pdf',
    'mp4': 'video/mp4',
    'avi': 'video/x-msvideo',
    'mov': 'video/quicktime',
    'mkv': 'video/x-matroska',
    'wmv': 'video/x-ms-wmv',
}

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def content_type_for(extension: str) -> str:
    """Map a file extension (without dot) to its MIME type."""
    return CONTENT_TYPES.get(extension.lower().lstrip('.'), DEFAULT_CONTENT_TYPE)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as B, KB, MB or GB with one decimal."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    if size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def display_file_name(file_name: str, max_length: int = 15) -> str:
    """
    Shorten a file name for list display.

    Stored names look like ``<deck>_<index>_<millis>.<ext>``; the leading
    ids are dropped so only the meaningful part is shown.
    """
    base = file_name.replace('\\', '/').rsplit('/', 1)[-1]
    parts = base.split('_')
    if len(parts) >= 3:
        meaningful = '_'.join(parts[2:])
        if '.' in meaningful:
            stem, _, extension = meaningful.rpartition('.')
            return f"{stem}.{extension}"
        return meaningful

    if len(base) > max_length:
        return f"{base[:12]}..."
    return base


def pitch_deck_object_key(
    user_id: str,
    index: int,
    original_name: str,
    deck_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Build ``{user}/{deck or temp}_{index}_{millis}.{ext}`` for an upload."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    extension = get_extension(original_name)
    return f"{user_id}/{deck_id or 'temp'}_{index}_{millis}.{extension}"


def avatar_object_key(user_id: str, original_name: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"{user_id}/avatar_{millis}.{get_extension(original_name)}"
