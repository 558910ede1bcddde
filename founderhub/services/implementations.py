"""Concrete implementations of service interfaces.

Supabase-backed storage, tables and auth for normal use, plus a local mode
(JSON table files and a directory object store) used when no Supabase
project is configured.
"""
import logging
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.prompt import Prompt

from .container import ServiceContainer
from .interfaces import (
    AuthInterface,
    DatabaseInterface,
    DocumentRendererInterface,
    FileChooserInterface,
    ObjectStorageInterface,
    VideoFrameExtractorInterface,
)
from ..utils.config import SETTINGS, Settings
from ..utils.error_handling import handle_api_errors
from ..utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseError,
    FounderHubError,
    SelectionError,
    StorageError,
    ValidationError,
    sanitize_path,
)
from ..utils.file_io import copy_file, read_json_file, safe_remove_file, write_json_file
from ..utils.validation import sanitize_path_input

log = logging.getLogger(__name__)


class Pdf2ImageRenderer(DocumentRendererInterface):
    """First-page PDF preview using pdf2image (poppler)."""

    def __init__(self, dpi: int = 72):
        self.dpi = dpi

    def render_first_page(self, path: Path, max_width: int):
        from pdf2image import convert_from_path

        pages = convert_from_path(
            str(path),
            dpi=self.dpi,
            first_page=1,
            last_page=1,
            size=(max_width, None),
        )
        return pages[0] if pages else None


class FFmpegFrameExtractor(VideoFrameExtractorInterface):
    """Video frame extraction using FFmpeg."""

    def __init__(self, ffmpeg_bin: Optional[str] = None):
        self.ffmpeg_bin = ffmpeg_bin

    def extract_frame(
        self,
        path: Path,
        output_path: Path,
        max_width: int,
        quality: int
    ) -> Optional[Path]:
        from ..media.ffmpeg_ops import extract_video_frame
        return extract_video_frame(
            Path(path), Path(output_path), max_width, quality, ffmpeg_bin=self.ffmpeg_bin
        )


class PresetFileChooser(FileChooserInterface):
    """Returns a fixed list of paths; used by the CLI arguments and the TUI input."""

    def __init__(self, paths: Optional[Sequence[Path]] = None):
        self.paths = [Path(p) for p in (paths or [])]

    def pick_files(self, multiple: bool, allowed_extensions: Sequence[str]) -> Optional[List[Path]]:
        if not self.paths:
            return None
        return list(self.paths) if multiple else self.paths[:1]


class PromptFileChooser(FileChooserInterface):
    """Asks for comma-separated paths on the terminal."""

    def pick_files(self, multiple: bool, allowed_extensions: Sequence[str]) -> Optional[List[Path]]:
        hint = ", ".join(allowed_extensions)
        raw = Prompt.ask(f"File path(s) ({hint}); leave empty to cancel", default="")
        if not raw.strip():
            return None

        try:
            parts = [sanitize_path_input(p) for p in raw.split(",") if p.strip()]
        except ValidationError as e:
            raise SelectionError(f"Could not read file selection: {e.message}", cause=e) from e

        paths = [Path(p).expanduser() for p in parts]
        return paths if multiple else paths[:1]


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

def create_supabase_client(settings: Settings = SETTINGS):
    """Create a Supabase client from settings."""
    if not (settings.supabase_url and settings.supabase_key):
        raise ConfigurationError(
            "Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY "
            "or use FOUNDERHUB_STORAGE_MODE=local"
        )
    from supabase import create_client
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseObjectStorage(ObjectStorageInterface):
    """Object storage backed by Supabase Storage buckets."""

    def __init__(self, client):
        self._client = client

    @handle_api_errors("Supabase storage", "upload", StorageError)
    def upload(self, bucket: str, key: str, path: Path, content_type: str) -> str:
        payload = Path(path).read_bytes()
        api = self._client.storage.from_(bucket)
        api.upload(key, payload, file_options={"content-type": content_type})
        url = api.get_public_url(key)
        log.info(f"Uploaded {sanitize_path(path)} to {bucket}/{key}")
        return url

    @handle_api_errors("Supabase storage", "remove", StorageError)
    def remove(self, bucket: str, keys: List[str]) -> None:
        if keys:
            self._client.storage.from_(bucket).remove(keys)
            log.info(f"Removed {len(keys)} object(s) from {bucket}")


class SupabaseDatabase(DatabaseInterface):
    """Table access through the Supabase PostgREST client."""

    def __init__(self, client):
        self._client = client

    @staticmethod
    def _filtered(query, filters: Dict[str, Any]):
        for column, value in filters.items():
            query = query.eq(column, value)
        return query

    @handle_api_errors("Supabase database", "select", DatabaseError)
    def select_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = self._filtered(self._client.table(table).select("*"), filters)
        response = query.limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    @handle_api_errors("Supabase database", "select", DatabaseError)
    def select_many(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = self._filtered(self._client.table(table).select("*"), filters)
        if order_by:
            query = query.order(order_by)
        return query.execute().data or []

    @handle_api_errors("Supabase database", "insert", DatabaseError)
    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        response = self._client.table(table).insert(values).execute()
        if not response.data:
            raise DatabaseError(f"Insert into {table} returned no row")
        return response.data[0]

    @handle_api_errors("Supabase database", "update", DatabaseError)
    def update(
        self,
        table: str,
        values: Dict[str, Any],
        filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        query = self._filtered(self._client.table(table).update(values), filters)
        return query.execute().data or []

    @handle_api_errors("Supabase database", "delete", DatabaseError)
    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        query = self._filtered(self._client.table(table).delete(), filters)
        return len(query.execute().data or [])


class SupabaseAuth(AuthInterface):
    """Current user from the Supabase auth session."""

    def __init__(self, client):
        self._client = client

    def current_user_id(self) -> Optional[str]:
        session = self._client.auth.get_session()
        if session is None or session.user is None:
            return None
        return session.user.id

    @handle_api_errors("Supabase auth", "sign in", AuthenticationError)
    def sign_in(self, email: str, password: str) -> str:
        response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        if response.user is None:
            raise AuthenticationError("Sign in returned no user")
        log.info("Signed in to Supabase")
        return response.user.id

    @handle_api_errors("Supabase auth", "sign out", AuthenticationError)
    def sign_out(self) -> None:
        self._client.auth.sign_out()


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------

class LocalObjectStorage(ObjectStorageInterface):
    """Stores objects as files under `<root>/<bucket>/<key>`."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _object_path(self, bucket: str, key: str) -> Path:
        target = (self.root / bucket / key).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Object key escapes storage root: {key}")
        return target

    def upload(self, bucket: str, key: str, path: Path, content_type: str) -> str:
        target = self._object_path(bucket, key)
        try:
            copy_file(path, target)
        except FounderHubError as e:
            raise StorageError(f"Local upload failed: {e}", cause=e) from e
        log.info(f"Stored {sanitize_path(path)} as {bucket}/{key}")
        return target.as_uri()

    def remove(self, bucket: str, keys: List[str]) -> None:
        for key in keys:
            safe_remove_file(self._object_path(bucket, key))


class LocalDatabase(DatabaseInterface):
    """One JSON file per table under `tables_dir`."""

    def __init__(self, tables_dir: Path):
        self.tables_dir = Path(tables_dir)
        self._lock = threading.Lock()

    def _table_path(self, table: str) -> Path:
        return self.tables_dir / f"{table}.json"

    def _read(self, table: str) -> List[Dict[str, Any]]:
        path = self._table_path(table)
        if not path.exists():
            return []
        try:
            return read_json_file(path)
        except FounderHubError as e:
            raise DatabaseError(f"Could not read table {table}: {e}", cause=e) from e

    def _write(self, table: str, rows: List[Dict[str, Any]]) -> None:
        try:
            write_json_file(self._table_path(table), rows)
        except FounderHubError as e:
            raise DatabaseError(f"Could not write table {table}: {e}", cause=e) from e

    @staticmethod
    def _matches(row: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    def select_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            for row in self._read(table):
                if self._matches(row, filters):
                    return dict(row)
        return None

    def select_many(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(r) for r in self._read(table) if self._matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, str(r.get(order_by) or "")))
        return rows

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now().isoformat())
        with self._lock:
            rows = self._read(table)
            rows.append(row)
            self._write(table, rows)
        return dict(row)

    def update(
        self,
        table: str,
        values: Dict[str, Any],
        filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        updated = []
        with self._lock:
            rows = self._read(table)
            for row in rows:
                if self._matches(row, filters):
                    row.update(values)
                    updated.append(dict(row))
            if updated:
                self._write(table, rows)
        return updated

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        with self._lock:
            rows = self._read(table)
            kept = [r for r in rows if not self._matches(r, filters)]
            removed = len(rows) - len(kept)
            if removed:
                self._write(table, kept)
        return removed


class LocalAuth(AuthInterface):
    """Single local user; signing in always succeeds."""

    def __init__(self, user_id: Optional[str] = None):
        self._default_user_id = user_id or SETTINGS.local_user_id
        self._user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def sign_in(self, email: str, password: str) -> str:
        self._user_id = self._default_user_id
        return self._user_id

    def sign_out(self) -> None:
        self._user_id = None


def register_default_services(
    container: ServiceContainer,
    settings: Settings = SETTINGS,
) -> ServiceContainer:
    """
    Register the default service implementations.

    Supabase services are used when `settings.use_supabase` is true, the local
    backend otherwise.
    """
    container.register(DocumentRendererInterface, Pdf2ImageRenderer)
    container.register_instance(
        VideoFrameExtractorInterface, FFmpegFrameExtractor(settings.ffmpeg_bin)
    )
    container.register(FileChooserInterface, PromptFileChooser)

    if settings.use_supabase:
        client = create_supabase_client(settings)
        container.register_instance(ObjectStorageInterface, SupabaseObjectStorage(client))
        container.register_instance(DatabaseInterface, SupabaseDatabase(client))
        container.register_instance(AuthInterface, SupabaseAuth(client))
        log.debug("Registered Supabase services")
    else:
        container.register_instance(
            ObjectStorageInterface, LocalObjectStorage(settings.local_storage_dir)
        )
        container.register_instance(DatabaseInterface, LocalDatabase(settings.local_tables_dir))
        container.register_instance(AuthInterface, LocalAuth(settings.local_user_id))
        log.debug("Registered local services")

    return container
