"""Service interfaces for dependency injection.

Abstract base classes for the collaborators the profile sessions talk to.
Enables testability through fake implementations and loose coupling.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


class FileChooserInterface(ABC):
    """Interface for picking files to upload."""

    @abstractmethod
    def pick_files(
        self,
        multiple: bool,
        allowed_extensions: Sequence[str]
    ) -> Optional[List[Path]]:
        """Let the user choose files.

        Args:
            multiple: Whether more than one file may be chosen
            allowed_extensions: Extensions (without dot) offered by the chooser

        Returns:
            Chosen paths, or None if the user cancelled
        """
        pass


class DocumentRendererInterface(ABC):
    """Interface for rendering document previews."""

    @abstractmethod
    def render_first_page(self, path: Path, max_width: int):
        """Render the first page of a document.

        Args:
            path: Document to render
            max_width: Target width in pixels

        Returns:
            A PIL image, or None if the document has no pages
        """
        pass


class VideoFrameExtractorInterface(ABC):
    """Interface for grabbing a still frame from a video."""

    @abstractmethod
    def extract_frame(
        self,
        path: Path,
        output_path: Path,
        max_width: int,
        quality: int
    ) -> Optional[Path]:
        """Write one frame of `path` to `output_path`.

        Returns:
            The written image path, or None if extraction produced nothing
        """
        pass


class ObjectStorageInterface(ABC):
    """Interface for bucket-based object storage."""

    @abstractmethod
    def upload(self, bucket: str, key: str, path: Path, content_type: str) -> str:
        """Upload a local file.

        Args:
            bucket: Bucket name
            key: Object key inside the bucket
            path: Local file to upload
            content_type: MIME type stored with the object

        Returns:
            Public URL of the stored object
        """
        pass

    @abstractmethod
    def remove(self, bucket: str, keys: List[str]) -> None:
        """Delete objects from a bucket."""
        pass


class DatabaseInterface(ABC):
    """Interface for table storage.

    Filters are equality matches on column values.
    """

    @abstractmethod
    def select_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def select_many(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it, including its generated `id`."""
        pass

    @abstractmethod
    def update(
        self,
        table: str,
        values: Dict[str, Any],
        filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them."""
        pass

    @abstractmethod
    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        """Delete matching rows and return how many were removed."""
        pass


class AuthInterface(ABC):
    """Interface for the signed-in user."""

    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        """Return the signed-in user's id, or None when signed out."""
        pass

    @abstractmethod
    def sign_in(self, email: str, password: str) -> str:
        """Sign in and return the user id."""
        pass

    @abstractmethod
    def sign_out(self) -> None:
        pass
