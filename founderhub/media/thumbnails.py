"""
Thumbnail generation for staged files.

Three strategies keyed by extension: a first-page preview for PDFs, a single
low-resolution frame for videos, and a generic icon for everything else.
Strategies raise ThumbnailError when they produce nothing; `generate` turns any
failure into the generic icon and reports the reason in the ThumbnailOutcome.
"""
import logging
import uuid
from pathlib import Path
from typing import Optional

from ..models import (
    DOCUMENT_EXTENSIONS,
    VIDEO_EXTENSIONS,
    FileIcon,
    StagedFile,
    Thumbnail,
    ThumbnailKind,
    ThumbnailOutcome,
)
from ..utils.exceptions import ThumbnailError, sanitize_error_message, sanitize_path

log = logging.getLogger(__name__)


class ThumbnailGenerator:
    """Produces one ThumbnailOutcome per staged file."""

    def __init__(
        self,
        renderer,
        frame_extractor,
        output_dir: Path,
        max_width: int = 200,
        quality: int = 75,
    ):
        """
        Args:
            renderer: DocumentRendererInterface used for PDFs
            frame_extractor: VideoFrameExtractorInterface used for videos
            output_dir: Directory where preview images are written
            max_width: Maximum preview width in pixels
            quality: JPEG quality (1-100)
        """
        self.renderer = renderer
        self.frame_extractor = frame_extractor
        self.output_dir = Path(output_dir)
        self.max_width = max_width
        self.quality = quality

    def generate(self, staged: StagedFile) -> ThumbnailOutcome:
        extension = staged.extension
        if staged.path is None:
            return ThumbnailOutcome(Thumbnail.generic(extension))

        if extension in DOCUMENT_EXTENSIONS:
            return self._guarded(staged, self._document_preview)
        if extension in VIDEO_EXTENSIONS:
            return self._guarded(staged, self._video_frame)
        return ThumbnailOutcome(Thumbnail.generic(extension))

    def _guarded(self, staged: StagedFile, strategy) -> ThumbnailOutcome:
        try:
            return ThumbnailOutcome(strategy(staged))
        except ThumbnailError as e:
            reason = e.message
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"

        log.warning(
            f"Thumbnail failed for {sanitize_path(staged.path)}, "
            f"using generic icon: {sanitize_error_message(reason)}"
        )
        return ThumbnailOutcome(Thumbnail.generic(staged.extension), failure=reason)

    def _output_path(self, staged: StagedFile) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / f"{staged.path.stem}_{uuid.uuid4().hex[:8]}.jpg"

    def _document_preview(self, staged: StagedFile) -> Thumbnail:
        image = self.renderer.render_first_page(staged.path, self.max_width)
        if image is None:
            raise ThumbnailError("document renderer returned no page")

        if image.mode != "RGB":
            image = image.convert("RGB")
        if image.width > self.max_width:
            image.thumbnail((self.max_width, self.max_width * 10))

        output = self._output_path(staged)
        image.save(output, "JPEG", quality=self.quality)
        log.debug(f"Rendered document preview for {sanitize_path(staged.path)}")
        return Thumbnail(ThumbnailKind.DOCUMENT_PREVIEW, FileIcon.DOCUMENT, output)

    def _video_frame(self, staged: StagedFile) -> Thumbnail:
        output = self._output_path(staged)
        frame: Optional[Path] = self.frame_extractor.extract_frame(
            staged.path, output, self.max_width, self.quality
        )
        if frame is None:
            raise ThumbnailError("no frame could be extracted")
        return Thumbnail(ThumbnailKind.VIDEO_FRAME, FileIcon.VIDEO, Path(frame))
