"""
Unit tests for thumbnail generation and the ffmpeg frame helpers.
"""
import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from PIL import Image

from founderhub.media.ffmpeg_ops import (
    build_frame_command,
    extract_video_frame,
    quality_to_qscale,
)
from founderhub.media.thumbnails import ThumbnailGenerator
from founderhub.models import FileIcon, StagedFile, ThumbnailKind
from founderhub.utils.exceptions import ThumbnailError
from tests.fixtures.fake_services import FakeFrameExtractor, FakeRenderer


@pytest.fixture
def generator(temp_dir):
    return ThumbnailGenerator(FakeRenderer(), FakeFrameExtractor(), temp_dir / "thumbs",
                              max_width=200, quality=75)


class TestThumbnailStrategies:
    """Test strategy choice by extension."""

    def test_pdf_rendered_and_resized(self, generator, deck_files):
        outcome = generator.generate(StagedFile.from_path(deck_files["pdf"]))

        assert not outcome.degraded
        thumb = outcome.thumbnail
        assert thumb.kind == ThumbnailKind.DOCUMENT_PREVIEW
        assert thumb.icon == FileIcon.DOCUMENT
        with Image.open(thumb.image_path) as image:
            assert image.width <= 200
            assert image.format == "JPEG"

    def test_palette_page_converted_to_rgb(self, generator, deck_files):
        generator.renderer.render_first_page = Mock(return_value=Image.new("P", (100, 140)))

        outcome = generator.generate(StagedFile.from_path(deck_files["pdf"]))

        assert outcome.thumbnail.kind == ThumbnailKind.DOCUMENT_PREVIEW

    def test_video_frame_uses_fixed_size_and_quality(self, generator, deck_files):
        outcome = generator.generate(StagedFile.from_path(deck_files["mp4"]))

        assert outcome.thumbnail.kind == ThumbnailKind.VIDEO_FRAME
        assert outcome.thumbnail.image_path.exists()
        _, max_width, quality = generator.frame_extractor.calls[0]
        assert (max_width, quality) == (200, 75)

    def test_other_types_get_generic_icon(self, generator, deck_files):
        outcome = generator.generate(StagedFile.from_path(deck_files["txt"]))

        assert not outcome.degraded
        assert outcome.thumbnail.is_generic
        assert outcome.thumbnail.icon == FileIcon.UNKNOWN
        assert generator.renderer.calls == []

    def test_stored_file_gets_icon_without_rendering(self, generator):
        staged = StagedFile.from_stored("https://x.test/deck.pdf", "u/deck_0_1.pdf")

        outcome = generator.generate(staged)

        assert outcome.thumbnail.is_generic
        assert outcome.thumbnail.icon == FileIcon.DOCUMENT
        assert generator.renderer.calls == []


class TestThumbnailDegradation:
    """A failing preview turns into a generic icon with a reason."""

    def test_renderer_exception(self, generator, deck_files):
        generator.renderer.error = ValueError("not a pdf")

        outcome = generator.generate(StagedFile.from_path(deck_files["pdf"]))

        assert outcome.degraded
        assert outcome.failure == "ValueError: not a pdf"
        assert outcome.thumbnail.icon == FileIcon.DOCUMENT
        assert outcome.thumbnail.image_path is None

    def test_renderer_returns_nothing(self, generator, deck_files):
        generator.renderer.render_first_page = Mock(return_value=None)

        outcome = generator.generate(StagedFile.from_path(deck_files["pdf"]))

        assert outcome.degraded
        assert "no page" in outcome.failure

    def test_extractor_exception(self, generator, deck_files):
        generator.frame_extractor.error = FileNotFoundError("ffmpeg")

        outcome = generator.generate(StagedFile.from_path(deck_files["mov"]))

        assert outcome.degraded
        assert outcome.thumbnail.icon == FileIcon.VIDEO

    def test_extractor_without_frame(self, generator, deck_files):
        generator.frame_extractor.produce = False

        outcome = generator.generate(StagedFile.from_path(deck_files["mp4"]))

        assert outcome.degraded
        assert "no frame" in outcome.failure

    def test_missing_frame_raises_thumbnail_error(self, generator, deck_files):
        generator.frame_extractor.produce = False

        with pytest.raises(ThumbnailError, match="no frame"):
            generator._video_frame(StagedFile.from_path(deck_files["mp4"]))


class TestFFmpegFrame:
    """Test the ffmpeg frame command and runner."""

    @pytest.mark.parametrize("quality,expected", [(100, 2), (75, 9), (1, 31), (500, 2), (-3, 31)])
    def test_quality_to_qscale(self, quality, expected):
        assert quality_to_qscale(quality) == expected

    def test_build_frame_command(self):
        cmd = build_frame_command(Path("in.mp4"), Path("out.jpg"), 200, 75)

        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-i") + 1] == "in.mp4"
        assert cmd[cmd.index("-frames:v") + 1] == "1"
        assert cmd[cmd.index("-vf") + 1] == "scale='min(200,iw)':-2"
        assert cmd[cmd.index("-q:v") + 1] == "9"
        assert cmd[-1] == "out.jpg"

    def test_build_frame_command_with_binary(self):
        cmd = build_frame_command(Path("in.mp4"), Path("out.jpg"), 200, 75,
                                  ffmpeg_bin="/opt/homebrew/bin/ffmpeg")
        assert cmd[0] == "/opt/homebrew/bin/ffmpeg"

    def test_extract_writes_frame(self, temp_dir):
        output = temp_dir / "frames" / "demo.jpg"

        def fake_run(cmd):
            Path(cmd[-1]).write_bytes(b"\xff\xd8jpeg")

        with patch("founderhub.media.ffmpeg_ops._run_cmd", side_effect=fake_run):
            result = extract_video_frame(temp_dir / "demo.mp4", output)

        assert result == output
        assert output.parent.is_dir()

    def test_extract_returns_none_without_output(self, temp_dir):
        with patch("founderhub.media.ffmpeg_ops._run_cmd"):
            result = extract_video_frame(temp_dir / "demo.mp4", temp_dir / "out.jpg")
        assert result is None

    def test_ffmpeg_failure_raises(self, temp_dir):
        failed = Mock(returncode=1, stderr="Invalid data found when processing input\n")
        with patch("founderhub.media.ffmpeg_ops.subprocess.run", return_value=failed):
            with pytest.raises(RuntimeError, match="Invalid data found"):
                extract_video_frame(temp_dir / "demo.mp4", temp_dir / "out.jpg")
