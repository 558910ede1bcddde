"""FFmpeg operations for video preview frames.

All commands use list-based subprocess calls for security (no shell injection).
"""
import subprocess
import logging
from pathlib import Path
from typing import List, Optional

from ..utils.config import SETTINGS
from ..utils.exceptions import sanitize_path

log = logging.getLogger(__name__)

# mjpeg -q:v runs from 2 (best) to 31 (worst)
_BEST_QSCALE = 2
_WORST_QSCALE = 31


def _run_cmd(cmd: List[str]) -> None:
    """
    Run an FFmpeg command using list-based subprocess (secure).

    Args:
        cmd: Command as list of strings (no shell interpretation)

    Raises:
        RuntimeError: If command fails
    """
    log.debug("RUN: %s", " ".join(cmd))
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if proc.returncode != 0:
        raise RuntimeError(f"ffmpeg error: {proc.stderr.strip()}")


def quality_to_qscale(quality: int) -> int:
    """Map a 1-100 JPEG style quality to ffmpeg's mjpeg qscale."""
    quality = max(1, min(100, quality))
    span = _WORST_QSCALE - _BEST_QSCALE
    return round(_WORST_QSCALE - (quality / 100) * span)


def build_frame_command(
    input_path: Path,
    output_path: Path,
    max_width: int,
    quality: int,
    seek_seconds: float = 0.0,
    ffmpeg_bin: Optional[str] = None,
) -> List[str]:
    """Command that writes one scaled frame of `input_path` as a JPEG."""
    return [
        ffmpeg_bin or SETTINGS.ffmpeg_bin, "-hide_banner", "-loglevel", "error", "-y",
        "-ss", f"{seek_seconds:.3f}",
        "-i", str(input_path),
        "-frames:v", "1",
        "-vf", f"scale='min({max_width},iw)':-2",
        "-q:v", str(quality_to_qscale(quality)),
        str(output_path),
    ]


def extract_video_frame(
    input_path: Path,
    output_path: Path,
    max_width: int = 200,
    quality: int = 75,
    ffmpeg_bin: Optional[str] = None,
) -> Optional[Path]:
    """
    Extract a single low-resolution frame from a video.

    Returns:
        Path to the written image, or None if ffmpeg produced nothing

    Raises:
        RuntimeError: If ffmpeg exits with an error
        FileNotFoundError: If the ffmpeg binary cannot be found
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _run_cmd(build_frame_command(
        input_path, output_path, max_width, quality, ffmpeg_bin=ffmpeg_bin
    ))

    if not output_path.exists() or output_path.stat().st_size == 0:
        log.warning(f"ffmpeg wrote no frame for {sanitize_path(input_path)}")
        return None

    log.debug(f"Extracted frame for {sanitize_path(input_path)}")
    return output_path
