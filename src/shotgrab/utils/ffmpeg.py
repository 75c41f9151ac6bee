"""
FFmpeg utilities - command lines for capture and gif conversion, media info.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..core.errors import MissingDependency
from ..core.types import CaptureRegion

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


def scale_expression(width: int, landscape: bool) -> str:
    """ffmpeg scale argument fixing the long side to ``width``.

    Landscape (width >= height) fixes the width and lets the height follow;
    portrait fixes the height instead.
    """
    return f"{width}:-1" if landscape else f"-1:{width}"


def gif_filter(fps: int, scale: str) -> str:
    return f"fps={fps},scale={scale}:flags=lanczos"


def build_capture_command(
    region: CaptureRegion,
    output: Path,
    fps: int,
    display: str,
    audio_source: Optional[str] = None,
    lossless: bool = False,
) -> List[str]:
    """x11grab capture of a screen region.

    Args:
        region: Area to capture. Dimensions are rounded down to even numbers.
        output: Output file; the container follows its extension.
        fps: Capture frame rate.
        display: X display, e.g. ":0".
        audio_source: PulseAudio source to record, or None for no sound.
        lossless: Keep every pixel (used as gif source material).
    """
    region = region.even()
    cmd = [
        FFMPEG, "-nostdin", "-y",
        "-f", "x11grab",
        "-video_size", f"{region.width}x{region.height}",
        "-framerate", str(fps),
        "-i", f"{display}+{region.x_offset},{region.y_offset}",
    ]

    if audio_source:
        cmd.extend(["-f", "pulse", "-i", audio_source, "-c:a", "aac"])

    cmd.extend([
        "-c:v", "libx264",
        "-preset", "ultrafast",
    ])
    if lossless:
        cmd.extend(["-qp", "0", "-pix_fmt", "yuv444p"])
    else:
        cmd.extend(["-crf", "23", "-pix_fmt", "yuv420p"])

    cmd.append(str(output))
    return cmd


def build_palette_command(source: Path, palette: Path, fps: int, scale: str) -> List[str]:
    """First gif pass: derive an optimised palette from the source video."""
    return [
        FFMPEG, "-nostdin", "-y",
        "-i", str(source),
        "-vf", f"{gif_filter(fps, scale)},palettegen",
        str(palette),
    ]


def build_gif_command(
    source: Path,
    palette: Path,
    output: Path,
    fps: int,
    scale: str,
) -> List[str]:
    """Second gif pass: encode the gif through the generated palette."""
    return [
        FFMPEG, "-nostdin", "-y",
        "-i", str(source),
        "-i", str(palette),
        "-lavfi", f"{gif_filter(fps, scale)} [x]; [x][1:v] paletteuse",
        str(output),
    ]


def get_media_info(path: Path, runner) -> Optional[dict]:
    """Get duration and size of a media file.

    Returns dict with:
    - duration: float (seconds)
    - size_mb: float
    - video: dict with width, height, codec (if video stream exists)

    None when the file is missing or ffprobe is unavailable or fails.
    """
    if not path.exists():
        return None

    cmd = [
        FFPROBE, "-v", "quiet",
        "-print_format", "json",
        "-show_format", "-show_streams",
        str(path)
    ]

    try:
        result = runner.run(cmd, check=False)
    except MissingDependency as e:
        logger.debug(str(e))
        return None

    if result.returncode != 0:
        return None

    try:
        info = json.loads(result.stdout)
    except ValueError:
        return None

    fmt = info.get("format", {})
    streams = info.get("streams", [])

    output = {
        "duration": float(fmt.get("duration", 0)),
        "size_mb": path.stat().st_size / (1024 * 1024),
    }

    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    if video_stream:
        output["video"] = {
            "width": video_stream.get("width"),
            "height": video_stream.get("height"),
            "codec": video_stream.get("codec_name"),
        }

    return output
