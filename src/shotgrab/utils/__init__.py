"""
Utils module - external program wrappers.
"""

from .process import CommandRunner, tail
from .ffmpeg import (
    scale_expression,
    build_capture_command,
    build_palette_command,
    build_gif_command,
    get_media_info,
)
from .desktop import (
    check_dependencies,
    select_region,
    clear_clipboard,
    copy_to_clipboard,
    notify,
)

__all__ = [
    # Process
    "CommandRunner",
    "tail",
    # FFmpeg
    "scale_expression",
    "build_capture_command",
    "build_palette_command",
    "build_gif_command",
    "get_media_info",
    # Desktop
    "check_dependencies",
    "select_region",
    "clear_clipboard",
    "copy_to_clipboard",
    "notify",
]
