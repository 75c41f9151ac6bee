"""
Tools module - the actions behind each menu entry and flag.
"""

from .capture import CaptureOrchestrator
from .upload import Uploader, DELETE_OPTION
from .menu import (
    choose,
    main_menu_options,
    MODE_SCREENSHOT,
    MODE_VIDEO,
    MODE_GIF,
    MODE_STOP,
    CAPTURE_MODES,
)

__all__ = [
    "CaptureOrchestrator",
    "Uploader",
    "DELETE_OPTION",
    "choose",
    "main_menu_options",
    "MODE_SCREENSHOT",
    "MODE_VIDEO",
    "MODE_GIF",
    "MODE_STOP",
    "CAPTURE_MODES",
]
