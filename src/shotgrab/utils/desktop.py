#!/usr/bin/env python3
"""
Desktop tools - region selection, clipboard and notifications on X11.

Wraps:
- slop: interactive region selection
- xclip: clipboard
- notify-send: desktop notifications

Clipboard and notification failures are logged and never abort the
capture; the file is already safely on disk by the time they run.
"""

import logging
import shlex
import shutil
import subprocess
from typing import Optional

from ..core.errors import MissingDependency
from ..core.types import CaptureRegion

logger = logging.getLogger(__name__)

APP_NAME = "shotgrab"

REQUIRED_TOOLS = ["slop", "maim", "ffmpeg"]
OPTIONAL_TOOLS = ["xclip", "notify-send", "ffprobe"]


# =============================================================================
# Dependency check
# =============================================================================

def check_dependencies(menu_command: Optional[str] = None) -> dict:
    """Check which external programs are installed.

    Args:
        menu_command: Configured menu command; its executable is checked too.
    """
    tools = list(REQUIRED_TOOLS)
    if menu_command:
        tools.append(shlex.split(menu_command)[0])
    tools.extend(OPTIONAL_TOOLS)

    missing = [tool for tool in tools if not shutil.which(tool)]

    if missing:
        return {
            "available": False,
            "missing": missing,
            "message": f"Missing tools: {', '.join(missing)}. "
                       f"Install with: sudo apt install {' '.join(missing)}"
        }
    return {
        "available": True,
        "missing": [],
        "message": "All external tools available"
    }


# =============================================================================
# Region selection
# =============================================================================

def select_region(runner) -> Optional[CaptureRegion]:
    """Let the user drag out a region with slop.

    Returns:
        The region, or None if the selection was cancelled.
    """
    result = runner.run(["slop", "-f", "%g"], check=False)
    geometry = (result.stdout or "").strip()
    if result.returncode != 0 or not geometry:
        logger.info("Region selection cancelled")
        return None

    try:
        region = CaptureRegion.parse(geometry)
    except ValueError as e:
        logger.warning(f"slop returned unusable geometry: {e}")
        return None

    logger.info(f"Region selected: {region.geometry}")
    return region


# =============================================================================
# Clipboard
# =============================================================================

def clear_clipboard(runner) -> bool:
    """Empty the clipboard selection so the new link is not appended to it."""
    return _xclip(runner, "")


def copy_to_clipboard(runner, text: str) -> bool:
    return _xclip(runner, text)


def _xclip(runner, text: str) -> bool:
    try:
        runner.run(["xclip", "-selection", "clipboard", "-i"], input=text, capture=False)
        return True
    except MissingDependency as e:
        logger.warning(f"Clipboard unavailable: {e}")
    except subprocess.CalledProcessError as e:
        logger.warning(f"xclip failed with status {e.returncode}")
    return False


# =============================================================================
# Notifications
# =============================================================================

def notify(runner, summary: str, body: str = "", urgency: str = "normal") -> bool:
    """Show a desktop notification."""
    cmd = ["notify-send", "-a", APP_NAME, "-u", urgency, summary]
    if body:
        cmd.append(body)
    try:
        runner.run(cmd)
        return True
    except MissingDependency as e:
        logger.warning(f"Notifications unavailable: {e}")
    except subprocess.CalledProcessError as e:
        logger.warning(f"notify-send failed with status {e.returncode}")
    return False
