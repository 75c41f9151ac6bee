"""
Menu frontend - choice in, choice out through a dmenu-compatible program.
"""

import logging
import shlex
from typing import List, Optional

logger = logging.getLogger(__name__)

MODE_SCREENSHOT = "screenshot"
MODE_VIDEO = "video"
MODE_GIF = "gif"
MODE_STOP = "stop"

CAPTURE_MODES = [MODE_SCREENSHOT, MODE_VIDEO, MODE_GIF]


def choose(runner, menu_command: str, options: List[str], prompt: Optional[str] = None) -> Optional[str]:
    """Show options in the menu and return the picked label.

    Anything that is not exactly one of the offered labels (Escape, free
    text typed into dmenu, an empty line) counts as cancel.
    """
    cmd = shlex.split(menu_command)
    if prompt and cmd and cmd[0] in ("dmenu", "rofi") and "-p" not in cmd:
        cmd.extend(["-p", prompt])

    result = runner.run(cmd, input="\n".join(options) + "\n", check=False)
    choice = (result.stdout or "").strip()

    if result.returncode != 0 or not choice:
        logger.info("Menu cancelled")
        return None
    if choice not in options:
        logger.info(f"Ignoring unknown menu choice {choice!r}")
        return None
    return choice


def main_menu_options(recording: bool) -> List[str]:
    """Labels of the main menu; only stop while a recording is running."""
    if recording:
        return [MODE_STOP]
    return list(CAPTURE_MODES)
