#!/usr/bin/env python3
"""
shotgrab - command line entry point.

Modes:
- screenshot: grab a region, then upload/delete/keep it
- video:      start recording a region to mkv (returns immediately)
- gif:        start recording a region for gif conversion
- stop:       stop the running recording; gifs are converted and uploaded

Without a mode flag an interactive menu asks for one. Usage:
    shotgrab -s --geometry 800x600+10+20 -n
    python -m shotgrab --gif
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from . import __version__
from .backends import BACKENDS
from .core.config import Settings, load_settings
from .core.errors import ConfigError, NoActiveRecording, ShotgrabError
from .core.types import CaptureKind, CaptureRegion
from .tools.capture import CaptureOrchestrator
from .tools.menu import (
    MODE_GIF,
    MODE_SCREENSHOT,
    MODE_STOP,
    MODE_VIDEO,
    choose,
    main_menu_options,
)
from .tools.upload import Uploader
from .utils.desktop import check_dependencies, notify, select_region
from .utils.logger import set_level, setup_logging
from .utils.process import CommandRunner

logger = logging.getLogger(__name__)

KIND_BY_MODE = {
    MODE_VIDEO: CaptureKind.VIDEO,
    MODE_GIF: CaptureKind.GIF,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shotgrab",
        description="Capture a screen region as screenshot, video or gif and upload it.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-s", "--screenshot", dest="mode", action="store_const", const=MODE_SCREENSHOT,
                      help="take a screenshot of a region")
    mode.add_argument("-r", "--record", dest="mode", action="store_const", const=MODE_VIDEO,
                      help="start recording a region to video")
    mode.add_argument("-g", "--gif", dest="mode", action="store_const", const=MODE_GIF,
                      help="start recording a region for a gif")
    mode.add_argument("-k", "--stop", dest="mode", action="store_const", const=MODE_STOP,
                      help="stop the running recording")

    parser.add_argument("-n", "--no-upload", action="store_true",
                        help="keep the capture on disk, do not upload")
    parser.add_argument("--geometry", metavar="WxH+X+Y",
                        help="capture this region instead of selecting one")
    parser.add_argument("-u", "--upload-to", choices=sorted(BACKENDS),
                        help="upload target, skipping the menu")
    parser.add_argument("-c", "--config", type=Path, metavar="PATH",
                        help="config file (default: ~/.config/shotgrab/config)")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser


def run(
    settings: Settings,
    mode: Optional[str] = None,
    geometry: Optional[str] = None,
    target: Optional[str] = None,
    runner: Optional[CommandRunner] = None,
    orchestrator: Optional[CaptureOrchestrator] = None,
    uploader: Optional[Uploader] = None,
) -> int:
    """Carry out one invocation.

    Raises:
        ShotgrabError: Any failure; the caller maps it to an exit code.
    """
    runner = runner or CommandRunner()
    orchestrator = orchestrator or CaptureOrchestrator(settings, runner=runner)
    uploader = uploader or Uploader(settings, runner=runner)

    if mode is None:
        options = main_menu_options(recording=orchestrator.is_recording())
        mode = choose(runner, settings.menu_command, options, "shotgrab")
        if mode is None:
            return 0

    if mode == MODE_STOP:
        result = orchestrator.stop_capture()
        if not result.uploadable:
            body = str(result.file_path)
            if result.duration is not None:
                body += f"\n{result.duration:.1f}s, {result.file_size:.1f} MB"
            notify(runner, "Recording saved", body)
            return 0
        uploader.handle_artifact(result.file_path, target)
        return 0

    if geometry:
        try:
            region = CaptureRegion.parse(geometry)
        except ValueError as e:
            raise ConfigError(str(e)) from e
    else:
        region = select_region(runner)
        if region is None:
            return 0

    if mode == MODE_SCREENSHOT:
        path = orchestrator.capture_screenshot(region)
        uploader.handle_artifact(path, target)
    else:
        orchestrator.start_capture(KIND_BY_MODE[mode], region)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except SystemExit as e:
        # --help / --version, or a malformed known option
        return e.code if isinstance(e.code, int) else 0

    setup_logging("DEBUG" if args.verbose else "INFO")
    if unknown:
        logger.debug(f"Ignoring unrecognized arguments: {' '.join(unknown)}")

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return e.exit_code

    if not args.verbose:
        set_level(settings.log_level)
    if args.no_upload:
        settings = replace(settings, no_upload=True)

    deps = check_dependencies(settings.menu_command)
    if not deps["available"]:
        logger.warning(deps["message"])

    runner = CommandRunner()
    try:
        return run(settings, args.mode, args.geometry, args.upload_to, runner=runner)
    except NoActiveRecording as e:
        logger.info(str(e))
        return e.exit_code
    except ShotgrabError as e:
        logger.error(str(e))
        notify(runner, "shotgrab failed", str(e), urgency="critical")
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
