"""
Capture orchestrator - screenshots and the start/stop lifecycle of
video and gif recordings.

Recordings run as detached ffmpeg processes. Starting one stores its
handle in the state file and returns at once; a later invocation reads
the handle back, stops the encoder and post-processes the output.
"""

import logging
import subprocess
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..core.config import Settings
from ..core.errors import (
    ArtifactMissing,
    CaptureFailed,
    ConversionFailed,
    NoActiveRecording,
    ProcessTerminationFailed,
)
from ..core.state import RecordingStateStore
from ..core.types import (
    TIMESTAMP_FORMAT,
    CaptureKind,
    CaptureRegion,
    RecordingHandle,
    RecordingResult,
)
from ..utils.ffmpeg import (
    FFMPEG,
    build_capture_command,
    build_gif_command,
    build_palette_command,
    get_media_info,
    scale_expression,
)
from ..utils.process import CommandRunner, tail

logger = logging.getLogger(__name__)


class CaptureOrchestrator:
    """Runs captures with the external tools and tracks running recordings."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[RecordingStateStore] = None,
        runner: Optional[CommandRunner] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.store = store or RecordingStateStore(settings.state_file)
        self.runner = runner or CommandRunner()
        self._clock = clock
        self._sleep = sleep

    def _timestamp(self) -> str:
        return self._clock().strftime(TIMESTAMP_FORMAT)

    def is_recording(self) -> bool:
        return self.store.exists()

    # -------------------------------------------------------------------------
    # Screenshot
    # -------------------------------------------------------------------------

    def capture_screenshot(self, region: CaptureRegion) -> Path:
        """Grab the region into ``img-<timestamp>.png`` and return its path."""
        image_dir = self.settings.image_dir
        image_dir.mkdir(parents=True, exist_ok=True)
        out_path = image_dir / f"img-{self._timestamp()}.png"

        try:
            self.runner.run(["maim", "-g", region.geometry, str(out_path)])
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            raise CaptureFailed(f"maim exited with status {e.returncode}: {detail}") from e

        logger.info(f"Screenshot saved to {out_path}")
        return out_path

    # -------------------------------------------------------------------------
    # Recording lifecycle
    # -------------------------------------------------------------------------

    def start_capture(
        self,
        kind: CaptureKind,
        region: CaptureRegion,
        sound: Optional[bool] = None,
    ) -> RecordingHandle:
        """Launch the encoder in the background and record its handle.

        Args:
            kind: Video (kept as mkv) or gif (converted when stopped).
            region: Area to record.
            sound: Record audio with video; defaults to settings.sound.
                Gifs never carry sound.

        Raises:
            RecordingInProgress: If another recording is running.
            CaptureFailed: If ffmpeg exits right after starting.
        """
        settings = self.settings
        if sound is None:
            sound = settings.sound
        timestamp = self._timestamp()
        settings.video_dir.mkdir(parents=True, exist_ok=True)

        if kind is CaptureKind.GIF:
            temp_path = settings.video_dir / f"gif-{timestamp}.mkv"
            final_path = settings.image_dir / f"gif-{timestamp}.gif"
            fps = settings.gif_fps
            audio_source = None
        else:
            temp_path = settings.video_dir / f"vid-{timestamp}.mkv"
            final_path = None
            fps = settings.video_fps
            audio_source = settings.sound_source if sound else None

        cmd = build_capture_command(
            region,
            temp_path,
            fps=fps,
            display=settings.display,
            audio_source=audio_source,
            lossless=kind is CaptureKind.GIF,
        )
        # Check, spawn and save under one lock; two starts racing each other
        # must not both launch an encoder.
        with self.store.claim() as save:
            process = self.runner.spawn(cmd, log_path=settings.log_file)
            handle = RecordingHandle(
                pid=process.pid,
                kind=kind,
                temp_path=temp_path,
                final_path=final_path,
                landscape=region.is_landscape if kind is CaptureKind.GIF else None,
            )
            save(handle)

        # Catch immediate failures (no X display, bad region) while we
        # still own the child.
        if settings.startup_check:
            self._sleep(settings.startup_check)
        if process.poll() is not None:
            self.store.clear()
            raise CaptureFailed(
                f"ffmpeg exited with status {process.returncode}:\n{tail(settings.log_file)}"
            )

        logger.info(
            f"Recording {kind.name.lower()} of {region.geometry} @ {fps}fps "
            f"to {temp_path} (pid {process.pid})"
        )
        return handle

    def stop_capture(self) -> RecordingResult:
        """Stop the running recording and finish its output.

        The state record is removed whether or not the encoder could be
        signalled.

        Raises:
            NoActiveRecording: If nothing is recording.
            ConversionFailed: If the gif passes fail.
        """
        handle = self.store.take()
        if handle is None:
            raise NoActiveRecording("No recording in progress")

        try:
            self.runner.terminate(handle.pid, timeout=self.settings.stop_timeout, expected_name=FFMPEG)
        except ProcessTerminationFailed as e:
            logger.warning(f"{e}; continuing with cleanup")

        # The encoder has exited; give the filesystem a moment anyway.
        if self.settings.settle_delay:
            self._sleep(self.settings.settle_delay)

        if handle.kind is CaptureKind.GIF:
            file_path = self.convert_gif(handle)
        else:
            file_path = handle.temp_path
            if not file_path.exists():
                raise ArtifactMissing(f"Recording {file_path} was not written")

        result = RecordingResult(kind=handle.kind, file_path=file_path)
        info = get_media_info(file_path, self.runner)
        if info:
            result.duration = info["duration"]
            result.file_size = info["size_mb"]

        logger.info(f"Recording stopped: {file_path}")
        return result

    # -------------------------------------------------------------------------
    # Gif conversion
    # -------------------------------------------------------------------------

    def convert_gif(self, handle: RecordingHandle) -> Path:
        """Two-pass gif encode of the captured video.

        Pass 1 builds a palette, pass 2 encodes with it. On failure the
        source video and palette stay on disk for inspection.

        Raises:
            ArtifactMissing: If the captured video is not there.
            ConversionFailed: If either pass fails.
        """
        source = handle.temp_path
        if not source.exists():
            raise ArtifactMissing(f"Gif source {source} was not written")

        output = handle.final_path or source.with_suffix(".gif")
        output.parent.mkdir(parents=True, exist_ok=True)
        palette = source.with_suffix(".palette.png")

        fps = self.settings.gif_fps
        scale = scale_expression(self.settings.gif_scale, bool(handle.landscape))

        passes = [
            ("palette", build_palette_command(source, palette, fps, scale)),
            ("encode", build_gif_command(source, palette, output, fps, scale)),
        ]
        for name, cmd in passes:
            try:
                self.runner.run(cmd)
            except subprocess.CalledProcessError as e:
                detail = (e.stderr or "").strip().splitlines()[-1:] or [""]
                raise ConversionFailed(
                    f"gif {name} pass failed with status {e.returncode}: {detail[0]}"
                ) from e

        palette.unlink(missing_ok=True)
        if not self.settings.keep_gif_source:
            source.unlink(missing_ok=True)

        logger.info(f"Gif written to {output}")
        return output
