"""
Recording state store - the single on-disk slot for the active recording.

The stop action runs in a later, separate process, so the handle of the
running encoder is written to a well-known file. Line format:

    <pid> <vid|gif> <temp path> [<final path> <aspect>]

The last two fields exist for gifs only; aspect is 0 when width >= height.
Access is serialised with flock(2) on a sibling ``.lock`` file.
"""

import fcntl
import logging
import shlex
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from .errors import RecordingInProgress, StateCorrupted
from .types import CaptureKind, RecordingHandle

logger = logging.getLogger(__name__)


def format_handle(handle: RecordingHandle) -> str:
    fields = [str(handle.pid), handle.kind.value, str(handle.temp_path)]
    if handle.kind is CaptureKind.GIF:
        fields.append(str(handle.final_path))
        fields.append("0" if handle.landscape else "1")
    return " ".join(shlex.quote(f) for f in fields)


def parse_handle(line: str) -> RecordingHandle:
    """Parse one state line.

    Raises:
        StateCorrupted: If the line does not match the state format.
    """
    try:
        parts = shlex.split(line)
    except ValueError as e:
        raise StateCorrupted(f"Unreadable state line: {line!r}") from e

    if len(parts) < 3:
        raise StateCorrupted(f"Too few fields in state line: {line!r}")

    try:
        pid = int(parts[0])
        kind = CaptureKind(parts[1])
    except ValueError as e:
        raise StateCorrupted(f"Bad pid or capture kind in state line: {line!r}") from e

    if kind is CaptureKind.VIDEO:
        if len(parts) != 3:
            raise StateCorrupted(f"Unexpected fields for video state: {line!r}")
        return RecordingHandle(pid=pid, kind=kind, temp_path=Path(parts[2]))

    if len(parts) != 5 or parts[4] not in ("0", "1"):
        raise StateCorrupted(f"Gif state needs final path and aspect flag: {line!r}")
    return RecordingHandle(
        pid=pid,
        kind=kind,
        temp_path=Path(parts[2]),
        final_path=Path(parts[3]),
        landscape=parts[4] == "0",
    )


class RecordingStateStore:
    """File-backed single slot holding at most one RecordingHandle."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a") as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            try:
                yield
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def claim(self) -> Iterator[Callable[[RecordingHandle], None]]:
        """Hold the slot exclusively while a recording is being started.

        Yields a writer for the new handle. The lock is kept until the
        block exits, so a concurrent start waits here and then sees the
        slot taken.

        Raises:
            RecordingInProgress: If the slot already holds a handle.
        """
        with self._locked(exclusive=True):
            if self.path.exists():
                raise RecordingInProgress("A recording is already running. Stop it first.")
            yield self._write

    def save(self, handle: RecordingHandle) -> None:
        """Write the handle, replacing whatever the slot held."""
        with self._locked(exclusive=True):
            self._write(handle)

    def _write(self, handle: RecordingHandle) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(format_handle(handle) + "\n")
        logger.debug(f"Saved recording state to {self.path}")

    def _read(self) -> Optional[RecordingHandle]:
        try:
            line = self.path.read_text().strip()
        except FileNotFoundError:
            return None
        if not line:
            return None
        return parse_handle(line)

    def load(self) -> Optional[RecordingHandle]:
        """Return the stored handle, or None when nothing is recording."""
        if not self.path.exists():
            return None
        with self._locked(exclusive=False):
            return self._read()

    def take(self) -> Optional[RecordingHandle]:
        """Read and remove the handle in one locked step.

        The slot is removed even when its content is corrupt, so a bad
        state file never blocks new recordings.
        """
        if not self.path.exists():
            return None
        with self._locked(exclusive=True):
            try:
                return self._read()
            finally:
                self._remove()

    def clear(self) -> None:
        with self._locked(exclusive=True):
            self._remove()

    def _remove(self) -> None:
        try:
            self.path.unlink()
            logger.debug(f"Removed recording state {self.path}")
        except FileNotFoundError:
            pass
