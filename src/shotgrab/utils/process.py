"""
Process helpers - run, spawn and signal external programs.

Every external tool goes through CommandRunner so callers can swap it out,
and so a missing executable always surfaces as MissingDependency.
"""

import logging
import shlex
import signal
import subprocess
from pathlib import Path
from typing import List, Optional

import psutil

from ..core.errors import MissingDependency, ProcessTerminationFailed

logger = logging.getLogger(__name__)


class CommandRunner:
    """Thin wrapper around subprocess and psutil."""

    def run(
        self,
        cmd: List[str],
        input: Optional[str] = None,
        check: bool = True,
        capture: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a command to completion and capture its output as text.

        With ``capture`` off, output goes to /dev/null instead. Tools that
        leave a child behind holding the output pipes (xclip keeps one
        around to own the selection) would otherwise block until that
        child exits.

        Raises:
            MissingDependency: If the executable is not installed.
            subprocess.CalledProcessError: If check is set and it exits non-zero.
        """
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            return subprocess.run(
                cmd,
                input=input,
                stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
                stderr=subprocess.PIPE if capture else subprocess.DEVNULL,
                text=True,
                check=check,
            )
        except FileNotFoundError as e:
            raise MissingDependency(f"{cmd[0]} not found. Please install it.") from e

    def spawn(self, cmd: List[str], log_path: Path) -> subprocess.Popen:
        """Start a detached command that outlives this process.

        Output goes to a log file instead of pipes; nobody is left to drain
        a pipe once we exit. The log only holds the current recording.
        """
        logger.debug(f"Spawning: {shlex.join(cmd)}")
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "wb") as log_file:
            try:
                return subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
            except FileNotFoundError as e:
                raise MissingDependency(f"{cmd[0]} not found. Please install it.") from e

    def terminate(self, pid: int, timeout: float, expected_name: Optional[str] = None) -> None:
        """Stop a process started by an earlier invocation and wait for it.

        SIGINT first so the encoder finalises its container, then SIGTERM,
        then SIGKILL, each bounded by ``timeout``.

        Raises:
            ProcessTerminationFailed: If the process is gone, belongs to
                someone else, or is not the expected program (pid reuse).
        """
        try:
            process = psutil.Process(pid)
            if expected_name and expected_name not in process.name():
                raise ProcessTerminationFailed(
                    f"Process {pid} is {process.name()!r}, not {expected_name}"
                )

            process.send_signal(signal.SIGINT)
            try:
                process.wait(timeout=timeout)
                return
            except psutil.TimeoutExpired:
                logger.warning(f"Process {pid} ignored SIGINT, sending SIGTERM")

            process.terminate()
            try:
                process.wait(timeout=timeout)
            except psutil.TimeoutExpired:
                logger.warning(f"Process {pid} ignored SIGTERM, killing it")
                process.kill()
                process.wait(timeout=timeout)
        except psutil.TimeoutExpired as e:
            raise ProcessTerminationFailed(f"Process {pid} survived SIGKILL") from e
        except psutil.NoSuchProcess as e:
            raise ProcessTerminationFailed(f"Recording process {pid} is not running") from e
        except psutil.AccessDenied as e:
            raise ProcessTerminationFailed(f"Not allowed to signal process {pid}") from e


def tail(path: Path, lines: int = 10) -> str:
    """Last lines of a log file, or an empty string if it is unreadable."""
    try:
        content = path.read_text(errors="replace")
    except OSError:
        return ""
    return "\n".join(content.strip().splitlines()[-lines:])
