"""Shared fixtures: settings in a temp dir and a fake command runner."""

import subprocess
from datetime import datetime

import pytest

from shotgrab.core.config import Settings
from shotgrab.core.errors import ProcessTerminationFailed


class FakeProcess:
    def __init__(self, pid, returncode=None):
        self.pid = pid
        self.returncode = returncode

    def poll(self):
        return self.returncode


class FakeRunner:
    """Records commands instead of running them.

    handlers map an executable name to ``fn(cmd, input)`` returning a
    CompletedProcess; unhandled commands succeed with empty output.
    """

    def __init__(self):
        self.calls = []
        self.inputs = []
        self.captures = []
        self.spawned = []
        self.terminated = []
        self.handlers = {}
        self.dead_pids = set()
        self.next_process = FakeProcess(4242)

    def run(self, cmd, input=None, check=True, capture=True):
        self.calls.append(list(cmd))
        self.inputs.append(input)
        self.captures.append(capture)
        handler = self.handlers.get(cmd[0])
        if handler:
            result = handler(cmd, input)
        else:
            result = subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")
        if check and result.returncode != 0:
            raise subprocess.CalledProcessError(result.returncode, cmd, result.stdout, result.stderr)
        return result

    def spawn(self, cmd, log_path):
        self.spawned.append(list(cmd))
        return self.next_process

    def terminate(self, pid, timeout, expected_name=None):
        self.terminated.append(pid)
        if pid in self.dead_pids:
            raise ProcessTerminationFailed(f"Recording process {pid} is not running")

    def commands(self, executable):
        return [c for c in self.calls if c[0] == executable]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        image_dir=tmp_path / "images",
        video_dir=tmp_path / "videos",
        credentials_file=tmp_path / "credentials",
        state_file=tmp_path / "run" / "shotgrab.state",
        display=":0",
        startup_check=0,
        settle_delay=0,
        stop_timeout=0.1,
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 5, 1, 13, 45, 1)
