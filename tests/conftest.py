"""Shared test fixtures for the slaveplay test suite.

FakeMPlayer stands in for a real ``mplayer -slave`` process: it records the
command lines written to its stdin and answers ``get_property path`` the way
the real player does, so the supervisor and sessions can be driven without
spawning anything.
"""

import itertools
import queue
import subprocess
import threading
import time

import pytest

from slaveplay.config import PlayerConfig
from slaveplay.player import Slave
from slaveplay.server.app import create_app

_pids = itertools.count(4000)


class FakeStdin:
    def __init__(self, process: "FakeMPlayer"):
        self._process = process
        self._buffer = ""
        self.writes: list[str] = []
        self.closed = False
        self.broken = False
        self.fail_writes = False

    def write(self, data: str) -> int:
        if self.closed or self.broken or self.fail_writes:
            raise BrokenPipeError(32, "Broken pipe")
        self.writes.append(data)
        self._buffer += data
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            self._process.handle(line)
        return len(data)

    def flush(self):
        if self.closed or self.broken:
            raise BrokenPipeError(32, "Broken pipe")

    def close(self):
        self.closed = True


class FakeStdout:
    def __init__(self):
        self._lines: queue.Queue[str] = queue.Queue()
        self.closed = False

    def emit(self, line: str):
        self._lines.put(line + "\n")

    def eof(self):
        self._lines.put("")

    def close(self):
        self.closed = True
        self._lines.put("")

    def readline(self) -> str:
        return self._lines.get()


class FakeMPlayer:
    def __init__(self, argv: list[str], answer_path: bool = True):
        self.argv = argv
        self.pid = next(_pids)
        self.stdin = FakeStdin(self)
        self.stdout = FakeStdout()
        self.received: list[str] = []
        self.loaded: str | None = None
        self.answer_path = answer_path
        self.returncode: int | None = None
        self.gates: dict[str, threading.Event] = {}
        self._exited = threading.Event()
        self._lock = threading.Lock()

    def handle(self, line: str):
        self.received.append(line)
        gate = self.gates.get(line)
        if gate is not None:
            gate.wait(5)
        if line.startswith("loadfile "):
            self.loaded = line[len("loadfile "):]
        elif line == "stop":
            self.loaded = None
        elif line == "get_property path" and self.answer_path:
            self.stdout.emit(f"ANS_path={self.loaded}" if self.loaded else "ANS_path=(null)")

    def hold(self, line: str) -> threading.Event:
        """Block the writer of 'line' until the returned event is set."""
        gate = self.gates[line] = threading.Event()
        return gate

    def finish_track(self):
        self.loaded = None

    def queries(self) -> int:
        return self.received.count("get_property path")

    def exit(self, returncode: int = 0):
        with self._lock:
            if self.returncode is not None:
                return
            self.returncode = returncode
        if self.stdin is not None:
            self.stdin.broken = True
        self.stdout.eof()
        for gate in self.gates.values():
            gate.set()
        self._exited.set()

    def poll(self) -> int | None:
        return self.returncode

    def wait(self, timeout: float | None = None) -> int:
        if not self._exited.wait(timeout):
            raise subprocess.TimeoutExpired(self.argv, timeout)
        return self.returncode

    def terminate(self):
        self.exit(-15)

    def kill(self):
        self.exit(-9)


class FakeLauncher:
    """Launcher handing out FakeMPlayer instances, optionally failing first."""

    def __init__(self):
        self.processes: list[FakeMPlayer] = []
        self.attempts = 0
        self.fail_next = 0
        self.answer_path = True

    def launch(self, argv: list[str]) -> FakeMPlayer:
        self.attempts += 1
        if self.fail_next:
            self.fail_next -= 1
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        process = FakeMPlayer(argv, answer_path=self.answer_path)
        self.processes.append(process)
        return process

    @property
    def current(self) -> FakeMPlayer | None:
        return self.processes[-1] if self.processes else None


def _wait_until(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout passes."""
    return _wait_until


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def player_config():
    """Fast timings so restart and poll behaviour fit in a test run."""
    return PlayerConfig(restart_timeout=0.2, poll_interval=0.05)


@pytest.fixture
def errors():
    """Collects everything the supervisor reports to its error handler."""
    return []


@pytest.fixture
def slave(launcher, player_config, errors):
    """A started Slave backed by the fake launcher."""
    s = Slave(player_config, launcher=launcher)
    s.start(errors.append)
    yield s
    s.stop()


@pytest.fixture
def running_player(slave, launcher, wait_until):
    """The first FakeMPlayer, once the supervisor has launched it."""
    assert wait_until(lambda: launcher.current is not None)
    return launcher.current


@pytest.fixture
def app(slave):
    """Flask test app around the fake-backed slave (already started)."""
    app = create_app(slave=slave, start=False)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
