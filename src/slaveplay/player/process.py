"""Launching the player process.

The supervisor never calls subprocess directly; it goes through a launcher so
restart behaviour can be exercised without a real player binary.
"""

from __future__ import annotations

import logging
import subprocess
from typing import IO, Protocol

logger = logging.getLogger(__name__)


class SlaveProcess(Protocol):
    """The parts of subprocess.Popen the supervisor relies on."""

    stdin: IO[str] | None
    stdout: IO[str] | None
    pid: int

    def poll(self) -> int | None: ...

    def wait(self, timeout: float | None = None) -> int: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...


class ProcessLauncher(Protocol):
    def launch(self, argv: list[str]) -> SlaveProcess: ...


class PopenLauncher:
    """Starts the player with piped stdin/stdout in line-buffered text mode.

    stderr goes to ``log_file`` when set (appended), otherwise to /dev/null.
    """

    def __init__(self, log_file: str = ""):
        self.log_file = log_file

    def launch(self, argv: list[str]) -> subprocess.Popen:
        stderr = subprocess.DEVNULL
        log = None
        if self.log_file:
            log = open(self.log_file, "a")
            stderr = log
        try:
            return subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=stderr,
                text=True,
                bufsize=1,
            )
        finally:
            # The child holds its own copy of the descriptor
            if log is not None:
                log.close()


def terminate(process: SlaveProcess, timeout: float = 5.0):
    """Terminate a running process, killing it if it ignores SIGTERM."""
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning("Player %s ignored SIGTERM, killing", process.pid)
        process.kill()
        process.wait()


def close_pipe(pipe: IO[str] | None):
    """Close one of the player's pipes once it is done with."""
    if pipe is None:
        return
    try:
        pipe.close()
    except OSError as e:
        # Flushing leftover input into a dead player
        logger.debug("Closing player pipe: %s", e)
