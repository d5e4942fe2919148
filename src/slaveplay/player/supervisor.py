"""Player process supervisor.

Keeps one MPlayer slave alive for the lifetime of the host process. Each
loop iteration launches the player, feeds it every command from the
CommandChannel until it exits, then restarts it: immediately after a clean
exit, after a fixed backoff after any error. There is no restart budget;
the loop is the retry mechanism.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from slaveplay.player.channel import CommandChannel
from slaveplay.player.detection import SessionOutcome, StopDetection
from slaveplay.player.errors import CommandWriteError, PipeError, SlaveExitError, SpawnError
from slaveplay.player.output import OutputReader
from slaveplay.player.process import (
    PopenLauncher,
    ProcessLauncher,
    SlaveProcess,
    close_pipe,
    terminate,
)
from slaveplay.player.protocol import DEFAULT_BINARY, build_argv, format_command

logger = logging.getLogger(__name__)

RESTART_TIMEOUT = 10.0        # Backoff after an abnormal exit
FORWARD_POLL_INTERVAL = 0.1   # How often the forwarder checks the process is alive

ErrorHandler = Callable[[Exception], None]


class RestartPolicy:
    """Fixed backoff: wait after errors, restart at once after clean exits."""

    def __init__(self, backoff: float = RESTART_TIMEOUT):
        self.backoff = backoff

    def delay_after(self, error: Exception | None) -> float:
        return self.backoff if error is not None else 0.0


class Supervisor:
    """Runs the launch/forward/reap/restart loop on a background thread.

    Errors never stop the loop. They are handed to the error handler given to
    start(), or logged when there is none.
    """

    def __init__(
        self,
        commands: CommandChannel,
        detection: StopDetection,
        launcher: ProcessLauncher | None = None,
        binary: str = DEFAULT_BINARY,
        restart_timeout: float = RESTART_TIMEOUT,
    ):
        self.commands = commands
        self.detection = detection
        self.launcher = launcher or PopenLauncher()
        self.argv = build_argv(binary)
        self.policy = RestartPolicy(restart_timeout)
        self._error_handler: ErrorHandler | None = None
        self._thread: threading.Thread | None = None
        self._running = False
        self._wakeup = threading.Event()
        self._process: SlaveProcess | None = None
        self._state = "stopped"
        self._restarts = 0
        self._last_error: Exception | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, error_handler: ErrorHandler | None = None):
        """Start supervising. Only the first call has any effect."""
        if self._thread is not None:
            logger.warning("Supervisor already running, ignoring start()")
            return
        self._error_handler = error_handler
        self._running = True
        self._wakeup.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="slave-supervisor")
        self._thread.start()
        logger.info("Supervising: %s", " ".join(self.argv))

    def stop(self, timeout: float = 10):
        """Stop the loop and the player. Meant for host shutdown and tests."""
        self._running = False
        self._wakeup.set()
        process = self._process
        if process is not None:
            terminate(process)
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
        self._state = "stopped"
        logger.info("Supervisor stopped")

    def status(self) -> dict:
        process = self._process
        return {
            "state": self._state,
            "pid": process.pid if process is not None else None,
            "restarts": self._restarts,
            "last_error": str(self._last_error) if self._last_error else None,
        }

    def _loop(self):
        while self._running:
            try:
                error = self.run_once()
            except Exception as e:
                logger.exception("Player run failed")
                error = e

            # Nobody else will tell a waiting session the player is gone
            if self.detection.signal(SessionOutcome.RESTARTED):
                logger.info("Player went away mid-session, releasing the session")

            if not self._running:
                break

            if error is not None:
                self._report(error)

            delay = self.policy.delay_after(error)
            if delay > 0:
                self._state = "backoff"
                logger.info("Restarting player in %.1fs", delay)
                self._wakeup.wait(delay)
            self._restarts += 1
        self._state = "stopped"

    def run_once(self) -> Exception | None:
        """Run a single player process to completion.

        Returns the error that ended it, or None after a clean exit.
        """
        self._state = "starting"
        try:
            process = self.launcher.launch(self.argv)
        except Exception as e:
            # Popen raises OSError, ValueError or SubprocessError; injected
            # launchers may raise anything
            return SpawnError(f"Failed to start {self.argv[0]}: {e}")

        if process.stdin is None or process.stdout is None:
            terminate(process)
            process.wait()
            return PipeError("Player started without stdin/stdout pipes")

        self._process = process
        self._state = "running"
        logger.info("Player started (pid %s)", process.pid)

        try:
            try:
                OutputReader(process.stdout, self.detection).start()
            except Exception:
                # No reader owns stdout
                close_pipe(process.stdout)
                raise
            error = self._forward(process)
        except Exception:
            terminate(process)
            raise
        else:
            if error is not None or not self._running:
                terminate(process)
            returncode = process.wait()
        finally:
            self._process = None
            close_pipe(process.stdin)
        logger.info("Player exited (pid %s, code %s)", process.pid, returncode)

        if error is None and returncode != 0:
            error = SlaveExitError(returncode)
        return error

    def _forward(self, process: SlaveProcess) -> Exception | None:
        """Write queued commands to the player until it exits or a write fails."""
        stdin = process.stdin
        while self._running and process.poll() is None:
            handoff = self.commands.receive(timeout=FORWARD_POLL_INTERVAL)
            if handoff is None:
                continue
            try:
                stdin.write(format_command(handoff.text))
                stdin.flush()
            except (OSError, ValueError) as e:
                # ValueError: stdin already closed
                self.commands.requeue(handoff)
                logger.warning("Write to player failed: %s", e)
                return CommandWriteError(handoff.text, e)
            self.commands.ack(handoff)
            logger.debug("player< %s", handoff.text)
        return None

    def _report(self, error: Exception):
        self._last_error = error
        if self._error_handler is None:
            logger.error("Player error: %s", error)
            return
        try:
            self._error_handler(error)
        except Exception:
            logger.exception("Error handler raised")
