"""Blocking playback sessions on top of the supervised player.

The player has no "end of track" notification on its slave channel, so a
session polls: once a second it asks for the loaded path, and the output
reader turns the "nothing loaded" answer into a STOPPED notification.
"""

from __future__ import annotations

import logging
import threading
import time

from slaveplay.player import protocol
from slaveplay.player.channel import CommandChannel
from slaveplay.player.detection import SessionOutcome, StopDetection
from slaveplay.player.errors import SessionBusyError

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0


class PlaybackController:
    """Plays one file at a time and blocks until it is done.

    A session ends when the player reports nothing loaded, when skip() is
    called, or when the player process dies. Overlapping sessions are
    rejected with SessionBusyError.
    """

    def __init__(
        self,
        commands: CommandChannel,
        detection: StopDetection,
        poll_interval: float = POLL_INTERVAL,
    ):
        self.commands = commands
        self.detection = detection
        self.poll_interval = poll_interval
        self._session_lock = threading.Lock()
        self._current_path: str | None = None

    @property
    def busy(self) -> bool:
        return self._session_lock.locked()

    @property
    def current_path(self) -> str | None:
        return self._current_path

    def play_and_wait(self, path: str, duration: float | None = None) -> SessionOutcome:
        """Play ``path`` and block until playback ends.

        With ``duration`` (seconds) a stop command is sent once it elapses;
        the session then ends the normal way, when the player reports that
        nothing is loaded.
        """
        if not self._session_lock.acquire(blocking=False):
            raise SessionBusyError(f"Already playing {self._current_path}")

        timer = None
        ended = threading.Event()
        try:
            self._current_path = path
            if duration is not None:
                timer = threading.Timer(
                    duration, self._stop_after_duration, args=(path, duration, ended),
                )
                timer.daemon = True
                timer.start()

            logger.info("Playing: %s", path)
            self.commands.send(protocol.loadfile(path))
            self.detection.arm()
            try:
                outcome = self._wait_for_end()
            finally:
                self.detection.disarm()
            logger.info("Finished: %s (%s)", path, outcome.value)
            return outcome
        finally:
            ended.set()
            if timer is not None:
                timer.cancel()
                # A stop already being sent must land before the next session's loadfile
                timer.join()
            self._current_path = None
            self._session_lock.release()

    def play_and_wait_with_duration(self, path: str, duration: float) -> SessionOutcome:
        return self.play_and_wait(path, duration=duration)

    def skip(self) -> bool:
        """Ask the active session to stop. Returns False if nothing is playing."""
        skipped = self.detection.signal(SessionOutcome.SKIPPED)
        if not skipped:
            logger.debug("Skip requested with no active session")
        return skipped

    def _wait_for_end(self) -> SessionOutcome:
        next_poll = time.monotonic() + self.poll_interval
        while True:
            outcome = self.detection.wait(timeout=max(0.0, next_poll - time.monotonic()))
            if outcome is SessionOutcome.SKIPPED:
                self.commands.send(protocol.STOP)
                return outcome
            if outcome is not None:
                return outcome

            # Answer arrives through the output reader
            self.commands.send(protocol.GET_PATH)
            next_poll += self.poll_interval
            now = time.monotonic()
            if next_poll < now:
                # Drop ticks missed while the send was blocked
                next_poll = now + self.poll_interval

    def _stop_after_duration(self, path: str, duration: float, ended: threading.Event):
        if ended.is_set():
            return
        logger.info("Duration of %.1fs reached for %s, stopping", duration, path)
        self.commands.send(protocol.STOP)
