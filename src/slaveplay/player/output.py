"""Reader for the player's stdout."""

import logging
import threading
from typing import Callable, TextIO

from slaveplay.player.detection import SessionOutcome, StopDetection
from slaveplay.player.process import close_pipe
from slaveplay.player.protocol import is_stop_signal

logger = logging.getLogger(__name__)


class OutputReader:
    """Consumes player output line by line and reports end of playback.

    While a session is armed, a line matching ``is_stop`` is turned into a
    STOPPED notification. Everything else is only logged. The reader closes
    the stream and ends quietly when it hits EOF or fails, which is how a
    dead player shows up on this side; the supervisor learns about the exit
    on its own.
    """

    def __init__(
        self,
        stream: TextIO,
        detection: StopDetection,
        is_stop: Callable[[str], bool] = is_stop_signal,
    ):
        self.stream = stream
        self.detection = detection
        self.is_stop = is_stop
        self._thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, daemon=True, name="slave-output")
        self._thread.start()
        return self._thread

    def run(self):
        try:
            for raw in iter(self.stream.readline, ""):
                self._handle_line(raw.strip())
        except (OSError, ValueError) as e:
            # ValueError: the pipe was closed under us
            logger.debug("Player output closed: %s", e)
        else:
            logger.debug("Player output reached EOF")
        finally:
            close_pipe(self.stream)

    def _handle_line(self, line: str):
        if not line:
            return
        logger.debug("player> %s", line)
        if self.detection.armed and self.is_stop(line):
            self.detection.signal(SessionOutcome.STOPPED)
