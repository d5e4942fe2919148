"""Stop-detection state shared by the session, output reader and supervisor."""

import enum
import logging
import queue
import threading

logger = logging.getLogger(__name__)


class SessionOutcome(enum.Enum):
    """How a playback session ended."""

    STOPPED = "stopped"      # player reported nothing loaded
    SKIPPED = "skipped"      # caller asked to skip
    RESTARTED = "restarted"  # player process died mid-session


class StopDetection:
    """Armed/disarmed flag plus the notification queue of the active session.

    Only one session may be armed at a time. Notifications sent while
    disarmed are dropped, and arming discards anything left over from the
    previous session.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._armed = False
        self._events: queue.Queue[SessionOutcome] = queue.Queue()

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._armed

    def arm(self):
        with self._lock:
            while True:
                try:
                    stale = self._events.get_nowait()
                except queue.Empty:
                    break
                logger.debug("Discarding stale notification: %s", stale.value)
            self._armed = True

    def disarm(self):
        with self._lock:
            self._armed = False

    def signal(self, outcome: SessionOutcome) -> bool:
        """Notify the armed session. Returns False if no session is armed."""
        with self._lock:
            if not self._armed:
                return False
            self._events.put(outcome)
            return True

    def wait(self, timeout: float | None = None) -> SessionOutcome | None:
        """Block until a notification arrives or ``timeout`` elapses."""
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None
