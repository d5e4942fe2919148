"""Command channel between callers and the supervised player.

Callers hand commands to whichever player instance is currently alive. A
send only returns once the supervisor has written the command to the
player's stdin, so commands are never silently dropped and always reach the
player in the order their senders were queued.
"""

import logging
import threading
from collections import deque

from slaveplay.player.protocol import format_command

logger = logging.getLogger(__name__)


class Handoff:
    """A command waiting to be delivered, plus its delivery state."""

    __slots__ = ("text", "delivered")

    def __init__(self, text: str):
        self.text = text
        self.delivered = False

    def __repr__(self) -> str:
        return f"Handoff({self.text!r}, delivered={self.delivered})"


class CommandChannel:
    """Unbuffered, in-order hand-off of command lines.

    Usage (supervisor side):
        handoff = channel.receive(timeout=0.1)
        if handoff is not None:
            write(handoff.text)
            channel.ack(handoff)
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._pending: deque[Handoff] = deque()

    def send(self, text: str):
        """Queue ``text`` and block until the supervisor has delivered it.

        Raises ValueError if ``text`` is not a single line.
        """
        format_command(text)
        handoff = Handoff(text)
        with self._cond:
            self._pending.append(handoff)
            self._cond.notify_all()
            self._cond.wait_for(lambda: handoff.delivered)
        logger.debug("Delivered: %s", text)

    def receive(self, timeout: float | None = None) -> Handoff | None:
        """Take the oldest pending command, or None if none arrived in time."""
        with self._cond:
            if not self._cond.wait_for(lambda: self._pending, timeout):
                return None
            return self._pending.popleft()

    def ack(self, handoff: Handoff):
        """Mark a received command as written, releasing its sender."""
        with self._cond:
            handoff.delivered = True
            self._cond.notify_all()

    def requeue(self, handoff: Handoff):
        """Put a command whose write failed back at the head of the line."""
        with self._cond:
            self._pending.appendleft(handoff)
            self._cond.notify_all()

    def pending(self) -> int:
        with self._cond:
            return len(self._pending)
