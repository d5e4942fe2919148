"""The supervised player as a single object, plus a process-wide default.

Usage:
    slave = Slave()
    slave.start(lambda err: log.warning("player: %s", err))
    slave.play_and_wait("/music/song.mp3")

or, with the module-level default instance:
    start_slave(handler)
    play_and_wait_with_duration("/music/song.mp3", 30)
"""

from __future__ import annotations

import logging
import threading

from slaveplay.config import PlayerConfig
from slaveplay.player.channel import CommandChannel
from slaveplay.player.detection import SessionOutcome, StopDetection
from slaveplay.player.process import PopenLauncher, ProcessLauncher
from slaveplay.player.session import PlaybackController
from slaveplay.player.supervisor import ErrorHandler, Supervisor

logger = logging.getLogger(__name__)


class Slave:
    """Wires the command channel, supervisor and playback controller together."""

    def __init__(self, config: PlayerConfig | None = None, launcher: ProcessLauncher | None = None):
        self.config = config or PlayerConfig()
        self.commands = CommandChannel()
        self.detection = StopDetection()
        self.supervisor = Supervisor(
            self.commands,
            self.detection,
            launcher=launcher or PopenLauncher(self.config.log_file),
            binary=self.config.binary,
            restart_timeout=self.config.restart_timeout,
        )
        self.controller = PlaybackController(
            self.commands, self.detection, poll_interval=self.config.poll_interval,
        )

    def start(self, error_handler: ErrorHandler | None = None):
        self.supervisor.start(error_handler)

    def stop(self):
        self.supervisor.stop()

    def send_command(self, text: str):
        """Send a raw slave command, blocking until the player has it."""
        self.commands.send(text)

    def play_and_wait(self, path: str) -> SessionOutcome:
        return self.controller.play_and_wait(path)

    def play_and_wait_with_duration(self, path: str, duration: float) -> SessionOutcome:
        return self.controller.play_and_wait(path, duration=duration)

    def skip(self) -> bool:
        return self.controller.skip()

    def status(self) -> dict:
        status = self.supervisor.status()
        status["session_active"] = self.controller.busy
        status["path"] = self.controller.current_path
        status["pending_commands"] = self.commands.pending()
        return status


_default: Slave | None = None
_default_lock = threading.Lock()


def get_default_slave() -> Slave:
    global _default
    with _default_lock:
        if _default is None:
            _default = Slave()
        return _default


def start_slave(error_handler: ErrorHandler | None = None):
    """Keep an MPlayer slave running for the rest of the process lifetime."""
    get_default_slave().start(error_handler)


def send_command(text: str):
    get_default_slave().send_command(text)


def play_and_wait(path: str) -> SessionOutcome:
    return get_default_slave().play_and_wait(path)


def play_and_wait_with_duration(path: str, duration: float) -> SessionOutcome:
    return get_default_slave().play_and_wait_with_duration(path, duration)


def skip() -> bool:
    return get_default_slave().skip()
