"""Supervision of an MPlayer slave process.

The supervisor keeps the player alive, the command channel feeds it, and
the playback controller turns load/poll/stop traffic into a blocking
"play and wait" call.
"""

from slaveplay.player.channel import CommandChannel
from slaveplay.player.detection import SessionOutcome, StopDetection
from slaveplay.player.errors import (
    CommandWriteError,
    PipeError,
    SessionBusyError,
    SlaveError,
    SlaveExitError,
    SpawnError,
)
from slaveplay.player.output import OutputReader
from slaveplay.player.process import PopenLauncher
from slaveplay.player.session import PlaybackController
from slaveplay.player.slave import (
    Slave,
    get_default_slave,
    play_and_wait,
    play_and_wait_with_duration,
    send_command,
    skip,
    start_slave,
)
from slaveplay.player.supervisor import RestartPolicy, Supervisor

__all__ = [
    "CommandChannel",
    "CommandWriteError",
    "OutputReader",
    "PipeError",
    "PlaybackController",
    "PopenLauncher",
    "RestartPolicy",
    "SessionBusyError",
    "SessionOutcome",
    "Slave",
    "SlaveError",
    "SlaveExitError",
    "SpawnError",
    "StopDetection",
    "Supervisor",
    "get_default_slave",
    "play_and_wait",
    "play_and_wait_with_duration",
    "send_command",
    "skip",
    "start_slave",
]
