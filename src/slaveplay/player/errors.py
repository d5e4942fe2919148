"""Errors raised while supervising the player process."""


class SlaveError(Exception):
    """Error managing the player slave."""


class SpawnError(SlaveError):
    """The player process could not be started."""


class PipeError(SlaveError):
    """The player started but its stdin/stdout pipes are unusable."""


class CommandWriteError(SlaveError):
    """Writing a command to the player's stdin failed."""

    def __init__(self, command: str, cause: Exception):
        super().__init__(f"Failed to write {command!r} to player: {cause}")
        self.command = command
        self.cause = cause


class SlaveExitError(SlaveError):
    """The player exited with a non-zero status."""

    def __init__(self, returncode: int):
        super().__init__(f"Player exited with code {returncode}")
        self.returncode = returncode


class SessionBusyError(SlaveError):
    """A playback session is already active."""
