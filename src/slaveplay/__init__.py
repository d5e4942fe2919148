"""slaveplay - keeps an MPlayer slave process alive and plays files through it."""

from slaveplay.__about__ import __version__

__all__ = ["__version__"]
