"""Configuration loader for slaveplay."""

from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python 3.10 fallback


@dataclass
class PlayerConfig:
    """Configuration for the supervised player process."""

    binary: str = "mplayer"
    restart_timeout: float = 10.0   # Backoff after an abnormal exit (seconds)
    poll_interval: float = 1.0      # "Still playing?" query interval (seconds)
    log_file: str = ""              # Where player stderr goes ("" = discard)


@dataclass
class ServerConfig:
    """Configuration for the HTTP control API."""

    host: str = "127.0.0.1"
    port: int = 5060


@dataclass
class Config:
    """Top-level slaveplay configuration."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(path: str | None = None) -> Config:
    """Load configuration from slaveplay.toml.

    Search order:
    1. Explicit path argument
    2. ./slaveplay.toml
    3. ~/.config/slaveplay/slaveplay.toml
    4. Defaults
    """
    search_paths = []
    if path:
        search_paths.append(Path(path))
    search_paths.extend([
        Path("slaveplay.toml"),
        Path.home() / ".config" / "slaveplay" / "slaveplay.toml",
    ])

    for p in search_paths:
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            return _parse_config(data)

    return Config()


def _parse_config(data: dict) -> Config:
    """Parse a TOML dict into Config."""
    config = Config()

    if "player" in data:
        p = data["player"]
        config.player = PlayerConfig(
            binary=p.get("binary", config.player.binary),
            restart_timeout=float(p.get("restart_timeout", config.player.restart_timeout)),
            poll_interval=float(p.get("poll_interval", config.player.poll_interval)),
            log_file=p.get("log_file", config.player.log_file),
        )

    if "server" in data:
        s = data["server"]
        config.server = ServerConfig(
            host=s.get("host", config.server.host),
            port=s.get("port", config.server.port),
        )

    return config
