"""CLI entry points for slaveplay.

slaveplay-server: Supervises the player and serves the control API
slaveplay: Talks to a running server
"""

import argparse
import json
import logging
import sys


def run_server():
    """Entry point for slaveplay-server command."""
    parser = argparse.ArgumentParser(
        description="slaveplay server - keeps an MPlayer slave alive behind a REST API"
    )
    parser.add_argument(
        "--host", default=None, help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=None, help="Port to listen on (default: 5060)"
    )
    parser.add_argument(
        "--config", default=None, help="Path to slaveplay.toml config file"
    )
    parser.add_argument(
        "--binary", default=None, help="Player binary (default: mplayer)"
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)"
    )
    args = parser.parse_args()

    _configure_logging(args.log_level)

    from slaveplay.config import load_config
    from slaveplay.server.app import create_app

    config = load_config(args.config)

    # CLI args override config file
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.binary:
        config.player.binary = args.binary

    app = create_app(config.player)

    logging.getLogger("slaveplay").info(
        "slaveplay server starting on %s:%d", config.server.host, config.server.port
    )

    try:
        app.run(
            host=config.server.host,
            port=config.server.port,
            threaded=True,  # Play requests block a thread each
            use_reloader=False,  # Don't reload - we have background threads
        )
    finally:
        app.slave.stop()


def run_ctl(argv: list[str] | None = None) -> int:
    """Entry point for slaveplay command."""
    parser = argparse.ArgumentParser(
        description="slaveplay - control a running slaveplay server"
    )
    parser.add_argument("--host", default=None, help="Server host (default: from config)")
    parser.add_argument("--port", type=int, default=None, help="Server port (default: from config)")
    parser.add_argument("--config", default=None, help="Path to slaveplay.toml config file")

    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("status", help="Show player status")
    play = sub.add_parser("play", help="Play a file")
    play.add_argument("path")
    play.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    sub.add_parser("skip", help="Skip the current file")
    sub.add_parser("stop", help="Send stop to the player")
    send = sub.add_parser("send", help="Send a raw slave command")
    send.add_argument("text", nargs="+")
    args = parser.parse_args(argv)

    from slaveplay.api_client import SlaveplayAPIError, SlaveplayClient
    from slaveplay.config import load_config

    config = load_config(args.config)
    host = args.host or config.server.host
    port = args.port or config.server.port

    with SlaveplayClient(host, port) as client:
        try:
            if args.action == "status":
                result = client.get_status()
            elif args.action == "play":
                result = client.play(args.path, args.duration)
            elif args.action == "skip":
                result = client.skip()
            elif args.action == "stop":
                result = client.stop()
            else:
                result = client.send_command(" ".join(args.text))
        except SlaveplayAPIError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(json.dumps(result, indent=2))
    return 0


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main():
    sys.exit(run_ctl())
