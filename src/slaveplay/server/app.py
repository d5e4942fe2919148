"""Flask REST API for slaveplay.

Exposes the supervised player over HTTP: start a blocking playback session
in the background, skip it, send raw slave commands, and read status.
"""

import logging
import threading

from flask import Flask, jsonify, request

from slaveplay.__about__ import __version__
from slaveplay.config import PlayerConfig
from slaveplay.player import SessionBusyError, Slave, protocol

logger = logging.getLogger(__name__)


def create_app(
    config: PlayerConfig | None = None,
    slave: Slave | None = None,
    start: bool = True,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Player configuration. Uses defaults if None.
        slave: Pre-built Slave (tests inject one with a fake launcher).
        start: Start supervising the player right away.
    """
    if slave is None:
        slave = Slave(config)

    app = Flask(__name__)
    app.slave = slave

    if start:
        slave.start(_log_player_error)

    # Global JSON error handler — prevents bare HTML 500s
    @app.errorhandler(Exception)
    def handle_exception(e):
        from werkzeug.exceptions import HTTPException
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error: %s", e)
        return jsonify({"error": str(e)}), 500

    def _run_session(path: str, duration: float | None):
        try:
            slave.controller.play_and_wait(path, duration=duration)
        except SessionBusyError as e:
            logger.warning("Play request dropped: %s", e)
        except Exception:
            logger.exception("Playback session for %s failed", path)

    # --- Health & status ---

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/api/status")
    def status():
        return jsonify(slave.status())

    # --- Playback ---

    @app.route("/api/play", methods=["POST"])
    def play():
        data = request.get_json(silent=True) or {}
        path = data.get("path") or ""
        if not isinstance(path, str):
            return jsonify({"error": "path must be a string"}), 400
        path = path.strip()
        if not path:
            return jsonify({"error": "path is required"}), 400
        try:
            protocol.format_command(protocol.loadfile(path))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        duration = data.get("duration")
        if duration is not None:
            try:
                duration = float(duration)
            except (TypeError, ValueError):
                return jsonify({"error": "duration must be a number"}), 400
            if duration <= 0:
                return jsonify({"error": "duration must be positive"}), 400

        if slave.controller.busy:
            return jsonify({"error": f"Already playing {slave.controller.current_path}"}), 409

        threading.Thread(
            target=_run_session, args=(path, duration), daemon=True, name="play-session",
        ).start()
        return jsonify({"ok": True, "path": path, "duration": duration}), 202

    @app.route("/api/skip", methods=["POST"])
    def skip():
        return jsonify({"skipped": slave.skip()})

    @app.route("/api/stop", methods=["POST"])
    def stop():
        slave.send_command("stop")
        return jsonify({"ok": True})

    @app.route("/api/command", methods=["POST"])
    def command():
        data = request.get_json(silent=True) or {}
        text = data.get("command") or ""
        if not isinstance(text, str):
            return jsonify({"error": "command must be a string"}), 400
        if not text.strip():
            return jsonify({"error": "command is required"}), 400
        try:
            slave.send_command(text)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify({"ok": True, "command": text})

    return app


def _log_player_error(error: Exception):
    logger.warning("Player error: %s", error)
