"""HTTP client for a running slaveplay server."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0  # Commands block while the player restarts


class SlaveplayAPIError(Exception):
    """Error communicating with the slaveplay server."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SlaveplayClient:
    """HTTP client for the slaveplay REST API.

    Usage:
        client = SlaveplayClient("127.0.0.1", 5060)
        client.play("/music/song.mp3", duration=30)
        client.skip()
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 5060,
        transport: httpx.BaseTransport | None = None,
    ):
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self._client = httpx.Client(
            base_url=self.base_url, timeout=DEFAULT_TIMEOUT, transport=transport,
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, data: dict | None = None) -> Any:
        try:
            resp = self._client.request(method, path, json=data)
            resp.raise_for_status()
            return resp.json()
        except httpx.ConnectError:
            raise SlaveplayAPIError(f"Cannot connect to {self.base_url}")
        except httpx.TimeoutException:
            raise SlaveplayAPIError("Request timed out")
        except httpx.HTTPStatusError as e:
            raise SlaveplayAPIError(_error_message(e.response), e.response.status_code)

    def _get(self, path: str) -> Any:
        return self._request("GET", path)

    def _post(self, path: str, data: dict | None = None) -> Any:
        return self._request("POST", path, data)

    def get_health(self) -> dict:
        return self._get("/api/health")

    def get_status(self) -> dict:
        return self._get("/api/status")

    def play(self, path: str, duration: float | None = None) -> dict:
        data: dict = {"path": path}
        if duration is not None:
            data["duration"] = duration
        return self._post("/api/play", data)

    def skip(self) -> dict:
        return self._post("/api/skip")

    def stop(self) -> dict:
        return self._post("/api/stop")

    def send_command(self, command: str) -> dict:
        return self._post("/api/command", {"command": command})


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error") or response.reason_phrase
    except ValueError:
        return f"HTTP {response.status_code}"
