"""Shared fixtures: a recording notifier and a fake backend."""

from dataclasses import dataclass
from unittest.mock import Mock

import pytest

from uptimedash.config import Config, CredentialsConfig, ServerConfig
from uptimedash.credentials import MemoryTokenStore
from uptimedash.session import SessionManager

BASE_URL = "http://api.test"


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((level, message))

    def texts(self, level: str | None = None) -> list[str]:
        return [message for lvl, message in self.messages if level is None or lvl == level]


def make_response(status_code: int = 200, body: object = None) -> Mock:
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = body
    return response


@dataclass
class Call:
    method: str
    path: str
    json: object
    headers: dict


class FakeBackend:
    """Routes requests by (method, path) to queued responses.

    The last queued response for a route is reused for later calls. Queue an
    exception instance to have the request raise it.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[Call] = []
        self.http = Mock()
        self.http.request.side_effect = self._handle

    def on(self, method: str, path: str, *responses: object) -> None:
        self.routes[(method, path)] = list(responses)

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [call for call in self.calls if call.method == method and call.path == path]

    def _handle(self, method, url, json=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append(Call(method, path, json, headers or {}))
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        item = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


SITES_PAYLOAD = {
    "sites": [
        {"id": 1, "url": "https://alpha.example", "last_status": "UP", "last_checked": "2026-10-19T10:00:00Z"},
        {"id": 2, "url": "https://bravo.example", "last_status": "DOWN", "last_checked": "2026-10-19T10:01:00Z"},
        {"id": 3, "url": "https://charlie.example", "last_status": "down", "last_checked": "2026-10-19T10:02:00Z"},
        {"id": 4, "url": "https://delta.example", "last_status": "UP", "last_checked": "2026-10-19T10:03:00Z"},
        {"id": 5, "url": "https://echo.example", "last_status": "", "last_checked": "0001-01-01T00:00:00Z"},
    ],
    "count": 5,
}


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(base_url=BASE_URL, timeout=5, user_agent="UptimeDash-Test")


@pytest.fixture
def config(server_config: ServerConfig, tmp_path) -> Config:
    return Config(server=server_config, credentials=CredentialsConfig(path=str(tmp_path / "token")))


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def on_expired() -> Mock:
    return Mock()


@pytest.fixture
def session(
    server_config: ServerConfig,
    token_store: MemoryTokenStore,
    notifier: RecordingNotifier,
    backend: FakeBackend,
    on_expired: Mock,
) -> SessionManager:
    return SessionManager(server_config, token_store, notifier, on_expired=on_expired, http=backend.http)


@pytest.fixture
def logged_in(session: SessionManager, backend: FakeBackend) -> SessionManager:
    """A session that has logged in with token 'tok-1'."""
    backend.on("POST", "/api/login", make_response(200, {"token": "tok-1"}))
    session.login("alice", "Secret123")
    return session
