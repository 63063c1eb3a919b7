"""Global fixtures and pytest configuration.

- Blocks real outbound requests
- Provides a recording fake session for dispatcher tests
- Exposes factories for registries, events and config files
"""

import threading
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, patch

import pytest
import requests
import yaml

from logrelay.relay.events import EventContext
from logrelay.relay.registry import DestinationRegistry
from logrelay.services.config_schema import RemoteLoggersConfig


@pytest.fixture(autouse=True)
def block_real_requests():
    """Prevent any outgoing HTTP request through requests.Session.send during tests."""
    with patch("requests.Session.send") as mock_send:
        mock_send.return_value.status_code = 200
        mock_send.return_value.ok = True
        yield mock_send


class FakeSession:
    """Records prepared requests; URLs listed in ``unreachable`` raise ConnectionError."""

    def __init__(self, unreachable: Optional[List[str]] = None, status: int = 200):
        self.unreachable = set(unreachable or [])
        self.status = status
        self.sent: List[requests.PreparedRequest] = []
        self.kwargs: List[Dict[str, Any]] = []

    def send(self, request, **kwargs):
        if request.url in self.unreachable:
            raise requests.ConnectionError(f"connection refused: {request.url}")
        self.sent.append(request)
        self.kwargs.append(kwargs)
        response = MagicMock()
        response.status_code = self.status
        response.ok = 200 <= self.status < 400
        return response

    def sent_urls(self) -> List[str]:
        return [r.url for r in self.sent]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_registry():
    """Build a compiled registry from a plain config mapping."""

    def _factory(raw: Dict[str, Any]) -> DestinationRegistry:
        return DestinationRegistry.from_config(RemoteLoggersConfig.model_validate(raw))

    return _factory


@pytest.fixture
def make_event():
    def _factory(body: Any = None, **overrides) -> EventContext:
        params = dict(
            host="relay.local:8080",
            header_items=[("content-type", "application/json"), ("x-trace", "abc")],
            method="POST",
            path="/logs",
            query_items=[("env", "prod"), ("env", "dev")],
            body={"msg": "hi"} if body is None else body,
        )
        params.update(overrides)
        return EventContext.from_request(**params)

    return _factory


@pytest.fixture
def secrets(tmp_path):
    """Basic auth username/password files."""
    username = tmp_path / "username"
    password = tmp_path / "password"
    username.write_bytes(b"alice")
    password.write_bytes(b"s3cret")
    return {"usernameFile": str(username), "passwordFile": str(password)}


@pytest.fixture
def config_file(tmp_path):
    """Write a remote loggers YAML document and return its path."""

    def _write(raw: Any, name: str = "remote-loggers.yaml") -> str:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(raw, f)
        return str(path)

    return _write


@pytest.fixture
def sample_config(secrets):
    return {
        "elastic": {
            "http": {
                "method": "POST",
                "url": "http://elastic.local/_doc",
                "auth": {"basic": secrets},
                "headers": {"Content-Type": ["application/json"]},
                "body": {"templates": ['{"message": "{{ body.msg }}"}']},
            }
        },
        "ping": {"http": {"method": "GET", "url": "http://ping.local/"}},
    }


@pytest.fixture
def session_factory():
    return FakeSession


class HangingSession(FakeSession):
    """Blocks sends to ``hang_url`` until ``release`` is set."""

    def __init__(self, hang_url: str, **kwargs):
        super().__init__(**kwargs)
        self.hang_url = hang_url
        self.release = threading.Event()
        self.closed = False

    def send(self, request, **kwargs):
        if request.url == self.hang_url:
            self.release.wait(10)
            raise requests.ReadTimeout(f"no answer from {request.url}")
        return super().send(request, **kwargs)

    def close(self):
        self.closed = True


@pytest.fixture
def hanging_session():
    session = HangingSession("http://hang.local/")
    yield session
    session.release.set()
