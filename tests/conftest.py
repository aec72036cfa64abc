"""
Test configuration and fixtures for Redis Monitor.
"""

from typing import Any, Dict, List, Tuple
from unittest.mock import patch

import pytest
from redis.exceptions import AuthenticationError, ResponseError


def pytest_addoption(parser):
    """Add custom pytest command-line options."""
    parser.addoption(
        "--run-integration-tests",
        action="store_true",
        default=False,
        help="Run tests that need a real Redis server (started with testcontainers)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly requested."""
    if config.getoption("--run-integration-tests"):
        return

    skip_integration = pytest.mark.skip(
        reason="Use --run-integration-tests to run integration tests"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def _normalize(command: Tuple[str, ...]) -> Tuple[str, ...]:
    return (command[0].upper(),) + tuple(command[1:])


class FakeRedis:
    """Stand-in for a redis-py client that answers from its server's reply table."""

    def __init__(self, server: "FakeServer", **kwargs):
        self.server = server
        self.kwargs = kwargs
        self.calls: List[Tuple[str, ...]] = []
        self.closed = False
        self.response_callbacks = {"PING": lambda response, **options: response == "PONG"}

    def execute_command(self, *args):
        self.calls.append(args)
        command = _normalize(args)
        # Longest registered prefix wins
        for size in range(len(command), 0, -1):
            if command[:size] in self.server.replies:
                reply = self.server.replies[command[:size]]
                break
        else:
            raise ResponseError(f"ERR unknown command '{args[0]}'")

        if callable(reply):
            reply = reply(*args)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self):
        self.closed = True


class FakeServer:
    """Reply table plus every client created against it."""

    def __init__(self):
        self.replies: Dict[Tuple[str, ...], Any] = {
            ("AUTH",): AuthenticationError(
                "AUTH <password> called without any password configured for the default user"
            ),
            ("ECHO",): lambda *args: args[1],
            ("CLIENT", "SETNAME"): "OK",
            ("SELECT",): "OK",
        }
        self.clients: List[FakeRedis] = []
        self.connect_error: Exception = None

    def __call__(self, **kwargs) -> FakeRedis:
        if self.connect_error is not None:
            raise self.connect_error
        client = FakeRedis(self, **kwargs)
        self.clients.append(client)
        return client

    def reply(self, *command: str, value: Any) -> None:
        """Register the raw reply (or exception) for a command prefix."""
        self.replies[_normalize(command)] = value

    @property
    def calls(self) -> List[Tuple[str, ...]]:
        return [call for client in self.clients for call in client.calls]

    @property
    def commands(self) -> List[str]:
        return [call[0].upper() for call in self.calls]


@pytest.fixture
def fake_server():
    """Patch the Redis client used by sessions with a scriptable fake server."""
    server = FakeServer()
    with patch("redis_monitor.core.session.Redis", new=server):
        yield server


@pytest.fixture
def connection_params():
    """Blank connection parameters, resolved to the configured defaults."""
    return ["", "", "", ""]
