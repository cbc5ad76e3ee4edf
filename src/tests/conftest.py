"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

# Set test environment before importing settings
os.environ["ENV"] = "development"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"

from host_lifecycle.clients import TeletraanClient  # noqa: E402
from host_lifecycle.config import get_settings  # noqa: E402
from host_lifecycle.models import TeletraanEndpoint  # noqa: E402

TELETRAAN_URL = "https://teletraan.example.com/v1"


class FakeTeletraan:
    """Stands in for the Teletraan API and records every request it gets.

    Responses are served in order; the last one repeats. An exception in
    the queue is raised from the transport instead of answering.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list[Callable[[], httpx.Response] | Exception] = []
        self.transport = httpx.MockTransport(self._handle)

    def respond(self, status_code: int, json: Any = None, text: str | None = None) -> None:
        if text is not None:
            self._responses.append(lambda: httpx.Response(status_code, text=text))
        elif json is not None:
            self._responses.append(lambda: httpx.Response(status_code, json=json))
        else:
            self._responses.append(lambda: httpx.Response(status_code))

    def fail(self, error: Exception) -> None:
        self._responses.append(error)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(404)
        response = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response()


@pytest.fixture
def teletraan() -> FakeTeletraan:
    return FakeTeletraan()


@pytest.fixture
def endpoint() -> TeletraanEndpoint:
    return TeletraanEndpoint(
        url=TELETRAAN_URL,
        environment="prod",
        token="test-token",
    )


@pytest.fixture
def client(teletraan, endpoint) -> Generator[TeletraanClient, None, None]:
    """Teletraan client wired to the fake API."""
    http_client = httpx.Client(transport=teletraan.transport)
    yield TeletraanClient(endpoint, http_client=http_client)
    http_client.close()


@pytest.fixture
def tokenless_client(teletraan, endpoint) -> Generator[TeletraanClient, None, None]:
    """Teletraan client with no configured token."""
    http_client = httpx.Client(transport=teletraan.transport)
    yield TeletraanClient(endpoint.rebind(token=""), http_client=http_client)
    http_client.close()


@pytest.fixture
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: Slow tests")
