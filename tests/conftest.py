"""Shared test fixtures for all test modules."""

import httpx
import pytest

from tests.helpers import FakeClock, RecordingNotifier
from vigilpy.config import MonitoringConfig
from vigilpy.engine import MonitoringEngine


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at START_TIME."""
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(clock: FakeClock, notifier: RecordingNotifier) -> MonitoringEngine:
    """Fresh engine with a fake clock and a recording notifier."""
    return MonitoringEngine(MonitoringConfig(), notifier=notifier, clock=clock)


@pytest.fixture
def webhook_requests() -> list[httpx.Request]:
    """Requests captured by webhook_transport."""
    return []


@pytest.fixture
def webhook_transport(webhook_requests: list[httpx.Request]) -> httpx.MockTransport:
    """Mock transport answering 200 and recording each request."""

    def handler(request: httpx.Request) -> httpx.Response:
        webhook_requests.append(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler)


@pytest.fixture
def failing_transport() -> httpx.MockTransport:
    """Mock transport that fails every request with a connection error."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Network error", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(engine)
            async with asgi_test_client(app) as client:
                response = await client.get("/health")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
