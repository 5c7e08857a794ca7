"""
pytest configuration and shared fixtures for the KenyDrive API tests.

Key concern: tests must not require a Gemini API key or open a browser.
We achieve this by:
  1. Ensuring AI_MOCK_MODE=true so GeminiClient returns canned responses.
  2. Overriding the get_dashboard dependency with a fresh, unmounted
     DashboardController per test whose opener records URLs instead of
     launching them.
  3. Driving the polling timer with ManualSleep instead of the wall clock.
"""

import asyncio
import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")


class ManualSleep:
    """
    Stand-in for asyncio.sleep: every call blocks until advance().

    Records the requested durations so tests can assert on the interval.
    """

    def __init__(self) -> None:
        self.calls: list[float] = []
        self._waiters: list[asyncio.Future] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    def advance(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)


@pytest.fixture()
def manual_sleep() -> ManualSleep:
    return ManualSleep()


@pytest.fixture()
def opened_urls() -> list[str]:
    return []


@pytest.fixture()
def dashboard(opened_urls):
    """Unmounted controller using the real (mock-mode) fetcher."""
    from kenydrive.services.dashboard import DashboardController

    return DashboardController(opener=opened_urls.append, fallback_delay_ms=0)


@pytest.fixture()
async def client(dashboard):
    """
    HTTPX async test client wired to the FastAPI app.

    The app lifespan is not run by ASGITransport, so the module-level
    dashboard singleton is never mounted during tests.
    """
    from kenydrive.core.rate_limit import limiter
    from kenydrive.main import app
    from kenydrive.services.dashboard import get_dashboard

    # Reset in-memory rate-limit counters so tests are independent.
    limiter.reset()

    app.dependency_overrides[get_dashboard] = lambda: dashboard
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
