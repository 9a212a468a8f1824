"""Shared test fixtures."""

import os

# config.settings reads the environment at import time
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.container import Container, get_container  # noqa: E402
from src.main import app  # noqa: E402
from tests.factories import FakeClock, create_active  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(clock: FakeClock) -> Container:
    """Container whose bus keeps an outbox, as it does when events are published."""
    c = Container(clock=clock)
    c.bus.enable_outbox()
    return c


@pytest.fixture
def active_market(container: Container) -> str:
    return create_active(container)


@pytest.fixture
async def client(container: Container) -> AsyncClient:
    """Async HTTP client bound to a fresh container with a fixed clock."""
    app.dependency_overrides[get_container] = lambda: container
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
