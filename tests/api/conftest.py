import httpx
import pytest_asyncio

from netwatch_manager.db.session import get_db
from netwatch_manager.main import app
from netwatch_manager.services.poller import status_poller
from netwatch_manager.services.sync import netwatch_sync


@pytest_asyncio.fixture
async def client(session_factory, monkeypatch):
    """API client bound to the per-test database (lifespan and poller timer not started)."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(netwatch_sync, "SessionLocal", session_factory)
    monkeypatch.setattr(status_poller, "session_factory", session_factory)

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
