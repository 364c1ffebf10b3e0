"""
Shared pytest fixtures for netwatch manager tests.

Provides fixtures for:
- Database sessions (file-backed SQLite per test)
- Mock remote device (in-memory netwatch rules)
- Seeded SystemConfig row pointing at the mock device
"""
import os
import tempfile
from datetime import datetime

from cryptography.fernet import Fernet

# Test environment configuration (must be set before netwatch_manager is imported)
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'netwatch_manager_test.db')}",
)
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ["RUN_POLLER_IN_APP"] = "false"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from netwatch_manager import models
from netwatch_manager.core.security import encrypt
from netwatch_manager.db.session import Base
from netwatch_manager.services.netwatch.vendors.mock import get_mock_router, reset_mock_routers

MOCK_HOST = "mock-router"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh database per test with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ============================================================================
# Remote Device Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def mock_router():
    """In-memory netwatch state of the mock device, reset around every test."""
    reset_mock_routers()
    yield get_mock_router(MOCK_HOST)
    reset_mock_routers()


@pytest_asyncio.fixture
async def system_config(db):
    config = models.SystemConfig(
        id=1,
        remote_host=MOCK_HOST,
        remote_user="admin",
        remote_secret=encrypt("secret"),
        remote_port=22,
        remote_vendor="mock",
        polling_interval_seconds=30,
        default_timeout_ms=1000,
        default_interval_seconds=5,
    )
    db.add(config)
    await db.commit()
    return config


@pytest_asyncio.fixture
async def make_device(db):
    """Factory for persisted devices."""
    async def _make_device(ip="10.0.0.1", name="core-router", status="unknown",
                           status_since: datetime | None = None, **kwargs):
        device = models.Device(
            name=name,
            ip=ip,
            type=kwargs.pop("type", "ROUTER"),
            lane_name=kwargs.pop("lane_name", "Core"),
            netwatch_timeout=kwargs.pop("netwatch_timeout", 1000),
            netwatch_interval=kwargs.pop("netwatch_interval", 5),
            status=status,
            status_since=status_since,
            **kwargs,
        )
        db.add(device)
        await db.commit()
        await db.refresh(device)
        return device

    return _make_device
