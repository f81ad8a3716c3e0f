"""Pytest configuration and fixtures."""
from __future__ import annotations

import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Settings are read on first import, so the test environment goes in first
TEST_ROOT = Path(tempfile.mkdtemp(prefix="photomarket-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_ROOT / 'test.db'}"
os.environ["STORAGE_ROOT"] = str(TEST_ROOT / "storage")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["COVER_GUARD_BACKEND"] = "memory"
for name in ("REDIS_URL", "ORIGINALS_DIR", "THUMBNAILS_DIR", "WATERMARKED_DIR", "LOG_FILE"):
    os.environ.pop(name, None)

from photomarket.api import dependencies
from photomarket.core.config import settings
from photomarket.core.database import AsyncSessionLocal, Base, engine
from photomarket.main import app
from photomarket.services import ImageWorkerPool, StorageService
from tests.factories import auth_headers


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Create all tables on the test database and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture(autouse=True)
def clean_storage():
    """Give every test empty storage directories."""
    settings.ensure_directories_exist()
    yield
    # thumbnails and watermarked copies live below the originals directory
    shutil.rmtree(settings.originals_dir, ignore_errors=True)
    settings.ensure_directories_exist()


@pytest.fixture(autouse=True)
def reset_service_singletons():
    """Fresh cover guard and queue for every test."""
    dependencies._cover_guard = None
    dependencies._cover_queue = None
    yield


@pytest.fixture
def storage() -> StorageService:
    return StorageService()


@pytest.fixture
def worker_pool():
    pool = ImageWorkerPool(max_workers=2)
    yield pool
    pool.shutdown()


@pytest_asyncio.fixture(scope="function")
async def client(test_db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client against the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Background cover jobs must finish before the tables are dropped
    await dependencies.get_cover_queue().drain()


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers("admin@example.com", is_admin=True)


@pytest.fixture
def user_headers() -> dict:
    return auth_headers("buyer@example.com")


@pytest.fixture
def sample_album_data() -> dict:
    """Sample album data for tests."""
    return {
        "category_id": "6f1c0a52-8d2e-4a55-9f51-0a2b7c3d4e5f",
        "name": "Sports Day 2024",
        "description": "Morning relay races",
        "date": "2024-10-12",
        "price": 5000,
        "is_published": True,
    }
