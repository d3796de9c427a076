"""Shared pytest fixtures: temporary SQLite database, click recorder and API client."""

import atexit
import os
import shutil
import tempfile

# Settings are read at import time, so the environment must be prepared first
_TEST_DB_DIR = tempfile.mkdtemp(prefix="shortener-tests-")
atexit.register(shutil.rmtree, _TEST_DB_DIR, ignore_errors=True)

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["BASE_URL"] = "http://sho.rt"
os.environ["API_PREFIX"] = "/api/v1"
os.environ["REDIRECT_STATUS_CODE"] = "303"
os.environ["ALLOW_PRIVATE_HOSTS"] = "false"

from typing import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from shortener.core.recorder_manager import get_click_recorder  # noqa: E402
from shortener.db.session import async_session_maker, engine  # noqa: E402
from shortener.main import app  # noqa: E402
from shortener.services.click_recorder import ClickRecorder  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def click_recorder(db_session: AsyncSession) -> AsyncGenerator[ClickRecorder, None]:
    recorder = ClickRecorder(workers=2)
    await recorder.start()
    yield recorder
    await recorder.stop(timeout=2.0)


@pytest_asyncio.fixture(scope="function")
async def client(click_recorder: ClickRecorder) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_click_recorder] = lambda: click_recorder

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

