from __future__ import annotations

import asyncio
from collections.abc import Generator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from reflect.app.core.config import get_settings
from reflect.db import create_engine, create_session_factory, init_db

TEST_IDENTITY = "auth0|test-user"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def test_client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    monkeypatch.delenv("PIXABAY_API_KEY", raising=False)
    monkeypatch.setenv("VERSION", "0.1.0-test")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "reflect.log"))
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "10")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SEC", "3600")

    db_path = tmp_path / f"test_{uuid4().hex}.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    get_settings.cache_clear()

    from reflect.app.main import app

    try:
        with TestClient(app) as client:
            client.headers.update({"X-Reflect-User-Id": TEST_IDENTITY})
            yield client
    finally:
        get_settings.cache_clear()


@pytest.fixture()
def temp_session_factory(tmp_path: Path):
    db_path = tmp_path / f"unit_{uuid4().hex}.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)

    async def _prepare() -> None:
        await init_db(engine, session_factory, "test", database_url)
        # Connections are reopened on the event loop of each test.
        await engine.dispose()

    asyncio.run(_prepare())
    try:
        yield session_factory
    finally:
        asyncio.run(engine.dispose())
