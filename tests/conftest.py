"""Shared fixtures: an app bound to a throwaway SQLite file and upload directory."""
from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from jobboard.core.config import settings
from jobboard.core.database import Base
from jobboard.core.security import get_current_user_optional
from jobboard.main import app
from jobboard.models import User
from jobboard.services.storage import LocalFileStorage

PASSWORD = "Secret123"


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def app_settings(tmp_path: Path, upload_dir: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/test.db")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(upload_dir))
    return settings


@pytest.fixture
def client(app_settings) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Pretend the given user is signed in, without a token."""

    def _act_as(user: User | None) -> None:
        app.dependency_overrides[get_current_user_optional] = lambda: user

    yield _act_as
    app.dependency_overrides.pop(get_current_user_optional, None)


def sign_up(client: TestClient, email: str, password: str = PASSWORD, **extra) -> dict:
    response = client.post("/users", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def create_job_post(client: TestClient, title: str = "Backend Engineer", body: str = "Python and SQL") -> dict:
    response = client.post("/job_posts", json={"title": title, "body": body})
    assert response.status_code == 201, response.text
    return response.json()


def stored_files(upload_dir: Path) -> list[Path]:
    if not upload_dir.exists():
        return []
    return [path for path in upload_dir.rglob("*") if path.is_file()]


@pytest.fixture
async def db_session(tmp_path: Path):
    import jobboard.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/services.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def storage(upload_dir: Path) -> LocalFileStorage:
    return LocalFileStorage(upload_dir)
