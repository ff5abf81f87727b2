"""
Pytest fixtures for test database, client, authentication and uploads.

Each test gets its own SQLite database file and upload directory, so
tests can assert exact row and file counts.
"""

import io
import json
import os
from pathlib import Path
from typing import AsyncGenerator, Callable

# Must be set before eventhub is imported: the module-level engine reads it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from eventhub.main import app
from eventhub.core.config import get_settings
from eventhub.core.security import create_refresh_token, hash_password
from eventhub.db.base import Base
from eventhub.db.session import get_db
from eventhub.models.user import User


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database with all tables for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def upload_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point UPLOAD_DIR at a per-test directory."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr(get_settings(), "UPLOAD_DIR", str(directory))
    return directory


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get a session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client: AsyncClient) -> Callable[..., str]:
    """Set a refresh_token cookie for the given role on the client."""

    def _login(role: str, email: str = None) -> str:
        token = create_refresh_token(email or f"{role}@example.com", role)
        client.cookies.set(get_settings().REFRESH_TOKEN_COOKIE, token)
        return token

    return _login


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model in a short-lived session."""

    async def _count(model) -> int:
        async with session_factory() as session:
            return (await session.execute(select(func.count()).select_from(model))).scalar_one()

    return _count


@pytest_asyncio.fixture
async def test_user(session_factory) -> User:
    async with session_factory() as session:
        user = User(email="test@example.com", hashed_password=hash_password("testpassword123"))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def _image_bytes(fmt: str = "PNG", size=(16, 12), mode: str = "RGB", exif=None) -> bytes:
    buf = io.BytesIO()
    color = {"RGB": (200, 30, 60), "RGBA": (200, 30, 60, 128)}.get(mode, 128)
    img = Image.new(mode, size, color=color)
    kwargs = {"exif": exif} if exif is not None else {}
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Build a small in-memory image in the given Pillow format."""
    return _image_bytes


@pytest.fixture
def event_form(make_image):
    """Multipart payload (data, files) for the create-event endpoint."""

    def _form(
        title: str = "Summer Jazz Night",
        categories=None,
        dates=None,
        picture=None,
        **overrides,
    ):
        if categories is None:
            categories = [{"name": "Premium", "price": "300"}, {"name": "Economy", "price": "80"}]
        if dates is None:
            dates = [
                {"event_date": "2026-11-20", "start_time": "18:00", "end_time": "21:00"},
                {"event_date": "2026-11-21", "start_time": "18:00", "end_time": "21:00"},
                {"event_date": "2026-11-22", "start_time": "14:00", "end_time": "17:00"},
            ]
        data = {
            "title": title,
            "description": "An evening of live jazz",
            "location": "Riverside Hall",
            "dates": dates if isinstance(dates, str) else json.dumps(dates),
            "categories": categories if isinstance(categories, str) else json.dumps(categories),
        }
        data.update(overrides)
        if picture is None:
            picture = ("poster.png", make_image("PNG"), "image/png")
        files = {"picture": picture} if picture is not False else None
        return data, files

    return _form
