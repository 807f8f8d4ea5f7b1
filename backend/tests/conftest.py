"""Pytest configuration and shared fixtures."""
import os

os.environ.setdefault("SECURITY__JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("SECURITY__SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("DB__DB_URL", "sqlite+aiosqlite://")

import itertools
import uuid
from typing import Dict, List, Set, Tuple

import httpx
import pytest
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventboard.core.database import db_helper
from eventboard.core.exceptions import MediaDeleteError, MediaUploadError
from eventboard.core.security import create_access_token
from eventboard.models import Base, MediaAsset, MediaKind
from eventboard.services.media_storage import MediaStorage, get_media_storage
from main import app


class FakeMediaStorage(MediaStorage):
    """In memory media host that records every call"""

    def __init__(self):
        self.uploaded: List[MediaAsset] = []
        self.deleted: List[Tuple[str, MediaKind]] = []
        self.fail_uploads: Set[str] = set()   # filenames
        self.fail_deletes: Set[str] = set()   # public ids
        self._ids = itertools.count(1)

    async def upload(self, file: UploadFile, kind: MediaKind) -> MediaAsset:
        await file.read()
        if file.filename in self.fail_uploads:
            raise MediaUploadError(f"Could not upload {file.filename}")
        public_id = f"eventboard/{kind.value}-{next(self._ids)}"
        asset = MediaAsset(public_id=public_id, url=f"https://media.test/{public_id}", kind=kind)
        self.uploaded.append(asset)
        return asset

    async def delete(self, public_id: str, kind: MediaKind) -> None:
        self.deleted.append((public_id, kind))
        if public_id in self.fail_deletes:
            raise MediaDeleteError(f"Could not delete {public_id}")

    @property
    def deleted_ids(self) -> List[str]:
        return [public_id for public_id, _ in self.deleted]


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
def media_storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
async def client(session_factory, media_storage):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[db_helper.session_getter] = override_session
    app.dependency_overrides[get_media_storage] = lambda: media_storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user_id) -> Dict[str, str]:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, username: str, email: str, password: str = "password123") -> uuid.UUID:
    response = await client.post(
        "/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return uuid.UUID(response.json()["userId"])


@pytest.fixture
async def alice(client) -> Dict[str, str]:
    return auth_headers(await register(client, "alice", "a@x.com"))


@pytest.fixture
async def bob(client) -> Dict[str, str]:
    return auth_headers(await register(client, "bob", "b@x.com"))


CONCERT = {
    "title": "Concert",
    "description": "Live music",
    "category": "musical",
    "startDates": "2024-06-01T18:00",
    "endDates": "2024-06-01T23:00",
    "locations": '{"lat": -26.18, "long": -58.19}',
}


async def create_publication(client, headers, files=None, **fields) -> str:
    data = {**CONCERT, **fields}
    response = await client.post("/publications", data=data, files=files, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["publicationId"]
