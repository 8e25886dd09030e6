"""Shared fixtures: an in-memory database per test, fake storage and mail providers, an API client."""

import os

# settings are read at import time, so the test environment goes in first
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["OBJECT_STORAGE_PROVIDER"] = "local"
os.environ["MAILER_PROVIDER"] = "noop"

import uuid
from datetime import datetime, timezone

import httpx
import pytest
from jose import jwt
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.db import Database
from app.core.errors import DownstreamError
from app.modules.assets.models import Asset, AssetGroup
from app.platform.ports.mailer import MailMessage
from app.platform.ports.object_storage import StoredObject, UploadOptions


class FakeStorage:
    """Object storage double that keeps uploads in memory and can be told to fail."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, data: bytes, *, filename: str, content_type: str, options: UploadOptions) -> StoredObject:
        if self.fail_upload:
            raise DownstreamError("Failed to upload file: provider unavailable")
        provider_id = f"{options.folder}/{uuid.uuid4().hex}"
        self.objects[provider_id] = data
        self.uploads.append(provider_id)
        return StoredObject(
            secure_url=f"https://cdn.test/{provider_id}",
            stored_name=filename,
            byte_size=len(data),
            provider_id=provider_id,
        )

    def delete(self, provider_id: str) -> None:
        self.deleted.append(provider_id)
        if self.fail_delete:
            raise RuntimeError("provider unavailable")
        self.objects.pop(provider_id, None)

    def resolve_url(self, provider_id: str) -> str:
        return f"https://cdn.test/{provider_id}"

    def thumbnail_url(self, provider_id: str) -> str | None:
        return f"https://cdn.test/thumb/{provider_id}"


class RecordingMailer:
    def __init__(self):
        self.sent: list[MailMessage] = []
        self.fail = False

    async def send(self, message: MailMessage) -> None:
        if self.fail:
            raise RuntimeError("smtp relay down")
        self.sent.append(message)


class FakeUpload:
    """Stands in for fastapi.UploadFile in service-level tests."""

    def __init__(self, data: bytes = b"\x89PNG....", filename: str = "photo.png", content_type: str = "image/png"):
        self.data = data
        self.filename = filename
        self.content_type = content_type

    async def read(self) -> bytes:
        return self.data


@pytest.fixture
async def db():
    database = Database(
        "sqlite+aiosqlite://",
        manage="create_all",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
async def session(db):
    async with db.session() as s:
        yield s


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    return uuid.uuid4()


def make_token(user_id: uuid.UUID, scopes: list[str] | None = None) -> str:
    claims = {"sub": str(user_id), "scopes": scopes if scopes is not None else ["*"]}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def auth(user_id: uuid.UUID, scopes: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, scopes)}"}


@pytest.fixture
async def client(db, storage, mailer):
    from app.main import app
    from app.platform.provider_registry import get_mailer, get_object_storage

    app.state.db = db
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_mailer] = lambda: mailer
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    app.state.db = None


async def add_group(session, user_id: uuid.UUID, name: str = "Group", total_size: int = 0) -> AssetGroup:
    group = AssetGroup(user_id=user_id, name=name, total_size=total_size)
    session.add(group)
    await session.commit()
    return group


async def add_asset(
    session,
    user_id: uuid.UUID,
    name: str,
    *,
    size: int = 100,
    group_id: uuid.UUID | None = None,
    mime_type: str = "image/png",
    file_name: str | None = None,
    created_at: datetime | None = None,
) -> Asset:
    asset = Asset(
        user_id=user_id,
        name=name,
        file_name=file_name or f"{name}.png",
        file_path=f"pixelpim/assets/{name}",
        mime_type=mime_type,
        size=size,
        asset_group_id=group_id,
    )
    if created_at is not None:
        asset.created_at = created_at
        asset.updated_at = created_at
    session.add(asset)
    await session.commit()
    return asset


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)
