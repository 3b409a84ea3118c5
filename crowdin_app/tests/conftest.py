"""Async test fixtures for the Crowdin app using in-memory SQLite."""

from __future__ import annotations

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from crowdin_app.app import create_app
from crowdin_app.config import AppSettings
from crowdin_app.database import Database
from crowdin_app.files.blobstore import Externalizer, LocalBlobStore
from crowdin_app.models import Base, Organization
from crowdin_app.security import encode_jwt

CLIENT_SECRET = "test-client-secret"
SAMPLE_DOMAIN = "acme"
SAMPLE_ORGANIZATION_ID = 42
SAMPLE_USER_ID = 7


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        _env_file=None,
        environment="test",
        client_id="test-client-id",
        client_secret=CLIENT_SECRET,
        auth_url="https://auth.example.test/oauth/token",
        database_url="sqlite+aiosqlite:///:memory:",
        blob_local_dir=str(tmp_path / "blobs"),
        base_url="http://test",
    )


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(settings) -> LocalBlobStore:
    return LocalBlobStore(settings.blob_dir, settings.blob_base_url)


@pytest.fixture
def externalizer(blob_store, settings) -> Externalizer:
    return Externalizer(blob_store, max_inline_bytes=settings.max_inline_bytes)


@pytest.fixture
def app(settings, engine, externalizer):
    database = Database(settings.database_url, engine=engine)
    return create_app(settings, database=database, externalizer=externalizer)


@pytest_asyncio.fixture
async def client(app):
    """HTTPX async test client against the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def make_jwt(
    secret: str = CLIENT_SECRET,
    domain: str | None = SAMPLE_DOMAIN,
    organization_id: int | None = SAMPLE_ORGANIZATION_ID,
    user_id: int | None = SAMPLE_USER_ID,
    expires_in: int = 300,
) -> str:
    context: dict = {}
    if organization_id is not None:
        context["organization_id"] = organization_id
    if user_id is not None:
        context["user_id"] = user_id
    payload = {
        "domain": domain,
        "context": context,
        "iat": int(time.time()),
        "exp": int(time.time()) + expires_in,
    }
    return encode_jwt(payload, secret)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_jwt()}"}


@pytest_asyncio.fixture
async def organization(db: AsyncSession) -> Organization:
    org = Organization(
        domain=SAMPLE_DOMAIN,
        organization_id=SAMPLE_ORGANIZATION_ID,
        app_id="app-1",
        app_secret="app-secret-1",
        user_id=SAMPLE_USER_ID,
        base_url="https://acme.crowdin.com",
        access_token="cached-token",
        access_token_expires=int(time.time()) + 3600,
    )
    db.add(org)
    await db.commit()
    await db.refresh(org)
    return org


def mock_http_response(status_code: int = 200, json_data=None, content: bytes | None = None, text: str = ""):
    response = MagicMock()
    response.status_code = status_code
    response.reason_phrase = "OK" if status_code < 400 else "Error"
    response.text = text
    response.content = content if content is not None else b""
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def mock_async_client(method: str, response=None, side_effect=None) -> AsyncMock:
    """An object usable as ``httpx.AsyncClient(...)`` in ``async with``."""
    mock_client = AsyncMock()
    call = AsyncMock(return_value=response, side_effect=side_effect)
    setattr(mock_client, method, call)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client
