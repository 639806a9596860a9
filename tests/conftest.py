"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from authsvc.auth.errors import ExternalIdentityError
from authsvc.auth.google import VerifiedClaims
from authsvc.auth.jwt import TokenIssuer
from authsvc.auth.service import IdentityService
from authsvc.config import Settings
from authsvc.database import Database
from authsvc.main import create_app
from authsvc.presence.mirror import PresenceMirror

TEST_SECRET = "test-secret"


class StubVerifier:
    """Identity verifier that accepts only the assertions registered on it."""

    def __init__(self) -> None:
        self.assertions: dict[str, VerifiedClaims] = {}

    def add(self, assertion: str, email: str, *, verified: bool = True, **claims: str | None) -> str:
        self.assertions[assertion] = VerifiedClaims(email=email, email_verified=verified, **claims)
        return assertion

    async def verify(self, assertion: str) -> VerifiedClaims:
        try:
            return self.assertions[assertion]
        except KeyError:
            msg = "Signature verification failed"
            raise ExternalIdentityError(msg) from None


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'authsvc.db'}",
        redis_url="redis://localhost:6379/15",
        jwt_secret=TEST_SECRET,
        google_client_id="test-client.apps.googleusercontent.com",
        log_format="console",
        environment="test",
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database with all tables created."""
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[fakeredis.aioredis.FakeRedis, None]:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield fake
    await fake.flushall()
    await fake.aclose()


@pytest.fixture
def tokens() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def presence(redis_client: fakeredis.aioredis.FakeRedis) -> PresenceMirror:
    return PresenceMirror(redis_client)


@pytest.fixture
def service(
    database: Database,
    tokens: TokenIssuer,
    verifier: StubVerifier,
    presence: PresenceMirror,
) -> IdentityService:
    return IdentityService(db=database, tokens=tokens, verifier=verifier, presence=presence)


@pytest_asyncio.fixture
async def client(
    settings: Settings,
    database: Database,
    redis_client: fakeredis.aioredis.FakeRedis,
    tokens: TokenIssuer,
    service: IdentityService,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with test services installed on app.state."""
    app = create_app(settings)
    app.state.database = database
    app.state.redis = redis_client
    app.state.token_issuer = tokens
    app.state.identity_service = service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


ANN = {"full_name": "Ann", "gender": "female", "email": "a@x.com", "password": "pw1"}


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """Register Ann over HTTP. Returns her credentials."""
    response = await client.post("/register", json=ANN)
    assert response.status_code == 201
    return dict(ANN)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client carrying a bearer token for the registered user."""
    response = await client.post("/login", json={
        "email": registered_user["email"],
        "password": registered_user["password"],
    })
    client.headers["Authorization"] = f"Bearer {response.json()['token']}"
    return client
