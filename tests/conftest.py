"""
Shared fixtures: in-memory SQLite store, test settings, a Google provider
backed by ``httpx.MockTransport`` and an ASGI client for the app.
"""

from __future__ import annotations

from typing import Any, Dict

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.tokens import TokenService
from config.settings import Settings, get_settings
from database.models import Base
from database.session import get_db_session
from database.store import UserStore
from providers.google import GoogleProvider
from providers.registry import ProviderRegistry, get_provider_registry

GOOGLE_ACCESS_TOKEN = "google-access-token"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-jwt-secret",
        jwt_expires_in="1h",
        oauth_state_secret="test-state-secret",
        frontend_url="http://front.test",
        oauth_failure_redirect="/login",
        google_client_id="google-client",
        google_client_secret="google-secret",
        google_callback_url="http://api.test/auth/google/callback",
        bcrypt_rounds=4,
        enable_user_listing=True,
        create_tables=False,
    )


@pytest.fixture
def tokens(settings: Settings) -> TokenService:
    return TokenService(settings.jwt_secret, expires_in=settings.jwt_expires_in)


# ── Database ───────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def store(session_factory):
    async with session_factory() as session:
        yield UserStore(session, bcrypt_rounds=4)


# ── Google provider stub ───────────────────────────────────────────────


@pytest.fixture
def google_api() -> Dict[str, Any]:
    """Mutable behaviour of the fake Google endpoints."""
    return {
        "token_status": 200,
        "userinfo": {
            "sub": "g1",
            "email": "b@x.com",
            "email_verified": True,
            "name": "B",
            "picture": "https://lh3.googleusercontent.com/b.png",
        },
        "requests": [],
    }


@pytest.fixture
def google_transport(google_api: Dict[str, Any]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        google_api["requests"].append(request)
        if request.url.host == "oauth2.googleapis.com" and request.url.path == "/token":
            if google_api["token_status"] != 200:
                return httpx.Response(google_api["token_status"], json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": GOOGLE_ACCESS_TOKEN})
        if request.url.path == "/oauth2/v3/userinfo":
            if request.headers.get("Authorization") != f"Bearer {GOOGLE_ACCESS_TOKEN}":
                return httpx.Response(401, json={"error": "invalid_token"})
            return httpx.Response(200, json=google_api["userinfo"])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def registry(settings: Settings, google_transport: httpx.MockTransport) -> ProviderRegistry:
    return ProviderRegistry(
        [
            GoogleProvider(
                settings.google_client_id,
                settings.google_client_secret,
                settings.google_callback_url,
                transport=google_transport,
            )
        ]
    )


# ── App client ─────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(settings: Settings, session_factory, registry: ProviderRegistry):
    from main import create_app

    app = create_app(settings)

    async def _session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_provider_registry] = lambda: registry

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://api.test") as http:
        yield http
