"""
Pytest configuration and fixtures for sign-in service tests.

Provides fixtures for:
- In-memory user and session stores
- Authentication flows wired to those stores
- Test application and HTTP client with stubbed OAuth providers
"""

import hashlib
import json
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Dict, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from signin_service.config.settings import Settings
from signin_service.core.auth import (
    CredentialVerifier,
    FederatedLoginFlow,
    LocalLoginFlow,
    SessionIdentityMapper,
    StoreError,
    UserStore,
    build_strategies,
)
from signin_service.domain.models import Provider, UserRecord
from signin_service.main import create_app


class InMemoryUserStore(UserStore):
    """UserStore kept in a dict, with the same indexing rules as RedisUserStore."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.emails: Dict[str, str] = {}
        self.provider_ids: Dict[tuple, str] = {}
        self.available = True
        self.create_calls = 0

    def _check(self):
        if not self.available:
            raise StoreError("User store unavailable")

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        self._check()
        user_id = self.emails.get((email or "").lower())
        return self.users.get(user_id) if user_id else None

    async def find_by_provider_id(self, provider: Provider, provider_id: str) -> Optional[UserRecord]:
        self._check()
        user_id = self.provider_ids.get((provider, provider_id))
        return self.users.get(user_id) if user_id else None

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        self._check()
        return self.users.get(user_id)

    async def create(self, fields: Dict[str, Any]) -> UserRecord:
        self._check()
        self.create_calls += 1
        email = fields.get("email")
        user = UserRecord(
            user_id=str(uuid.uuid4()),
            name=fields.get("name") or "",
            email=email.lower() if email else email,
            password_hash=fields.get("password_hash"),
            created_at=datetime.now(timezone.utc),
            google_id=fields.get("google_id"),
            github_id=fields.get("github_id"),
        )
        self.users[user.user_id] = user
        if user.email:
            self.emails.setdefault(user.email, user.user_id)
        for provider in Provider:
            if user.provider_id(provider):
                self.provider_ids[(provider, user.provider_id(provider))] = user.user_id
        return user

    async def count_users(self) -> int:
        self._check()
        return len(self.users)


class InMemorySessionStore:
    """Session store kept in a dict."""

    def __init__(self):
        self.sessions: Dict[str, str] = {}

    async def create_session(self, user_id: str) -> str:
        token = secrets.token_urlsafe(16)
        self.sessions[hashlib.sha256(token.encode()).hexdigest()] = user_id
        return token

    async def get_session_identity(self, token: str) -> Optional[str]:
        return self.sessions.get(hashlib.sha256(token.encode()).hexdigest())

    async def revoke_session(self, token: str) -> bool:
        return self.sessions.pop(hashlib.sha256(token.encode()).hexdigest(), None) is not None


def provider_transport(
    profiles: Dict[str, dict], token_status: int = 200
) -> httpx.MockTransport:
    """Stub Google/GitHub token and profile endpoints.

    ``profiles`` maps an authorization code to the profile JSON returned for it.
    """
    tokens: Dict[str, dict] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            form = dict(httpx.QueryParams(request.content.decode()))
            code = form.get("code")
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "server_error"})
            if code not in profiles:
                return httpx.Response(200, json={"error": "bad_verification_code"})
            access_token = f"token-{code}"
            tokens[access_token] = profiles[code]
            return httpx.Response(200, json={"access_token": access_token, "token_type": "bearer"})

        access_token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if access_token not in tokens:
            return httpx.Response(401, json={"message": "Bad credentials"})
        return httpx.Response(200, content=json.dumps(tokens[access_token]))

    return httpx.MockTransport(handler)


@pytest.fixture
def settings() -> Settings:
    """Settings with both providers configured and fast bcrypt"""
    return Settings(
        session_secret="test-session-secret",
        bcrypt_rounds=4,
        google_client_id="google-client",
        google_client_secret="google-secret",
        github_client_id="github-client",
        github_client_secret="github-secret",
    )


@pytest.fixture
def verifier() -> CredentialVerifier:
    return CredentialVerifier(rounds=4)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def local_flow(user_store, verifier) -> LocalLoginFlow:
    return LocalLoginFlow(user_store, verifier)


@pytest.fixture
def federated_flow(user_store, verifier) -> FederatedLoginFlow:
    return FederatedLoginFlow(user_store, verifier, placeholder_email="unknown@example.com")


@pytest.fixture
def session_mapper(user_store) -> SessionIdentityMapper:
    return SessionIdentityMapper(user_store)


@pytest.fixture
def provider_profiles() -> Dict[str, dict]:
    """Authorization codes the stubbed providers accept"""
    return {
        "google-code": {"sub": "g-100", "name": "Carol", "email": "Carol@example.com"},
        "github-code": {"id": 4242, "login": "bob", "name": None, "email": None},
    }


@pytest.fixture
def make_app(settings, user_store, session_store, provider_profiles) -> Callable:
    """Build the application with in-memory stores attached"""

    def _make(app_settings: Settings = None, transport: httpx.AsyncBaseTransport = None):
        app_settings = app_settings or settings
        app = create_app(app_settings)
        app.state.user_store = user_store
        app.state.session_store = session_store
        app.state.strategies = build_strategies(
            app_settings,
            user_store,
            transport=transport or provider_transport(provider_profiles),
        )
        return app

    return _make


@pytest_asyncio.fixture
async def client(make_app) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client"""
    transport = ASGITransport(app=make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def stub_provider() -> Callable[..., httpx.MockTransport]:
    """Factory for stubbed provider transports"""
    return provider_transport
