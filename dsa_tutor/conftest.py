"""
Pytest configuration and fixtures for DSA tutor chat API tests.

This module provides shared test fixtures and configuration for all test files.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool
from fastapi.testclient import TestClient

# Set testing environment before the application is imported
os.environ["TESTING"] = "true"
os.environ["JWT_KEY"] = "test-jwt-secret"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""

from dsa_tutor.main import app
from dsa_tutor.api.dependencies import get_generation_provider
from dsa_tutor.config.database import get_session, cleanup_test_database
from dsa_tutor.exceptions import ProviderError
from dsa_tutor.models.session_models import ChatSession, Message  # noqa: F401
from dsa_tutor.services.generation_provider import GenerationResult, StreamChunk, UnconfiguredProvider


TEST_JWT_KEY = "test-jwt-secret"


class StubProvider:
    """
    Configured generation provider double.

    ``error`` is raised before any output. With ``fail_after`` the stream
    yields that many chunks and then raises ``ProviderError``.
    """

    configured = True
    model = "stub-model"

    def __init__(self, reply="A stack is a LIFO data structure.", tokens_used=None,
                 error=None, chunks=None, fail_after=None, delay=0):
        self.reply = reply
        self.tokens_used = tokens_used
        self.error = error
        self.chunks = chunks
        self.fail_after = fail_after
        self.delay = delay
        self.calls = []

    async def complete(self, system_instruction, history, user_message):
        self.calls.append({
            "system_instruction": system_instruction,
            "history": list(history),
            "user_message": user_message
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return GenerationResult(content=self.reply, tokens_used=self.tokens_used, model=self.model)

    async def stream_complete(self, system_instruction, history, user_message):
        self.calls.append({
            "system_instruction": system_instruction,
            "history": list(history),
            "user_message": user_message
        })
        if self.error:
            raise self.error
        chunks = self.chunks if self.chunks is not None else [self.reply]
        for index, chunk in enumerate(chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise ProviderError("stream interrupted")
            yield StreamChunk(text=chunk)
        if self.tokens_used is not None:
            yield StreamChunk(text="", tokens_used=self.tokens_used)


def make_token(user_id: str, key: str = TEST_JWT_KEY, expires_in: timedelta = timedelta(minutes=30)) -> str:
    """Issue a token the way the account service does."""
    payload = {
        "userId": user_id,
        "exp": datetime.now(timezone.utc) + expires_in
    }
    return jwt.encode(payload, key, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment and clean up after all tests."""
    os.environ["TESTING"] = "true"

    yield

    cleanup_test_database()


@pytest.fixture(name="test_engine")
def test_engine_fixture():
    """Create a test database engine using in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return engine


@pytest.fixture(name="test_session")
def test_session_fixture(test_engine):
    """Create a test database session."""
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(test_session: Session):
    """
    Create a test client with the test database session.

    The generation provider is unconfigured, so replies come from the
    fallback responder unless a test overrides ``get_generation_provider``.
    """
    def get_test_session():
        return test_session

    app.dependency_overrides[get_session] = get_test_session
    app.dependency_overrides[get_generation_provider] = lambda: UnconfiguredProvider()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(name="alice_headers")
def alice_headers_fixture():
    return auth_headers("user-alice")


@pytest.fixture(name="bob_headers")
def bob_headers_fixture():
    return auth_headers("user-bob")


@pytest.fixture(name="stub_provider")
def stub_provider_fixture():
    return StubProvider()


@pytest.fixture(name="provider_factory")
def provider_factory_fixture():
    """Build StubProvider instances with custom behavior."""
    return StubProvider


@pytest.fixture(name="token_factory")
def token_factory_fixture():
    return make_token


@pytest.fixture(name="use_provider")
def use_provider_fixture(client):
    """Route the client's chat requests to the given provider."""
    def install(provider):
        app.dependency_overrides[get_generation_provider] = lambda: provider
        return provider
    return install
