"""
tests/conftest.py -- Shared test fixtures for ranker tests.

This module provides:
  - test_settings: a valid Settings object built from explicit overrides
  - token_service: TokenService bound to test_settings
  - user_store / ranking_store: isolated in-memory stores per test
  - api_client: TestClient with the real app and a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, load_settings
from rankings.store import RankingStore

TEST_SECRET_KEY = "test-secret-key-that-is-at-least-32-bytes-long"


def _shared_memory_url(name: str) -> str:
    return f"sqlite:///file:{name}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


@pytest.fixture
def test_settings() -> Settings:
    return load_settings(secret_key=TEST_SECRET_KEY, database_url="sqlite:///:memory:")


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(_shared_memory_url("users"))
    yield store
    store.close()


@pytest.fixture
def ranking_store() -> Generator[RankingStore, None, None]:
    store = RankingStore(_shared_memory_url("rankings"))
    yield store
    store.close()


def _patch_lifespan(settings: Settings, user_store: UserStore, ranking_store: RankingStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores and a test TokenService into app.state so
    TestClient routes never read the environment or touch a real database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.token_service = TokenService(settings)
        app.state.user_store = user_store
        app.state.ranking_store = ranking_store
        yield

    return test_lifespan


@pytest.fixture
def api_client(
    test_settings: Settings, user_store: UserStore, ranking_store: RankingStore
) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app backed by fresh in-memory stores."""
    original = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(test_settings, user_store, ranking_store)
    try:
        with TestClient(app, raise_server_exceptions=True) as client:
            yield client
    finally:
        app.router.lifespan_context = original
