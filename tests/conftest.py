"""
Nash Cards — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Mock catalog HTTP (respx)
- In-memory durable storage (aiosqlite)
- Recording UI port and controllable clock
- Mock API response data
- Async test support via pytest-asyncio
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, AsyncGenerator

import pytest
import respx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nashcards.auth.session_store import SessionStore
from nashcards.config import Settings
from nashcards.context import AppContext
from nashcards.models.account import SessionRecord
from nashcards.pipeline.lookup import LookupService
from nashcards.pipeline.pokemontcg import PokemonTCGClient
from nashcards.storage.kv import MemoryStorage, SqlStorage, create_schema
from nashcards.workflow.screens import Screen


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)

CATALOG_BASE_URL = "https://catalog.test/v2"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for anyio tests."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Test Doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingUI:
    """UI port that records every call instead of drawing anything."""

    def __init__(self) -> None:
        self.rendered: list[tuple[Screen, dict[str, Any]]] = []
        self.messages: list[str] = []
        self.search_toggles: list[bool] = []
        self.user: SessionRecord | None = None

    @property
    def screens(self) -> list[Screen]:
        return [screen for screen, _ in self.rendered]

    @property
    def last_screen(self) -> Screen | None:
        return self.rendered[-1][0] if self.rendered else None

    @property
    def last_context(self) -> dict[str, Any]:
        return self.rendered[-1][1] if self.rendered else {}

    def render(self, screen: Screen, context: dict[str, Any]) -> None:
        self.rendered.append((screen, context))

    def show_message(self, message: str) -> None:
        self.messages.append(message)

    def set_search_enabled(self, enabled: bool) -> None:
        self.search_toggles.append(enabled)

    def update_user(self, session: SessionRecord | None) -> None:
        self.user = session


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Async session factory on in-memory SQLite.

    Creates a fresh database for each test, ensuring isolation.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    await create_schema(engine)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def sql_storage(session_factory: async_sessionmaker[AsyncSession]) -> SqlStorage:
    return SqlStorage(session_factory)


@pytest.fixture
async def session_store(sql_storage: SqlStorage) -> SessionStore:
    """Session store with the demo account seeded."""
    store = SessionStore(sql_storage, key_prefix="nashCards_")
    await store.init()
    return store


@pytest.fixture
def catalog() -> respx.MockRouter:
    """
    respx router for the catalog API.

    All HTTP requests are intercepted and must be explicitly mocked.
    Prevents accidental calls to the live API in tests.
    """
    with respx.mock(base_url=CATALOG_BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
async def catalog_client(catalog: respx.MockRouter) -> AsyncGenerator[PokemonTCGClient, None]:
    async with PokemonTCGClient(
        api_key="",
        base_url=CATALOG_BASE_URL,
        max_retries=0,
        base_backoff=0.0,
    ) as client:
        yield client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lookup(catalog_client: PokemonTCGClient, clock: FakeClock) -> LookupService:
    return LookupService(catalog_client, cache_ttl_seconds=3600, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(SEARCH_LATENCY_SECONDS=0.0, POKEMONTCG_BASE_URL=CATALOG_BASE_URL)


@pytest.fixture
def app_context(
    test_settings: Settings,
    sql_storage: SqlStorage,
    session_store: SessionStore,
    lookup: LookupService,
) -> AppContext:
    return AppContext(
        settings=test_settings,
        durable=sql_storage,
        transient=MemoryStorage(),
        session_store=session_store,
        lookup=lookup,
    )


@pytest.fixture
def ui() -> RecordingUI:
    return RecordingUI()


# ---------------------------------------------------------------------------
# Fixture Loaders
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def load_mock_pokemontcg() -> dict:
    """Load mock pokemontcg.io search response from fixtures/mock_pokemontcg.json."""
    fixture_path = Path(__file__).parent / "fixtures" / "mock_pokemontcg.json"
    with open(fixture_path, encoding="utf-8") as f:
        return json.load(f)
