"""
Nash Cards — Application Context

Bundles the state the workflow needs so nothing lives in module globals:

- durable storage (accounts, session) on the SQL engine
- transient storage (card descriptor, screen history) in memory
- the session store and the lookup service built on top of them

Lifecycle: create_app_context() at startup, reset() on logout, close() at
shutdown.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nashcards.auth.session_store import SessionStore
from nashcards.config import Settings, settings as default_settings
from nashcards.pipeline.lookup import LookupService
from nashcards.pipeline.pokemontcg import PokemonTCGClient
from nashcards.storage.kv import KeyValueStorage, MemoryStorage, SqlStorage, create_schema

logger = structlog.get_logger(__name__)


class AppContext:
    """Owned application state passed to the workflow controller."""

    def __init__(
        self,
        settings: Settings,
        durable: KeyValueStorage,
        transient: KeyValueStorage,
        session_store: SessionStore,
        lookup: LookupService,
        client: PokemonTCGClient | None = None,
        engine: Any = None,
    ):
        self.settings = settings
        self.durable = durable
        self.transient = transient
        self.session_store = session_store
        self.lookup = lookup
        self._client = client
        self._engine = engine

    async def reset(self) -> None:
        """Drop per-tab state (card descriptor, screen history)."""
        await self.transient.clear()
        logger.info("app_context_reset")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        if self._engine is not None:
            await self._engine.dispose()
        logger.info("app_context_closed")


async def create_app_context(
    settings: Settings | None = None,
    database_url: str | None = None,
    client: PokemonTCGClient | None = None,
) -> AppContext:
    """
    Build the application context.

    Creates the storage schema, opens the catalog client and seeds the demo
    account.

    Args:
        settings: Settings override (defaults to the module singleton).
        database_url: Durable storage URL override.
        client: Pre-built catalog client (tests pass one pointed at a mock).
    """
    settings = settings or default_settings
    url = database_url or settings.DATABASE_URL

    logger.info("app_context_initializing", database_url=url)

    engine = create_async_engine(url, echo=False)
    owns_client = client is None
    client = client or PokemonTCGClient(
        api_key=settings.POKEMONTCG_API_KEY,
        base_url=settings.POKEMONTCG_BASE_URL,
        timeout=settings.POKEMONTCG_TIMEOUT_SECONDS,
        max_retries=settings.POKEMONTCG_MAX_RETRIES,
        base_backoff=settings.POKEMONTCG_BACKOFF_SECONDS,
    )

    try:
        await create_schema(engine)
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        durable = SqlStorage(session_factory)
        transient = MemoryStorage()

        await client.open()

        session_store = SessionStore(
            durable,
            key_prefix=settings.STORAGE_KEY_PREFIX,
            config=settings,
        )
        await session_store.init()
    except Exception:
        logger.exception("app_context_init_failed", database_url=url)
        if owns_client:
            await client.aclose()
        await engine.dispose()
        raise

    lookup = LookupService(client, cache_ttl_seconds=settings.SEARCH_CACHE_TTL_SECONDS)

    logger.info("app_context_ready")
    return AppContext(
        settings=settings,
        durable=durable,
        transient=transient,
        session_store=session_store,
        lookup=lookup,
        client=client,
        engine=engine,
    )
