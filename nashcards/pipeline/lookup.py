"""
Nash Cards — Card Lookup Service

Turns a user's card descriptor into formatted catalog cards:

1. Check the result cache (keyed by name + set + number, 1-hour TTL)
2. Query pokemontcg.io by exact name, narrowed by set when given
3. Keep cards whose name contains the query (case-insensitive); if none do,
   keep the whole result set
4. Format, cache, return

"No cards found" and transport failures are reported through the result
object, never raised. Choosing a fallback card is the caller's job.

The cache is unbounded and evicts lazily: an expired entry is simply
ignored and overwritten by the next successful search.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Callable, NamedTuple

import structlog
from pydantic import BaseModel, Field

from nashcards.config import settings
from nashcards.engine.pricing import enrich_card_with_pricing, generate_catalog_price
from nashcards.exceptions import NotFoundError, TransportError
from nashcards.models.card import CardPrices, CardResult, PricedCard, TCGPlayerPrice
from nashcards.pipeline.pokemontcg import (
    CardData,
    PokemonTCGClient,
    SetInfo,
    build_search_query,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Result Models
# ---------------------------------------------------------------------------


class SearchResult(BaseModel):
    """Outcome of search_cards."""
    success: bool
    data: list[CardResult] = Field(default_factory=list)
    error: str | None = None


class PricingResult(BaseModel):
    """Outcome of get_card_pricing."""
    success: bool
    data: PricedCard | None = None
    error: str | None = None


class SetsResult(BaseModel):
    """Outcome of get_popular_sets."""
    success: bool
    data: list[SetInfo] = Field(default_factory=list)
    error: str | None = None


class CacheEntry(NamedTuple):
    data: list[CardResult]
    timestamp: float  # Seconds on the service clock


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_card(card: CardData) -> CardResult:
    """Flatten a catalog card into the shape the result screens use."""
    return CardResult(
        id=card.id,
        name=card.name,
        set=card.set.name if card.set else "Unknown Set",
        set_code=card.set.id if card.set else "UNKNOWN",
        number=card.number or "N/A",
        image_url=card.image_url or "",
        rarity=card.rarity or "Common",
        type=card.types[0] if card.types else "Unknown",
        hp=card.hp or "N/A",
        prices=CardPrices(tcgplayer=TCGPlayerPrice(avg=generate_catalog_price(card.name))),
    )


def get_sample_card() -> CardResult:
    """Fixed Base Set Charizard for demos and manual testing."""
    return CardResult(
        id="sample_001",
        name="Charizard",
        set="Base Set",
        set_code="BS",
        number="4/102",
        image_url="https://images.pokemontcg.io/base1/4.png",
        rarity="Holo Rare",
        type="Fire",
        hp="120",
        prices=CardPrices(tcgplayer=TCGPlayerPrice(avg=Decimal("45.50"))),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class LookupService:
    """
    Cached, read-only card lookup.

    Usage:
        async with PokemonTCGClient() as client:
            lookup = LookupService(client)
            result = await lookup.search_cards("Charizard", "Base")
    """

    def __init__(
        self,
        client: PokemonTCGClient,
        cache_ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._ttl = (
            cache_ttl_seconds
            if cache_ttl_seconds is not None
            else settings.SEARCH_CACHE_TTL_SECONDS
        )
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}

    @staticmethod
    def cache_key(name: str, set_name: str, number: str = "") -> str:
        return f"search_{name}_{set_name}_{number}"

    def _cached(self, key: str) -> list[CardResult] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            return None
        return entry.data

    async def search_cards(
        self,
        name: str,
        set_name: str,
        number: str = "",
    ) -> SearchResult:
        """
        Search the catalog for cards matching a descriptor.

        Args:
            name: Card name as typed.
            set_name: Set/series name; blank means no set filter.
            number: Card number, only part of the cache key.

        Returns:
            SearchResult. success=False when the catalog errors or matches
            nothing.
        """
        key = self.cache_key(name, set_name, number)
        cached = self._cached(key)
        if cached is not None:
            logger.info("lookup_cache_hit", cache_key=key, count=len(cached))
            return SearchResult(success=True, data=cached)

        query = build_search_query(name, set_name)
        logger.info("lookup_search", query=query)

        try:
            cards = await self._client.search_cards(query)
        except TransportError as e:
            logger.warning("lookup_search_failed", query=query, error=str(e))
            return SearchResult(success=False, error=str(e))

        if not cards:
            logger.info("lookup_no_cards_found", query=query)
            return SearchResult(success=False, error="No cards found")

        name_match = name.strip().lower()
        matches = [card for card in cards if name_match in card.name.lower()]
        if not matches:
            logger.info("lookup_no_name_matches_using_all", query=query, count=len(cards))
            matches = cards

        formatted = [format_card(card) for card in matches]
        self._cache[key] = CacheEntry(data=formatted, timestamp=self._clock())

        logger.info("lookup_search_complete", query=query, count=len(formatted))
        return SearchResult(success=True, data=formatted)

    async def get_card_pricing(self, card_id: str, condition: str) -> PricingResult:
        """Fetch one card by catalog ID and price it for a condition."""
        try:
            card = await self._client.fetch_card(card_id)
        except (TransportError, NotFoundError) as e:
            logger.warning("lookup_pricing_failed", card_id=card_id, error=str(e))
            return PricingResult(success=False, error=str(e))

        priced = enrich_card_with_pricing(format_card(card), condition)
        return PricingResult(success=True, data=priced)

    async def get_popular_sets(self) -> SetsResult:
        """List sets for the input form's suggestions."""
        try:
            sets = await self._client.fetch_sets()
        except TransportError as e:
            logger.warning("lookup_sets_failed", error=str(e))
            return SetsResult(success=False, error=str(e))
        return SetsResult(success=True, data=sets)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("lookup_cache_cleared")

    @property
    def cache_size(self) -> int:
        return len(self._cache)
