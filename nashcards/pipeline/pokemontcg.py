"""
Nash Cards — pokemontcg.io API Client

Read-only access to the pokemontcg.io v2 card catalog:
- Card search by query string → candidate cards for a user's descriptor
- Card detail by ID → single card for pricing
- Set listing → popular sets for the input form

Base URL: https://api.pokemontcg.io/v2/
Query syntax: name:"Charizard" series.name:"Base"
"""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from nashcards.config import settings
from nashcards.exceptions import CardNotFoundError, TransportError

logger = structlog.get_logger(__name__)

_M = TypeVar("_M", bound=BaseModel)

# ---------------------------------------------------------------------------
# Pydantic Response Models
# ---------------------------------------------------------------------------


class SetInfo(BaseModel):
    """Set metadata from pokemontcg.io."""
    id: str = Field(..., description="Set code (e.g., 'base1')")
    name: str = Field(..., description="Set name (e.g., 'Base')")
    series: str | None = Field(default=None, description="Series name (e.g., 'Base')")
    releaseDate: str | None = Field(default=None, description="Release date YYYY/MM/DD")


class CardData(BaseModel):
    """
    Card metadata from pokemontcg.io.

    Only the fields the valuation screens show are modelled; everything else
    in the payload is ignored.
    """
    id: str = Field(..., description="Canonical card ID: {set_code}-{card_number}")
    name: str = Field(..., description="Card name")
    number: str | None = Field(default=None, description="Card number within set")
    set: SetInfo | None = Field(default=None, description="Set metadata")
    rarity: str | None = None
    types: list[str] = Field(default_factory=list)
    hp: str | None = None
    images: dict[str, str] | None = Field(default=None, description="Card images")

    @field_validator("hp", "number", mode="before")
    @classmethod
    def coerce_str(cls, v: Any) -> str | None:
        """The API is inconsistent about numeric strings."""
        if v is None or v == "":
            return None
        return str(v)

    @property
    def image_url(self) -> str | None:
        """Get the best available image URL."""
        if self.images:
            return self.images.get("large") or self.images.get("small")
        return None


class CardListResponse(BaseModel):
    """Paginated response from pokemontcg.io cards endpoint."""
    data: list[CardData] = Field(default_factory=list)
    page: int = Field(default=1)
    pageSize: int = Field(default=250)
    count: int = Field(default=0)
    totalCount: int = Field(default=0)


class SetListResponse(BaseModel):
    """Response from pokemontcg.io sets endpoint."""
    data: list[SetInfo] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Query Builder
# ---------------------------------------------------------------------------


def build_search_query(name: str, set_name: str | None = None) -> str:
    """
    Build a catalog query for an exact card name, optionally narrowed by set.

    Examples:
        >>> build_search_query("Charizard", "Base")
        'name:"Charizard" series.name:"Base"'
    """
    query = f'name:"{name.strip()}"'
    if set_name and set_name.strip():
        query += f' series.name:"{set_name.strip()}"'
    return query


def _parse(model: type[_M], data: Any) -> _M:
    """Validate a response body, reporting schema drift as a transport failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(
            "pokemontcg_unexpected_payload",
            model=model.__name__,
            error_count=e.error_count(),
        )
        raise TransportError(f"Unexpected {model.__name__} payload") from e


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class PokemonTCGClient:
    """
    Async client for the pokemontcg.io v2 API.

    Every failure (HTTP status, connection, malformed body) surfaces as
    TransportError so callers handle one exception type.

    Usage:
        async with PokemonTCGClient() as client:
            cards = await client.search_cards('name:"Pikachu"')
            card = await client.fetch_card("base1-58")
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        base_backoff: float | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.POKEMONTCG_API_KEY
        self._base_url = base_url or settings.POKEMONTCG_BASE_URL
        self._timeout = timeout if timeout is not None else settings.POKEMONTCG_TIMEOUT_SECONDS
        self._max_retries = (
            max_retries if max_retries is not None else settings.POKEMONTCG_MAX_RETRIES
        )
        self._base_backoff = (
            base_backoff if base_backoff is not None else settings.POKEMONTCG_BACKOFF_SECONDS
        )
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        if self._client is not None:
            return
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-Api-Key"] = self._api_key
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
        )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> PokemonTCGClient:
        await self.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request, retrying 429/5xx/connection errors with backoff."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        last_error: Exception | None = None
        status_code: int | None = None

        for attempt in range(self._max_retries + 1):
            retries_left = attempt < self._max_retries
            try:
                logger.debug("pokemontcg_request", path=path, params=params, attempt=attempt + 1)
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                last_error = e
                status_code = e.response.status_code
                logger.error(
                    "pokemontcg_http_error",
                    status_code=status_code,
                    attempt=attempt + 1,
                    path=path,
                )
                if (status_code == 429 or status_code >= 500) and retries_left:
                    await asyncio.sleep(self._base_backoff * (2 ** attempt))
                    continue
                break

            except httpx.RequestError as e:
                last_error = e
                status_code = None
                logger.error(
                    "pokemontcg_request_error",
                    error=str(e),
                    attempt=attempt + 1,
                    path=path,
                )
                if retries_left:
                    await asyncio.sleep(self._base_backoff * (2 ** attempt))
                    continue
                break

            except ValueError as e:
                # Body was not JSON
                last_error = e
                logger.error("pokemontcg_invalid_body", path=path, error=str(e))
                break

        if status_code is not None:
            message = f"API Error: {status_code}"
        else:
            message = f"pokemontcg.io request failed: {last_error}"
        raise TransportError(message, status_code=status_code) from last_error

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def search_cards(self, query: str) -> list[CardData]:
        """
        Run a catalog search and return the first page of matches.

        Args:
            query: pokemontcg.io query string (see build_search_query).

        Returns:
            Matching cards, possibly empty.
        """
        logger.info("pokemontcg_search", query=query)

        data = await self._request("/cards", params={"q": query})
        response = _parse(CardListResponse, data)

        logger.info(
            "pokemontcg_search_complete",
            query=query,
            count=len(response.data),
            total=response.totalCount,
        )
        return response.data

    async def fetch_card(self, card_id: str) -> CardData:
        """
        Fetch a single card by its pokemontcg.io ID.

        Raises:
            CardNotFoundError: The response carried no card.
            TransportError: The request failed.
        """
        logger.info("pokemontcg_fetch_card", card_id=card_id)

        data = await self._request(f"/cards/{card_id}")
        payload = data.get("data") if isinstance(data, dict) else None
        if not payload:
            raise CardNotFoundError(f"No card with id {card_id!r}")

        card = _parse(CardData, payload)
        logger.info("pokemontcg_fetch_card_complete", card_id=card.id, card_name=card.name)
        return card

    async def fetch_sets(self) -> list[SetInfo]:
        """Fetch the set list."""
        logger.info("pokemontcg_fetch_sets")

        data = await self._request("/sets")
        response = _parse(SetListResponse, data)

        logger.info("pokemontcg_fetch_sets_complete", count=len(response.data))
        return response.data
