"""
Nash Cards — Condition Pricing & Mock Prices

Enrichment applies a fixed multiplier per condition tier to a card's base
price:

    Near Mint          × 1.00
    Lightly Played     × 0.75
    Moderately Played  × 0.50
    anything else      × 0.50  (silent default, not an error)

Base prices come from the catalog when present. The catalog currently
returns no market data we trust, so both base prices and synthesized
fallback cards use deterministic name-seeded placeholders. The same name
always yields the same price.

All money values use Decimal, quantized to cents.
"""

from __future__ import annotations

import time
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

import structlog

from nashcards.config import settings
from nashcards.models.card import (
    CardDescriptor,
    CardPrices,
    CardResult,
    PriceBreakdown,
    PricedCard,
    TCGPlayerPrice,
)

logger = structlog.get_logger(__name__)

_CENT = Decimal("0.01")


class CardCondition(str, Enum):
    """Condition tiers offered on the card input form."""
    NEAR_MINT = "Near Mint"
    LIGHTLY_PLAYED = "Lightly Played"
    MODERATELY_PLAYED = "Moderately Played"


# Keyed by the raw form value so lookups work with plain strings
CONDITION_MULTIPLIERS: dict[str, Decimal] = {
    CardCondition.NEAR_MINT.value: settings.CONDITION_MULTIPLIER_NEAR_MINT,
    CardCondition.LIGHTLY_PLAYED.value: settings.CONDITION_MULTIPLIER_LIGHTLY_PLAYED,
    CardCondition.MODERATELY_PLAYED.value: settings.CONDITION_MULTIPLIER_MODERATELY_PLAYED,
}

# ---------------------------------------------------------------------------
# Sample images for synthesized cards (Base Set scans)
# ---------------------------------------------------------------------------

DEFAULT_MOCK_IMAGE = "https://images.pokemontcg.io/base1/4.png"

MOCK_IMAGES: dict[str, str] = {
    "charizard": "https://images.pokemontcg.io/base1/4.png",
    "blastoise": "https://images.pokemontcg.io/base1/2.png",
    "venusaur": "https://images.pokemontcg.io/base1/1.png",
    "dragonite": "https://images.pokemontcg.io/base1/5.png",
    "machamp": "https://images.pokemontcg.io/base1/7.png",
    "golem": "https://images.pokemontcg.io/base1/6.png",
    "arcanine": "https://images.pokemontcg.io/base1/23.png",
    "lapras": "https://images.pokemontcg.io/base1/16.png",
    "snorlax": "https://images.pokemontcg.io/base1/27.png",
    "alakazam": "https://images.pokemontcg.io/base1/1.png",
    "pikachu": "https://images.pokemontcg.io/base1/25.png",
}


def get_condition_multiplier(condition: str) -> Decimal:
    """Return the multiplier for a condition, 0.50 for unrecognized values."""
    multiplier = CONDITION_MULTIPLIERS.get(condition)
    if multiplier is None:
        logger.debug("condition_unrecognized_default_applied", condition=condition)
        return settings.CONDITION_MULTIPLIER_DEFAULT
    return multiplier


def generate_catalog_price(card_name: str) -> Decimal:
    """
    Placeholder average price for a catalog card, $5–$500.

    Seeded from the first character of the name ("pokemon" when blank).

    Examples:
        >>> generate_catalog_price("Pikachu")
        Decimal('53.00')  # 5 + (80 × 137) % 496
    """
    seed = ord((card_name or "pokemon")[0])
    return Decimal(5 + (seed * 137) % 496).quantize(_CENT)


def generate_fallback_price(card_name: str) -> Decimal:
    """
    Placeholder price for a synthesized card, $15–$500.

    Seeded from the first and last characters of the name.

    Examples:
        >>> generate_fallback_price("Charizard")
        Decimal('166.00')  # 15 + ((67 + 100) × 257) % 486

    Raises:
        ValueError: If the name is empty.
    """
    if not card_name:
        raise ValueError("card_name must be non-empty")

    seed = ord(card_name[0]) + ord(card_name[-1])
    return Decimal(15 + (seed * 257) % 486).quantize(_CENT)


def generate_mock_image_url(card_name: str) -> str:
    """Sample image for well-known names, the Charizard scan otherwise."""
    return MOCK_IMAGES.get(card_name.lower(), DEFAULT_MOCK_IMAGE)


def create_mock_card_result(descriptor: CardDescriptor) -> CardResult:
    """
    Synthesize a card for a descriptor the catalog could not match.

    Args:
        descriptor: What the user entered.

    Returns:
        CardResult shaped like a formatted catalog card, with a
        deterministic placeholder price.
    """
    card = CardResult(
        id=f"mock_{int(time.time() * 1000)}",
        name=descriptor.name,
        set=descriptor.set,
        set_code=descriptor.set[:2].upper(),
        number=descriptor.number or "1/102",
        image_url=generate_mock_image_url(descriptor.name),
        rarity="Holo Rare",
        type="Varies",
        hp="120",
        prices=CardPrices(tcgplayer=TCGPlayerPrice(avg=generate_fallback_price(descriptor.name))),
    )

    logger.info(
        "mock_card_created",
        card_name=card.name,
        set_name=card.set,
        price=str(card.prices.tcgplayer.avg),
    )
    return card


def enrich_card_with_pricing(card: CardResult, condition: str) -> PricedCard:
    """
    Apply the condition multiplier to a card's base price.

    Pure function: the input card is not modified.

    Args:
        card: Formatted catalog card or synthesized fallback.
        condition: Condition label from the input form.

    Returns:
        PricedCard copy with base, adjusted price and breakdown.

    Examples:
        Base $100.00, "Lightly Played" → adjusted $75.00, adjustment "75%"
    """
    multiplier = get_condition_multiplier(condition)

    raw_base = card.prices.tcgplayer.avg or generate_catalog_price(card.name)
    base_price = Decimal(raw_base).quantize(_CENT, rounding=ROUND_HALF_UP)
    adjusted_price = (base_price * multiplier).quantize(_CENT, rounding=ROUND_HALF_UP)
    adjustment_pct = (multiplier * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    priced = PricedCard.model_validate(
        {
            **card.model_dump(),
            "selected_condition": condition,
            "base_price": base_price,
            "adjusted_price": adjusted_price,
            "condition_multiplier": multiplier,
            "price_breakdown": PriceBreakdown(
                base_price=base_price,
                condition_adjustment=f"{adjustment_pct}%",
                estimated_value=adjusted_price,
            ),
        }
    )

    logger.debug(
        "card_enriched",
        card_id=card.id,
        condition=condition,
        base_price=str(base_price),
        multiplier=str(multiplier),
        adjusted_price=str(adjusted_price),
    )
    return priced
