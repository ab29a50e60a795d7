"""
Nash Cards — Card Models

CardDescriptor is what the user typed in; CardResult is a formatted catalog
(or synthesized) card; PricedCard is a CardResult after condition
enrichment.

All models accept and emit the camelCase field names used in stored JSON
(`setCode`, `imageUrl`, `adjustedPrice`, ...).
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CardDescriptor(BaseModel):
    """User-entered identification of a physical card."""
    name: str
    set: str
    number: str = ""
    condition: str
    photo: str | None = None  # Data URL of an uploaded photo


class TCGPlayerPrice(BaseModel):
    avg: Decimal | None = None


class CardPrices(BaseModel):
    tcgplayer: TCGPlayerPrice = Field(default_factory=TCGPlayerPrice)


class CardResult(BaseModel):
    """A card ready to be priced."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    set: str = "Unknown Set"
    set_code: str = Field(default="UNKNOWN", alias="setCode")
    number: str = "N/A"
    image_url: str = Field(default="", alias="imageUrl")
    rarity: str = "Common"
    type: str = "Unknown"
    hp: str = "N/A"
    prices: CardPrices = Field(default_factory=CardPrices)


class PriceBreakdown(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_price: Decimal = Field(..., alias="basePrice")
    condition_adjustment: str = Field(..., alias="conditionAdjustment")  # e.g. "75%"
    estimated_value: Decimal = Field(..., alias="estimatedValue")


class PricedCard(CardResult):
    """
    CardResult enriched with a condition-adjusted price.

    Invariant: adjusted_price == base_price * condition_multiplier.
    """
    selected_condition: str = Field(..., alias="selectedCondition")
    base_price: Decimal = Field(..., alias="basePrice")
    adjusted_price: Decimal = Field(..., alias="adjustedPrice")
    condition_multiplier: Decimal = Field(..., alias="conditionMultiplier")
    price_breakdown: PriceBreakdown = Field(..., alias="priceBreakdown")
