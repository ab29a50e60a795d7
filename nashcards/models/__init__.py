"""
Models package — SQLAlchemy tables and pydantic records.
"""

from nashcards.models.account import CredentialRecord, SessionRecord
from nashcards.models.base import Base
from nashcards.models.card import (
    CardDescriptor,
    CardPrices,
    CardResult,
    PriceBreakdown,
    PricedCard,
    TCGPlayerPrice,
)
from nashcards.models.storage_entry import StorageEntry

__all__ = [
    "Base",
    "CardDescriptor",
    "CardPrices",
    "CardResult",
    "CredentialRecord",
    "PriceBreakdown",
    "PricedCard",
    "SessionRecord",
    "StorageEntry",
    "TCGPlayerPrice",
]
