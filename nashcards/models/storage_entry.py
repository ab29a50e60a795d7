"""
Nash Cards — Durable Key-Value Storage Table

One row per storage key. Values are opaque JSON strings written by the
session store (`users`, `session`); the table itself knows nothing about
their shape.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import TIMESTAMP, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from nashcards.models.base import Base


class StorageEntry(Base):
    """A single durable key/value pair."""

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Storage key, including the configured prefix",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Serialized JSON payload",
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last write time",
    )

    def __repr__(self) -> str:
        return f"<StorageEntry key={self.key!r} size={len(self.value or '')}>"
