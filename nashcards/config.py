"""
Nash Cards — Configuration & Constants

Every endpoint, threshold and demo default lives here. No hardcoded values
in business logic.

Usage:
    from nashcards.config import settings
"""

from __future__ import annotations

from decimal import Decimal

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for Nash Cards.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # pokemontcg.io Catalog API
    # -----------------------------------------------------------------------
    POKEMONTCG_BASE_URL: str = "https://api.pokemontcg.io/v2"
    POKEMONTCG_API_KEY: str = ""
    POKEMONTCG_TIMEOUT_SECONDS: float = 30.0
    POKEMONTCG_MAX_RETRIES: int = 0         # User retries from the error screen
    POKEMONTCG_BACKOFF_SECONDS: float = 1.0

    # -----------------------------------------------------------------------
    # Lookup Cache
    # -----------------------------------------------------------------------
    SEARCH_CACHE_TTL_SECONDS: int = 3600    # 1 hour

    # Demo latency before each search, mirrors the hosted tool
    SEARCH_LATENCY_SECONDS: float = 2.0

    # -----------------------------------------------------------------------
    # Storage
    # -----------------------------------------------------------------------
    DATABASE_URL: str = "sqlite+aiosqlite:///nashcards.db"
    STORAGE_KEY_PREFIX: str = "nashCards_"

    # -----------------------------------------------------------------------
    # Accounts
    # -----------------------------------------------------------------------
    MIN_PASSWORD_LENGTH: int = 6
    DEMO_USER_ID: str = "1"
    DEMO_USER_NAME: str = "Demo User"
    DEMO_USER_EMAIL: str = "demo@example.com"
    DEMO_USER_PASSWORD: str = "password123"

    # -----------------------------------------------------------------------
    # Card Input
    # -----------------------------------------------------------------------
    MAX_PHOTO_BYTES: int = 10 * 1024 * 1024  # 10 MB

    # -----------------------------------------------------------------------
    # Condition Multipliers (Near Mint / Lightly Played / Moderately Played)
    # -----------------------------------------------------------------------
    CONDITION_MULTIPLIER_NEAR_MINT: Decimal = Decimal("1.00")
    CONDITION_MULTIPLIER_LIGHTLY_PLAYED: Decimal = Decimal("0.75")
    CONDITION_MULTIPLIER_MODERATELY_PLAYED: Decimal = Decimal("0.50")
    CONDITION_MULTIPLIER_DEFAULT: Decimal = Decimal("0.50")

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"


# Singleton instance
settings = Settings()
