"""Nash Cards — Screen Names"""

from __future__ import annotations

from enum import Enum


class Screen(str, Enum):
    """Screens of the valuation workflow, in the order a search visits them."""
    AUTH = "auth"
    CARD_INPUT = "card-input"
    CONFIRMATION = "confirmation"
    LOADING = "loading"
    RESULTS = "results"
    ERROR = "error"


# Entering any of these re-checks the session
PROTECTED_SCREENS: frozenset[Screen] = frozenset(
    {Screen.CARD_INPUT, Screen.CONFIRMATION, Screen.LOADING, Screen.RESULTS}
)
