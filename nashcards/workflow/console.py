"""
Nash Cards — Terminal Front-End

Implements the UI port by printing each screen to a text stream.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from nashcards.models.account import SessionRecord
from nashcards.models.card import CardDescriptor, PricedCard
from nashcards.workflow.screens import Screen

_RULE = "-" * 48


def _fmt_descriptor(descriptor: CardDescriptor) -> list[str]:
    return [
        f"  Name:      {descriptor.name}",
        f"  Set:       {descriptor.set}",
        f"  Number:    {descriptor.number or 'N/A'}",
        f"  Condition: {descriptor.condition}",
        f"  Photo:     {'attached' if descriptor.photo else 'none'}",
    ]


def _fmt_card(card: PricedCard) -> list[str]:
    breakdown = card.price_breakdown
    return [
        f"  {card.name} — {card.set or card.set_code or 'N/A'} #{card.number}",
        f"  Rarity: {card.rarity}  Type: {card.type}  HP: {card.hp}",
        f"  Condition: {card.selected_condition or 'N/A'}",
        f"  Estimated value: ${card.adjusted_price}",
        f"  Base Price × {breakdown.condition_adjustment} = ${breakdown.estimated_value}",
        f"  Image: {card.image_url or 'No Image'}",
    ]


class ConsoleUI:
    """Plain-text renderer for the valuation screens."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout
        self.search_enabled = True
        self.user_label = "Login"

    def _write(self, *lines: str) -> None:
        for line in lines:
            print(line, file=self._stream)

    def render(self, screen: Screen, context: dict[str, Any]) -> None:
        self._write(_RULE, f"[{screen.value}]  {self.user_label}", _RULE)

        if screen is Screen.AUTH:
            self._write("Log in or create an account to value your cards.")
        elif screen is Screen.CARD_INPUT:
            self._write("Describe your card: name, set, number (optional), condition.")
        elif screen is Screen.CONFIRMATION:
            self._write("Confirm card details:", *_fmt_descriptor(context["descriptor"]))
        elif screen is Screen.LOADING:
            self._write("Looking up card pricing...")
        elif screen is Screen.RESULTS:
            self._write(*_fmt_card(context["card"]))
        elif screen is Screen.ERROR:
            self._write(f"Error: {context.get('message', 'Something went wrong')}")

    def show_message(self, message: str) -> None:
        self._write(f"! {message}")

    def set_search_enabled(self, enabled: bool) -> None:
        self.search_enabled = enabled

    def update_user(self, session: SessionRecord | None) -> None:
        self.user_label = (session.name or "User") if session else "Login"
