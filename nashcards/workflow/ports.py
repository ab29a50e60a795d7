"""
Nash Cards — UI Port

The workflow controller never touches a rendering surface directly. Any
front-end (terminal, web, test double) implements this protocol.
"""

from __future__ import annotations

from typing import Any, Protocol

from nashcards.models.account import SessionRecord
from nashcards.workflow.screens import Screen


class UIPort(Protocol):
    """Rendering operations the controller relies on."""

    def render(self, screen: Screen, context: dict[str, Any]) -> None:
        """Show a screen. context carries the descriptor, card or message."""
        ...

    def show_message(self, message: str) -> None:
        """Inline notice on the current screen (form errors, redirects)."""
        ...

    def set_search_enabled(self, enabled: bool) -> None:
        ...

    def update_user(self, session: SessionRecord | None) -> None:
        """Refresh the header's user display."""
        ...
