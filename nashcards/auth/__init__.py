"""Nash Cards — Accounts & Sessions"""

from nashcards.auth.session_store import SessionStore

__all__ = ["SessionStore"]
