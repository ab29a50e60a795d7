"""
Nash Cards — Session Store

Owns the registered accounts and the single active session, both kept in
durable key-value storage:

    {prefix}users    → JSON array of credential records
    {prefix}session  → JSON session record, absent when logged out

A new login overwrites the previous session; there is never more than one.
Passwords are stored and compared in cleartext. This store backs a demo
and must not hold real credentials.
"""

from __future__ import annotations

import json
import re
import time
from datetime import datetime, timezone

import structlog
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from nashcards.config import Settings, settings as default_settings
from nashcards.exceptions import (
    ConfigError,
    DuplicateEmailError,
    InvalidPasswordError,
    MissingCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from nashcards.models.account import CredentialRecord, SessionRecord
from nashcards.storage.kv import KeyValueStorage

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_USERS_ADAPTER = TypeAdapter(list[CredentialRecord])


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


class SessionStore:
    """
    Signup, login and session lookup against durable storage.

    Usage:
        store = SessionStore(storage)
        await store.init()
        session = await store.login("demo@example.com", "password123")
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key_prefix: str | None = None,
        config: Settings | None = None,
    ):
        self._storage = storage
        self._config = config or default_settings
        prefix = key_prefix if key_prefix is not None else self._config.STORAGE_KEY_PREFIX
        self._users_key = f"{prefix}users"
        self._session_key = f"{prefix}session"

    # -----------------------------------------------------------------------
    # Storage helpers
    # -----------------------------------------------------------------------

    async def _load_users(self) -> list[CredentialRecord] | None:
        raw = await self._storage.get(self._users_key)
        if raw is None:
            return None
        try:
            return _USERS_ADAPTER.validate_json(raw)
        except PydanticValidationError as e:
            raise ConfigError(f"Failed to load users from {self._users_key}: {e}") from e

    async def _save_users(self, users: list[CredentialRecord]) -> None:
        await self._storage.set(self._users_key, _USERS_ADAPTER.dump_json(users).decode())

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def init(self) -> None:
        """Seed the demo account on first run and report any restored session."""
        if await self._load_users() is None:
            await self._save_users(
                [
                    CredentialRecord(
                        id=self._config.DEMO_USER_ID,
                        name=self._config.DEMO_USER_NAME,
                        email=self._config.DEMO_USER_EMAIL,
                        password=self._config.DEMO_USER_PASSWORD,
                    )
                ]
            )
            logger.info("session_store_seeded", email=self._config.DEMO_USER_EMAIL)

        session = await self.get_session()
        if session:
            logger.info("session_restored", name=session.name, email=session.email)

    async def signup(self, name: str, email: str, password: str) -> SessionRecord:
        """
        Register an account and log straight into it.

        Raises:
            ValidationError: Empty field, malformed email or short password.
            DuplicateEmailError: Email already registered.
        """
        if not name or not email or not password:
            raise ValidationError("All fields are required")

        if not is_valid_email(email):
            raise ValidationError("Invalid email address")

        if len(password) < self._config.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {self._config.MIN_PASSWORD_LENGTH} characters"
            )

        users = await self._load_users() or []
        if any(user.email == email for user in users):
            logger.info("signup_duplicate_email", email=email)
            raise DuplicateEmailError("Email already registered")

        taken = {user.id for user in users}
        user_id = int(time.time() * 1000)
        while str(user_id) in taken:
            user_id += 1

        users.append(CredentialRecord(id=str(user_id), name=name, email=email, password=password))
        await self._save_users(users)

        logger.info("signup_success", user_id=str(user_id), email=email)
        return await self.login(email, password)

    async def login(self, email: str, password: str) -> SessionRecord:
        """
        Replace the active session with one for this account.

        Raises:
            MissingCredentialsError: Email or password empty.
            UserNotFoundError: No account for the email.
            InvalidPasswordError: Password mismatch.
        """
        if not email or not password:
            raise MissingCredentialsError("Email and password are required")

        users = await self._load_users() or []
        user = next((u for u in users if u.email == email), None)

        if user is None:
            logger.info("login_user_not_found", email=email)
            raise UserNotFoundError("User not found")

        if user.password != password:
            logger.info("login_invalid_password", email=email)
            raise InvalidPasswordError("Invalid password")

        session = SessionRecord(
            id=user.id,
            name=user.name,
            email=user.email,
            login_time=datetime.now(timezone.utc).isoformat(),
        )
        await self._storage.set(self._session_key, session.model_dump_json(by_alias=True))

        logger.info("session_login_success", user_id=user.id, email=user.email)
        return session

    async def logout(self) -> None:
        await self._storage.remove(self._session_key)
        logger.info("session_logout")

    async def get_session(self) -> SessionRecord | None:
        raw = await self._storage.get(self._session_key)
        if raw is None:
            return None
        try:
            return SessionRecord.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            raise ConfigError(f"Failed to load session from {self._session_key}: {e}") from e

    async def is_logged_in(self) -> bool:
        return await self.get_session() is not None

    async def get_profile(self) -> CredentialRecord | None:
        """Credential record behind the active session, None if orphaned."""
        session = await self.get_session()
        if session is None:
            return None

        users = await self._load_users() or []
        return next((u for u in users if u.id == session.id), None)
