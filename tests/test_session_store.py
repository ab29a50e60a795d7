"""
Nash Cards — Session Store Tests

Covers seeding, signup validation, login failures, single-session
overwrite, logout and profile lookup.
"""

from __future__ import annotations

import json

import pytest

from nashcards.auth.session_store import SessionStore, is_valid_email
from nashcards.exceptions import (
    AuthError,
    ConfigError,
    DuplicateEmailError,
    InvalidPasswordError,
    MissingCredentialsError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from nashcards.storage.kv import MemoryStorage, SqlStorage


async def _stored_users(storage: SqlStorage) -> list[dict]:
    return json.loads(await storage.get("nashCards_users") or "[]")


class TestInit:
    @pytest.mark.asyncio
    async def test_seeds_demo_account(self, session_store: SessionStore, sql_storage: SqlStorage) -> None:
        users = await _stored_users(sql_storage)

        assert users == [
            {
                "id": "1",
                "name": "Demo User",
                "email": "demo@example.com",
                "password": "password123",
            }
        ]

    @pytest.mark.asyncio
    async def test_does_not_reseed(self, session_store: SessionStore, sql_storage: SqlStorage) -> None:
        await session_store.signup("Ann", "ann@x.com", "abc123")
        await session_store.init()

        users = await _stored_users(sql_storage)
        assert [u["email"] for u in users] == ["demo@example.com", "ann@x.com"]

    @pytest.mark.asyncio
    async def test_corrupt_user_list_raises_config_error(self) -> None:
        storage = MemoryStorage()
        await storage.set("nashCards_users", "not json")

        with pytest.raises(ConfigError):
            await SessionStore(storage, key_prefix="nashCards_").init()


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_creates_record_and_session(
        self, session_store: SessionStore, sql_storage: SqlStorage
    ) -> None:
        session = await session_store.signup("Ann", "ann@x.com", "abc123")

        assert session.name == "Ann"
        assert session.email == "ann@x.com"
        assert await session_store.is_logged_in()

        users = await _stored_users(sql_storage)
        assert users[-1]["email"] == "ann@x.com"
        assert users[-1]["id"] == session.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("name", "email", "password"),
        [
            ("", "ann@x.com", "abc123"),
            ("Ann", "", "abc123"),
            ("Ann", "ann@x.com", ""),
        ],
    )
    async def test_empty_field_rejected(
        self, session_store: SessionStore, name: str, email: str, password: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await session_store.signup(name, email, password)
        assert "required" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["ann", "ann@x", "ann x@y.com", "@x.com"])
    async def test_malformed_email_rejected(self, session_store: SessionStore, email: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await session_store.signup("Ann", email, "abc123")
        assert "Invalid email" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["a", "abcde", "12345"])
    async def test_short_password_rejected_without_new_record(
        self, session_store: SessionStore, sql_storage: SqlStorage, password: str
    ) -> None:
        before = await _stored_users(sql_storage)

        with pytest.raises(ValidationError):
            await session_store.signup("Ann", "ann@x.com", password)

        assert await _stored_users(sql_storage) == before
        assert not await session_store.is_logged_in()

    @pytest.mark.asyncio
    async def test_six_character_password_accepted(self, session_store: SessionStore) -> None:
        session = await session_store.signup("Ann", "ann@x.com", "abcdef")
        assert session.email == "ann@x.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, session_store: SessionStore) -> None:
        with pytest.raises(DuplicateEmailError) as exc_info:
            await session_store.signup("Someone", "demo@example.com", "whatever1")

        assert isinstance(exc_info.value, AuthError)
        assert "already registered" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_duplicate_after_own_signup(self, session_store: SessionStore) -> None:
        await session_store.signup("Ann", "ann@x.com", "abc123")
        with pytest.raises(DuplicateEmailError):
            await session_store.signup("Ann Again", "ann@x.com", "zzz999")

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, session_store: SessionStore, sql_storage: SqlStorage) -> None:
        await session_store.signup("Ann", "ann@x.com", "abc123")
        await session_store.signup("Bo", "bo@x.com", "abc123")

        ids = [u["id"] for u in await _stored_users(sql_storage)]
        assert len(ids) == len(set(ids))


class TestLogin:
    @pytest.mark.asyncio
    async def test_demo_login(self, session_store: SessionStore) -> None:
        session = await session_store.login("demo@example.com", "password123")

        assert session.id == "1"
        assert session.name == "Demo User"
        assert session.login_time

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("email", "password"), [("", "password123"), ("demo@example.com", "")])
    async def test_missing_credentials(self, session_store: SessionStore, email: str, password: str) -> None:
        with pytest.raises(MissingCredentialsError) as exc_info:
            await session_store.login(email, password)

        assert isinstance(exc_info.value, ValidationError)

    @pytest.mark.asyncio
    async def test_unknown_email(self, session_store: SessionStore) -> None:
        with pytest.raises(UserNotFoundError) as exc_info:
            await session_store.login("nobody@example.com", "password123")

        assert isinstance(exc_info.value, NotFoundError)
        assert str(exc_info.value) == "User not found"

    @pytest.mark.asyncio
    async def test_wrong_password(self, session_store: SessionStore) -> None:
        with pytest.raises(InvalidPasswordError):
            await session_store.login("demo@example.com", "password124")

        assert not await session_store.is_logged_in()

    @pytest.mark.asyncio
    async def test_login_replaces_previous_session(
        self, session_store: SessionStore, sql_storage: SqlStorage
    ) -> None:
        await session_store.signup("Ann", "ann@x.com", "abc123")
        await session_store.login("demo@example.com", "password123")

        session = await session_store.get_session()
        assert session is not None
        assert session.email == "demo@example.com"

        stored = json.loads(await sql_storage.get("nashCards_session") or "{}")
        assert set(stored) == {"id", "name", "email", "loginTime"}

    @pytest.mark.asyncio
    async def test_session_survives_new_store(self, session_store: SessionStore, sql_storage: SqlStorage) -> None:
        """The session is durable: a fresh store on the same storage sees it."""
        await session_store.login("demo@example.com", "password123")

        reopened = SessionStore(sql_storage, key_prefix="nashCards_")
        await reopened.init()
        assert await reopened.is_logged_in()


class TestLogoutAndProfile:
    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, session_store: SessionStore) -> None:
        await session_store.login("demo@example.com", "password123")

        await session_store.logout()
        await session_store.logout()

        assert not await session_store.is_logged_in()
        assert await session_store.get_session() is None

    @pytest.mark.asyncio
    async def test_profile_for_active_session(self, session_store: SessionStore) -> None:
        await session_store.login("demo@example.com", "password123")

        profile = await session_store.get_profile()

        assert profile is not None
        assert profile.email == "demo@example.com"
        assert "password123" not in repr(profile)

    @pytest.mark.asyncio
    async def test_profile_none_without_session(self, session_store: SessionStore) -> None:
        assert await session_store.get_profile() is None

    @pytest.mark.asyncio
    async def test_profile_none_for_orphaned_session(
        self, session_store: SessionStore, sql_storage: SqlStorage
    ) -> None:
        await sql_storage.set(
            "nashCards_session",
            json.dumps({"id": "ghost", "name": "Ghost", "email": "g@x.com",
                        "loginTime": "2026-01-01T00:00:00+00:00"}),
        )

        assert await session_store.is_logged_in()
        assert await session_store.get_profile() is None


class TestEmailFormat:
    @pytest.mark.parametrize("email", ["a@b.co", "first.last@example.com", "x+y@z.io"])
    def test_valid(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.d", "a@b c.d"])
    def test_invalid(self, email: str) -> None:
        assert not is_valid_email(email)
