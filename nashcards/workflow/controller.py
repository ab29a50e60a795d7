"""
Nash Cards — Workflow Controller

Screen state machine for one user session:

    auth ──login/signup──▶ card-input ──submit──▶ confirmation ──confirm──▶ loading
                              ▲                                               │
                              └──── new search / home ──── results / error ◀──┘

Every entry into card-input, confirmation, loading or results re-checks the
session, so a logout mid-flow sends the next transition to auth.

Searches are single-flight: a second trigger while one runs is ignored.
The guard is released in `finally` whatever the outcome.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any

import structlog

from nashcards.context import AppContext
from nashcards.engine.pricing import create_mock_card_result, enrich_card_with_pricing
from nashcards.exceptions import AuthError, ConfigError, SessionExpiredError, ValidationError
from nashcards.models.account import SessionRecord
from nashcards.models.card import CardDescriptor, PricedCard
from nashcards.workflow.ports import UIPort
from nashcards.workflow.screens import PROTECTED_SCREENS, Screen

logger = structlog.get_logger(__name__)

# Transient storage keys
CARD_DATA_KEY = "cardData"
CURRENT_SCREEN_KEY = "currentScreen"
PREVIOUS_SCREEN_KEY = "previousScreen"

LOGIN_REQUIRED_MESSAGE = "Please log in first to continue"
SEARCH_FAILED_MESSAGE = "Failed to fetch card pricing. Please try again."
STORED_DATA_UNREADABLE_MESSAGE = "Saved account data could not be read. Please log in again."


class WorkflowController:
    """
    Drives the valuation screens through an injected UI port.

    Usage:
        controller = WorkflowController(ctx, ui)
        await controller.start()
        await controller.handle_login("demo@example.com", "password123")
    """

    def __init__(self, ctx: AppContext, ui: UIPort, search_latency: float | None = None):
        self._ctx = ctx
        self._ui = ui
        self._latency = (
            search_latency
            if search_latency is not None
            else ctx.settings.SEARCH_LATENCY_SECONDS
        )
        self.current_screen: Screen | None = None
        self.current_card: PricedCard | None = None
        self._photo: str | None = None
        self._search_in_progress = False

    @property
    def search_in_progress(self) -> bool:
        return self._search_in_progress

    @property
    def photo(self) -> str | None:
        return self._photo

    # -----------------------------------------------------------------------
    # Navigation
    # -----------------------------------------------------------------------

    async def start(self) -> Screen:
        """Open on card-input when a session survives from last run, else auth."""
        try:
            await self._ctx.session_store.init()
        except ConfigError as e:
            await self._discard_unreadable_state(e)

        session = await self._current_session()
        self._ui.update_user(session)

        logger.info("workflow_start", logged_in=session is not None)
        return await self.navigate(Screen.CARD_INPUT if session else Screen.AUTH)

    async def _discard_unreadable_state(self, error: ConfigError) -> None:
        """Drop the stored session so the user lands on auth instead of a crash."""
        logger.warning("workflow_stored_state_unreadable", error=str(error))
        await self._ctx.session_store.logout()
        self._ui.show_message(STORED_DATA_UNREADABLE_MESSAGE)

    async def _current_session(self) -> SessionRecord | None:
        try:
            return await self._ctx.session_store.get_session()
        except ConfigError as e:
            await self._discard_unreadable_state(e)
            return None

    async def _require_session(self, screen: Screen) -> None:
        if screen in PROTECTED_SCREENS and await self._current_session() is None:
            raise SessionExpiredError(LOGIN_REQUIRED_MESSAGE)

    async def navigate(self, screen: Screen, **context: Any) -> Screen:
        """
        Show a screen, redirecting to auth when a protected screen is entered
        without a session.

        Returns:
            The screen actually shown.
        """
        try:
            await self._require_session(screen)
        except SessionExpiredError as e:
            logger.info("workflow_session_required", requested=screen.value)
            self._ui.show_message(str(e))
            screen, context = Screen.AUTH, {}

        self.current_screen = screen
        await self._ctx.transient.set(CURRENT_SCREEN_KEY, screen.value)
        self._ui.render(screen, context)

        logger.debug("workflow_screen_shown", screen=screen.value)
        return screen

    async def show_error(self, message: str) -> Screen:
        return await self.navigate(Screen.ERROR, message=message)

    # -----------------------------------------------------------------------
    # Auth screen
    # -----------------------------------------------------------------------

    async def handle_login(self, email: str, password: str) -> bool:
        email = email.strip()
        if not email or not password:
            self._ui.show_message("Please enter email and password")
            return False

        try:
            session = await self._ctx.session_store.login(email, password)
        except (ValidationError, AuthError) as e:
            self._ui.show_message(str(e))
            return False
        except ConfigError as e:
            logger.warning("workflow_stored_state_unreadable", error=str(e))
            self._ui.show_message(STORED_DATA_UNREADABLE_MESSAGE)
            return False

        self._ui.update_user(session)
        await self.navigate(Screen.CARD_INPUT)
        return True

    async def handle_signup(
        self,
        name: str,
        email: str,
        password: str,
        password_confirm: str,
    ) -> bool:
        name, email = name.strip(), email.strip()
        if not name or not email or not password or not password_confirm:
            self._ui.show_message("Please fill in all fields")
            return False

        if password != password_confirm:
            self._ui.show_message("Passwords do not match")
            return False

        try:
            session = await self._ctx.session_store.signup(name, email, password)
        except (ValidationError, AuthError) as e:
            self._ui.show_message(str(e))
            return False
        except ConfigError as e:
            logger.warning("workflow_stored_state_unreadable", error=str(e))
            self._ui.show_message(STORED_DATA_UNREADABLE_MESSAGE)
            return False

        self._ui.update_user(session)
        await self.navigate(Screen.CARD_INPUT)
        return True

    async def handle_logout(self) -> Screen:
        await self._ctx.session_store.logout()
        await self._ctx.reset()
        self.current_card = None
        self.clear_photo()
        self._ui.update_user(None)
        return await self.navigate(Screen.AUTH)

    # -----------------------------------------------------------------------
    # Card input screen
    # -----------------------------------------------------------------------

    def attach_photo(self, content_type: str, data: bytes) -> bool:
        """Keep an uploaded image as a data URL. Rejects non-images and files over the size cap."""
        if not content_type.startswith("image/"):
            self._ui.show_message("Please upload an image file")
            return False

        if len(data) > self._ctx.settings.MAX_PHOTO_BYTES:
            limit_mb = self._ctx.settings.MAX_PHOTO_BYTES // (1024 * 1024)
            self._ui.show_message(f"File size must be less than {limit_mb}MB")
            return False

        self._photo = f"data:{content_type};base64,{base64.b64encode(data).decode()}"
        logger.info("photo_attached", content_type=content_type, size=len(data))
        return True

    def clear_photo(self) -> None:
        self._photo = None

    async def submit_search(
        self,
        name: str,
        set_name: str,
        number: str = "",
        condition: str | None = None,
    ) -> bool:
        """Validate the card form and move to confirmation."""
        if await self._current_session() is None:
            self._ui.show_message("Please log in first to search for cards")
            await self.navigate(Screen.AUTH)
            return False

        name, set_name, number = name.strip(), set_name.strip(), number.strip()

        if not self._photo and not name and not set_name:
            self._ui.show_message("Please upload a photo or enter card details")
            return False

        if not name or not set_name:
            self._ui.show_message("Please enter card name and set")
            return False

        if not condition:
            self._ui.show_message("Please select a card condition")
            return False

        descriptor = CardDescriptor(
            name=name,
            set=set_name,
            number=number,
            condition=condition,
            photo=self._photo,
        )
        await self._ctx.transient.set(CARD_DATA_KEY, descriptor.model_dump_json())

        logger.info("search_submitted", card_name=name, set_name=set_name, condition=condition)
        await self.navigate(Screen.CONFIRMATION, descriptor=descriptor)
        return True

    async def _load_descriptor(self) -> CardDescriptor | None:
        raw = await self._ctx.transient.get(CARD_DATA_KEY)
        if raw is None:
            return None
        return CardDescriptor.model_validate_json(raw)

    # -----------------------------------------------------------------------
    # Confirmation / loading
    # -----------------------------------------------------------------------

    async def back(self) -> Screen:
        return await self.navigate(Screen.CARD_INPUT)

    async def confirm(self) -> PricedCard | None:
        await self._ctx.transient.set(PREVIOUS_SCREEN_KEY, Screen.CONFIRMATION.value)
        return await self.perform_search()

    async def perform_search(self) -> PricedCard | None:
        """
        Look up and price the stored card descriptor.

        Falls back to a synthesized card when the catalog reports failure or
        no results. Returns None when the search was skipped or failed.
        """
        if self._search_in_progress:
            logger.debug("search_already_in_progress")
            return None

        self._search_in_progress = True
        self._ui.set_search_enabled(False)

        try:
            if await self._current_session() is None:
                self._ui.show_message("You must be logged in to search for cards")
                await self.navigate(Screen.AUTH)
                return None

            descriptor = await self._load_descriptor()
            if descriptor is None:
                await self.show_error("Card data not found")
                return None

            if await self.navigate(Screen.LOADING, descriptor=descriptor) is not Screen.LOADING:
                return None

            if self._latency > 0:
                await asyncio.sleep(self._latency)

            result = await self._ctx.lookup.search_cards(
                descriptor.name,
                descriptor.set,
                descriptor.number,
            )

            if result.success and result.data:
                logger.info("search_using_first_match", matches=len(result.data))
                card = result.data[0]
            else:
                logger.info("search_using_mock_card", reason=result.error)
                card = create_mock_card_result(descriptor)

            priced = enrich_card_with_pricing(card, descriptor.condition)
            if await self.navigate(Screen.RESULTS, card=priced) is not Screen.RESULTS:
                return None

            self.current_card = priced
            return priced

        except Exception:
            logger.exception("search_failed")
            await self.show_error(SEARCH_FAILED_MESSAGE)
            return None

        finally:
            self._search_in_progress = False
            self._ui.set_search_enabled(True)

    # -----------------------------------------------------------------------
    # Results / error screens
    # -----------------------------------------------------------------------

    async def new_search(self) -> Screen:
        return await self.navigate(Screen.CARD_INPUT)

    async def go_home(self) -> Screen:
        """Back to an empty card form."""
        self.clear_photo()
        await self._ctx.transient.remove(CARD_DATA_KEY)
        return await self.navigate(Screen.CARD_INPUT)

    async def retry(self) -> Screen:
        """Return to the screen the failed action started from."""
        previous = await self._ctx.transient.get(PREVIOUS_SCREEN_KEY)
        screen = Screen(previous) if previous else Screen.CARD_INPUT

        if screen is Screen.CONFIRMATION:
            descriptor = await self._load_descriptor()
            if descriptor is not None:
                return await self.navigate(screen, descriptor=descriptor)
            screen = Screen.CARD_INPUT
        return await self.navigate(screen)

    async def load_set_suggestions(self) -> list[str]:
        """Set names for the input form, empty when the catalog is unavailable."""
        result = await self._ctx.lookup.get_popular_sets()
        return [s.name for s in result.data]
