"""
Nash Cards — End-to-End Workflow Tests

Runs whole user journeys through the controller with a real application
context (SQLite durable storage, mocked catalog HTTP):

A. New user signs up and lands on the card form
B. Demo user logs in, searches and gets a priced catalog card
C. Catalog is down or empty, so a synthesized card is priced instead
D. Protected screens bounce to auth without a session
E. Restart keeps the session; logout forgets it
"""

from __future__ import annotations

from decimal import Decimal

import httpx
import pytest
import respx

from nashcards.config import Settings
from nashcards.context import AppContext, create_app_context
from nashcards.pipeline.pokemontcg import PokemonTCGClient
from nashcards.workflow.controller import LOGIN_REQUIRED_MESSAGE, WorkflowController
from nashcards.workflow.screens import Screen


@pytest.mark.asyncio
async def test_scenario_a_signup(app_context: AppContext, ui) -> None:
    controller = WorkflowController(app_context, ui)
    await controller.start()

    assert await controller.handle_signup("Ann", "ann@x.com", "abc123", "abc123")

    session = await app_context.session_store.get_session()
    assert session is not None
    assert session.name == "Ann"
    assert session.email == "ann@x.com"
    assert ui.screens == [Screen.AUTH, Screen.CARD_INPUT]


@pytest.mark.asyncio
async def test_scenario_b_demo_search(
    app_context: AppContext,
    ui,
    catalog: respx.MockRouter,
    load_mock_pokemontcg: dict,
) -> None:
    catalog.get("/cards").mock(return_value=httpx.Response(200, json=load_mock_pokemontcg))
    controller = WorkflowController(app_context, ui)
    await controller.start()

    assert await controller.handle_login("demo@example.com", "password123")
    assert await controller.submit_search("Pikachu", "Base", "58", "Lightly Played")
    card = await controller.confirm()

    assert card is not None
    assert card.id == "base1-58"
    # ord("P") = 80; 5 + (80 × 137) % 496 = 53; 53 × 0.75 = 39.75
    assert card.base_price == Decimal("53.00")
    assert card.adjusted_price == Decimal("39.75")
    assert ui.screens == [
        Screen.AUTH,
        Screen.CARD_INPUT,
        Screen.CONFIRMATION,
        Screen.LOADING,
        Screen.RESULTS,
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [httpx.Response(500), httpx.Response(200, json={"data": []})],
    ids=["server-error", "no-results"],
)
async def test_scenario_c_fallback_card(
    app_context: AppContext,
    ui,
    catalog: respx.MockRouter,
    response: httpx.Response,
) -> None:
    catalog.get("/cards").mock(return_value=response)
    controller = WorkflowController(app_context, ui)
    await controller.start()
    await controller.handle_login("demo@example.com", "password123")

    await controller.submit_search("Charizard", "Base Set", "", "Near Mint")
    card = await controller.confirm()

    assert card is not None
    assert card.id.startswith("mock_")
    assert card.adjusted_price == Decimal("166.00")
    assert card.adjusted_price == card.base_price
    assert ui.last_screen is Screen.RESULTS


@pytest.mark.asyncio
async def test_scenario_d_protected_screen_without_session(app_context: AppContext, ui) -> None:
    controller = WorkflowController(app_context, ui)

    assert await controller.navigate(Screen.CARD_INPUT) is Screen.AUTH
    assert ui.messages == [LOGIN_REQUIRED_MESSAGE]
    assert "log in first" in ui.messages[0]


@pytest.mark.asyncio
async def test_scenario_e_session_survives_restart(
    tmp_path,
    ui,
    catalog_client: PokemonTCGClient,
) -> None:
    settings = Settings(SEARCH_LATENCY_SECONDS=0.0)
    url = f"sqlite+aiosqlite:///{tmp_path / 'nashcards.db'}"

    first = await create_app_context(settings, database_url=url, client=catalog_client)
    try:
        controller = WorkflowController(first, ui)
        assert await controller.start() is Screen.AUTH
        await controller.handle_login("demo@example.com", "password123")
    finally:
        await first.close()

    second = await create_app_context(settings, database_url=url, client=catalog_client)
    try:
        controller = WorkflowController(second, ui)
        assert await controller.start() is Screen.CARD_INPUT

        await controller.handle_logout()
        assert not await second.session_store.is_logged_in()
    finally:
        await second.close()
