"""
Nash Cards — Application Entrypoint

Configures structlog, builds the application context and runs the
terminal front-end.

Run via:
    python -m nashcards.main
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import structlog

from nashcards.config import settings
from nashcards.context import create_app_context
from nashcards.engine.pricing import CardCondition
from nashcards.workflow.console import ConsoleUI
from nashcards.workflow.controller import WorkflowController
from nashcards.workflow.screens import Screen


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output on stderr.

    stdout belongs to the terminal UI.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper())

    # Configure stdlib logging first (for third-party libraries)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Terminal Loop
# ---------------------------------------------------------------------------

_CONDITIONS = [c.value for c in CardCondition]


async def _ask(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def _auth_screen(controller: WorkflowController) -> bool:
    choice = (await _ask("[l]ogin, [s]ignup, [q]uit: ")).strip().lower()
    if choice == "q":
        return False
    if choice == "s":
        await controller.handle_signup(
            await _ask("Name: "),
            await _ask("Email: "),
            await _ask("Password: "),
            await _ask("Confirm password: "),
        )
    elif choice == "l":
        await controller.handle_login(await _ask("Email: "), await _ask("Password: "))
    return True


async def _card_input_screen(controller: WorkflowController) -> bool:
    choice = (await _ask("[s]earch, [p]hoto, [o]ut (logout), [q]uit: ")).strip().lower()
    if choice == "q":
        return False
    if choice == "o":
        await controller.handle_logout()
    elif choice == "p":
        path = Path((await _ask("Photo path (blank to clear): ")).strip())
        if str(path) in ("", "."):
            controller.clear_photo()
        elif path.is_file():
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            controller.attach_photo(content_type, path.read_bytes())
        else:
            print(f"! No such file: {path}")
    elif choice == "s":
        name = await _ask("Card name: ")
        set_name = await _ask("Set: ")
        number = await _ask("Number (optional): ")
        for i, label in enumerate(_CONDITIONS, start=1):
            print(f"  {i}. {label}")
        picked = (await _ask("Condition: ")).strip()
        condition = _CONDITIONS[int(picked) - 1] if picked in {"1", "2", "3"} else None
        await controller.submit_search(name, set_name, number, condition)
    return True


async def _confirmation_screen(controller: WorkflowController) -> bool:
    choice = (await _ask("[c]onfirm, [b]ack: ")).strip().lower()
    if choice == "c":
        await controller.confirm()
    elif choice == "b":
        await controller.back()
    return True


async def _results_screen(controller: WorkflowController) -> bool:
    choice = (await _ask("[n]ew search, [h]ome, [o]ut (logout), [q]uit: ")).strip().lower()
    if choice == "q":
        return False
    if choice == "n":
        await controller.new_search()
    elif choice == "h":
        await controller.go_home()
    elif choice == "o":
        await controller.handle_logout()
    return True


async def _error_screen(controller: WorkflowController) -> bool:
    choice = (await _ask("[r]etry, [h]ome: ")).strip().lower()
    if choice == "r":
        await controller.retry()
    elif choice == "h":
        await controller.go_home()
    return True


_HANDLERS = {
    Screen.AUTH: _auth_screen,
    Screen.CARD_INPUT: _card_input_screen,
    Screen.CONFIRMATION: _confirmation_screen,
    Screen.RESULTS: _results_screen,
    Screen.ERROR: _error_screen,
}


async def run_console(controller: WorkflowController) -> None:
    """Prompt for the current screen's actions until the user quits."""
    await controller.start()
    while True:
        handler = _HANDLERS.get(controller.current_screen)
        if handler is None:
            # Loading is never left as the current screen once a search settles
            await controller.new_search()
            continue
        if not await handler(controller):
            break


# ---------------------------------------------------------------------------
# Application Startup
# ---------------------------------------------------------------------------


async def main() -> None:
    """
    Application entrypoint.

    Execution order:
    1. Configure logging (structlog JSON on stderr)
    2. Build the application context (storage, catalog client, demo account)
    3. Run the terminal UI until the user quits
    """
    configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("nashcards_startup_begin", version="0.1.0")

    if not settings.POKEMONTCG_API_KEY:
        logger.warning("config_pokemontcg_api_key_missing", note="anonymous rate limits apply")

    ctx = await create_app_context()
    controller = WorkflowController(ctx, ConsoleUI())

    try:
        await run_console(controller)
    except (KeyboardInterrupt, EOFError):
        logger.info("nashcards_interrupted_by_user")
    finally:
        await ctx.close()
        logger.info("nashcards_shutdown_complete")


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
