"""Slack slash-command registry with deferred flags and async dispatch."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypedDict

logger = logging.getLogger(__name__)

SlackResponse = dict[str, Any]


class CommandContext(TypedDict):
    """Fields of a slash-command request that handlers use."""

    text: str
    user_id: str
    user_name: str
    channel_id: str
    response_url: str


CommandHandler = Callable[[CommandContext], Awaitable[SlackResponse]]


class CommandDef(TypedDict):
    """Registry entry for a single slash command."""

    handler: CommandHandler
    description: str
    # Deferred commands are acknowledged at once and answered via response_url
    deferred: bool


def ephemeral(text: str) -> SlackResponse:
    return {"response_type": "ephemeral", "text": text}


async def _placeholder_handler(_context: CommandContext) -> SlackResponse:
    """Placeholder until real handlers are wired during app init."""
    return ephemeral("Handler not yet configured.")


COMMAND_REGISTRY: dict[str, CommandDef] = {
    "/habit-report": {
        "handler": _placeholder_handler,
        "description": "Today's report with completion buttons (or `week` / `month`)",
        "deferred": True,
    },
    "/habit-status": {
        "handler": _placeholder_handler,
        "description": "Quick completion status for today",
        "deferred": False,
    },
    "/habit-help": {
        "handler": _placeholder_handler,
        "description": "Show available commands",
        "deferred": False,
    },
    "/habit-done": {
        "handler": _placeholder_handler,
        "description": "Mark a habit complete: /habit-done <habit>",
        "deferred": True,
    },
}


def register_handler(command: str, handler: CommandHandler) -> None:
    """Wire a real handler into an existing registry entry."""
    if command not in COMMAND_REGISTRY:
        msg = f"Unknown command: {command}"
        raise KeyError(msg)
    COMMAND_REGISTRY[command]["handler"] = handler


def is_deferred(command: str) -> bool:
    entry = COMMAND_REGISTRY.get(command)
    return entry is not None and entry["deferred"]


async def dispatch_command(command: str, context: CommandContext) -> SlackResponse:
    """Look up and run a command handler.

    Returns:
        The handler's Slack response, or an ephemeral error message.
    """
    if command not in COMMAND_REGISTRY:
        logger.error("Unknown command requested: %s", command)
        return ephemeral(f"Unknown command: {command}")

    try:
        return await COMMAND_REGISTRY[command]["handler"](context)
    except Exception:
        logger.exception("Error executing command %s", command)
        return ephemeral("Something went wrong while handling that command. Please try again later.")
