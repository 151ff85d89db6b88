"""Slack inbound handling: signature checks, slash commands, button clicks."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs

from slack_sdk.signature import SignatureVerifier

from habitsheet.core.config import Settings
from habitsheet.core.config import settings as default_settings
from habitsheet.core.orchestrator import TrackerService
from habitsheet.core.registry import (
    CommandContext,
    SlackResponse,
    ephemeral,
    register_handler,
)
from habitsheet.integrations.slack_blocks import (
    ACTION_PREFIX,
    build_completion_response,
    build_help_text,
    build_period_text,
    build_report_blocks,
    build_status_text,
)

logger = logging.getLogger(__name__)

PERIOD_LABELS = {"week": "Weekly", "month": "Monthly"}


def verify_slack_request(
    body: bytes,
    headers: Mapping[str, str],
    config: Settings | None = None,
) -> bool:
    """Check the X-Slack-Signature header. Always False without a signing secret."""
    cfg = config or default_settings
    if not cfg.slack_signing_secret:
        logger.warning("SLACK_SIGNING_SECRET not set, rejecting Slack request")
        return False
    return SignatureVerifier(cfg.slack_signing_secret).is_valid_request(body, dict(headers))


def parse_form(body: bytes) -> dict[str, str]:
    """Decode an application/x-www-form-urlencoded body (first value wins)."""
    fields = parse_qs(body.decode("utf-8"), keep_blank_values=True)
    return {key: values[0] for key, values in fields.items()}


def command_context(form: Mapping[str, str]) -> CommandContext:
    return CommandContext(
        text=form.get("text", ""),
        user_id=form.get("user_id", ""),
        user_name=form.get("user_name", ""),
        channel_id=form.get("channel_id", ""),
        response_url=form.get("response_url", ""),
    )


def parse_interaction(form: Mapping[str, str]) -> dict[str, Any]:
    """Interactive payloads arrive as JSON in the ``payload`` form field."""
    raw = form.get("payload", "")
    if not raw:
        return {}
    payload = json.loads(raw)
    return payload if isinstance(payload, dict) else {}


def url_verification(payload: Mapping[str, Any]) -> dict[str, str] | None:
    """Echo the challenge of an Events API url_verification request."""
    if payload.get("type") != "url_verification":
        return None
    return {"challenge": str(payload.get("challenge", ""))}


def register_command_handlers(service: TrackerService) -> None:
    """Wire the slash commands to a tracker service."""

    async def habit_report(context: CommandContext) -> SlackResponse:
        period = context["text"].strip().lower()
        if period in PERIOD_LABELS:
            report = await service.period_report(period)
            return ephemeral(build_period_text(report, PERIOD_LABELS[period]))
        daily = await service.daily_report()
        return {
            "response_type": "in_channel",
            "text": f"Habit report: {daily.summary['completed_today']}/{daily.summary['total_habits']} done",
            "blocks": build_report_blocks(daily, service.config.slack_max_buttons),
        }

    async def habit_status(_context: CommandContext) -> SlackResponse:
        return ephemeral(build_status_text(await service.daily_report()))

    async def habit_help(_context: CommandContext) -> SlackResponse:
        return ephemeral(build_help_text())

    async def habit_done(context: CommandContext) -> SlackResponse:
        habit = context["text"].strip()
        if not habit:
            return ephemeral("Usage: /habit-done <habit name>")
        result = await service.complete_habit(habit, context["user_name"] or context["user_id"])
        return build_completion_response(result, context["user_id"])

    register_handler("/habit-report", habit_report)
    register_handler("/habit-status", habit_status)
    register_handler("/habit-help", habit_help)
    register_handler("/habit-done", habit_done)


async def handle_interaction(payload: Mapping[str, Any], service: TrackerService) -> SlackResponse:
    """Handle a block_actions payload from a 'Complete' button."""
    actions = payload.get("actions") or []
    if payload.get("type") != "block_actions" or not actions:
        return ephemeral("Unsupported action.")

    action = actions[0]
    if not str(action.get("action_id", "")).startswith(ACTION_PREFIX):
        return ephemeral("Unsupported action.")

    user = payload.get("user") or {}
    user_id = str(user.get("id", ""))
    who = str(user.get("username") or user.get("name") or user_id)
    habit = str(action.get("value", ""))
    logger.info("Button completion of '%s' by %s", habit, who)
    result = await service.complete_habit(habit, who)
    return build_completion_response(result, user_id)
