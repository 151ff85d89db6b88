"""FastAPI entrypoint: report API, Slack endpoints, scheduler lifespan."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from html import escape
from typing import Any

import uvicorn
from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from habitsheet.core.config import settings, validate_settings
from habitsheet.core.orchestrator import REPORT_ERRORS, TrackerService, run_daily_report
from habitsheet.core.registry import CommandContext, dispatch_command, ephemeral, is_deferred
from habitsheet.data.audit import read_audit_entries
from habitsheet.data.reports import DailyReport, PeriodReport
from habitsheet.integrations.channels import ChannelRouter, EmailProvider, SlackProvider
from habitsheet.integrations.scheduler import Scheduler
from habitsheet.integrations.slack_commands import (
    command_context,
    handle_interaction,
    parse_form,
    parse_interaction,
    register_command_handlers,
    url_verification,
    verify_slack_request,
)

logger = logging.getLogger(__name__)

_service: TrackerService | None = None
_router: ChannelRouter | None = None
_slack: SlackProvider | None = None
_scheduler: Scheduler | None = None


async def _daily_report_job() -> object:
    """Scheduler job: run the report pipeline if the app is wired."""
    if _service is None or _router is None:
        logger.error("Tracker not configured, skipping daily report")
        return None
    return await run_daily_report(_service, _router, settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire the tracker, channels and scheduler alongside the FastAPI server."""
    global _service, _router, _slack, _scheduler  # noqa: PLW0603

    validation = validate_settings(settings)
    for issue in validation.issues:
        logger.warning("Config issue: %s", issue)
    for warning in validation.warnings:
        logger.warning("Config warning: %s", warning)

    _slack = SlackProvider(settings)
    _router = ChannelRouter()
    if settings.slack_enabled:
        _router.register(_slack)
    if settings.email_to:
        _router.register(EmailProvider(settings))
    await _router.initialize()

    if settings.spreadsheet_id:
        _service = TrackerService(settings)
        register_command_handlers(_service)
        logger.info("Tracker wired to sheet '%s'", settings.sheet_name)

        if settings.schedule_enabled:
            _scheduler = Scheduler(jobs={"daily_report": _daily_report_job}, config=settings)
            await _scheduler.start()
    else:
        logger.warning("SPREADSHEET_ID not set, tracker disabled")

    yield

    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None

    await _router.shutdown()
    if not settings.slack_enabled:
        await _slack.shutdown()


app = FastAPI(title="habitsheet", version="0.1.0", lifespan=lifespan)

_bearer_scheme = HTTPBearer()


class HealthResponse(BaseModel):
    """Response for the /health endpoint."""

    status: str


class ReceiptModel(BaseModel):
    channel: str
    success: bool
    detail: str = ""


class RunReportResponse(BaseModel):
    """Response for POST /reports/daily."""

    receipts: list[ReceiptModel]


async def _verify_api_key(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),  # noqa: B008
) -> str:
    """Validate the Bearer token against the configured report_api_key."""
    if not settings.report_api_key or credentials.credentials != settings.report_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return credentials.credentials


def _require_service() -> TrackerService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Tracker is not configured")
    return _service


async def _verified_body(request: Request) -> bytes:
    body = await request.body()
    if not verify_slack_request(body, request.headers, settings):
        raise HTTPException(status_code=401, detail="Invalid Slack signature")
    return body


def _daily_json(report: DailyReport) -> dict[str, Any]:
    return {
        "day": report.day.isoformat(),
        "summary": report.summary,
        "records": [dataclasses.asdict(r) for r in report.records],
    }


def _period_json(report: PeriodReport) -> dict[str, Any]:
    return {
        "start": report.start.isoformat() if report.start else None,
        "end": report.end.isoformat() if report.end else None,
        "days": [{"day": d.day.isoformat(), "summary": d.summary} for d in report.days],
        "perfect_days": report.perfect_days,
        "average_completion": report.average_completion,
        "best_day": report.best_day.isoformat() if report.best_day else None,
        "worst_day": report.worst_day.isoformat() if report.worst_day else None,
        "habit_stats": report.habit_stats,
        "trends": report.trends,
    }


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/", response_class=HTMLResponse)
async def status_page() -> str:
    """Human-readable service status."""
    validation = validate_settings(settings)
    entries = read_audit_entries(settings.data_audit_path / "completions.jsonl")
    last = entries[-1] if entries else None

    items = [f"<li>Tracker: {'configured' if _service is not None else 'not configured'}</li>"]
    items.append(f"<li>Scheduler: {'running' if _scheduler is not None else 'stopped'}</li>")
    if _router is not None:
        names = ", ".join(p.name for p in _router.providers) or "none"
        items.append(f"<li>Channels: {escape(names)}</li>")
    if last is not None:
        items.append(
            f"<li>Last completion: {escape(str(last.get('habit', '')))} on {escape(str(last.get('day', '')))}</li>"
        )
    problems = "".join(f"<li>{escape(msg)}</li>" for msg in validation.issues + validation.warnings)
    return (
        "<!DOCTYPE html><html><head><meta charset='utf-8'><title>habitsheet</title></head><body>"
        f"<h1>habitsheet</h1><ul>{''.join(items)}</ul>"
        + (f"<h2>Configuration</h2><ul>{problems}</ul>" if problems else "")
        + "</body></html>"
    )


@app.get("/reports/today")
async def report_today(_key: str = Depends(_verify_api_key)) -> dict[str, Any]:
    """Today's analysis as JSON. Requires Bearer auth."""
    service = _require_service()
    try:
        report = await service.daily_report()
    except REPORT_ERRORS as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return _daily_json(report)


@app.get("/reports/{period}")
async def report_period(period: str, _key: str = Depends(_verify_api_key)) -> dict[str, Any]:
    """Week-to-date or month-to-date rollup. Requires Bearer auth."""
    if period not in ("week", "month"):
        raise HTTPException(status_code=404, detail=f"Unknown report period: {period}")
    service = _require_service()
    try:
        report = await service.period_report(period)
    except REPORT_ERRORS as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return _period_json(report)


@app.post("/reports/daily", response_model=RunReportResponse)
async def run_report(_key: str = Depends(_verify_api_key)) -> RunReportResponse:
    """Build and broadcast today's report now. Requires Bearer auth."""
    service = _require_service()
    if _router is None:
        raise HTTPException(status_code=503, detail="No delivery channels")
    receipts = await run_daily_report(service, _router, settings)
    return RunReportResponse(receipts=[ReceiptModel(**dataclasses.asdict(r)) for r in receipts])


async def _reply(response_url: str, body: dict[str, Any]) -> None:
    if not response_url or _slack is None:
        logger.warning("No response_url for deferred Slack reply")
        return
    receipt = await _slack.post_response(response_url, body)
    if not receipt.success:
        logger.error("Deferred Slack reply failed: %s", receipt.detail)


async def _answer_command_later(command: str, context: CommandContext) -> None:
    await _reply(context["response_url"], await dispatch_command(command, context))


async def _answer_interaction_later(payload: dict[str, Any]) -> None:
    try:
        body = await handle_interaction(payload, _require_service())
    except Exception:
        logger.exception("Error handling Slack interaction")
        body = ephemeral("Something went wrong while completing that habit.")
    await _reply(str(payload.get("response_url", "")), body)


@app.post("/slack/commands")
async def slack_commands(request: Request, background_tasks: BackgroundTasks) -> dict[str, Any]:
    """Slash commands. Slow commands are acknowledged now and answered via response_url."""
    body = await _verified_body(request)
    _require_service()
    form = parse_form(body)
    command = form.get("command", "")
    context = command_context(form)

    if is_deferred(command):
        background_tasks.add_task(_answer_command_later, command, context)
        return ephemeral("Working on it...")
    return await dispatch_command(command, context)


@app.post("/slack/interactions")
async def slack_interactions(request: Request, background_tasks: BackgroundTasks) -> Response:
    """Button clicks. Acknowledged at once, answered via response_url."""
    body = await _verified_body(request)
    _require_service()
    try:
        payload = parse_interaction(parse_form(body))
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Malformed interaction payload") from exc
    background_tasks.add_task(_answer_interaction_later, payload)
    return Response(status_code=200)


@app.post("/slack/events")
async def slack_events(request: Request) -> dict[str, Any]:
    """Events API endpoint; only URL verification is handled."""
    body = await _verified_body(request)
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Malformed event payload") from exc
    challenge = url_verification(payload) if isinstance(payload, dict) else None
    if challenge is not None:
        return challenge
    return {"ok": True}


def main() -> None:
    """Console entry point."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_level=settings.log_level.lower())
