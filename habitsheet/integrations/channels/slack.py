"""Slack incoming-webhook implementation of CommunicationProvider."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from habitsheet.core.config import Settings
from habitsheet.core.config import settings as default_settings
from habitsheet.integrations.channels.base import (
    Capability,
    CommunicationProvider,
    DeliveryReceipt,
    ReportContent,
)
from habitsheet.integrations.slack_blocks import build_daily_message

logger = logging.getLogger(__name__)


class SlackProvider(CommunicationProvider):
    """Posts Block Kit messages to an incoming webhook and to response_url."""

    def __init__(self, config: Settings | None = None, client: httpx.AsyncClient | None = None) -> None:
        self._config = config or default_settings
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "slack"

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset(Capability) - {Capability.HTML}

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the HTTP client, creating lazily if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client

    async def initialize(self) -> None:
        if not self._config.slack_webhook_url:
            logger.warning("No Slack webhook URL, Slack reports disabled")

    async def shutdown(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(self, url: str, payload: dict[str, Any]) -> DeliveryReceipt:
        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Slack post failed: %s", exc)
            return DeliveryReceipt(channel=self.name, success=False, detail=str(exc))
        if not response.is_success:
            logger.error("Slack returned %d: %s", response.status_code, response.text)
            return DeliveryReceipt(
                channel=self.name,
                success=False,
                detail=f"HTTP {response.status_code}: {response.text}",
            )
        return DeliveryReceipt(channel=self.name, success=True)

    async def send_report(self, content: ReportContent) -> DeliveryReceipt:
        if not self._config.slack_webhook_url:
            return DeliveryReceipt(channel=self.name, success=False, detail="webhook not configured")
        payload = build_daily_message(
            content.report,
            channel=self._config.slack_channel,
            lessons=content.lessons,
            phrases=content.phrases,
            max_buttons=self._config.slack_max_buttons,
        )
        receipt = await self._post(self._config.slack_webhook_url, payload)
        if receipt.success:
            logger.info("Slack report sent to %s", self._config.slack_channel)
        return receipt

    async def notify(self, message: str) -> DeliveryReceipt:
        if not self._config.slack_webhook_url:
            return DeliveryReceipt(channel=self.name, success=False, detail="webhook not configured")
        return await self._post(self._config.slack_webhook_url, {"text": message})

    async def post_response(self, response_url: str, body: dict[str, Any]) -> DeliveryReceipt:
        """Follow-up reply to a slash command or button click."""
        return await self._post(response_url, body)
