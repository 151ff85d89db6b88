"""Channel router: fans reports and notifications out to every provider."""

from __future__ import annotations

import logging

from habitsheet.integrations.channels.base import (
    CommunicationProvider,
    DeliveryReceipt,
    ReportContent,
)

logger = logging.getLogger(__name__)


class ChannelRouter:
    """Delivers to all registered providers; one failing channel never blocks another."""

    def __init__(self) -> None:
        self._providers: dict[str, CommunicationProvider] = {}

    def register(self, provider: CommunicationProvider) -> None:
        """Register a provider. Re-registering a name replaces it."""
        self._providers[provider.name] = provider

    @property
    def providers(self) -> list[CommunicationProvider]:
        return list(self._providers.values())

    def get(self, name: str) -> CommunicationProvider | None:
        return self._providers.get(name)

    async def initialize(self) -> None:
        for provider in self._providers.values():
            await provider.initialize()

    async def shutdown(self) -> None:
        for provider in self._providers.values():
            try:
                await provider.shutdown()
            except Exception:
                logger.exception("Error shutting down %s", provider.name)

    async def broadcast_report(self, content: ReportContent) -> list[DeliveryReceipt]:
        """Send the report on every channel and collect receipts."""
        receipts = []
        for provider in self._providers.values():
            try:
                receipt = await provider.send_report(content)
            except Exception as exc:
                logger.exception("Report delivery via %s raised", provider.name)
                receipt = DeliveryReceipt(channel=provider.name, success=False, detail=str(exc))
            receipts.append(receipt)
        return receipts

    async def notify(self, message: str) -> list[DeliveryReceipt]:
        """Send a notification on every channel and collect receipts."""
        receipts = []
        for provider in self._providers.values():
            try:
                receipt = await provider.notify(message)
            except Exception as exc:
                logger.exception("Notification via %s raised", provider.name)
                receipt = DeliveryReceipt(channel=provider.name, success=False, detail=str(exc))
            receipts.append(receipt)
        return receipts
