"""SMTP implementation of CommunicationProvider."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from habitsheet.core.config import Settings, is_valid_email
from habitsheet.core.config import settings as default_settings
from habitsheet.integrations.channels.base import (
    Capability,
    CommunicationProvider,
    DeliveryReceipt,
    ReportContent,
)
from habitsheet.integrations.email_report import build_html, build_plain_text, build_subject

logger = logging.getLogger(__name__)


class EmailProvider(CommunicationProvider):
    """Sends multipart (plain + HTML) mail through the configured SMTP server."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    @property
    def name(self) -> str:
        return "email"

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset({Capability.SEND_REPORT, Capability.NOTIFY, Capability.HTML})

    async def initialize(self) -> None:
        if not is_valid_email(self._config.email_to):
            logger.warning("EMAIL_TO is missing or invalid, email reports disabled")

    async def shutdown(self) -> None:
        pass

    def _build_message(self, subject: str, text: str, html: str | None = None) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.email_from or self._config.smtp_username or self._config.email_to
        msg["To"] = self._config.email_to
        msg.set_content(text)
        if html is not None:
            msg.add_alternative(html, subtype="html")
        return msg

    def _send(self, msg: EmailMessage) -> None:
        cfg = self._config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=30) as smtp:
            if cfg.smtp_use_tls:
                smtp.starttls()
            if cfg.smtp_username:
                smtp.login(cfg.smtp_username, cfg.smtp_password)
            smtp.send_message(msg)

    async def _deliver(self, msg: EmailMessage) -> DeliveryReceipt:
        if not is_valid_email(self._config.email_to):
            return DeliveryReceipt(channel=self.name, success=False, detail="invalid recipient")

        attempts = max(self._config.email_max_retries, 1)
        last_error = ""
        for attempt in range(1, attempts + 1):
            try:
                await asyncio.to_thread(self._send, msg)
            except (smtplib.SMTPException, OSError) as exc:
                last_error = str(exc)
                logger.warning("Email attempt %d/%d failed: %s", attempt, attempts, exc)
                if attempt < attempts:
                    await asyncio.sleep(self._config.email_retry_delay)
                continue
            logger.info("Email sent to %s", self._config.email_to)
            return DeliveryReceipt(channel=self.name, success=True)

        return DeliveryReceipt(channel=self.name, success=False, detail=last_error)

    async def send_report(self, content: ReportContent) -> DeliveryReceipt:
        report = content.report
        msg = self._build_message(
            build_subject(report),
            build_plain_text(report, content.lessons, content.phrases),
            build_html(report, content.lessons, content.phrases),
        )
        return await self._deliver(msg)

    async def notify(self, message: str) -> DeliveryReceipt:
        return await self._deliver(self._build_message("Habit tracker notification", message))
