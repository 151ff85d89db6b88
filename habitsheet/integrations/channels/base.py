"""Abstract base for report delivery channels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

from habitsheet.data.lessons import Lesson, Phrase
from habitsheet.data.reports import DailyReport


class Capability(StrEnum):
    """What a channel can do."""

    SEND_REPORT = "send_report"
    NOTIFY = "notify"
    RICH_TEXT = "rich_text"
    HTML = "html"
    INTERACTIVE = "interactive"  # buttons that call back into the app


@dataclass(frozen=True)
class ReportContent:
    """Everything a channel needs to render the daily report."""

    report: DailyReport
    lessons: tuple[Lesson, ...] = ()
    phrases: tuple[Phrase, ...] = ()


@dataclass
class DeliveryReceipt:
    """Outcome of one delivery attempt on one channel."""

    channel: str  # provider name (e.g. "slack")
    success: bool
    detail: str = ""


class CommunicationProvider(ABC):
    """Abstract delivery channel.

    Implementations: SlackProvider, EmailProvider.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider name (e.g. 'slack')."""

    @property
    @abstractmethod
    def capabilities(self) -> frozenset[Capability]:
        """Set of capabilities this provider supports."""

    @abstractmethod
    async def send_report(self, content: ReportContent) -> DeliveryReceipt:
        """Render and deliver the daily report."""

    @abstractmethod
    async def notify(self, message: str) -> DeliveryReceipt:
        """Send a short plain-text notification."""

    def supports(self, capability: Capability) -> bool:
        """Check if this provider supports a capability."""
        return capability in self.capabilities

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider (called during app startup)."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Clean shutdown (called during app teardown)."""
