"""Delivery channels package: ABC + provider implementations."""

from habitsheet.integrations.channels.base import (
    Capability,
    CommunicationProvider,
    DeliveryReceipt,
    ReportContent,
)
from habitsheet.integrations.channels.email import EmailProvider
from habitsheet.integrations.channels.router import ChannelRouter
from habitsheet.integrations.channels.slack import SlackProvider

__all__ = [
    "Capability",
    "ChannelRouter",
    "CommunicationProvider",
    "DeliveryReceipt",
    "EmailProvider",
    "ReportContent",
    "SlackProvider",
]
