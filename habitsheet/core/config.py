"""Configuration via environment variables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from pydantic_settings import BaseSettings

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Settings(BaseSettings):
    """Application settings loaded from .env file. Immutable once built."""

    # Google Sheets
    google_service_account_file: Path = Path("service_account.json")
    spreadsheet_id: str = ""
    sheet_name: str = "habit"
    sheet_first_row: int = 14
    sheet_date_row: int = 15
    sheet_last_row: int = 31
    sheet_name_column: str = "C"
    sheet_first_day_column: str = "E"
    sheet_last_day_column: str = "AI"

    # Daily lessons / phrase cards (optional second spreadsheet)
    lessons_spreadsheet_id: str = ""
    lessons_sheet_name: str = "daily lessons"
    phrases_sheet_name: str = "english phrases"
    lessons_count: int = 4
    phrases_count: int = 10

    # Email
    email_to: str = ""
    email_from: str = ""
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_max_retries: int = 3
    email_retry_delay: float = 1.0

    # Slack
    slack_enabled: bool = True
    slack_webhook_url: str = ""
    slack_channel: str = "#habit"
    slack_signing_secret: str = ""
    slack_max_buttons: int = 5

    # Completion writes
    completion_debounce_seconds: float = 5.0
    data_audit_path: Path = Path("data/audit")

    # Scheduler
    schedule_morning: str = "08:00"
    schedule_evening: str = "20:00"
    schedule_enabled: bool = True

    # Locale
    timezone: str = "Asia/Ho_Chi_Minh"

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    report_api_key: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True}


settings = Settings()


def is_valid_email(address: str) -> bool:
    """Loose sanity check on an email address."""
    return bool(_EMAIL_RE.match(address))


@dataclass
class ConfigValidation:
    """Outcome of validate_settings()."""

    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues


def validate_settings(config: Settings | None = None) -> ConfigValidation:
    """Check required settings. Issues block reporting; warnings do not."""
    cfg = config or settings
    result = ConfigValidation()

    if not cfg.spreadsheet_id:
        result.issues.append("SPREADSHEET_ID is required")
    if cfg.slack_enabled and not cfg.slack_webhook_url:
        result.issues.append("SLACK_WEBHOOK_URL is required when Slack is enabled")
    if cfg.slack_webhook_url and "hooks.slack.com" not in cfg.slack_webhook_url:
        result.warnings.append("SLACK_WEBHOOK_URL does not look like a Slack incoming webhook")

    if not cfg.email_to:
        result.warnings.append("EMAIL_TO is not set; email reports are disabled")
    elif not is_valid_email(cfg.email_to):
        result.warnings.append(f"EMAIL_TO is not a valid address: {cfg.email_to}")

    if cfg.sheet_date_row < cfg.sheet_first_row or cfg.sheet_date_row >= cfg.sheet_last_row:
        result.issues.append("SHEET_DATE_ROW must lie between SHEET_FIRST_ROW and SHEET_LAST_ROW")

    return result
