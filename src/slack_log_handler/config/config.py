# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. SLACK__WEBHOOK_URL, LOGGING__CONSOLE_LEVEL.
"""

from __future__ import annotations

import os
import socket
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import AliasChoices, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slack_log_handler.models.severity import SeverityColorRule


def _default_process_name() -> str:
    """Name of the running program (script stem), like a process image name."""
    return Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else "python"


def parse_severity_rules(raw: str) -> list[SeverityColorRule]:
    """Parse ``"level=color,level=color"`` into ordered rules.

    Entries without ``=`` or with an empty side are skipped.
    """
    rules: list[SeverityColorRule] = []
    for entry in raw.split(","):
        level, sep, color = entry.partition("=")
        if not sep or not level.strip() or not color.strip():
            continue
        rules.append(SeverityColorRule(level=level.strip(), color=color.strip()))
    return rules


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "slack-log-handler"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    # Per-target levels (only the 5 standard levels)
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Local outputs
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/slack_log_handler.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    # Logfire integration via structlog
    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class SlackSettings(BaseSettings):
    """Slack incoming webhook configuration (from env SLACK__*)."""

    model_config = SettingsConfigDict(env_prefix="SLACK__", extra="ignore")

    enabled: bool = True
    webhook_url: Optional[str] = Field(
        default=None,
        description="Incoming webhook URL with token. $VAR and ${VAR} are expanded.",
    )
    channel: str = Field(default="", description="Channel to post to (e.g. #alerts).")
    username: str = Field(default="", description="Username to post as.")
    icon_url: str = Field(default="", description="URL of the icon to use, if any.")
    icon_emoji: str = Field(default="", description="Emoji icon to use, if any (e.g. :ghost:).")

    add_attachment: bool = Field(
        default=True,
        description="Include an attachment with logger/process/machine details.",
    )
    add_exception_trace_field: bool = Field(
        default=True,
        description="Include exception traces as attachment fields. Requires add_attachment.",
    )
    username_append_logger_name: bool = Field(
        default=False,
        description="Append ' - <logger name>' to the username.",
    )

    # Raw string from env so pydantic-settings does not try to JSON-decode it.
    severity_colors_raw: str = Field(
        default="",
        description="Level to color overrides, e.g. 'info=green,debug=#CCCCCC'. Env: SLACK__SEVERITY_COLORS.",
        validation_alias=AliasChoices("severity_colors", "SLACK__SEVERITY_COLORS"),
    )
    proxy: Optional[str] = Field(default=None, description="Outbound HTTP proxy URL.")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    process_name: str = Field(default_factory=_default_process_name)
    machine_name: str = Field(default_factory=socket.gethostname)

    @field_validator("webhook_url", "proxy")
    @classmethod
    def _expand_env_vars(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        expanded = os.path.expandvars(value).strip()
        return expanded or None

    @computed_field
    @property
    def severity_rules(self) -> list[SeverityColorRule]:
        """Ordered level to color rules parsed from severity_colors_raw."""
        return parse_severity_rules(self.severity_colors_raw)


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. SLACK__CHANNEL, LOGGING__CONSOLE_LEVEL.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as flat keys or nested dicts, e.g.:
        - from_env(slack__channel="#ops")
        - from_env(slack={"channel": "#ops"})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from slack_log_handler.config import get_settings

        settings = get_settings()
        url = settings.slack.webhook_url
        console_level = settings.logging.console_level
    """
    return Settings()
