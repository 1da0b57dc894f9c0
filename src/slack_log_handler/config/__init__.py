"""Configuration subpackage."""

from slack_log_handler.config.config import (
    AppSettings,
    LoggingSettings,
    Settings,
    SlackSettings,
    get_settings,
    parse_severity_rules,
)

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "Settings",
    "SlackSettings",
    "get_settings",
    "parse_severity_rules",
]
