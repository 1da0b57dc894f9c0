"""Exceptions subpackage."""

from slack_log_handler.exceptions.exceptions import (
    InvalidConfigError,
    MissingRequiredConfigError,
    SlackLogHandlerError,
    WebhookDeliveryError,
)

__all__ = [
    "InvalidConfigError",
    "MissingRequiredConfigError",
    "SlackLogHandlerError",
    "WebhookDeliveryError",
]
