"""Custom exceptions for webhook delivery and configuration."""

from __future__ import annotations


class SlackLogHandlerError(Exception):
    """Base exception for slack_log_handler errors."""

    pass


class MissingRequiredConfigError(SlackLogHandlerError):
    """Raised when a required configuration value is missing."""

    pass


class InvalidConfigError(SlackLogHandlerError, ValueError):
    """Raised when a configuration value is present but malformed."""

    pass


class WebhookDeliveryError(SlackLogHandlerError):
    """Raised (or reported) when a webhook POST fails."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause
