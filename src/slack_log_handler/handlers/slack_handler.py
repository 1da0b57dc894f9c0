# -*- coding: utf-8 -*-
"""logging.Handler that posts records to a Slack incoming webhook.

Each record is snapshotted into a LogEvent, composed into a Payload on the
emitting thread, and handed to the WebhookClient, which delivers it in the
background. emit() never raises into the logging call.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from slack_log_handler.clients.webhook import DeliveryCallback, WebhookClient
from slack_log_handler.exceptions import InvalidConfigError, MissingRequiredConfigError
from slack_log_handler.models import ExceptionInfo, LogEvent, SeverityColorRule
from slack_log_handler.notifications import CompositionConfig, NotificationComposer, PayloadComposer
from slack_log_handler.utils import is_webhook_url, mask_webhook_url

if TYPE_CHECKING:  # pragma: no cover
    from slack_log_handler.config.config import Settings

# Records from these loggers are never forwarded (the delivery path logs under them).
INTERNAL_LOGGER_PREFIX = "slack_log_handler"

# Python level names -> display names understood by the severity palette
LEVEL_DISPLAY_NAMES: dict[str, str] = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}


def level_display_name(levelname: str) -> str:
    return LEVEL_DISPLAY_NAMES.get(levelname, levelname)


def _is_internal(logger_name: str) -> bool:
    return logger_name == INTERNAL_LOGGER_PREFIX or logger_name.startswith(INTERNAL_LOGGER_PREFIX + ".")


class SlackHandler(logging.Handler):
    """Send log records to Slack as messages with a details attachment."""

    def __init__(
        self,
        webhook_url: str,
        *,
        channel: str = "",
        username: str = "",
        icon_url: str = "",
        icon_emoji: str = "",
        add_attachment: bool = True,
        add_exception_trace_field: bool = True,
        username_append_logger_name: bool = False,
        severity_rules: Iterable[SeverityColorRule] = (),
        process_name: str = "",
        machine_name: str = "",
        level: int | str = logging.NOTSET,
        proxy: Optional[str] = None,
        client: Optional[WebhookClient] = None,
        composer: Optional[PayloadComposer] = None,
        on_complete: Optional[DeliveryCallback] = None,
    ) -> None:
        """Initialize the handler.

        Args:
            webhook_url: Incoming webhook URL with token.
            channel: Channel to post to; empty keeps the webhook's default.
            username: Username to post as.
            icon_url: URL of the icon to use, if any.
            icon_emoji: Emoji icon to use, if any.
            add_attachment: Include logger/process/machine (and exception) details.
            add_exception_trace_field: Include the exception trace. Requires add_attachment.
            username_append_logger_name: Append ' - <logger name>' to the username.
            severity_rules: Ordered level to color overrides.
            process_name: Process name shown in the attachment.
            machine_name: Machine name shown in the attachment.
            level: Minimum level handled.
            proxy: Outbound HTTP proxy for the client created when client is omitted.
            client: Delivery client; one is created (and owned) when omitted.
            composer: Payload composer; NotificationComposer by default.
            on_complete: Optional callback for each delivery outcome.

        Raises:
            MissingRequiredConfigError: If webhook_url is empty.
            InvalidConfigError: If webhook_url is not an absolute http(s) URL.
        """
        super().__init__(level)
        if not webhook_url or not webhook_url.strip():
            raise MissingRequiredConfigError("SLACK__WEBHOOK_URL")
        self.webhook_url = webhook_url.strip()
        if not is_webhook_url(self.webhook_url):
            raise InvalidConfigError(
                f"SLACK__WEBHOOK_URL is not an http(s) URL: {mask_webhook_url(self.webhook_url)}"
            )
        self.channel = channel
        self.username = username
        self.icon_url = icon_url
        self.icon_emoji = icon_emoji
        self.add_attachment = add_attachment
        self.add_exception_trace_field = add_exception_trace_field
        self.username_append_logger_name = username_append_logger_name
        self.severity_rules: tuple[SeverityColorRule, ...] = tuple(severity_rules)
        self.process_name = process_name
        self.machine_name = machine_name
        self.on_complete = on_complete

        self._owns_client = client is None
        self._client = client or WebhookClient(proxy=proxy)
        self._composer: PayloadComposer = composer or NotificationComposer()
        self._emitting = threading.local()

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        *,
        client: Optional[WebhookClient] = None,
        composer: Optional[PayloadComposer] = None,
    ) -> SlackHandler:
        """Build a handler from the ``slack`` settings section.

        Raises:
            MissingRequiredConfigError: If SLACK__WEBHOOK_URL is not set.
        """
        cfg = settings.slack
        if not cfg.webhook_url:
            raise MissingRequiredConfigError("SLACK__WEBHOOK_URL")
        return cls(
            cfg.webhook_url,
            channel=cfg.channel,
            username=cfg.username,
            icon_url=cfg.icon_url,
            icon_emoji=cfg.icon_emoji,
            add_attachment=cfg.add_attachment,
            add_exception_trace_field=cfg.add_exception_trace_field,
            username_append_logger_name=cfg.username_append_logger_name,
            severity_rules=cfg.severity_rules,
            process_name=cfg.process_name,
            machine_name=cfg.machine_name,
            level=cfg.level,
            proxy=cfg.proxy,
            client=client,
            composer=composer,
        )

    @property
    def client(self) -> WebhookClient:
        return self._client

    def to_event(self, record: logging.LogRecord) -> LogEvent:
        """Snapshot a record into an immutable LogEvent."""
        exception = None
        if record.exc_info:
            exception = ExceptionInfo.from_exc_info(*record.exc_info)
        return LogEvent(
            level=level_display_name(record.levelname),
            logger_name=record.name,
            rendered_message=record.getMessage(),
            exception=exception,
        )

    def composition_config(self, rendered_text: str) -> CompositionConfig:
        return CompositionConfig(
            rendered_text=rendered_text,
            include_attachment=self.add_attachment,
            include_exception_trace_field=self.add_exception_trace_field,
            append_logger_name_to_username=self.username_append_logger_name,
            username=self.username,
            channel=self.channel,
            icon_url=self.icon_url,
            icon_emoji=self.icon_emoji,
            process_name=self.process_name,
            machine_name=self.machine_name,
            severity_rules=self.severity_rules,
        )

    def filter(self, record: logging.LogRecord) -> bool | logging.LogRecord:
        if _is_internal(record.name):
            return False
        return super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._emitting, "active", False):
            return
        self._emitting.active = True
        try:
            event = self.to_event(record)
            rendered = self.format(record) if self.formatter is not None else event.rendered_message
            payload = self._composer.compose(event, self.composition_config(rendered))
            self._client.deliver(self.webhook_url, payload, self.on_complete)
        except Exception:
            self.handleError(record)
        finally:
            self._emitting.active = False

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight deliveries. Returns False on timeout."""
        return self._client.flush(timeout)

    def close(self) -> None:
        try:
            if self._owns_client:
                self._client.close()
            else:
                self._client.flush(timeout=5.0)
        finally:
            super().close()
