"""slack_log_handler: post Python log records to Slack incoming webhooks."""

from slack_log_handler.clients import WebhookClient
from slack_log_handler.config import get_settings
from slack_log_handler.handlers import SlackHandler
from slack_log_handler.models import (
    Attachment,
    ExceptionInfo,
    Field,
    LogEvent,
    Payload,
    SeverityColorRule,
)
from slack_log_handler.notifications import (
    CompositionConfig,
    NotificationComposer,
    SeverityPalette,
    chunk_text,
)

__version__ = "0.0.1"
__all__ = [
    "Attachment",
    "CompositionConfig",
    "ExceptionInfo",
    "Field",
    "LogEvent",
    "NotificationComposer",
    "Payload",
    "SeverityColorRule",
    "SeverityPalette",
    "SlackHandler",
    "WebhookClient",
    "chunk_text",
    "get_settings",
]
