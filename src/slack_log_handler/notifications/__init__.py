"""Notification composition subsystem."""

from slack_log_handler.notifications.chunker import chunk_text
from slack_log_handler.notifications.composer import (
    TRACE_CHUNK_MAX_CHARS,
    NotificationComposer,
)
from slack_log_handler.notifications.palette import SeverityPalette, resolve_color
from slack_log_handler.notifications.types import CompositionConfig, PayloadComposer

__all__ = [
    "CompositionConfig",
    "NotificationComposer",
    "PayloadComposer",
    "SeverityPalette",
    "TRACE_CHUNK_MAX_CHARS",
    "chunk_text",
    "resolve_color",
]
