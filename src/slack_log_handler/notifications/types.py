"""Notification composition types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from slack_log_handler.models import LogEvent, Payload, SeverityColorRule


@dataclass(frozen=True)
class CompositionConfig:
    """Static channel/identity options plus the already-formatted message body."""

    rendered_text: str
    include_attachment: bool = True
    include_exception_trace_field: bool = True
    """Only meaningful when include_attachment is True."""
    append_logger_name_to_username: bool = False
    username: str = ""
    channel: str = ""
    icon_url: str = ""
    icon_emoji: str = ""
    process_name: str = ""
    machine_name: str = ""
    severity_rules: tuple[SeverityColorRule, ...] = ()


class PayloadComposer(Protocol):
    """Build a wire-ready payload from a log event."""

    def compose(self, event: LogEvent, config: CompositionConfig) -> Payload:
        """Return the payload for the given event.

        Args:
            event: Immutable snapshot of the log occurrence.
            config: Static options and the rendered message text.
        """
        ...
