# -*- coding: utf-8 -*-
"""Compose webhook payloads from log events.

Attachment field order (left to right):
    Exception Message, Exception Type, Exception Trace [1..N], Logger, Process, Machine

Logger is present only when the logger name is not appended to the username;
exception fields only when the event carries an exception.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog

from slack_log_handler.models import Attachment, ExceptionInfo, Field, LogEvent, Payload
from slack_log_handler.notifications.chunker import chunk_text
from slack_log_handler.notifications.palette import SeverityPalette
from slack_log_handler.notifications.types import CompositionConfig, PayloadComposer

# Slack truncates field values around 2000 characters; leave room for the fences.
TRACE_CHUNK_MAX_CHARS = 1990

CODE_FENCE = "```"
_FENCE_SUBSTITUTE = "'''"


def format_trace_chunk(chunk: str) -> str:
    """Fence a trace chunk as a code block, neutralizing fences inside it."""
    return f"{CODE_FENCE}{chunk.replace(CODE_FENCE, _FENCE_SUBSTITUTE)}{CODE_FENCE}"


def trace_field_title(index: int) -> str:
    """Title for the 1-based trace chunk index."""
    return "Exception Trace" if index == 1 else f"Exception Trace {index}"


class _FieldListBuilder:
    """Ordered field list assembled as a head (exception details) plus a fixed tail."""

    def __init__(self) -> None:
        self._head: list[Field] = []
        self._tail: list[Field] = []

    def head(self, field: Field) -> _FieldListBuilder:
        self._head.append(field)
        return self

    def tail(self, field: Field) -> _FieldListBuilder:
        self._tail.append(field)
        return self

    def build(self) -> tuple[Field, ...]:
        return (*self._head, *self._tail)


class NotificationComposer(PayloadComposer):
    """Turn one LogEvent plus static options into a Payload. Never raises."""

    def __init__(
        self,
        *,
        palette: Optional[SeverityPalette] = None,
        max_trace_chars: int = TRACE_CHUNK_MAX_CHARS,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the composer.

        Args:
            palette: Palette used when the config carries no severity rules.
            max_trace_chars: Maximum size of one trace chunk (before fencing).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name.
        """
        self._palette = palette or SeverityPalette()
        self._max_trace_chars = max_trace_chars
        self._logger = get_logger(logger_name or "slack_log_handler.composer")

    def compose(self, event: LogEvent, config: CompositionConfig) -> Payload:
        username = config.username
        if config.append_logger_name_to_username:
            username += f" - {event.logger_name}"

        attachments: tuple[Attachment, ...] = ()
        if config.include_attachment:
            attachments = (self._build_attachment(event, config),)

        return Payload(
            text=config.rendered_text,
            channel=config.channel or None,
            username=username or None,
            icon_url=config.icon_url or None,
            icon_emoji=config.icon_emoji or None,
            attachments=attachments,
        )

    def _build_attachment(self, event: LogEvent, config: CompositionConfig) -> Attachment:
        palette = SeverityPalette(config.severity_rules) if config.severity_rules else self._palette

        builder = _FieldListBuilder()
        if event.exception is not None:
            self._add_exception_fields(builder, event.exception, config)
        if not config.append_logger_name_to_username:
            builder.tail(Field("Logger", event.logger_name, short=True))
        builder.tail(Field("Process", config.process_name, short=True))
        builder.tail(Field("Machine", config.machine_name, short=True))

        fields = builder.build()
        self._logger.debug(
            "payload_attachment_composed",
            log_level=event.level,
            attachment_fields_count=len(fields),
        )
        return Attachment(
            fallback=f"[{event.level}] {event.logger_name} in {config.process_name} on {config.machine_name}",
            color=palette.color_for(event.level),
            fields=fields,
        )

    def _add_exception_fields(
        self,
        builder: _FieldListBuilder,
        exception: ExceptionInfo,
        config: CompositionConfig,
    ) -> None:
        builder.head(Field("Exception Message", exception.message))
        builder.head(Field("Exception Type", exception.type_name, short=True))

        trace = exception.stack_trace
        if not config.include_exception_trace_field or not trace or not trace.strip():
            return
        for index, chunk in enumerate(chunk_text(trace, self._max_trace_chars), start=1):
            builder.head(Field(trace_field_title(index), format_trace_chunk(chunk)))
