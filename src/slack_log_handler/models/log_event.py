# -*- coding: utf-8 -*-
"""LogEvent: immutable snapshot of one log occurrence.

Built by the handler from a ``logging.LogRecord`` so composition never touches
live record state.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from types import TracebackType
from typing import Optional


@dataclass(frozen=True, slots=True)
class ExceptionInfo:
    """Exception attached to a log event."""

    message: str
    type_name: str
    stack_trace: Optional[str] = None

    @classmethod
    def from_exc_info(
        cls,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> Optional[ExceptionInfo]:
        """Capture ``sys.exc_info()``-style triples; returns None when there is no exception."""
        if exc is None:
            return None
        stack_trace = "".join(traceback.format_exception(exc_type or type(exc), exc, tb))
        return cls(
            message=str(exc),
            type_name=(exc_type or type(exc)).__name__,
            stack_trace=stack_trace,
        )


@dataclass(frozen=True, slots=True)
class LogEvent:
    """One log occurrence with an already-resolved level name."""

    level: str
    """Level display name (e.g. INFO, WARN, ERROR, FATAL)."""
    logger_name: str
    rendered_message: str
    exception: Optional[ExceptionInfo] = None
