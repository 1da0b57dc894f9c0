# -*- coding: utf-8 -*-
"""Domain models."""

from slack_log_handler.models.delivery import DeliveryAttempt, DeliveryState
from slack_log_handler.models.log_event import ExceptionInfo, LogEvent
from slack_log_handler.models.payload import Attachment, Field, Payload
from slack_log_handler.models.severity import SeverityColorRule

__all__ = [
    "Attachment",
    "DeliveryAttempt",
    "DeliveryState",
    "ExceptionInfo",
    "Field",
    "LogEvent",
    "Payload",
    "SeverityColorRule",
]
