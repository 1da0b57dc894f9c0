# -*- coding: utf-8 -*-
"""Notification payload models (message, attachment, field).

Mirrors the Slack incoming-webhook message format:
https://api.slack.com/reference/messaging/attachments
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True, slots=True)
class Field:
    """Attachment field, displayed in a table on the message."""

    title: str
    """Field title; may not contain markup."""
    value: str
    """Field text; may contain markup and span multiple lines."""
    short: bool = False
    """Whether the value is short enough to render side-by-side with a sibling."""


@dataclass(frozen=True, slots=True)
class Attachment:
    """Richly formatted block attached to a message."""

    fallback: str
    """Plain-text summary shown by clients that do not render attachments."""
    color: Optional[str] = None
    """One of 'good', 'warning', 'danger', or a hex color code."""
    pretext: Optional[str] = None
    text: Optional[str] = None
    fields: tuple[Field, ...] = ()
    mrkdwn_in: tuple[str, ...] = field(default=("fields",), init=False)


@dataclass(frozen=True, slots=True)
class Payload:
    """Message posted to the webhook, serialized to JSON before POSTing."""

    text: str
    channel: Optional[str] = None
    username: Optional[str] = None
    icon_url: Optional[str] = None
    icon_emoji: Optional[str] = None
    attachments: tuple[Attachment, ...] = ()

    def with_defaults(
        self,
        *,
        username: Optional[str] = None,
        channel: Optional[str] = None,
        icon_url: Optional[str] = None,
    ) -> Payload:
        """Return a copy where empty username/channel/icon_url take the given defaults."""
        return replace(
            self,
            username=self.username or username or None,
            channel=self.channel or channel or None,
            icon_url=self.icon_url or icon_url or None,
        )
