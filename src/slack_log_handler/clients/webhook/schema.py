"""Wire schema for Slack incoming-webhook messages."""

from __future__ import annotations

import json
from typing import NotRequired, TypedDict

from slack_log_handler.models import Attachment, Field, Payload


class FieldSchema(TypedDict):
    """Attachment field schema."""

    title: str
    value: str
    short: bool


class AttachmentSchema(TypedDict):
    """Attachment schema."""

    fallback: str
    pretext: NotRequired[str]
    text: NotRequired[str]
    color: NotRequired[str]
    fields: list[FieldSchema]
    mrkdwn_in: list[str]


class PayloadSchema(TypedDict):
    """Message schema (POSTed as the form field ``payload``)."""

    channel: NotRequired[str]
    username: NotRequired[str]
    icon_url: NotRequired[str]
    icon_emoji: NotRequired[str]
    text: str
    attachments: NotRequired[list[AttachmentSchema]]


def field_to_wire(field: Field) -> FieldSchema:
    return {"title": field.title, "value": field.value, "short": field.short}


def attachment_to_wire(attachment: Attachment) -> AttachmentSchema:
    wire: AttachmentSchema = {
        "fallback": attachment.fallback,
        "fields": [field_to_wire(f) for f in attachment.fields],
        "mrkdwn_in": list(attachment.mrkdwn_in),
    }
    if attachment.pretext is not None:
        wire["pretext"] = attachment.pretext
    if attachment.text is not None:
        wire["text"] = attachment.text
    if attachment.color is not None:
        wire["color"] = attachment.color
    return wire


def payload_to_wire(payload: Payload) -> PayloadSchema:
    """Convert a Payload to its wire dict; None values and empty attachments are omitted."""
    wire: PayloadSchema = {"text": payload.text}
    if payload.channel is not None:
        wire["channel"] = payload.channel
    if payload.username is not None:
        wire["username"] = payload.username
    if payload.icon_url is not None:
        wire["icon_url"] = payload.icon_url
    if payload.icon_emoji is not None:
        wire["icon_emoji"] = payload.icon_emoji
    if payload.attachments:
        wire["attachments"] = [attachment_to_wire(a) for a in payload.attachments]
    return wire


def serialize_payload(payload: Payload) -> str:
    """Serialize a Payload to the JSON string sent in the ``payload`` form field."""
    return json.dumps(payload_to_wire(payload))
