# -*- coding: utf-8 -*-
"""Fire-and-forget Slack webhook client (aiohttp)."""

from slack_log_handler.clients.webhook.schema import payload_to_wire, serialize_payload
from slack_log_handler.clients.webhook.webhook_client import DeliveryCallback, WebhookClient

__all__ = ["DeliveryCallback", "WebhookClient", "payload_to_wire", "serialize_payload"]
