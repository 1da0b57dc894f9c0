"""HTTP clients."""

from slack_log_handler.clients.webhook import WebhookClient

__all__ = ["WebhookClient"]
