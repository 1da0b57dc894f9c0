"""logging handlers."""

from slack_log_handler.handlers.slack_handler import SlackHandler, level_display_name

__all__ = ["SlackHandler", "level_display_name"]
