"""Dependency injection."""

from slack_log_handler.DI.container import Container

__all__ = ["Container"]
