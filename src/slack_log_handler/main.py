# -*- coding: utf-8 -*-
"""
Manual harness: sends a handful of sample log events to the configured webhook.

Orchestrates: logging, settings, container, SlackHandler on the root logger, sample events, shutdown.
Events flow: logging call -> SlackHandler -> NotificationComposer -> WebhookClient -> webhook.

Run with: SLACK__WEBHOOK_URL=https://hooks.slack.com/services/... python -m slack_log_handler.main
"""
from __future__ import annotations

import logging

import structlog

from slack_log_handler.DI import Container
from slack_log_handler.config import get_settings
from slack_log_handler.exceptions import MissingRequiredConfigError
from slack_log_handler.logging.config import configure_logging
from slack_log_handler.utils import mask_webhook_url

DRAIN_TIMEOUT_SECONDS = 10.0


class FieldAccessError(Exception):
    """Sample exception type for the harness."""


def emit_samples(sample_logger: logging.Logger) -> None:
    """Emit one event per interesting shape (plain, warning, chained, caught, fatal)."""
    sample_logger.info("I know he can get the job, but can he do the job?")
    sample_logger.debug("I'm not arguing that with you.")
    sample_logger.warning("Be careful!")

    try:
        try:
            raise ValueError("You can't aggregate this!")
        except ValueError as inner:
            raise FieldAccessError("You can't access this field.") from inner
    except FieldAccessError:
        sample_logger.exception("Have you used a computer before?")

    try:
        _ = 1 / int("0")
    except ZeroDivisionError:
        sample_logger.error("I'm afraid I can't do that.", exc_info=True)

    sample_logger.critical("That's it. It's over.", exc_info=UnicodeError("Could not fall backwards."))


def run() -> None:
    configure_logging()
    logger = structlog.get_logger("slack_log_handler.main")
    settings = get_settings()
    if not settings.slack.webhook_url:
        logger.error(
            "main_missing_webhook_url",
            message="SLACK__WEBHOOK_URL is not set",
        )
        raise MissingRequiredConfigError("SLACK__WEBHOOK_URL")

    container = Container()
    handler = container.slack_handler()
    client = container.webhook_client()
    root = logging.getLogger()
    root.addHandler(handler)
    logger.info(
        "main_samples_started",
        webhook_url=mask_webhook_url(settings.slack.webhook_url),
        slack_level=settings.slack.level,
    )
    try:
        emit_samples(logging.getLogger("harness.Program"))
    finally:
        root.removeHandler(handler)
        if not client.flush(DRAIN_TIMEOUT_SECONDS):
            logger.warning("main_drain_timeout", webhook_in_flight_count=client.in_flight_count)
        handler.close()
        client.close()
        logger.info("main_shutdown_complete")


def main() -> None:
    run()


__all__ = ["run", "main", "emit_samples"]

if __name__ == "__main__":
    main()
