# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from slack_log_handler.config import Settings, get_settings
from slack_log_handler.clients.webhook import WebhookClient
from slack_log_handler.handlers import SlackHandler
from slack_log_handler.notifications import NotificationComposer, SeverityPalette


def _build_palette(settings: Settings) -> SeverityPalette:
    return SeverityPalette(settings.slack.severity_rules)


def _build_webhook_client(settings: Settings) -> WebhookClient:
    return WebhookClient(proxy=settings.slack.proxy)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, palette, composer, webhook client, handler."""

    config = providers.Callable(get_settings)

    severity_palette = providers.Singleton(_build_palette, config)

    notification_composer = providers.Singleton(
        NotificationComposer,
        palette=severity_palette,
    )

    webhook_client = providers.Singleton(_build_webhook_client, config)

    slack_handler = providers.Singleton(
        SlackHandler.from_settings,
        settings=config,
        client=webhook_client,
        composer=notification_composer,
    )
