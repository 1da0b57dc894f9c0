# -*- coding: utf-8 -*-
"""Unit tests for SlackHandler."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any
from unittest.mock import Mock

import pytest

from slack_log_handler.clients.webhook import WebhookClient
from slack_log_handler.config import Settings
from slack_log_handler.exceptions import InvalidConfigError, MissingRequiredConfigError
from slack_log_handler.handlers import SlackHandler, level_display_name
from slack_log_handler.models import Payload, SeverityColorRule

from conftest import DeliveryRecorder, LocalWebhookServer

HOOK = "https://hooks.slack.com/services/T000/B000/XXXX"


def _fake_client() -> Mock:
    return Mock(spec=WebhookClient)


def _handler(client: Any, **kwargs: Any) -> SlackHandler:
    defaults: dict[str, Any] = {
        "username": "log-bot",
        "channel": "#alerts",
        "process_name": "worker",
        "machine_name": "host-1",
    }
    defaults.update(kwargs)
    return SlackHandler(HOOK, client=client, **defaults)


@pytest.fixture
def test_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("app.orders")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


def _sent_payload(client: Mock) -> Payload:
    client.deliver.assert_called_once()
    endpoint, payload, _callback = client.deliver.call_args.args
    assert endpoint == HOOK
    return payload


@pytest.mark.parametrize(
    ("levelname", "expected"),
    [("WARNING", "WARN"), ("CRITICAL", "FATAL"), ("ERROR", "ERROR"), ("INFO", "INFO"), ("DEBUG", "DEBUG")],
)
def test_level_display_name(levelname: str, expected: str) -> None:
    assert level_display_name(levelname) == expected


def test_requires_webhook_url() -> None:
    with pytest.raises(MissingRequiredConfigError):
        SlackHandler("  ", client=_fake_client())


@pytest.mark.parametrize("url", ["hooks.slack.com/services/T/B/X", "ftp://hooks.slack.com/x", "not a url"])
def test_rejects_malformed_webhook_url(url: str) -> None:
    with pytest.raises(InvalidConfigError) as exc_info:
        SlackHandler(url, client=_fake_client())

    assert isinstance(exc_info.value, ValueError)


def test_from_settings_rejects_malformed_webhook_url() -> None:
    with pytest.raises(InvalidConfigError):
        SlackHandler.from_settings(Settings(slack={"webhook_url": "hooks.slack.com"}), client=_fake_client())


def test_warning_record_is_composed_and_delivered(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(_handler(client))

    test_logger.warning("disk at %d%%", 91)

    payload = _sent_payload(client)
    assert payload.text == "disk at 91%"
    assert payload.username == "log-bot"
    assert payload.channel == "#alerts"
    attachment = payload.attachments[0]
    assert attachment.color == "warning"
    assert attachment.fallback == "[WARN] app.orders in worker on host-1"
    assert [f.title for f in attachment.fields] == ["Logger", "Process", "Machine"]


def test_exception_record_carries_exception_fields(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(_handler(client))

    try:
        raise KeyError("missing order")
    except KeyError:
        test_logger.exception("lookup failed")

    fields = _sent_payload(client).attachments[0].fields
    assert [f.title for f in fields[:3]] == ["Exception Message", "Exception Type", "Exception Trace"]
    assert fields[0].value == "'missing order'"
    assert fields[1].value == "KeyError"
    assert "Traceback (most recent call last)" in fields[2].value
    assert fields[2].value.startswith("```") and fields[2].value.endswith("```")


def test_critical_record_is_colored_danger(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(_handler(client))

    test_logger.critical("it's over")

    assert _sent_payload(client).attachments[0].color == "danger"


def test_username_append_logger_name(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(_handler(client, username_append_logger_name=True))

    test_logger.error("boom")

    payload = _sent_payload(client)
    assert payload.username == "log-bot - app.orders"
    assert "Logger" not in [f.title for f in payload.attachments[0].fields]


def test_formatter_renders_payload_text(test_logger: logging.Logger) -> None:
    client = _fake_client()
    handler = _handler(client)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    test_logger.addHandler(handler)

    test_logger.error("boom")

    assert _sent_payload(client).text == "ERROR app.orders: boom"


def test_severity_rules_and_disabled_attachment(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(
        _handler(client, severity_rules=[SeverityColorRule("info", "green")])
    )
    test_logger.info("deployed")
    assert _sent_payload(client).attachments[0].color == "#008000"

    plain_client = _fake_client()
    test_logger.handlers.clear()
    test_logger.addHandler(_handler(plain_client, add_attachment=False))
    test_logger.info("deployed")
    assert _sent_payload(plain_client).attachments == ()


def test_handler_level_filters_records(test_logger: logging.Logger) -> None:
    client = _fake_client()
    test_logger.addHandler(_handler(client, level=logging.ERROR))

    test_logger.warning("ignored")

    client.deliver.assert_not_called()


def test_internal_records_are_not_forwarded() -> None:
    client = _fake_client()
    handler = _handler(client)
    internal = logging.LogRecord(
        "slack_log_handler.webhook", logging.WARNING, __file__, 1, "webhook_delivery_failed", None, None
    )

    handler.handle(internal)

    client.deliver.assert_not_called()


def test_reentrant_emit_is_dropped(test_logger: logging.Logger) -> None:
    client = _fake_client()
    client.deliver.side_effect = lambda *args: test_logger.error("logged while delivering")
    test_logger.addHandler(_handler(client))

    test_logger.error("first")

    assert client.deliver.call_count == 1


def test_emit_never_raises(test_logger: logging.Logger) -> None:
    client = _fake_client()
    composer = Mock()
    composer.compose.side_effect = RuntimeError("composer bug")
    handler = _handler(client, composer=composer)
    handler.handleError = Mock()  # type: ignore[method-assign]
    test_logger.addHandler(handler)

    test_logger.error("boom")

    handler.handleError.assert_called_once()
    client.deliver.assert_not_called()


def test_close_flushes_injected_client_without_closing_it() -> None:
    client = _fake_client()
    handler = _handler(client)

    handler.close()

    client.flush.assert_called_once_with(timeout=5.0)
    client.close.assert_not_called()


def test_from_settings_maps_slack_section() -> None:
    settings = Settings(
        slack={
            "webhook_url": HOOK,
            "channel": "#ops",
            "username": "ops-bot",
            "username_append_logger_name": True,
            "severity_colors": "info=green",
            "level": "ERROR",
            "process_name": "api",
            "machine_name": "box",
        }
    )
    client = _fake_client()

    handler = SlackHandler.from_settings(settings, client=client)

    assert handler.webhook_url == HOOK
    assert handler.channel == "#ops"
    assert handler.username == "ops-bot"
    assert handler.username_append_logger_name is True
    assert handler.severity_rules == (SeverityColorRule("info", "green"),)
    assert handler.level == logging.ERROR
    assert handler.process_name == "api"
    assert handler.machine_name == "box"
    assert handler.client is client


def test_from_settings_requires_webhook_url() -> None:
    with pytest.raises(MissingRequiredConfigError):
        SlackHandler.from_settings(Settings(slack={"webhook_url": None}))


def test_end_to_end_delivery_to_local_webhook(
    webhook_server: LocalWebhookServer,
    recorder: DeliveryRecorder,
    test_logger: logging.Logger,
) -> None:
    handler = SlackHandler(
        webhook_server.url,
        username="log-bot",
        process_name="worker",
        machine_name="host-1",
        on_complete=recorder,
    )
    test_logger.addHandler(handler)
    try:
        try:
            1 / 0
        except ZeroDivisionError:
            test_logger.error("I'm afraid I can't do that.", exc_info=True)
        assert recorder.wait()
    finally:
        handler.close()

    assert recorder.outcomes == [(True, None)]
    sent = json.loads(webhook_server.requests[0].form["payload"])
    assert sent["text"] == "I'm afraid I can't do that."
    assert sent["username"] == "log-bot"
    attachment = sent["attachments"][0]
    assert attachment["color"] == "danger"
    assert attachment["mrkdwn_in"] == ["fields"]
    assert [f["title"] for f in attachment["fields"]] == [
        "Exception Message",
        "Exception Type",
        "Exception Trace",
        "Logger",
        "Process",
        "Machine",
    ]
    assert attachment["fields"][1]["value"] == "ZeroDivisionError"
    assert handler.client.is_closed
