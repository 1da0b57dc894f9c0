# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import asyncio
import socket
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from aiohttp import web

from slack_log_handler.clients.webhook import WebhookClient
from slack_log_handler.models import ExceptionInfo, LogEvent
from slack_log_handler.notifications import CompositionConfig

HOOK_PATH = "/services/T000/B000/XXXX"


@dataclass(frozen=True)
class RecordedRequest:
    """One request received by the local webhook server."""

    method: str
    content_type: str
    form: dict[str, str]


@dataclass
class LocalWebhookServer:
    """aiohttp server on its own loop thread, recording every POST it receives."""

    status: int = 200
    gate: Optional[threading.Event] = None
    """When set, responses wait for the gate to open."""
    requests: list[RecordedRequest] = field(default_factory=list)
    url: str = ""
    _loop: Optional[asyncio.AbstractEventLoop] = None
    _thread: Optional[threading.Thread] = None
    _runner: Optional[web.AppRunner] = None

    def start(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()
        asyncio.run_coroutine_threadsafe(self._start(), self._loop).result(timeout=5)

    def stop(self) -> None:
        assert self._loop is not None and self._thread is not None
        if self.gate is not None:
            self.gate.set()
        if self._runner is not None:
            asyncio.run_coroutine_threadsafe(self._runner.cleanup(), self._loop).result(timeout=5)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()

    async def _start(self) -> None:
        app = web.Application()
        app.router.add_post(HOOK_PATH, self._handle)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "127.0.0.1", 0)
        await site.start()
        host, port = self._runner.addresses[0][:2]
        self.url = f"http://{host}:{port}{HOOK_PATH}"

    async def _handle(self, request: web.Request) -> web.Response:
        form = await request.post()
        self.requests.append(
            RecordedRequest(
                method=request.method,
                content_type=request.content_type,
                form={key: str(value) for key, value in form.items()},
            )
        )
        if self.gate is not None:
            await asyncio.to_thread(self.gate.wait, 5)
        return web.Response(status=self.status, text="ok")


class DeliveryRecorder:
    """Completion callback that records outcomes and signals each one."""

    def __init__(self) -> None:
        self.outcomes: list[tuple[bool, Optional[str]]] = []
        self.thread_names: list[str] = []
        self._event = threading.Event()

    def __call__(self, success: bool, error: Optional[str]) -> None:
        self.outcomes.append((success, error))
        self.thread_names.append(threading.current_thread().name)
        self._event.set()

    def wait(self, timeout: float = 5.0) -> bool:
        return self._event.wait(timeout)


@pytest.fixture
def webhook_server() -> Iterator[LocalWebhookServer]:
    """Running local webhook endpoint (HTTP 200)."""
    server = LocalWebhookServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_factory() -> Iterator[Callable[..., LocalWebhookServer]]:
    """Start local webhook servers with custom status/gate; all stopped at teardown."""
    servers: list[LocalWebhookServer] = []

    def _build(**kwargs: Any) -> LocalWebhookServer:
        server = LocalWebhookServer(**kwargs)
        server.start()
        servers.append(server)
        return server

    yield _build
    for server in servers:
        server.stop()


@pytest.fixture
def webhook_client() -> Iterator[WebhookClient]:
    """Fresh webhook client, closed at teardown."""
    client = WebhookClient()
    yield client
    client.close(timeout=5)


@pytest.fixture
def recorder() -> DeliveryRecorder:
    return DeliveryRecorder()


@pytest.fixture
def unused_port() -> int:
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def log_event_factory() -> Callable[..., LogEvent]:
    """Build LogEvent with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> LogEvent:
        return LogEvent(
            level=overrides.pop("level", "ERROR"),
            logger_name=overrides.pop("logger_name", "app.orders"),
            rendered_message=overrides.pop("rendered_message", "Order sync failed"),
            exception=overrides.pop("exception", None),
        )

    return _build


@pytest.fixture
def exception_factory() -> Callable[..., ExceptionInfo]:
    def _build(**overrides: Any) -> ExceptionInfo:
        return ExceptionInfo(
            message=overrides.pop("message", "boom"),
            type_name=overrides.pop("type_name", "FieldAccessException"),
            stack_trace=overrides.pop("stack_trace", "at A\nat B"),
        )

    return _build


@pytest.fixture
def config_factory() -> Callable[..., CompositionConfig]:
    """Build CompositionConfig with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> CompositionConfig:
        defaults: dict[str, Any] = {
            "rendered_text": "Order sync failed",
            "include_attachment": True,
            "include_exception_trace_field": True,
            "append_logger_name_to_username": False,
            "username": "log-bot",
            "channel": "#alerts",
            "icon_url": "",
            "icon_emoji": ":ghost:",
            "process_name": "worker",
            "machine_name": "host-1",
        }
        defaults.update(overrides)
        return CompositionConfig(**defaults)

    return _build
