# -*- coding: utf-8 -*-
"""Fire-and-forget webhook client (aiohttp on a private event loop thread).

``deliver`` is safe to call from any synchronous thread (e.g. inside a
``logging.Handler.emit``): it registers a DeliveryAttempt, schedules the POST
on the client's loop and returns immediately. Every attempt stays in the
in-flight registry until it completes or fails, and no error ever propagates
back to the caller; failures are logged and reported through the optional
completion callback.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from types import SimpleNamespace
from typing import Any, Callable, Optional

import aiohttp
import structlog
from structlog.contextvars import bound_contextvars

from slack_log_handler.clients.webhook.schema import serialize_payload
from slack_log_handler.exceptions import WebhookDeliveryError
from slack_log_handler.models import DeliveryAttempt, DeliveryState, Payload
from slack_log_handler.utils import mask_webhook_url

DeliveryCallback = Callable[[bool, Optional[str]], None]
"""Completion callback: (success, error description or None)."""

FORM_FIELD = "payload"


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def _cancelled_error(attempt: DeliveryAttempt) -> WebhookDeliveryError:
    return WebhookDeliveryError(
        f"Delivery cancelled, client closed: {mask_webhook_url(attempt.endpoint)}",
        url=attempt.endpoint,
    )


class WebhookClient:
    """Post payloads to incoming webhooks without blocking the caller.

    The event loop thread is started lazily on the first delivery and stopped
    by close(). The aiohttp session lives on that loop.
    """

    def __init__(
        self,
        *,
        proxy: Optional[str] = None,
        username: Optional[str] = None,
        channel: Optional[str] = None,
        icon_url: Optional[str] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            proxy: Optional outbound HTTP proxy URL.
            username: Default username for payloads that carry none.
            channel: Default channel for payloads that carry none.
            icon_url: Default icon URL for payloads that carry none.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name.
        """
        self._proxy = proxy or None
        self._default_username = username or None
        self._default_channel = channel or None
        self._default_icon_url = icon_url or None
        self._logger = get_logger(logger_name or "slack_log_handler.webhook")

        self._lock = threading.Lock()
        self._drained = threading.Condition(self._lock)
        self._in_flight: dict[str, DeliveryAttempt] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._closed = False

    @property
    def in_flight_count(self) -> int:
        """Number of attempts not yet completed or failed."""
        with self._lock:
            return len(self._in_flight)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def in_flight(self) -> list[DeliveryAttempt]:
        """Snapshot of the in-flight attempts."""
        with self._lock:
            return list(self._in_flight.values())

    # -- public API -------------------------------------------------------

    def deliver(
        self,
        endpoint: str,
        payload: Payload,
        on_complete: Optional[DeliveryCallback] = None,
    ) -> None:
        """Schedule one POST of ``payload`` to ``endpoint`` and return immediately.

        Args:
            endpoint: Webhook URL.
            payload: Message to serialize and send.
            on_complete: Optional callback invoked once, on the client's loop
                thread (or synchronously when scheduling itself fails).
        """
        self._submit(endpoint, payload, on_complete)

    def post(self, endpoint: str, payload: Payload, *, timeout: Optional[float] = None) -> None:
        """POST ``payload`` and block until the exchange finishes.

        Must not be called from the client's own loop thread.

        Raises:
            WebhookDeliveryError: If the request fails or does not finish within timeout.
        """
        attempt = self._submit(endpoint, payload, None)
        if attempt.future is not None:
            try:
                attempt.future.result(timeout=timeout)
            except TimeoutError as exc:
                raise WebhookDeliveryError(
                    f"POST did not finish within {timeout}s: {mask_webhook_url(endpoint)}",
                    url=endpoint,
                    cause=exc,
                ) from exc
            except concurrent.futures.CancelledError as exc:
                raise WebhookDeliveryError(
                    f"POST cancelled, client closed: {mask_webhook_url(endpoint)}",
                    url=endpoint,
                ) from exc
        if attempt.error is not None:
            error = attempt.error
            status_code = error.status if isinstance(error, aiohttp.ClientResponseError) else None
            raise WebhookDeliveryError(
                f"POST failed: {mask_webhook_url(endpoint)} ({_describe(error)})",
                url=endpoint,
                status_code=status_code,
                cause=error,
            ) from error

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until no attempt is in flight. Returns False on timeout."""
        with self._drained:
            return self._drained.wait_for(lambda: not self._in_flight, timeout=timeout)

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Wait for in-flight attempts (up to timeout), then stop the loop thread.

        Attempts still in flight after the timeout are cancelled and reported
        as failed, so no attempt (nor a blocked ``post``) outlives the loop.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            loop, thread = self._loop, self._thread

        if not self.flush(timeout):
            self._cancel_pending(timeout)
        if loop is None or thread is None:
            return
        try:
            asyncio.run_coroutine_threadsafe(self._close_session(), loop).result(timeout=timeout)
        except Exception as exc:
            self._logger.warning(
                "webhook_session_close_failed",
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=timeout)
        if not thread.is_alive():
            loop.close()
        self._logger.debug("webhook_client_closed")

    def _cancel_pending(self, timeout: Optional[float]) -> None:
        pending = self.in_flight()
        self._logger.warning(
            "webhook_close_pending_attempts",
            webhook_in_flight_count=len(pending),
        )
        for attempt in pending:
            if attempt.future is not None:
                attempt.future.cancel()
        if self.flush(timeout):
            return
        # The loop did not get to the cancellations; untrack what is left.
        for attempt in self.in_flight():
            self._finish(attempt, None, _cancelled_error(attempt))

    # -- registry ---------------------------------------------------------

    def _submit(
        self,
        endpoint: str,
        payload: Payload,
        on_complete: Optional[DeliveryCallback],
    ) -> DeliveryAttempt:
        attempt = DeliveryAttempt(endpoint=str(endpoint))
        with self._lock:
            self._in_flight[attempt.id] = attempt
        try:
            loop = self._ensure_loop()
            attempt.future = asyncio.run_coroutine_threadsafe(
                self._run_attempt(attempt, payload, on_complete),
                loop,
            )
        except Exception as exc:
            self._finish(attempt, on_complete, exc)
        return attempt

    def _advance(self, attempt: DeliveryAttempt, state: DeliveryState) -> None:
        """Move an attempt forward; out-of-order or repeated signals are ignored."""
        with self._lock:
            if not attempt.state.is_before(state):
                return
            attempt.state = state
        self._logger.debug("webhook_attempt_state", webhook_state=state.value)

    def _finish(
        self,
        attempt: DeliveryAttempt,
        on_complete: Optional[DeliveryCallback],
        error: Optional[Exception] = None,
    ) -> None:
        with self._drained:
            attempt.state = DeliveryState.COMPLETED if error is None else DeliveryState.FAILED
            attempt.error = error
            self._in_flight.pop(attempt.id, None)
            self._drained.notify_all()

        if error is None:
            self._logger.debug("webhook_delivery_completed")
        else:
            status_code = error.status if isinstance(error, aiohttp.ClientResponseError) else None
            self._logger.warning(
                "webhook_delivery_failed",
                webhook_attempt_id=attempt.id,
                webhook_url=mask_webhook_url(attempt.endpoint),
                http_status_code=status_code,
                error_type=type(error).__name__,
                error_message=str(error),
            )

        if on_complete is None:
            return
        try:
            on_complete(error is None, None if error is None else _describe(error))
        except Exception as exc:
            self._logger.warning(
                "webhook_callback_failed",
                error_type=type(exc).__name__,
                error_message=str(exc),
            )

    # -- event loop -------------------------------------------------------

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._closed:
                raise RuntimeError("WebhookClient is closed")
            if self._loop is not None:
                return self._loop
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=self._run_loop,
                args=(loop,),
                name="slack-log-handler-webhook",
                daemon=True,
            )
            thread.start()
            self._loop, self._thread = loop, thread
            return loop

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(trace_configs=[self._trace_config()])
        return self._session

    async def _close_session(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # -- request tracing --------------------------------------------------

    def _trace_config(self) -> aiohttp.TraceConfig:
        """Drive attempt states from aiohttp's request lifecycle signals."""
        trace_config = aiohttp.TraceConfig()
        trace_config.on_request_start.append(self._on_stream_opening)
        trace_config.on_connection_create_start.append(self._on_stream_opening)
        trace_config.on_connection_reuseconn.append(self._on_stream_opening)
        trace_config.on_request_headers_sent.append(self._on_headers_sent)
        trace_config.on_request_chunk_sent.append(self._on_chunk_sent)
        return trace_config

    @staticmethod
    def _traced(trace_config_ctx: SimpleNamespace) -> Optional[SimpleNamespace]:
        ctx = trace_config_ctx.trace_request_ctx
        return ctx if isinstance(ctx, SimpleNamespace) else None

    async def _on_stream_opening(
        self, session: aiohttp.ClientSession, trace_config_ctx: SimpleNamespace, params: Any
    ) -> None:
        ctx = self._traced(trace_config_ctx)
        if ctx is not None:
            self._advance(ctx.attempt, DeliveryState.STREAM_OPENING)

    async def _on_headers_sent(
        self, session: aiohttp.ClientSession, trace_config_ctx: SimpleNamespace, params: Any
    ) -> None:
        ctx = self._traced(trace_config_ctx)
        if ctx is not None:
            self._advance(ctx.attempt, DeliveryState.STREAM_WRITING)

    async def _on_chunk_sent(
        self,
        session: aiohttp.ClientSession,
        trace_config_ctx: SimpleNamespace,
        params: aiohttp.TraceRequestChunkSentParams,
    ) -> None:
        ctx = self._traced(trace_config_ctx)
        if ctx is None:
            return
        self._advance(ctx.attempt, DeliveryState.STREAM_WRITING)
        ctx.bytes_sent += len(params.chunk)
        if ctx.bytes_sent >= ctx.body_size:
            self._advance(ctx.attempt, DeliveryState.RESPONSE_AWAITED)

    # -- exchange ---------------------------------------------------------

    async def _run_attempt(
        self,
        attempt: DeliveryAttempt,
        payload: Payload,
        on_complete: Optional[DeliveryCallback],
    ) -> None:
        with bound_contextvars(
            webhook_attempt_id=attempt.id,
            webhook_url=mask_webhook_url(attempt.endpoint),
        ):
            try:
                await self._exchange(attempt, payload)
            except asyncio.CancelledError:
                self._finish(attempt, on_complete, _cancelled_error(attempt))
                raise
            except Exception as exc:
                self._finish(attempt, on_complete, exc)
                return
            self._finish(attempt, on_complete)

    async def _exchange(self, attempt: DeliveryAttempt, payload: Payload) -> None:
        body = serialize_payload(
            payload.with_defaults(
                username=self._default_username,
                channel=self._default_channel,
                icon_url=self._default_icon_url,
            )
        )
        # Single field, sent as application/x-www-form-urlencoded.
        form = aiohttp.FormData({FORM_FIELD: body})()
        session = await self._get_session()
        async with session.post(
            attempt.endpoint,
            data=form,
            proxy=self._proxy,
            trace_request_ctx=SimpleNamespace(attempt=attempt, body_size=form.size or 0, bytes_sent=0),
        ) as response:
            self._advance(attempt, DeliveryState.RESPONSE_AWAITED)
            await response.read()
            response.raise_for_status()
