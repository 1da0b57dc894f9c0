"""DeliveryAttempt: one outstanding webhook POST owned by the delivery client.

Lifecycle: CREATED -> STREAM_OPENING -> STREAM_WRITING -> RESPONSE_AWAITED -> COMPLETED,
or any state -> FAILED.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from uuid import uuid4


class DeliveryState(str, Enum):
    """Delivery attempt state."""

    CREATED = "CREATED"
    """Registered, not yet scheduled on the I/O loop."""
    STREAM_OPENING = "STREAM_OPENING"
    """Request started; acquiring or opening the connection."""
    STREAM_WRITING = "STREAM_WRITING"
    """Request headers or body being written."""
    RESPONSE_AWAITED = "RESPONSE_AWAITED"
    """Request fully sent; waiting for (and draining) the response."""
    COMPLETED = "COMPLETED"
    """Response received with a success status."""
    FAILED = "FAILED"
    """Terminated by an error."""

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryState.COMPLETED, DeliveryState.FAILED)

    def is_before(self, other: DeliveryState) -> bool:
        """True when ``other`` comes later in the lifecycle than this state."""
        return _LIFECYCLE.index(self) < _LIFECYCLE.index(other)


_LIFECYCLE = (
    DeliveryState.CREATED,
    DeliveryState.STREAM_OPENING,
    DeliveryState.STREAM_WRITING,
    DeliveryState.RESPONSE_AWAITED,
    DeliveryState.COMPLETED,
    DeliveryState.FAILED,
)


@dataclass(slots=True, eq=False)
class DeliveryAttempt:
    """In-flight request handle. Identity is ``id``."""

    endpoint: str
    id: str = field(default_factory=lambda: uuid4().hex[:12])
    state: DeliveryState = DeliveryState.CREATED
    error: Optional[Exception] = None
    """Set when the attempt ends in FAILED."""
    future: Optional[Future[None]] = None
    """Handle of the coroutine scheduled on the client's loop."""
