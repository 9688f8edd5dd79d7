"""Event bus contract, envelope builder and an in-process implementation."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Awaitable, Callable, Protocol

from maintenance_engine.db.enums import MaintenanceEventType
from maintenance_engine.schemas.events import EventEnvelope, EventPayload
from maintenance_engine.types import TenantId

logger = logging.getLogger(__name__)

EventHandler = Callable[[EventEnvelope], Awaitable[None]]


class EventBus(Protocol):
    async def publish(self, envelope: EventEnvelope) -> None: ...


def build_envelope(
    *,
    event_type: MaintenanceEventType,
    payload: EventPayload,
    tenant_id: TenantId,
    correlation_id: str,
    occurred_at: datetime,
    aggregate_id: str | None = None,
    aggregate_type: str = "WorkOrder",
    causation_id: str | None = None,
    metadata: dict | None = None,
) -> EventEnvelope:
    return EventEnvelope(
        event_type=event_type,
        aggregate_id=aggregate_id or payload.work_order_id,
        aggregate_type=aggregate_type,
        tenant_id=tenant_id,
        correlation_id=correlation_id,
        causation_id=causation_id,
        occurred_at=occurred_at,
        metadata=metadata or {},
        payload=payload,
    )


class InMemoryEventBus:
    """
    In-process bus that records every envelope and fans out to subscribers.

    Construct one per process or per test; there is no shared instance.
    Handler failures propagate to the publisher.
    """

    def __init__(self) -> None:
        self.published: list[EventEnvelope] = []
        self._handlers: dict[MaintenanceEventType | None, list[EventHandler]] = defaultdict(list)

    def subscribe(
        self, handler: EventHandler, event_type: MaintenanceEventType | None = None
    ) -> Callable[[], None]:
        """Register a handler (``event_type=None`` receives everything). Returns an unsubscribe callable."""
        self._handlers[event_type].append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return _unsubscribe

    async def publish(self, envelope: EventEnvelope) -> None:
        self.published.append(envelope)
        logger.debug(
            "Published %s for %s tenant=%s",
            envelope.event_type.value,
            envelope.aggregate_id,
            envelope.tenant_id,
        )
        for handler in [*self._handlers[envelope.event_type], *self._handlers[None]]:
            await handler(envelope)

    def of_type(self, event_type: MaintenanceEventType) -> list[EventEnvelope]:
        return [e for e in self.published if e.event_type == event_type]

    def clear(self) -> None:
        self.published.clear()
