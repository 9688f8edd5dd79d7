"""Domain event payloads and the envelope published on the event bus."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from maintenance_engine.db.enums import (
    MaintenanceEventType,
    SLABreachType,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
)
from maintenance_engine.schemas.money import Money
from maintenance_engine.types import (
    PropertyId,
    TenantId,
    UnitId,
    UserId,
    VendorId,
    WorkOrderId,
)


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True)

    work_order_id: WorkOrderId
    work_order_number: str


class WorkOrderCreatedPayload(_Payload):
    property_id: PropertyId
    unit_id: UnitId | None
    priority: WorkOrderPriority
    category: WorkOrderCategory
    title: str


class WorkOrderAssignedPayload(_Payload):
    vendor_id: VendorId | None
    assigned_to_user_id: UserId | None
    auto_assigned: bool = False
    score: float | None = None


class WorkOrderCompletedPayload(_Payload):
    completion_notes: str
    actual_cost: Money | None
    resolution_time_minutes: int
    sla_breached: bool
    vendor_id: VendorId | None


class WorkOrderVerifiedPayload(_Payload):
    rating: int
    vendor_id: VendorId | None


class WorkOrderCancelledPayload(_Payload):
    reason: str
    previous_status: WorkOrderStatus


class WorkOrderEscalatedPayload(_Payload):
    reason: str
    escalation_level: int
    status: WorkOrderStatus
    priority: WorkOrderPriority


class SLABreachedPayload(_Payload):
    breach_type: SLABreachType
    priority: WorkOrderPriority
    minutes_overdue: int


EventPayload = (
    WorkOrderCreatedPayload
    | WorkOrderAssignedPayload
    | WorkOrderCompletedPayload
    | WorkOrderVerifiedPayload
    | WorkOrderCancelledPayload
    | WorkOrderEscalatedPayload
    | SLABreachedPayload
)


class EventEnvelope(BaseModel):
    """Transport wrapper for a domain event."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: f"evt_{uuid4().hex}")
    event_type: MaintenanceEventType
    aggregate_id: str
    aggregate_type: str = "WorkOrder"
    tenant_id: TenantId
    correlation_id: str
    causation_id: str | None = None
    occurred_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    payload: EventPayload
