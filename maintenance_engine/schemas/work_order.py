"""Pydantic schemas for work orders (aggregate, value objects and operation inputs)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from maintenance_engine.core.constants import MAX_CUSTOMER_RATING, MIN_CUSTOMER_RATING
from maintenance_engine.db.enums import (
    DEFAULT_WORK_ORDER_PRIORITY,
    DEFAULT_WORK_ORDER_SOURCE,
    DEFAULT_WORK_ORDER_STATUS,
    AttachmentType,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderSource,
    WorkOrderStatus,
)
from maintenance_engine.schemas.money import Money
from maintenance_engine.types import (
    CustomerId,
    PropertyId,
    TenantId,
    UnitId,
    UserId,
    VendorId,
    WorkOrderId,
)


# =============================================================================
# Value objects
# =============================================================================


class SLAWindow(BaseModel):
    """Response/resolution/escalation windows in minutes."""

    model_config = ConfigDict(frozen=True)

    response_minutes: int = Field(..., gt=0)
    resolution_minutes: int = Field(..., gt=0)
    escalation_minutes: int = Field(..., gt=0)

    @model_validator(mode="after")
    def _resolution_after_response(self) -> "SLAWindow":
        if self.resolution_minutes < self.response_minutes:
            raise ValueError("resolution window must not be shorter than response window")
        return self


class SLATracking(BaseModel):
    """SLA clock embedded in a work order."""

    model_config = ConfigDict(frozen=True)

    config: SLAWindow
    submitted_at: datetime
    responded_at: datetime | None = None
    resolved_at: datetime | None = None
    response_due_at: datetime
    resolution_due_at: datetime
    response_breached: bool = False
    resolution_breached: bool = False
    paused_at: datetime | None = None
    pause_reason: str | None = None
    # Accumulated across every completed pause window
    paused_duration_minutes: float = 0.0
    escalated_at: datetime | None = None
    escalation_level: int = 0

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None


class WorkOrderAttachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: AttachmentType
    url: str = Field(..., min_length=1, max_length=2048)
    description: str | None = Field(None, max_length=500)


class TimelineEntry(BaseModel):
    """Append-only audit trail entry."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    action: str
    status: WorkOrderStatus
    user_id: UserId
    notes: str | None = None


# =============================================================================
# Aggregate
# =============================================================================


class WorkOrder(BaseModel):
    """Maintenance work order aggregate root."""

    model_config = ConfigDict(frozen=True)

    id: WorkOrderId
    tenant_id: TenantId
    work_order_number: str
    property_id: PropertyId
    unit_id: UnitId | None = None
    customer_id: CustomerId | None = None

    status: WorkOrderStatus = DEFAULT_WORK_ORDER_STATUS
    priority: WorkOrderPriority
    category: WorkOrderCategory
    source: WorkOrderSource

    title: str
    description: str
    location: str = ""
    attachments: list[WorkOrderAttachment] = Field(default_factory=list)

    assigned_to_user_id: UserId | None = None
    vendor_id: VendorId | None = None
    scheduled_date: datetime | None = None
    scheduled_time_slot: str | None = None

    estimated_cost: Money | None = None
    actual_cost: Money | None = None
    completion_notes: str | None = None
    customer_rating: int | None = None
    customer_feedback: str | None = None

    requires_entry: bool = True
    entry_instructions: str | None = None
    permission_to_enter: bool = False

    sla: SLATracking
    timeline: list[TimelineEntry] = Field(default_factory=list)

    created_at: datetime
    updated_at: datetime
    created_by: UserId
    updated_by: UserId

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


# =============================================================================
# Operation inputs
# =============================================================================


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class WorkOrderCreate(_Input):
    """Request to create a work order."""

    property_id: PropertyId = Field(..., min_length=1)
    unit_id: UnitId | None = None
    customer_id: CustomerId | None = None
    priority: WorkOrderPriority = DEFAULT_WORK_ORDER_PRIORITY
    category: WorkOrderCategory
    source: WorkOrderSource = DEFAULT_WORK_ORDER_SOURCE
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    location: str = Field("", max_length=255)
    attachments: list[WorkOrderAttachment] = Field(default_factory=list)
    estimated_cost: Money | None = None
    # Overrides the priority default when set
    sla_config: SLAWindow | None = None
    requires_entry: bool = True
    entry_instructions: str | None = Field(None, max_length=1000)
    permission_to_enter: bool = False


class WorkOrderTriage(_Input):
    priority: WorkOrderPriority | None = None
    category: WorkOrderCategory | None = None
    notes: str | None = Field(None, max_length=2000)


class WorkOrderAssign(_Input):
    """Assign to a vendor, an internal technician, or both."""

    vendor_id: VendorId | None = None
    assigned_to_user_id: UserId | None = None
    notes: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _require_assignee(self) -> "WorkOrderAssign":
        if not self.vendor_id and not self.assigned_to_user_id:
            raise ValueError("vendor_id or assigned_to_user_id is required")
        return self


class WorkOrderSchedule(_Input):
    scheduled_date: datetime
    scheduled_time_slot: str = Field(..., min_length=1, max_length=50)  # e.g. "09:00-12:00"
    notes: str | None = Field(None, max_length=2000)


class WorkOrderComplete(_Input):
    completion_notes: str = Field(..., min_length=1, max_length=5000)
    actual_cost: Money | None = None
    attachments: list[WorkOrderAttachment] = Field(default_factory=list)


class WorkOrderVerify(_Input):
    rating: int = Field(..., ge=MIN_CUSTOMER_RATING, le=MAX_CUSTOMER_RATING)
    feedback: str | None = Field(None, max_length=2000)


class WorkOrderNote(_Input):
    """Free-text note for start/await-parts/resume transitions."""

    notes: str | None = Field(None, max_length=2000)


class WorkOrderReason(_Input):
    """Mandatory reason for cancel, escalate and SLA pause."""

    reason: str = Field(..., min_length=1, max_length=2000)


# =============================================================================
# Read models
# =============================================================================


class SLAStatus(BaseModel):
    """Point-in-time SLA view; computing it never mutates the work order."""

    work_order_id: WorkOrderId
    evaluated_at: datetime
    is_paused: bool
    response_due_at: datetime
    resolution_due_at: datetime
    response_breached: bool
    resolution_breached: bool
    response_minutes_remaining: int
    resolution_minutes_remaining: int
    escalation_level: int
    escalation_due: bool
