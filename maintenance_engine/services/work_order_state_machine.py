"""Work order lifecycle state machine.

Legal transitions live in a single dispatch table (``TRANSITIONS``). Every
transition function is pure: it checks the table, builds a new immutable
``WorkOrder`` with exactly one appended timeline entry and returns it. Illegal
calls raise ``InvalidTransitionError`` and leave the input untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from maintenance_engine.core.constants import (
    SEQUENCE_PAD_WIDTH,
    VENDOR_CODE_PREFIX,
    WORK_ORDER_NUMBER_PREFIX,
)
from maintenance_engine.db.enums import WorkOrderPriority, WorkOrderStatus
from maintenance_engine.schemas.work_order import (
    SLAWindow,
    TimelineEntry,
    WorkOrder,
    WorkOrderAssign,
    WorkOrderComplete,
    WorkOrderCreate,
    WorkOrderSchedule,
    WorkOrderTriage,
    WorkOrderVerify,
)
from maintenance_engine.services import sla_clock
from maintenance_engine.services.errors import InvalidTransitionError
from maintenance_engine.types import TenantId, UserId, WorkOrderId


class WorkOrderOperation(str, Enum):
    TRIAGE = "triage"
    ASSIGN = "assign"
    SCHEDULE = "schedule"
    START_WORK = "start_work"
    AWAIT_PARTS = "await_parts"
    RESUME_WORK = "resume_work"
    COMPLETE = "complete"
    VERIFY = "verify"
    CANCEL = "cancel"
    ESCALATE = "escalate"
    PAUSE_SLA = "pause_sla"
    RESUME_SLA = "resume_sla"


@dataclass(frozen=True)
class TransitionRule:
    """Source statuses an operation accepts and the status it produces.

    ``allowed_from=None`` accepts every status; ``target=None`` keeps the
    current status (overlay operations such as escalation and SLA pause).
    """

    allowed_from: frozenset[WorkOrderStatus] | None
    target: WorkOrderStatus | None


S = WorkOrderStatus

TRANSITIONS: dict[WorkOrderOperation, TransitionRule] = {
    WorkOrderOperation.TRIAGE: TransitionRule(frozenset({S.SUBMITTED}), S.TRIAGED),
    WorkOrderOperation.ASSIGN: TransitionRule(frozenset({S.SUBMITTED, S.TRIAGED}), S.ASSIGNED),
    WorkOrderOperation.SCHEDULE: TransitionRule(frozenset({S.ASSIGNED}), S.SCHEDULED),
    WorkOrderOperation.START_WORK: TransitionRule(
        frozenset({S.ASSIGNED, S.SCHEDULED}), S.IN_PROGRESS
    ),
    WorkOrderOperation.AWAIT_PARTS: TransitionRule(frozenset({S.IN_PROGRESS}), S.PENDING_PARTS),
    WorkOrderOperation.RESUME_WORK: TransitionRule(frozenset({S.PENDING_PARTS}), S.IN_PROGRESS),
    WorkOrderOperation.COMPLETE: TransitionRule(
        frozenset({S.IN_PROGRESS, S.PENDING_PARTS}), S.COMPLETED
    ),
    WorkOrderOperation.VERIFY: TransitionRule(frozenset({S.COMPLETED}), S.VERIFIED),
    WorkOrderOperation.CANCEL: TransitionRule(
        frozenset(s for s in WorkOrderStatus if not s.is_terminal), S.CANCELLED
    ),
    WorkOrderOperation.ESCALATE: TransitionRule(None, None),
    WorkOrderOperation.PAUSE_SLA: TransitionRule(None, None),
    WorkOrderOperation.RESUME_SLA: TransitionRule(None, None),
}


def can_transition(status: WorkOrderStatus, operation: WorkOrderOperation) -> bool:
    rule = TRANSITIONS[operation]
    return rule.allowed_from is None or status in rule.allowed_from


def ensure_transition(work_order: WorkOrder, operation: WorkOrderOperation) -> WorkOrderStatus:
    """Return the status the operation produces, or raise if it is illegal here."""
    if not can_transition(work_order.status, operation):
        raise InvalidTransitionError(
            f"Cannot {operation.value.replace('_', ' ')} work order in "
            f"{work_order.status.value} status"
        )
    target = TRANSITIONS[operation].target
    return target if target is not None else work_order.status


def _append(
    work_order: WorkOrder,
    *,
    now: datetime,
    user_id: UserId,
    action: str,
    status: WorkOrderStatus,
    notes: str | None = None,
    **changes: Any,
) -> WorkOrder:
    entry = TimelineEntry(
        timestamp=now,
        action=action,
        status=status,
        user_id=user_id,
        notes=notes,
    )
    return work_order.model_copy(
        update={
            **changes,
            "status": status,
            "timeline": [*work_order.timeline, entry],
            "updated_at": now,
            "updated_by": user_id,
        }
    )


def format_work_order_number(year: int, sequence: int) -> str:
    return f"{WORK_ORDER_NUMBER_PREFIX}-{year}-{sequence:0{SEQUENCE_PAD_WIDTH}d}"


def format_vendor_code(sequence: int) -> str:
    return f"{VENDOR_CODE_PREFIX}-{sequence:0{SEQUENCE_PAD_WIDTH}d}"


# =============================================================================
# Transitions
# =============================================================================


def create_work_order(
    work_order_id: WorkOrderId,
    tenant_id: TenantId,
    work_order_number: str,
    data: WorkOrderCreate,
    created_by: UserId,
    now: datetime,
    window: SLAWindow,
) -> WorkOrder:
    """Build a new work order in ``submitted`` status with a seeded timeline."""
    seed = TimelineEntry(
        timestamp=now,
        action="Work order submitted",
        status=WorkOrderStatus.SUBMITTED,
        user_id=created_by,
    )
    return WorkOrder(
        id=work_order_id,
        tenant_id=tenant_id,
        work_order_number=work_order_number,
        property_id=data.property_id,
        unit_id=data.unit_id,
        customer_id=data.customer_id,
        status=WorkOrderStatus.SUBMITTED,
        priority=data.priority,
        category=data.category,
        source=data.source,
        title=data.title,
        description=data.description,
        location=data.location,
        attachments=list(data.attachments),
        estimated_cost=data.estimated_cost,
        requires_entry=data.requires_entry,
        entry_instructions=data.entry_instructions,
        permission_to_enter=data.permission_to_enter,
        sla=sla_clock.start_sla(now, window),
        timeline=[seed],
        created_at=now,
        updated_at=now,
        created_by=created_by,
        updated_by=created_by,
    )


def triage(
    work_order: WorkOrder,
    data: WorkOrderTriage,
    user_id: UserId,
    now: datetime,
    sla_table: dict[WorkOrderPriority, SLAWindow],
) -> WorkOrder:
    """Review and categorise. Triage counts as the first response."""
    status = ensure_transition(work_order, WorkOrderOperation.TRIAGE)
    sla = work_order.sla
    priority = data.priority or work_order.priority
    if priority != work_order.priority:
        sla = sla_clock.rebase_sla(sla, sla_table[priority])
    if sla.responded_at is None:
        sla = sla.model_copy(update={"responded_at": now})

    action = "Work order triaged"
    if priority != work_order.priority:
        action = f"Work order triaged (priority {work_order.priority.value} → {priority.value})"
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=action,
        status=status,
        notes=data.notes,
        priority=priority,
        category=data.category or work_order.category,
        sla=sla,
    )


def assign(
    work_order: WorkOrder,
    data: WorkOrderAssign,
    user_id: UserId,
    now: datetime,
    vendor_name: str | None = None,
) -> WorkOrder:
    """Assign to a vendor and/or technician. Vendor eligibility is checked by the caller."""
    status = ensure_transition(work_order, WorkOrderOperation.ASSIGN)
    sla = work_order.sla
    if sla.responded_at is None:
        sla = sla.model_copy(update={"responded_at": now})
    if data.vendor_id:
        action = f"Assigned to vendor {vendor_name}" if vendor_name else "Assigned to vendor"
    else:
        action = "Assigned to technician"
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=action,
        status=status,
        notes=data.notes,
        vendor_id=data.vendor_id or work_order.vendor_id,
        assigned_to_user_id=data.assigned_to_user_id or work_order.assigned_to_user_id,
        sla=sla,
    )


def schedule(
    work_order: WorkOrder, data: WorkOrderSchedule, user_id: UserId, now: datetime
) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.SCHEDULE)
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=(
            f"Scheduled for {data.scheduled_date.date().isoformat()} "
            f"({data.scheduled_time_slot})"
        ),
        status=status,
        notes=data.notes,
        scheduled_date=data.scheduled_date,
        scheduled_time_slot=data.scheduled_time_slot,
    )


def start_work(
    work_order: WorkOrder, notes: str | None, user_id: UserId, now: datetime
) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.START_WORK)
    return _append(
        work_order, now=now, user_id=user_id, action="Work started", status=status, notes=notes
    )


def await_parts(
    work_order: WorkOrder, notes: str | None, user_id: UserId, now: datetime
) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.AWAIT_PARTS)
    return _append(
        work_order, now=now, user_id=user_id, action="Waiting for parts", status=status, notes=notes
    )


def resume_work(
    work_order: WorkOrder, notes: str | None, user_id: UserId, now: datetime
) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.RESUME_WORK)
    return _append(
        work_order, now=now, user_id=user_id, action="Work resumed", status=status, notes=notes
    )


def complete(
    work_order: WorkOrder, data: WorkOrderComplete, user_id: UserId, now: datetime
) -> WorkOrder:
    """
    Finish the work and stop the resolution clock.

    A clock that is still paused is closed first, so the pause window counts
    toward the due date rather than against the vendor.
    """
    status = ensure_transition(work_order, WorkOrderOperation.COMPLETE)
    sla = work_order.sla
    if sla.paused_at is not None:
        sla, _ = sla_clock.resume_sla(sla, now)
    sla = sla.model_copy(
        update={
            "resolved_at": now,
            "resolution_breached": sla.resolution_breached or now > sla.resolution_due_at,
        }
    )
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action="Work completed",
        status=status,
        notes=data.completion_notes,
        completion_notes=data.completion_notes,
        actual_cost=data.actual_cost or work_order.actual_cost,
        attachments=[*work_order.attachments, *data.attachments],
        sla=sla,
    )


def verify(
    work_order: WorkOrder, data: WorkOrderVerify, user_id: UserId, now: datetime
) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.VERIFY)
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=f"Customer verified completion (Rating: {data.rating}/5)",
        status=status,
        notes=data.feedback,
        customer_rating=data.rating,
        customer_feedback=data.feedback,
    )


def cancel(work_order: WorkOrder, reason: str, user_id: UserId, now: datetime) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.CANCEL)
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action="Work order cancelled",
        status=status,
        notes=reason,
        completion_notes=reason,
    )


def escalate(work_order: WorkOrder, reason: str, user_id: UserId, now: datetime) -> WorkOrder:
    """Raise the escalation level. Status is left as it is."""
    status = ensure_transition(work_order, WorkOrderOperation.ESCALATE)
    level = work_order.sla.escalation_level + 1
    sla = work_order.sla.model_copy(
        update={
            "escalation_level": level,
            "escalated_at": work_order.sla.escalated_at or now,
        }
    )
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=f"Escalated (Level {level})",
        status=status,
        notes=reason,
        sla=sla,
    )


def pause_sla(work_order: WorkOrder, reason: str, user_id: UserId, now: datetime) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.PAUSE_SLA)
    sla = sla_clock.pause_sla(work_order.sla, now, reason)
    return _append(
        work_order, now=now, user_id=user_id, action="SLA paused", status=status, notes=reason, sla=sla
    )


def resume_sla(work_order: WorkOrder, user_id: UserId, now: datetime) -> WorkOrder:
    status = ensure_transition(work_order, WorkOrderOperation.RESUME_SLA)
    sla, paused_minutes = sla_clock.resume_sla(work_order.sla, now)
    return _append(
        work_order,
        now=now,
        user_id=user_id,
        action=f"SLA resumed (paused for {round(paused_minutes)} minutes)",
        status=status,
        sla=sla,
    )
