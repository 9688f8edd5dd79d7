"""Pure state-machine tests: dispatch table legality, timeline growth and field effects."""

from datetime import datetime, timedelta, timezone

import pytest

from maintenance_engine.db.enums import (
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderSource,
    WorkOrderStatus,
)
from maintenance_engine.schemas.work_order import (
    WorkOrder,
    WorkOrderAssign,
    WorkOrderComplete,
    WorkOrderCreate,
    WorkOrderSchedule,
    WorkOrderTriage,
    WorkOrderVerify,
)
from maintenance_engine.services import sla_clock
from maintenance_engine.services import work_order_state_machine as sm
from maintenance_engine.services.errors import (
    InvalidTransitionError,
    MaintenanceErrorCode,
    SLAStateError,
)
from maintenance_engine.services.work_order_state_machine import WorkOrderOperation as Op
from maintenance_engine.types import TenantId, UserId, WorkOrderId

NOW = datetime(2025, 6, 2, 8, 0, tzinfo=timezone.utc)
USER = UserId("user-1")
SLA_TABLE = sla_clock.default_sla_table()


def _new_work_order(priority: WorkOrderPriority = WorkOrderPriority.MEDIUM) -> WorkOrder:
    data = WorkOrderCreate(
        property_id="prop-1",
        priority=priority,
        category=WorkOrderCategory.ELECTRICAL,
        source=WorkOrderSource.INSPECTION,
        title="Flickering hallway lights",
        description="Lights flicker on the second floor hallway.",
    )
    return sm.create_work_order(
        work_order_id=WorkOrderId("wo-1"),
        tenant_id=TenantId("tenant-1"),
        work_order_number="WO-2025-0001",
        data=data,
        created_by=USER,
        now=NOW,
        window=SLA_TABLE[priority],
    )


def _in_status(status: WorkOrderStatus) -> WorkOrder:
    return _new_work_order().model_copy(update={"status": status})


STATUS_OPERATIONS = {
    Op.TRIAGE: lambda wo, now: sm.triage(wo, WorkOrderTriage(), USER, now, SLA_TABLE),
    Op.ASSIGN: lambda wo, now: sm.assign(wo, WorkOrderAssign(assigned_to_user_id="tech-1"), USER, now),
    Op.SCHEDULE: lambda wo, now: sm.schedule(
        wo,
        WorkOrderSchedule(scheduled_date=now + timedelta(days=1), scheduled_time_slot="09:00-12:00"),
        USER,
        now,
    ),
    Op.START_WORK: lambda wo, now: sm.start_work(wo, None, USER, now),
    Op.AWAIT_PARTS: lambda wo, now: sm.await_parts(wo, None, USER, now),
    Op.RESUME_WORK: lambda wo, now: sm.resume_work(wo, None, USER, now),
    Op.COMPLETE: lambda wo, now: sm.complete(wo, WorkOrderComplete(completion_notes="Fixed"), USER, now),
    Op.VERIFY: lambda wo, now: sm.verify(wo, WorkOrderVerify(rating=5), USER, now),
    Op.CANCEL: lambda wo, now: sm.cancel(wo, "Duplicate request", USER, now),
}

ILLEGAL_PAIRS = [
    (op, status)
    for op in STATUS_OPERATIONS
    for status in WorkOrderStatus
    if not sm.can_transition(status, op)
]
LEGAL_PAIRS = [
    (op, status)
    for op in STATUS_OPERATIONS
    for status in WorkOrderStatus
    if sm.can_transition(status, op)
]


def _pair_id(pair) -> str:
    op, status = pair
    return f"{op.value}-from-{status.value}"


# =============================================================================
# Dispatch table
# =============================================================================

def test_every_operation_has_a_rule():
    assert set(sm.TRANSITIONS) == set(Op)


OVERLAYS = {Op.ESCALATE, Op.PAUSE_SLA, Op.RESUME_SLA}


@pytest.mark.parametrize(
    "status,allowed",
    [
        (WorkOrderStatus.COMPLETED, {Op.VERIFY}),
        (WorkOrderStatus.VERIFIED, set()),
        (WorkOrderStatus.CANCELLED, set()),
    ],
)
def test_terminal_statuses_accept_only_overlays_and_sign_off(status, allowed):
    legal = {op for op in Op if op not in OVERLAYS and sm.can_transition(status, op)}

    assert legal == allowed


@pytest.mark.parametrize("pair", ILLEGAL_PAIRS, ids=[_pair_id(p) for p in ILLEGAL_PAIRS])
def test_illegal_transition_raises_and_leaves_input_untouched(pair):
    op, status = pair
    work_order = _in_status(status)
    snapshot = work_order.model_dump()

    with pytest.raises(InvalidTransitionError) as exc_info:
        STATUS_OPERATIONS[op](work_order, NOW + timedelta(minutes=5))

    assert exc_info.value.code == MaintenanceErrorCode.INVALID_STATUS_TRANSITION
    assert status.value in exc_info.value.message
    assert work_order.model_dump() == snapshot


@pytest.mark.parametrize("pair", LEGAL_PAIRS, ids=[_pair_id(p) for p in LEGAL_PAIRS])
def test_legal_transition_reaches_target_and_appends_one_entry(pair):
    op, status = pair
    work_order = _in_status(status)
    later = NOW + timedelta(minutes=5)

    updated = STATUS_OPERATIONS[op](work_order, later)

    assert updated.status == sm.TRANSITIONS[op].target
    assert len(updated.timeline) == len(work_order.timeline) + 1
    assert updated.timeline[-1].status == updated.status
    assert updated.timeline[-1].timestamp == later
    assert updated.updated_at == later
    assert updated.updated_by == USER
    assert updated.work_order_number == work_order.work_order_number


# =============================================================================
# Creation and numbering
# =============================================================================

def test_create_seeds_timeline_and_sla():
    work_order = _new_work_order(WorkOrderPriority.EMERGENCY)

    assert work_order.status == WorkOrderStatus.SUBMITTED
    assert len(work_order.timeline) == 1
    assert work_order.timeline[0].action == "Work order submitted"
    assert work_order.sla.response_due_at == NOW + timedelta(minutes=30)
    assert work_order.sla.resolution_due_at == NOW + timedelta(minutes=240)


def test_number_formatting():
    assert sm.format_work_order_number(2025, 7) == "WO-2025-0007"
    assert sm.format_work_order_number(2025, 12345) == "WO-2025-12345"
    assert sm.format_vendor_code(42) == "VND-0042"


# =============================================================================
# Field effects
# =============================================================================

def test_triage_records_response_and_rebases_on_priority_change():
    work_order = _new_work_order(WorkOrderPriority.LOW)
    later = NOW + timedelta(minutes=20)

    triaged = sm.triage(
        work_order,
        WorkOrderTriage(priority=WorkOrderPriority.HIGH, category=WorkOrderCategory.HVAC, notes="Urgent"),
        USER,
        later,
        SLA_TABLE,
    )

    assert triaged.priority == WorkOrderPriority.HIGH
    assert triaged.category == WorkOrderCategory.HVAC
    assert triaged.sla.responded_at == later
    assert triaged.sla.response_due_at == NOW + timedelta(minutes=120)
    assert triaged.sla.resolution_due_at == NOW + timedelta(minutes=1440)
    assert "low → high" in triaged.timeline[-1].action


def test_triage_rebase_keeps_accumulated_pause():
    work_order = _new_work_order(WorkOrderPriority.LOW)
    paused = sm.pause_sla(work_order, "Tenant away", USER, NOW)
    resumed = sm.resume_sla(paused, USER, NOW + timedelta(minutes=90))

    triaged = sm.triage(
        resumed, WorkOrderTriage(priority=WorkOrderPriority.MEDIUM), USER, NOW, SLA_TABLE
    )

    assert triaged.sla.resolution_due_at == NOW + timedelta(minutes=4320 + 90)


def test_assign_keeps_first_response_time():
    work_order = _new_work_order()
    triaged = sm.triage(work_order, WorkOrderTriage(), USER, NOW + timedelta(minutes=5), SLA_TABLE)

    assigned = sm.assign(
        triaged,
        WorkOrderAssign(vendor_id="ven-1"),
        USER,
        NOW + timedelta(minutes=30),
        vendor_name="Bright Sparks",
    )

    assert assigned.vendor_id == "ven-1"
    assert assigned.sla.responded_at == NOW + timedelta(minutes=5)
    assert assigned.timeline[-1].action == "Assigned to vendor Bright Sparks"


def test_complete_closes_open_pause_and_flags_late_resolution():
    work_order = _in_status(WorkOrderStatus.IN_PROGRESS)
    paused = sm.pause_sla(work_order, "Parts on order", USER, NOW + timedelta(minutes=10))

    done_at = NOW + timedelta(minutes=10 + 60)
    completed = sm.complete(paused, WorkOrderComplete(completion_notes="Replaced fuse"), USER, done_at)

    assert completed.sla.paused_at is None
    assert completed.sla.paused_duration_minutes == pytest.approx(60)
    assert completed.sla.resolved_at == done_at
    assert completed.sla.resolution_breached is False
    assert completed.completion_notes == "Replaced fuse"

    late = sm.complete(
        work_order,
        WorkOrderComplete(completion_notes="Late fix"),
        USER,
        work_order.sla.resolution_due_at + timedelta(minutes=1),
    )
    assert late.sla.resolution_breached is True


def test_complete_never_clears_breach_flag():
    work_order = _in_status(WorkOrderStatus.IN_PROGRESS)
    flagged = work_order.model_copy(
        update={"sla": work_order.sla.model_copy(update={"resolution_breached": True})}
    )

    completed = sm.complete(flagged, WorkOrderComplete(completion_notes="Done"), USER, NOW)

    assert completed.sla.resolution_breached is True


def test_verify_records_rating_and_feedback():
    work_order = _in_status(WorkOrderStatus.COMPLETED)

    verified = sm.verify(work_order, WorkOrderVerify(rating=4, feedback="Quick job"), USER, NOW)

    assert verified.customer_rating == 4
    assert verified.customer_feedback == "Quick job"
    assert verified.timeline[-1].action == "Customer verified completion (Rating: 4/5)"


def test_cancel_stores_reason_as_completion_notes():
    cancelled = sm.cancel(_new_work_order(), "Tenant fixed it", USER, NOW)

    assert cancelled.status == WorkOrderStatus.CANCELLED
    assert cancelled.completion_notes == "Tenant fixed it"


@pytest.mark.parametrize("status", list(WorkOrderStatus))
def test_escalate_is_an_overlay(status):
    work_order = _in_status(status)

    once = sm.escalate(work_order, "No response", USER, NOW)
    twice = sm.escalate(once, "Still no response", USER, NOW + timedelta(hours=1))

    assert once.status == status
    assert twice.status == status
    assert twice.sla.escalation_level == 2
    assert twice.sla.escalated_at == NOW
    assert len(twice.timeline) == len(work_order.timeline) + 2
    assert twice.timeline[-1].action == "Escalated (Level 2)"


def test_pause_and_resume_sla_through_state_machine():
    work_order = _new_work_order()

    paused = sm.pause_sla(work_order, "Waiting on tenant", USER, NOW)
    with pytest.raises(SLAStateError) as exc_info:
        sm.pause_sla(paused, "again", USER, NOW)
    assert exc_info.value.code == MaintenanceErrorCode.SLA_ALREADY_PAUSED

    resumed = sm.resume_sla(paused, USER, NOW + timedelta(minutes=45))
    assert resumed.timeline[-1].action == "SLA resumed (paused for 45 minutes)"
    assert resumed.status == work_order.status
    assert len(resumed.timeline) == 3

    with pytest.raises(SLAStateError) as exc_info:
        sm.resume_sla(resumed, USER, NOW)
    assert exc_info.value.code == MaintenanceErrorCode.SLA_NOT_PAUSED


def test_full_happy_path_timeline_length():
    work_order = _new_work_order()
    steps = [
        Op.TRIAGE,
        Op.ASSIGN,
        Op.SCHEDULE,
        Op.START_WORK,
        Op.AWAIT_PARTS,
        Op.RESUME_WORK,
        Op.COMPLETE,
        Op.VERIFY,
    ]

    current = work_order
    for i, op in enumerate(steps, start=1):
        current = STATUS_OPERATIONS[op](current, NOW + timedelta(minutes=i))

    assert current.status == WorkOrderStatus.VERIFIED
    assert len(current.timeline) == 1 + len(steps)
    assert [e.status for e in current.timeline] == [
        WorkOrderStatus.SUBMITTED,
        WorkOrderStatus.TRIAGED,
        WorkOrderStatus.ASSIGNED,
        WorkOrderStatus.SCHEDULED,
        WorkOrderStatus.IN_PROGRESS,
        WorkOrderStatus.PENDING_PARTS,
        WorkOrderStatus.IN_PROGRESS,
        WorkOrderStatus.COMPLETED,
        WorkOrderStatus.VERIFIED,
    ]
