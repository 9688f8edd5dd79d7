"""SLA clock: due-date computation, pause/resume arithmetic and breach predicates.

All functions are pure. ``now`` is always passed in by the caller so the
orchestration service (and tests) control time.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from maintenance_engine.core.config import Settings, settings as default_settings
from maintenance_engine.db.enums import SLABreachType, WorkOrderPriority
from maintenance_engine.schemas.work_order import SLAStatus, SLATracking, SLAWindow, WorkOrder
from maintenance_engine.services.errors import MaintenanceErrorCode, SLAStateError
from maintenance_engine.utils.datetime_utils import minutes_between


def default_sla_table(config: Settings | None = None) -> dict[WorkOrderPriority, SLAWindow]:
    """Build the priority → SLA window table from settings."""
    config = config or default_settings
    table: dict[WorkOrderPriority, SLAWindow] = {}
    for priority in WorkOrderPriority:
        response, resolution, escalation = config.sla_minutes[priority.value]
        table[priority] = SLAWindow(
            response_minutes=response,
            resolution_minutes=resolution,
            escalation_minutes=escalation,
        )
    return table


def start_sla(submitted_at: datetime, window: SLAWindow) -> SLATracking:
    """Start a fresh SLA clock at submission time."""
    return SLATracking(
        config=window,
        submitted_at=submitted_at,
        response_due_at=submitted_at + timedelta(minutes=window.response_minutes),
        resolution_due_at=submitted_at + timedelta(minutes=window.resolution_minutes),
    )


def rebase_sla(sla: SLATracking, window: SLAWindow) -> SLATracking:
    """
    Recompute due dates for a new window (priority change at triage).

    Due dates stay anchored on submission and keep every completed pause
    window, so the shift invariant still holds after re-prioritisation.
    """
    paused = timedelta(minutes=sla.paused_duration_minutes)
    return sla.model_copy(
        update={
            "config": window,
            "response_due_at": sla.submitted_at + timedelta(minutes=window.response_minutes) + paused,
            "resolution_due_at": sla.submitted_at
            + timedelta(minutes=window.resolution_minutes)
            + paused,
        }
    )


def pause_sla(sla: SLATracking, now: datetime, reason: str | None = None) -> SLATracking:
    if sla.paused_at is not None:
        raise SLAStateError("SLA is already paused", MaintenanceErrorCode.SLA_ALREADY_PAUSED)
    return sla.model_copy(update={"paused_at": now, "pause_reason": reason})


def resume_sla(sla: SLATracking, now: datetime) -> tuple[SLATracking, float]:
    """
    Resume a paused clock.

    Returns the updated SLA and the length of the pause window in minutes.
    Both due dates move forward by exactly that window.
    """
    if sla.paused_at is None:
        raise SLAStateError("SLA is not paused", MaintenanceErrorCode.SLA_NOT_PAUSED)
    elapsed = max(now - sla.paused_at, timedelta(0))
    elapsed_minutes = elapsed.total_seconds() / 60
    resumed = sla.model_copy(
        update={
            "paused_at": None,
            "pause_reason": None,
            "paused_duration_minutes": sla.paused_duration_minutes + elapsed_minutes,
            "response_due_at": sla.response_due_at + elapsed,
            "resolution_due_at": sla.resolution_due_at + elapsed,
        }
    )
    return resumed, elapsed_minutes


# =============================================================================
# Breach predicates (read path: never mutate)
# =============================================================================


def is_response_breached(sla: SLATracking, now: datetime) -> bool:
    """True once the response deadline has passed on a running, unanswered clock."""
    if sla.paused_at is not None or sla.responded_at is not None:
        return False
    return now > sla.response_due_at


def is_resolution_breached(sla: SLATracking, now: datetime) -> bool:
    if sla.paused_at is not None or sla.resolved_at is not None:
        return False
    return now > sla.resolution_due_at


def newly_breached(sla: SLATracking, now: datetime) -> list[SLABreachType]:
    """Breach types that have crossed but are not yet flagged on the record."""
    crossed: list[SLABreachType] = []
    if not sla.response_breached and is_response_breached(sla, now):
        crossed.append(SLABreachType.RESPONSE)
    if not sla.resolution_breached and is_resolution_breached(sla, now):
        crossed.append(SLABreachType.RESOLUTION)
    return crossed


def mark_breached(sla: SLATracking, breach_types: list[SLABreachType]) -> SLATracking:
    """Set breach flags. Flags only ever go from False to True."""
    update: dict[str, bool] = {}
    if SLABreachType.RESPONSE in breach_types:
        update["response_breached"] = True
    if SLABreachType.RESOLUTION in breach_types:
        update["resolution_breached"] = True
    return sla.model_copy(update=update) if update else sla


def due_at(sla: SLATracking, breach_type: SLABreachType) -> datetime:
    if breach_type == SLABreachType.RESPONSE:
        return sla.response_due_at
    return sla.resolution_due_at


def minutes_overdue(due: datetime, now: datetime) -> int:
    return max(0, round(minutes_between(due, now)))


def minutes_remaining(due: datetime, now: datetime) -> int:
    return max(0, round(minutes_between(now, due)))


def is_escalation_due(sla: SLATracking, now: datetime) -> bool:
    """Unescalated, running clock past its escalation threshold."""
    if sla.paused_at is not None or sla.escalation_level > 0 or sla.resolved_at is not None:
        return False
    threshold = sla.submitted_at + timedelta(
        minutes=sla.config.escalation_minutes + sla.paused_duration_minutes
    )
    return now > threshold


def resolution_time_minutes(sla: SLATracking) -> float | None:
    """Working minutes from submission to resolution, excluding paused time."""
    if sla.resolved_at is None:
        return None
    return max(0.0, minutes_between(sla.submitted_at, sla.resolved_at) - sla.paused_duration_minutes)


def response_time_minutes(sla: SLATracking) -> float | None:
    if sla.responded_at is None:
        return None
    return max(0.0, minutes_between(sla.submitted_at, sla.responded_at))


def sla_status(work_order: WorkOrder, now: datetime) -> SLAStatus:
    sla = work_order.sla
    response_remaining = (
        0 if sla.responded_at is not None else minutes_remaining(sla.response_due_at, now)
    )
    resolution_remaining = (
        0 if sla.resolved_at is not None else minutes_remaining(sla.resolution_due_at, now)
    )
    return SLAStatus(
        work_order_id=work_order.id,
        evaluated_at=now,
        is_paused=sla.is_paused,
        response_due_at=sla.response_due_at,
        resolution_due_at=sla.resolution_due_at,
        response_breached=sla.response_breached or is_response_breached(sla, now),
        resolution_breached=sla.resolution_breached or is_resolution_breached(sla, now),
        response_minutes_remaining=response_remaining,
        resolution_minutes_remaining=resolution_remaining,
        escalation_level=sla.escalation_level,
        escalation_due=is_escalation_due(sla, now),
    )
