"""
Maintenance orchestration service.

Every write operation follows the same path: load the work order through the
repository, run the pure state-machine transition (which checks legality
against the dispatch table), persist, then publish domain events. Failures
come back as ``Err`` results; repository and event-bus exceptions propagate.

Repositories, the event bus, settings and the clock are injected so the
service holds no module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from maintenance_engine.core.config import Settings, settings as default_settings
from maintenance_engine.core.constants import SYSTEM_USER_ID
from maintenance_engine.core.structured_logging import build_log_context
from maintenance_engine.db.enums import (
    MaintenanceEventType,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
)
from maintenance_engine.repositories.base import (
    DuplicateRecordError,
    VendorRepository,
    WorkOrderRepository,
)
from maintenance_engine.schemas.events import (
    EventPayload,
    SLABreachedPayload,
    WorkOrderAssignedPayload,
    WorkOrderCancelledPayload,
    WorkOrderCompletedPayload,
    WorkOrderCreatedPayload,
    WorkOrderEscalatedPayload,
    WorkOrderVerifiedPayload,
)
from maintenance_engine.schemas.vendor import Vendor, VendorCreate, VendorUpdate
from maintenance_engine.schemas.work_order import (
    SLAStatus,
    WorkOrder,
    WorkOrderAssign,
    WorkOrderComplete,
    WorkOrderCreate,
    WorkOrderNote,
    WorkOrderReason,
    WorkOrderSchedule,
    WorkOrderTriage,
    WorkOrderVerify,
)
from maintenance_engine.services import sla_clock, vendor_scoring
from maintenance_engine.services import work_order_state_machine as sm
from maintenance_engine.services.errors import (
    Err,
    MaintenanceDomainError,
    MaintenanceErrorCode,
    Ok,
    Result,
    err,
)
from maintenance_engine.services.event_bus import EventBus, build_envelope
from maintenance_engine.types import (
    CustomerId,
    PropertyId,
    TenantId,
    UnitId,
    UserId,
    VendorId,
    WorkOrderId,
)
from maintenance_engine.utils.datetime_utils import now_utc
from maintenance_engine.utils.pagination import PaginatedResponse, PaginationParams

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Op = sm.WorkOrderOperation


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one SLA breach sweep over a tenant."""

    scanned: int = 0
    breached_work_orders: int = 0
    events_published: int = 0


@dataclass(frozen=True)
class WorkOrderStats:
    total: int
    open: int
    pending_approval: int
    sla_breached: int
    by_status: dict[WorkOrderStatus, int] = field(default_factory=dict)


def _new_correlation_id() -> str:
    return f"corr_{uuid4().hex}"


class MaintenanceService:
    def __init__(
        self,
        work_orders: WorkOrderRepository,
        vendors: VendorRepository,
        event_bus: EventBus,
        *,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._work_orders = work_orders
        self._vendors = vendors
        self._event_bus = event_bus
        self._settings = settings or default_settings
        self._clock = clock or now_utc
        self._sla_table = sla_clock.default_sla_table(self._settings)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _parse(
        model: type[ModelT], data: ModelT | dict[str, Any], code: MaintenanceErrorCode
    ) -> ModelT | Err:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in e['loc']) or 'input'}: {e['msg']}" for e in exc.errors()
            )
            return err(code, messages)

    async def _load_work_order(
        self, tenant_id: TenantId, work_order_id: WorkOrderId
    ) -> WorkOrder | Err:
        work_order = await self._work_orders.find_by_id(work_order_id, tenant_id)
        if work_order is None:
            return err(
                MaintenanceErrorCode.WORK_ORDER_NOT_FOUND, f"Work order {work_order_id} not found"
            )
        return work_order

    async def _load_vendor(self, tenant_id: TenantId, vendor_id: VendorId) -> Vendor | Err:
        vendor = await self._vendors.find_by_id(vendor_id, tenant_id)
        if vendor is None:
            return err(MaintenanceErrorCode.VENDOR_NOT_FOUND, f"Vendor {vendor_id} not found")
        return vendor

    async def _transition(
        self,
        tenant_id: TenantId,
        work_order: WorkOrder,
        operation: sm.WorkOrderOperation,
        apply: Callable[[WorkOrder, datetime], WorkOrder],
        *,
        user_id: UserId,
        correlation_id: str,
    ) -> WorkOrder | Err:
        """Run a pure transition and persist it. Nothing is written on failure."""
        context = build_log_context(
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=user_id,
            work_order_id=work_order.id,
            operation=operation.value,
        )
        try:
            updated = apply(work_order, self._clock())
        except MaintenanceDomainError as exc:
            logger.info(
                "Rejected %s on %s: %s", operation.value, work_order.work_order_number, exc.message,
                extra=context,
            )
            return exc.to_result()

        await self._work_orders.update(updated)
        logger.info(
            "Work order %s %s (%s -> %s)",
            updated.work_order_number,
            operation.value,
            work_order.status.value,
            updated.status.value,
            extra=context,
        )
        return updated

    async def _publish(
        self,
        event_type: MaintenanceEventType,
        payload: EventPayload,
        *,
        tenant_id: TenantId,
        correlation_id: str,
        user_id: UserId | None = None,
    ) -> None:
        envelope = build_envelope(
            event_type=event_type,
            payload=payload,
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            occurred_at=self._clock(),
            metadata={"user_id": user_id} if user_id else None,
        )
        await self._event_bus.publish(envelope)

    async def _simple_transition(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        operation: sm.WorkOrderOperation,
        apply: Callable[[WorkOrder, datetime], WorkOrder],
        acting_user_id: UserId,
        correlation_id: str,
    ) -> Result[WorkOrder]:
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        updated = await self._transition(
            tenant_id, loaded, operation, apply, user_id=acting_user_id, correlation_id=correlation_id
        )
        if isinstance(updated, Err):
            return updated
        return Ok(updated)

    # =========================================================================
    # Lifecycle operations
    # =========================================================================

    async def create_work_order(
        self,
        tenant_id: TenantId,
        data: WorkOrderCreate | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderCreate, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed

        now = self._clock()
        window = parsed.sla_config or self._sla_table[parsed.priority]
        sequence = await self._work_orders.get_next_sequence(tenant_id)
        number = sm.format_work_order_number(now.year, sequence)
        if await self._work_orders.find_by_work_order_number(number, tenant_id) is not None:
            return err(
                MaintenanceErrorCode.WORK_ORDER_NUMBER_EXISTS, f"Work order number {number} exists"
            )

        work_order = sm.create_work_order(
            work_order_id=WorkOrderId(f"wo_{uuid4().hex}"),
            tenant_id=tenant_id,
            work_order_number=number,
            data=parsed,
            created_by=acting_user_id,
            now=now,
            window=window,
        )
        try:
            await self._work_orders.create(work_order)
        except DuplicateRecordError as exc:
            return err(MaintenanceErrorCode.WORK_ORDER_NUMBER_EXISTS, str(exc))

        logger.info(
            "Created work order %s priority=%s",
            number,
            work_order.priority.value,
            extra=build_log_context(
                tenant_id=tenant_id,
                correlation_id=correlation_id,
                user_id=acting_user_id,
                work_order_id=work_order.id,
                operation="create",
            ),
        )
        await self._publish(
            MaintenanceEventType.WORK_ORDER_CREATED,
            WorkOrderCreatedPayload(
                work_order_id=work_order.id,
                work_order_number=number,
                property_id=work_order.property_id,
                unit_id=work_order.unit_id,
                priority=work_order.priority,
                category=work_order.category,
                title=work_order.title,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return Ok(work_order)

    async def triage(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderTriage | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderTriage, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.TRIAGE,
            lambda wo, now: sm.triage(wo, parsed, acting_user_id, now, self._sla_table),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def assign(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderAssign | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderAssign, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        if not sm.can_transition(loaded.status, Op.ASSIGN):
            return err(
                MaintenanceErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot assign work order in {loaded.status.value} status",
            )

        vendor: Vendor | None = None
        if parsed.vendor_id:
            found = await self._load_vendor(tenant_id, parsed.vendor_id)
            if isinstance(found, Err):
                return found
            if not found.is_assignable:
                return err(
                    MaintenanceErrorCode.VENDOR_NOT_AVAILABLE,
                    f"Vendor {found.vendor_code} is {found.status.value}",
                )
            vendor = found

        return await self._assign_loaded(
            tenant_id, loaded, parsed, vendor, acting_user_id, correlation_id
        )

    async def _assign_loaded(
        self,
        tenant_id: TenantId,
        work_order: WorkOrder,
        data: WorkOrderAssign,
        vendor: Vendor | None,
        acting_user_id: UserId,
        correlation_id: str,
        *,
        score: float | None = None,
    ) -> Result[WorkOrder]:
        vendor_name = vendor.company_name if vendor else None
        updated = await self._transition(
            tenant_id,
            work_order,
            Op.ASSIGN,
            lambda wo, now: sm.assign(wo, data, acting_user_id, now, vendor_name=vendor_name),
            user_id=acting_user_id,
            correlation_id=correlation_id,
        )
        if isinstance(updated, Err):
            return updated
        await self._publish(
            MaintenanceEventType.WORK_ORDER_ASSIGNED,
            WorkOrderAssignedPayload(
                work_order_id=updated.id,
                work_order_number=updated.work_order_number,
                vendor_id=updated.vendor_id,
                assigned_to_user_id=updated.assigned_to_user_id,
                auto_assigned=score is not None,
                score=score,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return Ok(updated)

    async def auto_assign(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        """Assign the highest-scoring active vendor for the work order's category."""
        correlation_id = correlation_id or _new_correlation_id()
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        if not sm.can_transition(loaded.status, Op.ASSIGN):
            return err(
                MaintenanceErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot assign work order in {loaded.status.value} status",
            )

        candidates = await self._vendors.find_available(
            loaded.category, loaded.priority == WorkOrderPriority.EMERGENCY, tenant_id
        )
        best = vendor_scoring.select_best_vendor(candidates, loaded)
        if best is None:
            return err(
                MaintenanceErrorCode.NO_AVAILABLE_VENDOR,
                f"No available vendor for {loaded.category.value}",
            )

        logger.info(
            "Auto-assign picked %s score=%.1f from %d candidates",
            best.vendor.vendor_code,
            best.score,
            len(candidates),
            extra=build_log_context(
                tenant_id=tenant_id,
                correlation_id=correlation_id,
                work_order_id=loaded.id,
                vendor_id=best.vendor.id,
                operation="auto_assign",
            ),
        )
        data = WorkOrderAssign(
            vendor_id=best.vendor.id,
            notes=f"Auto-assigned to {best.vendor.company_name} (score {best.score:.1f})",
        )
        return await self._assign_loaded(
            tenant_id, loaded, data, best.vendor, acting_user_id, correlation_id, score=best.score
        )

    async def schedule(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderSchedule | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderSchedule, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.SCHEDULE,
            lambda wo, now: sm.schedule(wo, parsed, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def start_work(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderNote | dict[str, Any] | None,
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderNote, data or {}, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.START_WORK,
            lambda wo, now: sm.start_work(wo, parsed.notes, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def await_parts(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderNote | dict[str, Any] | None,
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderNote, data or {}, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.AWAIT_PARTS,
            lambda wo, now: sm.await_parts(wo, parsed.notes, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def resume_work(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderNote | dict[str, Any] | None,
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderNote, data or {}, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.RESUME_WORK,
            lambda wo, now: sm.resume_work(wo, parsed.notes, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def complete(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderComplete | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        """Complete the work, then fold the job into the assigned vendor's metrics."""
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderComplete, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        result = await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.COMPLETE,
            lambda wo, now: sm.complete(wo, parsed, acting_user_id, now),
            acting_user_id,
            correlation_id,
        )
        if isinstance(result, Err):
            return result
        work_order = result.value

        if work_order.vendor_id:
            vendor = await self._vendors.find_by_id(work_order.vendor_id, tenant_id)
            if vendor is not None:
                await self._vendors.update(
                    vendor.model_copy(
                        update={
                            "performance_metrics": vendor_scoring.record_completion(
                                vendor.performance_metrics, work_order
                            ),
                            "updated_at": self._clock(),
                            "updated_by": acting_user_id,
                        }
                    )
                )
            else:
                logger.warning(
                    "Vendor %s missing; metrics not updated",
                    work_order.vendor_id,
                    extra=build_log_context(
                        tenant_id=tenant_id,
                        correlation_id=correlation_id,
                        work_order_id=work_order.id,
                        operation="complete",
                    ),
                )

        await self._publish(
            MaintenanceEventType.WORK_ORDER_COMPLETED,
            WorkOrderCompletedPayload(
                work_order_id=work_order.id,
                work_order_number=work_order.work_order_number,
                completion_notes=parsed.completion_notes,
                actual_cost=work_order.actual_cost,
                resolution_time_minutes=round(
                    sla_clock.resolution_time_minutes(work_order.sla) or 0
                ),
                sla_breached=work_order.sla.resolution_breached,
                vendor_id=work_order.vendor_id,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return Ok(work_order)

    async def verify(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderVerify | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        """Record the customer's sign-off and fold the rating into the vendor's average."""
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderVerify, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        result = await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.VERIFY,
            lambda wo, now: sm.verify(wo, parsed, acting_user_id, now),
            acting_user_id,
            correlation_id,
        )
        if isinstance(result, Err):
            return result
        work_order = result.value

        if work_order.vendor_id:
            vendor = await self._vendors.find_by_id(work_order.vendor_id, tenant_id)
            if vendor is not None:
                await self._vendors.update(
                    vendor.model_copy(
                        update={
                            "performance_metrics": vendor_scoring.apply_rating(
                                vendor.performance_metrics, parsed.rating
                            ),
                            "updated_at": self._clock(),
                            "updated_by": acting_user_id,
                        }
                    )
                )

        await self._publish(
            MaintenanceEventType.WORK_ORDER_VERIFIED,
            WorkOrderVerifiedPayload(
                work_order_id=work_order.id,
                work_order_number=work_order.work_order_number,
                rating=parsed.rating,
                vendor_id=work_order.vendor_id,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return Ok(work_order)

    async def cancel(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderReason | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderReason, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        updated = await self._transition(
            tenant_id,
            loaded,
            Op.CANCEL,
            lambda wo, now: sm.cancel(wo, parsed.reason, acting_user_id, now),
            user_id=acting_user_id,
            correlation_id=correlation_id,
        )
        if isinstance(updated, Err):
            return updated
        await self._publish(
            MaintenanceEventType.WORK_ORDER_CANCELLED,
            WorkOrderCancelledPayload(
                work_order_id=updated.id,
                work_order_number=updated.work_order_number,
                reason=parsed.reason,
                previous_status=loaded.status,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return Ok(updated)

    async def escalate(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderReason | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        correlation_id = correlation_id or _new_correlation_id()
        parsed = self._parse(WorkOrderReason, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        result = await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.ESCALATE,
            lambda wo, now: sm.escalate(wo, parsed.reason, acting_user_id, now),
            acting_user_id,
            correlation_id,
        )
        if isinstance(result, Err):
            return result
        work_order = result.value
        await self._publish(
            MaintenanceEventType.WORK_ORDER_ESCALATED,
            WorkOrderEscalatedPayload(
                work_order_id=work_order.id,
                work_order_number=work_order.work_order_number,
                reason=parsed.reason,
                escalation_level=work_order.sla.escalation_level,
                status=work_order.status,
                priority=work_order.priority,
            ),
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            user_id=acting_user_id,
        )
        return result

    async def pause_sla(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        data: WorkOrderReason | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        parsed = self._parse(WorkOrderReason, data, MaintenanceErrorCode.INVALID_WORK_ORDER_DATA)
        if isinstance(parsed, Err):
            return parsed
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.PAUSE_SLA,
            lambda wo, now: sm.pause_sla(wo, parsed.reason, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    async def resume_sla(
        self,
        tenant_id: TenantId,
        work_order_id: WorkOrderId,
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[WorkOrder]:
        return await self._simple_transition(
            tenant_id,
            work_order_id,
            Op.RESUME_SLA,
            lambda wo, now: sm.resume_sla(wo, acting_user_id, now),
            acting_user_id,
            correlation_id or _new_correlation_id(),
        )

    # =========================================================================
    # SLA sweep
    # =========================================================================

    async def check_sla_breaches(
        self, tenant_id: TenantId, correlation_id: str | None = None
    ) -> Result[SweepResult]:
        """
        Flag newly crossed SLA deadlines across a tenant's open work orders.

        Each flag flips at most once; a second run with no time change writes
        nothing and publishes nothing.
        """
        correlation_id = correlation_id or _new_correlation_id()
        context = build_log_context(
            tenant_id=tenant_id, correlation_id=correlation_id, operation="sla_sweep"
        )
        now = self._clock()
        scanned = breached = published = 0

        pagination = PaginationParams(page=1, per_page=self._settings.SLA_SWEEP_BATCH_SIZE)
        while True:
            page = await self._work_orders.find_many(tenant_id, pagination)
            for work_order in page.items:
                if work_order.is_terminal:
                    continue
                scanned += 1
                crossed = sla_clock.newly_breached(work_order.sla, now)
                if not crossed:
                    continue

                await self._work_orders.update(
                    work_order.model_copy(
                        update={"sla": sla_clock.mark_breached(work_order.sla, crossed)}
                    )
                )
                breached += 1
                for breach_type in crossed:
                    await self._publish(
                        MaintenanceEventType.SLA_BREACHED,
                        SLABreachedPayload(
                            work_order_id=work_order.id,
                            work_order_number=work_order.work_order_number,
                            breach_type=breach_type,
                            priority=work_order.priority,
                            minutes_overdue=sla_clock.minutes_overdue(
                                sla_clock.due_at(work_order.sla, breach_type), now
                            ),
                        ),
                        tenant_id=tenant_id,
                        correlation_id=correlation_id,
                        user_id=SYSTEM_USER_ID,
                    )
                    published += 1
                logger.warning(
                    "SLA breached on %s: %s",
                    work_order.work_order_number,
                    ", ".join(b.value for b in crossed),
                    extra=context,
                )
            if not page.has_more:
                break
            pagination = pagination.next()

        result = SweepResult(
            scanned=scanned, breached_work_orders=breached, events_published=published
        )
        logger.info(
            "SLA sweep scanned=%d breached=%d events=%d",
            scanned,
            breached,
            published,
            extra=context,
        )
        return Ok(result)

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_work_order(
        self, tenant_id: TenantId, work_order_id: WorkOrderId
    ) -> Result[WorkOrder]:
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        return Ok(loaded)

    async def get_work_order_by_number(
        self, tenant_id: TenantId, work_order_number: str
    ) -> Result[WorkOrder]:
        work_order = await self._work_orders.find_by_work_order_number(work_order_number, tenant_id)
        if work_order is None:
            return err(
                MaintenanceErrorCode.WORK_ORDER_NOT_FOUND,
                f"Work order {work_order_number} not found",
            )
        return Ok(work_order)

    async def list_work_orders(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_many(tenant_id, pagination)

    async def list_work_orders_by_status(
        self, tenant_id: TenantId, status: WorkOrderStatus, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_status(status, tenant_id, pagination)

    async def list_work_orders_by_property(
        self, tenant_id: TenantId, property_id: PropertyId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_property(property_id, tenant_id, pagination)

    async def list_work_orders_by_unit(
        self, tenant_id: TenantId, unit_id: UnitId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_unit(unit_id, tenant_id, pagination)

    async def list_work_orders_by_customer(
        self, tenant_id: TenantId, customer_id: CustomerId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_customer(customer_id, tenant_id, pagination)

    async def list_work_orders_by_vendor(
        self, tenant_id: TenantId, vendor_id: VendorId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_vendor(vendor_id, tenant_id, pagination)

    async def list_work_orders_by_priority(
        self,
        tenant_id: TenantId,
        priority: WorkOrderPriority,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResponse[WorkOrder]:
        return await self._work_orders.find_by_priority(priority, tenant_id, pagination)

    async def list_scheduled_for_date(self, tenant_id: TenantId, day: date) -> list[WorkOrder]:
        return await self._work_orders.find_scheduled_for_date(day, tenant_id)

    async def list_sla_breached(self, tenant_id: TenantId) -> list[WorkOrder]:
        return await self._work_orders.find_sla_breached(tenant_id)

    async def list_pending_approval(self, tenant_id: TenantId) -> list[WorkOrder]:
        """Completed work orders awaiting customer verification."""
        return await self._work_orders.find_pending_approval(tenant_id)

    async def get_work_order_stats(self, tenant_id: TenantId) -> WorkOrderStats:
        by_status = await self._work_orders.count_by_status(tenant_id)
        pending = await self._work_orders.find_pending_approval(tenant_id)
        breached = await self._work_orders.find_sla_breached(tenant_id)
        return WorkOrderStats(
            total=sum(by_status.values()),
            open=sum(n for status, n in by_status.items() if not status.is_terminal),
            pending_approval=len(pending),
            sla_breached=len(breached),
            by_status=by_status,
        )

    async def get_sla_status(
        self, tenant_id: TenantId, work_order_id: WorkOrderId
    ) -> Result[SLAStatus]:
        """Evaluate the SLA clock at the current time without persisting anything."""
        loaded = await self._load_work_order(tenant_id, work_order_id)
        if isinstance(loaded, Err):
            return loaded
        return Ok(sla_clock.sla_status(loaded, self._clock()))

    # =========================================================================
    # Vendors
    # =========================================================================

    async def create_vendor(
        self,
        tenant_id: TenantId,
        data: VendorCreate | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[Vendor]:
        parsed = self._parse(VendorCreate, data, MaintenanceErrorCode.INVALID_VENDOR_DATA)
        if isinstance(parsed, Err):
            return parsed

        now = self._clock()
        code = sm.format_vendor_code(await self._vendors.get_next_sequence(tenant_id))
        if await self._vendors.find_by_vendor_code(code, tenant_id) is not None:
            return err(MaintenanceErrorCode.VENDOR_CODE_EXISTS, f"Vendor code {code} exists")

        vendor = Vendor(
            id=VendorId(f"ven_{uuid4().hex}"),
            tenant_id=tenant_id,
            vendor_code=code,
            created_at=now,
            updated_at=now,
            created_by=acting_user_id,
            updated_by=acting_user_id,
            **parsed.model_dump(),
        )
        try:
            await self._vendors.create(vendor)
        except DuplicateRecordError as exc:
            return err(MaintenanceErrorCode.VENDOR_CODE_EXISTS, str(exc))

        logger.info(
            "Created vendor %s (%s)",
            code,
            vendor.company_name,
            extra=build_log_context(
                tenant_id=tenant_id,
                correlation_id=correlation_id,
                user_id=acting_user_id,
                vendor_id=vendor.id,
                operation="create_vendor",
            ),
        )
        return Ok(vendor)

    async def update_vendor(
        self,
        tenant_id: TenantId,
        vendor_id: VendorId,
        data: VendorUpdate | dict[str, Any],
        acting_user_id: UserId,
        correlation_id: str | None = None,
    ) -> Result[Vendor]:
        parsed = self._parse(VendorUpdate, data, MaintenanceErrorCode.INVALID_VENDOR_DATA)
        if isinstance(parsed, Err):
            return parsed
        vendor = await self._load_vendor(tenant_id, vendor_id)
        if isinstance(vendor, Err):
            return vendor

        # An explicit null keeps the stored value
        changes = parsed.model_dump(exclude_unset=True, exclude_none=True)
        updated = vendor.model_copy(
            update={
                **{key: getattr(parsed, key) for key in changes},
                "updated_at": self._clock(),
                "updated_by": acting_user_id,
            }
        )
        await self._vendors.update(updated)
        logger.info(
            "Updated vendor %s fields=%s",
            vendor.vendor_code,
            sorted(changes),
            extra=build_log_context(
                tenant_id=tenant_id,
                correlation_id=correlation_id,
                user_id=acting_user_id,
                vendor_id=vendor_id,
                operation="update_vendor",
            ),
        )
        return Ok(updated)

    async def get_vendor(self, tenant_id: TenantId, vendor_id: VendorId) -> Result[Vendor]:
        vendor = await self._load_vendor(tenant_id, vendor_id)
        if isinstance(vendor, Err):
            return vendor
        return Ok(vendor)

    async def get_vendor_by_code(self, tenant_id: TenantId, vendor_code: str) -> Result[Vendor]:
        vendor = await self._vendors.find_by_vendor_code(vendor_code, tenant_id)
        if vendor is None:
            return err(MaintenanceErrorCode.VENDOR_NOT_FOUND, f"Vendor {vendor_code} not found")
        return Ok(vendor)

    async def list_vendors(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[Vendor]:
        return await self._vendors.find_many(tenant_id, pagination)

    async def list_vendors_by_specialization(
        self, tenant_id: TenantId, specialization: WorkOrderCategory
    ) -> list[Vendor]:
        return await self._vendors.find_by_specialization(specialization, tenant_id)

    async def list_preferred_vendors(self, tenant_id: TenantId) -> list[Vendor]:
        return await self._vendors.find_preferred(tenant_id)
