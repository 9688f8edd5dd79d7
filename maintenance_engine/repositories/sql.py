"""SQLAlchemy async repositories.

Each call opens its own session and commits before returning. Domain models
are mapped to rows with ``model_dump`` (nested value objects in JSON mode) and
back with ``model_validate``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from maintenance_engine.db.enums import (
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
)
from maintenance_engine.db.models import (
    MaintenanceSequence,
    MaintenanceVendor,
    MaintenanceWorkOrder,
)
from maintenance_engine.repositories.base import DuplicateRecordError
from maintenance_engine.schemas.vendor import Vendor
from maintenance_engine.schemas.work_order import WorkOrder
from maintenance_engine.types import (
    CustomerId,
    PropertyId,
    TenantId,
    UnitId,
    UserId,
    VendorId,
    WorkOrderId,
)
from maintenance_engine.utils.pagination import PaginatedResponse, PaginationParams

logger = logging.getLogger(__name__)

_ROW_ONLY_COLUMNS = {"response_breached", "resolution_breached", "deleted_at", "deleted_by"}
_WORK_ORDER_JSON_FIELDS = {"attachments", "estimated_cost", "actual_cost", "sla", "timeline"}
_VENDOR_JSON_FIELDS = {
    "specializations",
    "service_areas",
    "contacts",
    "rate_cards",
    "performance_metrics",
}


# =============================================================================
# Row mapping
# =============================================================================


def work_order_to_row_values(work_order: WorkOrder) -> dict[str, Any]:
    values = work_order.model_dump(exclude=_WORK_ORDER_JSON_FIELDS)
    values.update(work_order.model_dump(mode="json", include=_WORK_ORDER_JSON_FIELDS))
    values["response_breached"] = work_order.sla.response_breached
    values["resolution_breached"] = work_order.sla.resolution_breached
    return values


def row_to_work_order(row: MaintenanceWorkOrder) -> WorkOrder:
    data = {
        column.key: getattr(row, column.key)
        for column in MaintenanceWorkOrder.__table__.columns
        if column.key not in _ROW_ONLY_COLUMNS
    }
    return WorkOrder.model_validate(data)


def vendor_to_row_values(vendor: Vendor) -> dict[str, Any]:
    values = vendor.model_dump(exclude=_VENDOR_JSON_FIELDS)
    values.update(vendor.model_dump(mode="json", include=_VENDOR_JSON_FIELDS))
    return values


def row_to_vendor(row: MaintenanceVendor) -> Vendor:
    data = {
        column.key: getattr(row, column.key)
        for column in MaintenanceVendor.__table__.columns
        if column.key not in _ROW_ONLY_COLUMNS
    }
    return Vendor.model_validate(data)


async def _next_sequence(session: AsyncSession, tenant_id: TenantId, name: str) -> int:
    async with session.begin():
        row = await session.get(MaintenanceSequence, (tenant_id, name))
        if row is None:
            row = MaintenanceSequence(tenant_id=tenant_id, name=name, value=0)
            session.add(row)
        row.value += 1
        value = row.value
    return value


# =============================================================================
# Work orders
# =============================================================================


class SqlWorkOrderRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _live(tenant_id: TenantId, *conditions):
        return (
            MaintenanceWorkOrder.tenant_id == tenant_id,
            MaintenanceWorkOrder.deleted_at.is_(None),
            *conditions,
        )

    async def _page(
        self, tenant_id: TenantId, pagination: PaginationParams | None, *conditions
    ) -> PaginatedResponse[WorkOrder]:
        pagination = pagination or PaginationParams()
        where = self._live(tenant_id, *conditions)
        async with self._session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(MaintenanceWorkOrder).where(*where)
            )
            rows = await session.scalars(
                select(MaintenanceWorkOrder)
                .where(*where)
                .order_by(MaintenanceWorkOrder.created_at.desc(), MaintenanceWorkOrder.id.desc())
                .offset(pagination.offset)
                .limit(pagination.per_page)
            )
            items = [row_to_work_order(row) for row in rows]
        return PaginatedResponse.create(items, total or 0, pagination)

    async def _list(self, tenant_id: TenantId, *conditions, order_by=None) -> list[WorkOrder]:
        order = order_by if order_by is not None else (
            MaintenanceWorkOrder.created_at.desc(),
            MaintenanceWorkOrder.id.desc(),
        )
        async with self._session_factory() as session:
            rows = await session.scalars(
                select(MaintenanceWorkOrder).where(*self._live(tenant_id, *conditions)).order_by(*order)
            )
            return [row_to_work_order(row) for row in rows]

    async def _get_row(
        self, session: AsyncSession, work_order_id: str, tenant_id: str
    ) -> MaintenanceWorkOrder | None:
        return await session.scalar(
            select(MaintenanceWorkOrder).where(
                MaintenanceWorkOrder.id == work_order_id, *self._live(tenant_id)
            )
        )

    async def find_by_id(self, work_order_id: WorkOrderId, tenant_id: TenantId) -> WorkOrder | None:
        async with self._session_factory() as session:
            row = await self._get_row(session, work_order_id, tenant_id)
            return row_to_work_order(row) if row else None

    async def find_by_work_order_number(
        self, work_order_number: str, tenant_id: TenantId
    ) -> WorkOrder | None:
        found = await self._list(
            tenant_id, MaintenanceWorkOrder.work_order_number == work_order_number
        )
        return found[0] if found else None

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination)

    async def find_by_property(
        self, property_id: PropertyId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.property_id == property_id)

    async def find_by_unit(
        self, unit_id: UnitId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.unit_id == unit_id)

    async def find_by_customer(
        self, customer_id: CustomerId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.customer_id == customer_id)

    async def find_by_vendor(
        self, vendor_id: VendorId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.vendor_id == vendor_id)

    async def find_by_status(
        self, status: WorkOrderStatus, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.status == status)

    async def find_by_priority(
        self, priority: WorkOrderPriority, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return await self._page(tenant_id, pagination, MaintenanceWorkOrder.priority == priority)

    async def find_sla_breached(self, tenant_id: TenantId) -> list[WorkOrder]:
        return await self._list(
            tenant_id,
            MaintenanceWorkOrder.response_breached.is_(True)
            | MaintenanceWorkOrder.resolution_breached.is_(True),
        )

    async def find_scheduled_for_date(self, day: date, tenant_id: TenantId) -> list[WorkOrder]:
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        return await self._list(
            tenant_id,
            MaintenanceWorkOrder.scheduled_date >= start,
            MaintenanceWorkOrder.scheduled_date < start + timedelta(days=1),
            order_by=(MaintenanceWorkOrder.scheduled_date, MaintenanceWorkOrder.id),
        )

    async def find_pending_approval(self, tenant_id: TenantId) -> list[WorkOrder]:
        return await self._list(tenant_id, MaintenanceWorkOrder.status == WorkOrderStatus.COMPLETED)

    async def create(self, work_order: WorkOrder) -> WorkOrder:
        async with self._session_factory() as session:
            session.add(MaintenanceWorkOrder(**work_order_to_row_values(work_order)))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateRecordError(
                    f"Work order {work_order.id} / {work_order.work_order_number} already exists"
                ) from exc
        return work_order

    async def update(self, work_order: WorkOrder) -> WorkOrder:
        async with self._session_factory() as session:
            row = await self._get_row(session, work_order.id, work_order.tenant_id)
            if row is None:
                raise KeyError(f"Work order {work_order.id} not found for tenant {work_order.tenant_id}")
            for key, value in work_order_to_row_values(work_order).items():
                setattr(row, key, value)
            await session.commit()
        return work_order

    async def delete(self, work_order_id: WorkOrderId, tenant_id: TenantId, deleted_by: UserId) -> None:
        async with self._session_factory() as session:
            row = await self._get_row(session, work_order_id, tenant_id)
            if row is None:
                return
            row.deleted_at = datetime.now(timezone.utc)
            row.deleted_by = deleted_by
            await session.commit()
        logger.info("Soft-deleted work order %s tenant=%s", work_order_id, tenant_id)

    async def get_next_sequence(self, tenant_id: TenantId) -> int:
        async with self._session_factory() as session:
            return await _next_sequence(session, tenant_id, "work_order")

    async def count_by_status(self, tenant_id: TenantId) -> dict[WorkOrderStatus, int]:
        counts = {status: 0 for status in WorkOrderStatus}
        async with self._session_factory() as session:
            rows = await session.execute(
                select(MaintenanceWorkOrder.status, func.count())
                .where(*self._live(tenant_id))
                .group_by(MaintenanceWorkOrder.status)
            )
            for status, count in rows:
                counts[status] = count
        return counts


# =============================================================================
# Vendors
# =============================================================================


class SqlVendorRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _live(tenant_id: TenantId, *conditions):
        return (
            MaintenanceVendor.tenant_id == tenant_id,
            MaintenanceVendor.deleted_at.is_(None),
            *conditions,
        )

    async def _list(self, tenant_id: TenantId, *conditions) -> list[Vendor]:
        async with self._session_factory() as session:
            rows = await session.scalars(
                select(MaintenanceVendor)
                .where(*self._live(tenant_id, *conditions))
                .order_by(MaintenanceVendor.vendor_code)
            )
            return [row_to_vendor(row) for row in rows]

    async def _get_row(
        self, session: AsyncSession, vendor_id: str, tenant_id: str
    ) -> MaintenanceVendor | None:
        return await session.scalar(
            select(MaintenanceVendor).where(MaintenanceVendor.id == vendor_id, *self._live(tenant_id))
        )

    async def find_by_id(self, vendor_id: VendorId, tenant_id: TenantId) -> Vendor | None:
        async with self._session_factory() as session:
            row = await self._get_row(session, vendor_id, tenant_id)
            return row_to_vendor(row) if row else None

    async def find_by_vendor_code(self, vendor_code: str, tenant_id: TenantId) -> Vendor | None:
        found = await self._list(tenant_id, MaintenanceVendor.vendor_code == vendor_code)
        return found[0] if found else None

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[Vendor]:
        pagination = pagination or PaginationParams()
        where = self._live(tenant_id)
        async with self._session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(MaintenanceVendor).where(*where)
            )
            rows = await session.scalars(
                select(MaintenanceVendor)
                .where(*where)
                .order_by(MaintenanceVendor.vendor_code)
                .offset(pagination.offset)
                .limit(pagination.per_page)
            )
            items = [row_to_vendor(row) for row in rows]
        return PaginatedResponse.create(items, total or 0, pagination)

    async def find_by_specialization(
        self, specialization: WorkOrderCategory, tenant_id: TenantId
    ) -> list[Vendor]:
        # JSON array membership is not portable across dialects; filter after load.
        return [v for v in await self._list(tenant_id) if specialization in v.specializations]

    async def find_available(
        self, specialization: WorkOrderCategory, emergency_required: bool, tenant_id: TenantId
    ) -> list[Vendor]:
        conditions = [MaintenanceVendor.status == VendorStatus.ACTIVE]
        if emergency_required:
            conditions.append(MaintenanceVendor.emergency_available.is_(True))
        return [
            v for v in await self._list(tenant_id, *conditions) if specialization in v.specializations
        ]

    async def find_preferred(self, tenant_id: TenantId) -> list[Vendor]:
        return await self._list(tenant_id, MaintenanceVendor.is_preferred.is_(True))

    async def create(self, vendor: Vendor) -> Vendor:
        async with self._session_factory() as session:
            session.add(MaintenanceVendor(**vendor_to_row_values(vendor)))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateRecordError(
                    f"Vendor {vendor.id} / {vendor.vendor_code} already exists"
                ) from exc
        return vendor

    async def update(self, vendor: Vendor) -> Vendor:
        async with self._session_factory() as session:
            row = await self._get_row(session, vendor.id, vendor.tenant_id)
            if row is None:
                raise KeyError(f"Vendor {vendor.id} not found for tenant {vendor.tenant_id}")
            for key, value in vendor_to_row_values(vendor).items():
                setattr(row, key, value)
            await session.commit()
        return vendor

    async def delete(self, vendor_id: VendorId, tenant_id: TenantId, deleted_by: UserId) -> None:
        async with self._session_factory() as session:
            row = await self._get_row(session, vendor_id, tenant_id)
            if row is None:
                return
            row.deleted_at = datetime.now(timezone.utc)
            row.deleted_by = deleted_by
            await session.commit()
        logger.info("Soft-deleted vendor %s tenant=%s", vendor_id, tenant_id)

    async def get_next_sequence(self, tenant_id: TenantId) -> int:
        async with self._session_factory() as session:
            return await _next_sequence(session, tenant_id, "vendor")
