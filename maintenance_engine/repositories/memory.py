"""In-memory repositories for tests, demos and local tooling.

Each instance owns its own storage. Construct one per process or per test and
pass it to the service explicitly.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, timezone
from typing import Callable, TypeVar

from maintenance_engine.db.enums import (
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
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
from maintenance_engine.utils.datetime_utils import ensure_utc
from maintenance_engine.utils.pagination import PaginatedResponse, PaginationParams, paginate_list

T = TypeVar("T", WorkOrder, Vendor)


def _newest_first(records: list[T]) -> list[T]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class _TenantStore:
    """Tenant-partitioned record store with soft delete and per-tenant sequences."""

    def __init__(self) -> None:
        self._records: dict[TenantId, dict[str, T]] = defaultdict(dict)
        self._deleted: dict[TenantId, dict[str, datetime]] = defaultdict(dict)
        self._sequences: Counter[TenantId] = Counter()

    def get(self, tenant_id: TenantId, record_id: str):
        if record_id in self._deleted[tenant_id]:
            return None
        return self._records[tenant_id].get(record_id)

    def live(self, tenant_id: TenantId) -> list:
        deleted = self._deleted[tenant_id]
        return [r for rid, r in self._records[tenant_id].items() if rid not in deleted]

    def insert(self, tenant_id: TenantId, record_id: str, record) -> None:
        if record_id in self._records[tenant_id]:
            raise DuplicateRecordError(f"Record {record_id} already exists")
        self._records[tenant_id][record_id] = record

    def replace(self, tenant_id: TenantId, record_id: str, record) -> None:
        if self.get(tenant_id, record_id) is None:
            raise KeyError(f"Record {record_id} not found for tenant {tenant_id}")
        self._records[tenant_id][record_id] = record

    def soft_delete(self, tenant_id: TenantId, record_id: str) -> None:
        if record_id in self._records[tenant_id]:
            self._deleted[tenant_id][record_id] = datetime.now(timezone.utc)

    def next_sequence(self, tenant_id: TenantId) -> int:
        self._sequences[tenant_id] += 1
        return self._sequences[tenant_id]


class InMemoryWorkOrderRepository:
    def __init__(self) -> None:
        self._store = _TenantStore()

    def _filter(
        self,
        tenant_id: TenantId,
        predicate: Callable[[WorkOrder], bool],
        pagination: PaginationParams | None,
    ) -> PaginatedResponse[WorkOrder]:
        items = _newest_first([w for w in self._store.live(tenant_id) if predicate(w)])
        return paginate_list(items, pagination or PaginationParams())

    async def find_by_id(self, work_order_id: WorkOrderId, tenant_id: TenantId) -> WorkOrder | None:
        return self._store.get(tenant_id, work_order_id)

    async def find_by_work_order_number(
        self, work_order_number: str, tenant_id: TenantId
    ) -> WorkOrder | None:
        for work_order in self._store.live(tenant_id):
            if work_order.work_order_number == work_order_number:
                return work_order
        return None

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: True, pagination)

    async def find_by_property(
        self, property_id: PropertyId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.property_id == property_id, pagination)

    async def find_by_unit(
        self, unit_id: UnitId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.unit_id == unit_id, pagination)

    async def find_by_customer(
        self, customer_id: CustomerId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.customer_id == customer_id, pagination)

    async def find_by_vendor(
        self, vendor_id: VendorId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.vendor_id == vendor_id, pagination)

    async def find_by_status(
        self, status: WorkOrderStatus, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.status == status, pagination)

    async def find_by_priority(
        self, priority: WorkOrderPriority, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]:
        return self._filter(tenant_id, lambda w: w.priority == priority, pagination)

    async def find_sla_breached(self, tenant_id: TenantId) -> list[WorkOrder]:
        return _newest_first(
            [
                w
                for w in self._store.live(tenant_id)
                if w.sla.response_breached or w.sla.resolution_breached
            ]
        )

    async def find_scheduled_for_date(self, day: date, tenant_id: TenantId) -> list[WorkOrder]:
        return sorted(
            (
                w
                for w in self._store.live(tenant_id)
                if w.scheduled_date is not None and ensure_utc(w.scheduled_date).date() == day
            ),
            key=lambda w: (w.scheduled_date, w.id),
        )

    async def find_pending_approval(self, tenant_id: TenantId) -> list[WorkOrder]:
        return _newest_first(
            [w for w in self._store.live(tenant_id) if w.status == WorkOrderStatus.COMPLETED]
        )

    async def create(self, work_order: WorkOrder) -> WorkOrder:
        if await self.find_by_work_order_number(work_order.work_order_number, work_order.tenant_id):
            raise DuplicateRecordError(f"Work order number {work_order.work_order_number} exists")
        self._store.insert(work_order.tenant_id, work_order.id, work_order)
        return work_order

    async def update(self, work_order: WorkOrder) -> WorkOrder:
        self._store.replace(work_order.tenant_id, work_order.id, work_order)
        return work_order

    async def delete(self, work_order_id: WorkOrderId, tenant_id: TenantId, deleted_by: UserId) -> None:
        self._store.soft_delete(tenant_id, work_order_id)

    async def get_next_sequence(self, tenant_id: TenantId) -> int:
        return self._store.next_sequence(tenant_id)

    async def count_by_status(self, tenant_id: TenantId) -> dict[WorkOrderStatus, int]:
        counts = {status: 0 for status in WorkOrderStatus}
        for work_order in self._store.live(tenant_id):
            counts[work_order.status] += 1
        return counts


class InMemoryVendorRepository:
    def __init__(self) -> None:
        self._store = _TenantStore()

    async def find_by_id(self, vendor_id: VendorId, tenant_id: TenantId) -> Vendor | None:
        return self._store.get(tenant_id, vendor_id)

    async def find_by_vendor_code(self, vendor_code: str, tenant_id: TenantId) -> Vendor | None:
        for vendor in self._store.live(tenant_id):
            if vendor.vendor_code == vendor_code:
                return vendor
        return None

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[Vendor]:
        vendors = sorted(self._store.live(tenant_id), key=lambda v: v.vendor_code)
        return paginate_list(vendors, pagination or PaginationParams())

    async def find_by_specialization(
        self, specialization: WorkOrderCategory, tenant_id: TenantId
    ) -> list[Vendor]:
        return sorted(
            (v for v in self._store.live(tenant_id) if specialization in v.specializations),
            key=lambda v: v.vendor_code,
        )

    async def find_available(
        self, specialization: WorkOrderCategory, emergency_required: bool, tenant_id: TenantId
    ) -> list[Vendor]:
        return [
            v
            for v in await self.find_by_specialization(specialization, tenant_id)
            if v.status == VendorStatus.ACTIVE and (v.emergency_available or not emergency_required)
        ]

    async def find_preferred(self, tenant_id: TenantId) -> list[Vendor]:
        return sorted(
            (v for v in self._store.live(tenant_id) if v.is_preferred),
            key=lambda v: v.vendor_code,
        )

    async def create(self, vendor: Vendor) -> Vendor:
        if await self.find_by_vendor_code(vendor.vendor_code, vendor.tenant_id):
            raise DuplicateRecordError(f"Vendor code {vendor.vendor_code} exists")
        self._store.insert(vendor.tenant_id, vendor.id, vendor)
        return vendor

    async def update(self, vendor: Vendor) -> Vendor:
        self._store.replace(vendor.tenant_id, vendor.id, vendor)
        return vendor

    async def delete(self, vendor_id: VendorId, tenant_id: TenantId, deleted_by: UserId) -> None:
        self._store.soft_delete(tenant_id, vendor_id)

    async def get_next_sequence(self, tenant_id: TenantId) -> int:
        return self._store.next_sequence(tenant_id)
