"""Repository contracts consumed by the maintenance service.

Every method is tenant-scoped: implementations must never return or modify a
record that belongs to a different tenant.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from maintenance_engine.db.enums import (
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
)
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


class WorkOrderRepository(Protocol):
    async def find_by_id(self, work_order_id: WorkOrderId, tenant_id: TenantId) -> WorkOrder | None: ...

    async def find_by_work_order_number(
        self, work_order_number: str, tenant_id: TenantId
    ) -> WorkOrder | None: ...

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_property(
        self, property_id: PropertyId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_unit(
        self, unit_id: UnitId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_customer(
        self, customer_id: CustomerId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_vendor(
        self, vendor_id: VendorId, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_status(
        self, status: WorkOrderStatus, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_by_priority(
        self, priority: WorkOrderPriority, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[WorkOrder]: ...

    async def find_sla_breached(self, tenant_id: TenantId) -> list[WorkOrder]: ...

    async def find_scheduled_for_date(self, day: date, tenant_id: TenantId) -> list[WorkOrder]: ...

    async def find_pending_approval(self, tenant_id: TenantId) -> list[WorkOrder]: ...

    async def create(self, work_order: WorkOrder) -> WorkOrder: ...

    async def update(self, work_order: WorkOrder) -> WorkOrder: ...

    async def delete(self, work_order_id: WorkOrderId, tenant_id: TenantId, deleted_by: UserId) -> None: ...

    async def get_next_sequence(self, tenant_id: TenantId) -> int: ...

    async def count_by_status(self, tenant_id: TenantId) -> dict[WorkOrderStatus, int]: ...


class VendorRepository(Protocol):
    async def find_by_id(self, vendor_id: VendorId, tenant_id: TenantId) -> Vendor | None: ...

    async def find_by_vendor_code(self, vendor_code: str, tenant_id: TenantId) -> Vendor | None: ...

    async def find_many(
        self, tenant_id: TenantId, pagination: PaginationParams | None = None
    ) -> PaginatedResponse[Vendor]: ...

    async def find_by_specialization(
        self, specialization: WorkOrderCategory, tenant_id: TenantId
    ) -> list[Vendor]: ...

    async def find_available(
        self, specialization: WorkOrderCategory, emergency_required: bool, tenant_id: TenantId
    ) -> list[Vendor]:
        """Active vendors with the specialization (and emergency cover when required)."""
        ...

    async def find_preferred(self, tenant_id: TenantId) -> list[Vendor]: ...

    async def create(self, vendor: Vendor) -> Vendor: ...

    async def update(self, vendor: Vendor) -> Vendor: ...

    async def delete(self, vendor_id: VendorId, tenant_id: TenantId, deleted_by: UserId) -> None: ...

    async def get_next_sequence(self, tenant_id: TenantId) -> int: ...


class DuplicateRecordError(Exception):
    """Raised by ``create`` when an id, work order number or vendor code is already taken."""
