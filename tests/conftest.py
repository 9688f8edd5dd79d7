"""
Test configuration and fixtures.

Provides:
- Fresh in-memory repositories and event bus per test
- A controllable clock
- A MaintenanceService wired to all of the above
- Factories for work orders and vendors
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from maintenance_engine.core.config import Settings
from maintenance_engine.db.enums import (
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderSource,
)
from maintenance_engine.repositories import InMemoryVendorRepository, InMemoryWorkOrderRepository
from maintenance_engine.schemas.vendor import Vendor, VendorPerformanceMetrics
from maintenance_engine.schemas.work_order import WorkOrder, WorkOrderCreate
from maintenance_engine.services import sla_clock
from maintenance_engine.services import work_order_state_machine as sm
from maintenance_engine.services.event_bus import InMemoryEventBus
from maintenance_engine.services.maintenance_service import MaintenanceService
from maintenance_engine.types import TenantId, UserId, VendorId, WorkOrderId

T0 = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# =============================================================================
# Core fixtures
# =============================================================================

@pytest.fixture
def tenant_id() -> TenantId:
    return TenantId("tenant-acme")


@pytest.fixture
def user_id() -> UserId:
    return UserId("user-manager")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def work_order_repo() -> InMemoryWorkOrderRepository:
    return InMemoryWorkOrderRepository()


@pytest.fixture
def vendor_repo() -> InMemoryVendorRepository:
    return InMemoryVendorRepository()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def service(work_order_repo, vendor_repo, event_bus, test_settings, clock) -> MaintenanceService:
    return MaintenanceService(
        work_order_repo,
        vendor_repo,
        event_bus,
        settings=test_settings,
        clock=clock,
    )


# =============================================================================
# Factories
# =============================================================================

def _work_order_input(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "property_id": "prop-1",
        "unit_id": "unit-101",
        "customer_id": "cust-1",
        "priority": WorkOrderPriority.MEDIUM,
        "category": WorkOrderCategory.PLUMBING,
        "source": WorkOrderSource.CUSTOMER_APP,
        "title": "Leaking kitchen tap",
        "description": "Tap drips constantly; water pooling under the sink.",
        "location": "Kitchen",
    }
    data.update(overrides)
    return data


@pytest.fixture
def create_work_order(service, tenant_id, user_id):
    async def _create(**overrides: Any) -> WorkOrder:
        result = await service.create_work_order(tenant_id, _work_order_input(**overrides), user_id)
        assert result.ok, result
        return result.value

    return _create


@pytest.fixture
def add_vendor(vendor_repo, tenant_id, user_id, clock):
    """Insert a vendor directly with explicit metrics (bypasses create_vendor numbering)."""
    counter = {"n": 0}

    async def _add(
        *,
        company_name: str = "Acme Plumbing",
        specializations: list[WorkOrderCategory] | None = None,
        status: VendorStatus = VendorStatus.ACTIVE,
        is_preferred: bool = False,
        emergency_available: bool = False,
        sla_compliance_rate: float = 100.0,
        average_rating: float = 0.0,
        reopen_rate: float = 0.0,
    ) -> Vendor:
        counter["n"] += 1
        vendor = Vendor(
            id=VendorId(f"ven-{counter['n']}"),
            tenant_id=tenant_id,
            vendor_code=f"VND-{counter['n']:04d}",
            company_name=company_name,
            status=status,
            specializations=specializations or [WorkOrderCategory.PLUMBING],
            is_preferred=is_preferred,
            emergency_available=emergency_available,
            performance_metrics=VendorPerformanceMetrics(
                sla_compliance_rate=sla_compliance_rate,
                average_rating=average_rating,
                reopen_rate=reopen_rate,
            ),
            created_at=clock(),
            updated_at=clock(),
            created_by=user_id,
            updated_by=user_id,
        )
        return await vendor_repo.create(vendor)

    return _add


@pytest.fixture
def build_work_order(tenant_id, user_id, clock):
    """Build a work order aggregate without going through a repository."""
    counter = {"n": 0}

    def _build(
        *, tenant: TenantId | None = None, created_at: datetime | None = None, **overrides: Any
    ) -> WorkOrder:
        counter["n"] += 1
        priority = overrides.get("priority", WorkOrderPriority.MEDIUM)
        return sm.create_work_order(
            WorkOrderId(f"wo-{counter['n']}"),
            tenant or tenant_id,
            sm.format_work_order_number(2025, counter["n"]),
            WorkOrderCreate(**_work_order_input(**overrides)),
            user_id,
            created_at or clock(),
            sla_clock.default_sla_table()[priority],
        )

    return _build


@pytest.fixture
def build_vendor(tenant_id, user_id, clock):
    """Build a vendor aggregate without going through a repository."""
    counter = {"n": 0}

    def _build(*, tenant: TenantId | None = None, **overrides: Any) -> Vendor:
        counter["n"] += 1
        data: dict[str, Any] = {
            "id": VendorId(f"ven-{counter['n']}"),
            "tenant_id": tenant or tenant_id,
            "vendor_code": sm.format_vendor_code(counter["n"]),
            "company_name": f"Vendor {counter['n']}",
            "specializations": [WorkOrderCategory.PLUMBING],
            "created_at": clock(),
            "updated_at": clock(),
            "created_by": user_id,
            "updated_by": user_id,
        }
        data.update(overrides)
        return Vendor(**data)

    return _build
