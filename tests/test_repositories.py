"""
Repository contract tests.

Every test runs against both the in-memory repositories and the SQLAlchemy
repositories (aiosqlite file database), so the two stay interchangeable.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from maintenance_engine.db.enums import (
    AttachmentType,
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
)
from maintenance_engine.db.session import create_engine, create_session_factory, init_db
from maintenance_engine.repositories import (
    DuplicateRecordError,
    InMemoryVendorRepository,
    InMemoryWorkOrderRepository,
)
from maintenance_engine.repositories.sql import SqlVendorRepository, SqlWorkOrderRepository
from maintenance_engine.schemas.money import Money
from maintenance_engine.schemas.vendor import VendorContact, VendorRateCard
from maintenance_engine.types import TenantId, VendorId, WorkOrderId
from maintenance_engine.utils.pagination import PaginationParams

OTHER_TENANT = TenantId("tenant-globex")
BASE = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="function", params=["memory", "sql"])
async def repos(request, tmp_path):
    """Yield ``(work_order_repo, vendor_repo)`` for each backend."""
    if request.param == "memory":
        yield InMemoryWorkOrderRepository(), InMemoryVendorRepository()
        return

    engine = create_engine(url=f"sqlite+aiosqlite:///{tmp_path / 'maintenance.db'}")
    await init_db(engine)
    session_factory = create_session_factory(engine)
    try:
        yield SqlWorkOrderRepository(session_factory), SqlVendorRepository(session_factory)
    finally:
        await engine.dispose()


@pytest.fixture
def work_orders(repos):
    return repos[0]


@pytest.fixture
def vendors(repos):
    return repos[1]


def _hours(n: int) -> datetime:
    return BASE + timedelta(hours=n)


# =============================================================================
# Work orders
# =============================================================================

@pytest.mark.asyncio
async def test_work_order_round_trip(work_orders, build_work_order):
    work_order = build_work_order(
        attachments=[{"type": AttachmentType.IMAGE, "url": "https://files.example/leak.jpg"}],
        estimated_cost=Money(amount=Decimal("125.50"), currency="USD"),
    )
    work_order = work_order.model_copy(
        update={"scheduled_date": datetime(2025, 3, 12, 14, 30, tzinfo=timezone.utc)}
    )

    await work_orders.create(work_order)
    fetched = await work_orders.find_by_id(work_order.id, work_order.tenant_id)

    assert fetched.model_dump() == work_order.model_dump()
    assert fetched.created_at.tzinfo is not None
    assert fetched.sla.response_due_at == work_order.sla.response_due_at
    assert fetched.estimated_cost.amount == Decimal("125.50")
    assert await work_orders.find_by_work_order_number(
        work_order.work_order_number, work_order.tenant_id
    ) == fetched


@pytest.mark.asyncio
async def test_work_orders_are_tenant_scoped(work_orders, build_work_order, tenant_id):
    mine = await work_orders.create(build_work_order())
    theirs = await work_orders.create(build_work_order(tenant=OTHER_TENANT))

    assert await work_orders.find_by_id(mine.id, OTHER_TENANT) is None
    assert await work_orders.find_by_work_order_number(mine.work_order_number, OTHER_TENANT) is None
    page = await work_orders.find_many(tenant_id)
    assert [w.id for w in page.items] == [mine.id]
    assert (await work_orders.find_many(OTHER_TENANT)).items[0].id == theirs.id


@pytest.mark.asyncio
async def test_duplicate_work_order_number_rejected(work_orders, build_work_order):
    original = await work_orders.create(build_work_order())
    clash = build_work_order().model_copy(
        update={"work_order_number": original.work_order_number}
    )

    with pytest.raises(DuplicateRecordError):
        await work_orders.create(clash)


@pytest.mark.asyncio
async def test_same_number_allowed_in_different_tenants(work_orders, build_work_order):
    first = await work_orders.create(build_work_order())
    second = build_work_order(tenant=OTHER_TENANT).model_copy(
        update={"work_order_number": first.work_order_number}
    )

    await work_orders.create(second)

    assert await work_orders.find_by_id(second.id, OTHER_TENANT) is not None


@pytest.mark.asyncio
async def test_update_replaces_stored_state(work_orders, build_work_order):
    work_order = await work_orders.create(build_work_order())
    changed = work_order.model_copy(
        update={"status": WorkOrderStatus.TRIAGED, "updated_at": _hours(1)}
    )

    await work_orders.update(changed)
    fetched = await work_orders.find_by_id(work_order.id, work_order.tenant_id)

    assert fetched.status == WorkOrderStatus.TRIAGED
    assert fetched.updated_at == _hours(1)


@pytest.mark.asyncio
async def test_update_missing_work_order_raises(work_orders, build_work_order):
    with pytest.raises(KeyError):
        await work_orders.update(build_work_order())


@pytest.mark.asyncio
async def test_soft_delete_hides_work_order(work_orders, build_work_order, tenant_id, user_id):
    kept = await work_orders.create(build_work_order(created_at=_hours(0)))
    gone = await work_orders.create(build_work_order(created_at=_hours(1)))

    await work_orders.delete(gone.id, tenant_id, user_id)

    assert await work_orders.find_by_id(gone.id, tenant_id) is None
    assert [w.id for w in (await work_orders.find_many(tenant_id)).items] == [kept.id]
    assert (await work_orders.count_by_status(tenant_id))[WorkOrderStatus.SUBMITTED] == 1
    with pytest.raises(KeyError):
        await work_orders.update(gone)


@pytest.mark.asyncio
async def test_pagination_newest_first(work_orders, build_work_order, tenant_id):
    created = [await work_orders.create(build_work_order(created_at=_hours(n))) for n in range(3)]

    first = await work_orders.find_many(tenant_id, PaginationParams(page=1, per_page=2))
    second = await work_orders.find_many(tenant_id, PaginationParams(page=2, per_page=2))

    assert [w.id for w in first.items] == [created[2].id, created[1].id]
    assert [w.id for w in second.items] == [created[0].id]
    assert first.total == 3
    assert first.pages == 2
    assert first.has_more and not second.has_more


@pytest.mark.asyncio
async def test_filtered_listings(work_orders, build_work_order, tenant_id):
    a = await work_orders.create(
        build_work_order(created_at=_hours(0), property_id="prop-A", unit_id="u-1", customer_id="c-1")
    )
    b = await work_orders.create(
        build_work_order(created_at=_hours(1), property_id="prop-A", unit_id="u-2", customer_id="c-2")
    )
    assigned = b.model_copy(update={"vendor_id": VendorId("ven-9")})
    await work_orders.update(assigned)

    by_property = await work_orders.find_by_property("prop-A", tenant_id)
    assert [w.id for w in by_property.items] == [b.id, a.id]
    assert [w.id for w in (await work_orders.find_by_unit("u-1", tenant_id)).items] == [a.id]
    assert [w.id for w in (await work_orders.find_by_customer("c-2", tenant_id)).items] == [b.id]
    assert [w.id for w in (await work_orders.find_by_vendor("ven-9", tenant_id)).items] == [b.id]
    by_status = await work_orders.find_by_status(WorkOrderStatus.SUBMITTED, tenant_id)
    assert by_status.total == 2


@pytest.mark.asyncio
async def test_find_by_priority(work_orders, build_work_order, tenant_id):
    urgent = await work_orders.create(build_work_order(priority=WorkOrderPriority.EMERGENCY))
    await work_orders.create(build_work_order(priority=WorkOrderPriority.LOW))

    page = await work_orders.find_by_priority(WorkOrderPriority.EMERGENCY, tenant_id)

    assert [w.id for w in page.items] == [urgent.id]


@pytest.mark.asyncio
async def test_find_sla_breached(work_orders, build_work_order, tenant_id):
    healthy = await work_orders.create(build_work_order(created_at=_hours(0)))
    late = await work_orders.create(build_work_order(created_at=_hours(1)))
    await work_orders.update(
        late.model_copy(update={"sla": late.sla.model_copy(update={"response_breached": True})})
    )

    breached = await work_orders.find_sla_breached(tenant_id)

    assert [w.id for w in breached] == [late.id]
    assert healthy.id not in {w.id for w in breached}


@pytest.mark.asyncio
async def test_find_scheduled_for_date(work_orders, build_work_order, tenant_id):
    early = await work_orders.create(build_work_order())
    late = await work_orders.create(build_work_order())
    other_day = await work_orders.create(build_work_order())
    for work_order, when in [
        (late, datetime(2025, 3, 12, 16, 0, tzinfo=timezone.utc)),
        (early, datetime(2025, 3, 12, 8, 0, tzinfo=timezone.utc)),
        (other_day, datetime(2025, 3, 13, 0, 0, tzinfo=timezone.utc)),
    ]:
        await work_orders.update(work_order.model_copy(update={"scheduled_date": when}))

    scheduled = await work_orders.find_scheduled_for_date(date(2025, 3, 12), tenant_id)

    assert [w.id for w in scheduled] == [early.id, late.id]


@pytest.mark.asyncio
async def test_find_pending_approval_returns_completed(work_orders, build_work_order, tenant_id):
    done = await work_orders.create(build_work_order())
    await work_orders.create(build_work_order())
    await work_orders.update(done.model_copy(update={"status": WorkOrderStatus.COMPLETED}))

    pending = await work_orders.find_pending_approval(tenant_id)

    assert [w.id for w in pending] == [done.id]


@pytest.mark.asyncio
async def test_count_by_status_includes_every_status(work_orders, build_work_order, tenant_id):
    first = await work_orders.create(build_work_order())
    await work_orders.create(build_work_order())
    await work_orders.update(first.model_copy(update={"status": WorkOrderStatus.CANCELLED}))

    counts = await work_orders.count_by_status(tenant_id)

    assert set(counts) == set(WorkOrderStatus)
    assert counts[WorkOrderStatus.SUBMITTED] == 1
    assert counts[WorkOrderStatus.CANCELLED] == 1
    assert counts[WorkOrderStatus.VERIFIED] == 0


@pytest.mark.asyncio
async def test_sequences_are_per_tenant_and_monotonic(work_orders, vendors, tenant_id):
    assert [await work_orders.get_next_sequence(tenant_id) for _ in range(3)] == [1, 2, 3]
    assert await work_orders.get_next_sequence(OTHER_TENANT) == 1
    # Vendor codes have their own counter
    assert await vendors.get_next_sequence(tenant_id) == 1


# =============================================================================
# Vendors
# =============================================================================

@pytest.mark.asyncio
async def test_vendor_round_trip(vendors, build_vendor):
    vendor = build_vendor(
        contacts=[VendorContact(name="Dispatch", phone="+1-555-0100", is_emergency_contact=True)],
        rate_cards=[
            VendorRateCard(
                category=WorkOrderCategory.PLUMBING,
                hourly_rate=Money(amount=Decimal("80.00"), currency="USD"),
                minimum_charge=Money(amount=Decimal("120.00"), currency="USD"),
            )
        ],
        service_areas=["downtown", "riverside"],
        insurance_expiry_date=datetime(2026, 1, 31, tzinfo=timezone.utc),
    )

    await vendors.create(vendor)
    fetched = await vendors.find_by_id(vendor.id, vendor.tenant_id)

    assert fetched.model_dump() == vendor.model_dump()
    assert fetched.rate_card_for(WorkOrderCategory.PLUMBING).minimum_charge.amount == Decimal("120.00")
    assert (await vendors.find_by_vendor_code(vendor.vendor_code, vendor.tenant_id)).id == vendor.id


@pytest.mark.asyncio
async def test_duplicate_vendor_code_rejected(vendors, build_vendor):
    original = await vendors.create(build_vendor())

    with pytest.raises(DuplicateRecordError):
        await vendors.create(build_vendor(vendor_code=original.vendor_code))


@pytest.mark.asyncio
async def test_vendor_listings_ordered_by_code(vendors, build_vendor, tenant_id):
    second = await vendors.create(build_vendor(vendor_code="VND-0002", is_preferred=True))
    first = await vendors.create(build_vendor(vendor_code="VND-0001"))
    await vendors.create(build_vendor(tenant=OTHER_TENANT, vendor_code="VND-0003"))

    page = await vendors.find_many(tenant_id)

    assert [v.id for v in page.items] == [first.id, second.id]
    assert page.total == 2
    assert [v.id for v in await vendors.find_preferred(tenant_id)] == [second.id]


@pytest.mark.asyncio
async def test_find_by_specialization(vendors, build_vendor, tenant_id):
    plumber = await vendors.create(build_vendor())
    electrician = await vendors.create(
        build_vendor(specializations=[WorkOrderCategory.ELECTRICAL, WorkOrderCategory.HVAC])
    )

    hvac = await vendors.find_by_specialization(WorkOrderCategory.HVAC, tenant_id)

    assert [v.id for v in hvac] == [electrician.id]
    assert plumber.id not in {v.id for v in hvac}


@pytest.mark.asyncio
async def test_find_available_filters_status_and_emergency(vendors, build_vendor, tenant_id):
    regular = await vendors.create(build_vendor())
    on_call = await vendors.create(build_vendor(emergency_available=True))
    await vendors.create(build_vendor(status=VendorStatus.SUSPENDED, emergency_available=True))
    await vendors.create(build_vendor(specializations=[WorkOrderCategory.ELECTRICAL]))

    routine = await vendors.find_available(WorkOrderCategory.PLUMBING, False, tenant_id)
    emergency = await vendors.find_available(WorkOrderCategory.PLUMBING, True, tenant_id)

    assert [v.id for v in routine] == [regular.id, on_call.id]
    assert [v.id for v in emergency] == [on_call.id]


@pytest.mark.asyncio
async def test_vendor_update_and_soft_delete(vendors, build_vendor, tenant_id, user_id):
    vendor = await vendors.create(build_vendor())

    await vendors.update(vendor.model_copy(update={"company_name": "Renamed Ltd"}))
    assert (await vendors.find_by_id(vendor.id, tenant_id)).company_name == "Renamed Ltd"

    await vendors.delete(vendor.id, tenant_id, user_id)
    assert await vendors.find_by_id(vendor.id, tenant_id) is None
    assert await vendors.find_by_vendor_code(vendor.vendor_code, tenant_id) is None
    with pytest.raises(KeyError):
        await vendors.update(vendor)


@pytest.mark.asyncio
async def test_missing_records_return_none(work_orders, vendors, tenant_id):
    assert await work_orders.find_by_id(WorkOrderId("wo-missing"), tenant_id) is None
    assert await vendors.find_by_id(VendorId("ven-missing"), tenant_id) is None
