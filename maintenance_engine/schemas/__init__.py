"""Pydantic schemas for domain entities, operation inputs and events."""

from maintenance_engine.schemas.events import EventEnvelope
from maintenance_engine.schemas.money import Money
from maintenance_engine.schemas.vendor import (
    Vendor,
    VendorContact,
    VendorCreate,
    VendorPerformanceMetrics,
    VendorRateCard,
    VendorUpdate,
)
from maintenance_engine.schemas.work_order import (
    SLAStatus,
    SLATracking,
    SLAWindow,
    TimelineEntry,
    WorkOrder,
    WorkOrderAssign,
    WorkOrderAttachment,
    WorkOrderComplete,
    WorkOrderCreate,
    WorkOrderNote,
    WorkOrderReason,
    WorkOrderSchedule,
    WorkOrderTriage,
    WorkOrderVerify,
)

__all__ = [
    "EventEnvelope",
    "Money",
    # Vendors
    "Vendor",
    "VendorContact",
    "VendorCreate",
    "VendorPerformanceMetrics",
    "VendorRateCard",
    "VendorUpdate",
    # Work orders
    "SLAStatus",
    "SLATracking",
    "SLAWindow",
    "TimelineEntry",
    "WorkOrder",
    "WorkOrderAssign",
    "WorkOrderAttachment",
    "WorkOrderComplete",
    "WorkOrderCreate",
    "WorkOrderNote",
    "WorkOrderReason",
    "WorkOrderSchedule",
    "WorkOrderTriage",
    "WorkOrderVerify",
]
