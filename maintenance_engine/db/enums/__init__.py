"""Enum definitions for application constants."""

from maintenance_engine.db.enums.defaults import (
    DEFAULT_VENDOR_STATUS,
    DEFAULT_WORK_ORDER_PRIORITY,
    DEFAULT_WORK_ORDER_SOURCE,
    DEFAULT_WORK_ORDER_STATUS,
)
from maintenance_engine.db.enums.maintenance import (
    AttachmentType,
    MaintenanceEventType,
    SLABreachType,
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderSource,
    WorkOrderStatus,
)

TERMINAL_WORK_ORDER_STATUSES = WorkOrderStatus.terminal()

__all__ = [
    "AttachmentType",
    "MaintenanceEventType",
    "SLABreachType",
    "VendorStatus",
    "WorkOrderCategory",
    "WorkOrderPriority",
    "WorkOrderSource",
    "WorkOrderStatus",
    "TERMINAL_WORK_ORDER_STATUSES",
    "DEFAULT_VENDOR_STATUS",
    "DEFAULT_WORK_ORDER_PRIORITY",
    "DEFAULT_WORK_ORDER_SOURCE",
    "DEFAULT_WORK_ORDER_STATUS",
]
