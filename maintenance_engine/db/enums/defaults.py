"""Centralized defaults for enums."""

from maintenance_engine.db.enums.maintenance import (
    VendorStatus,
    WorkOrderPriority,
    WorkOrderSource,
    WorkOrderStatus,
)


DEFAULT_WORK_ORDER_STATUS: WorkOrderStatus = WorkOrderStatus.SUBMITTED
DEFAULT_WORK_ORDER_PRIORITY: WorkOrderPriority = WorkOrderPriority.MEDIUM
DEFAULT_WORK_ORDER_SOURCE: WorkOrderSource = WorkOrderSource.MANAGER_APP
DEFAULT_VENDOR_STATUS: VendorStatus = VendorStatus.ACTIVE
