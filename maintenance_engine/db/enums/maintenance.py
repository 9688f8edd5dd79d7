"""Maintenance-related enums."""

from enum import Enum


class WorkOrderStatus(str, Enum):
    """
    Work order lifecycle status.

    submitted → triaged → assigned → scheduled → in_progress ⇄ pending_parts
    → completed → verified, with cancelled reachable from any non-terminal state.
    """

    SUBMITTED = "submitted"
    TRIAGED = "triaged"
    ASSIGNED = "assigned"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    PENDING_PARTS = "pending_parts"  # Waiting on backordered parts
    COMPLETED = "completed"
    VERIFIED = "verified"  # Customer confirmed completion
    CANCELLED = "cancelled"

    @classmethod
    def terminal(cls) -> frozenset["WorkOrderStatus"]:
        return frozenset({cls.COMPLETED, cls.VERIFIED, cls.CANCELLED})

    @property
    def is_terminal(self) -> bool:
        return self in WorkOrderStatus.terminal()


class WorkOrderPriority(str, Enum):
    """Work order priority level."""

    EMERGENCY = "emergency"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WorkOrderCategory(str, Enum):
    """Maintenance trade category (also used as vendor specialization)."""

    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    HVAC = "hvac"
    APPLIANCE = "appliance"
    STRUCTURAL = "structural"
    PEST_CONTROL = "pest_control"
    LANDSCAPING = "landscaping"
    CLEANING = "cleaning"
    SECURITY = "security"
    GENERAL = "general"
    OTHER = "other"


class WorkOrderSource(str, Enum):
    """How a work order was raised."""

    CUSTOMER_APP = "customer_app"
    MANAGER_APP = "manager_app"
    INSPECTION = "inspection"
    SCHEDULED = "scheduled"  # Recurring/preventive maintenance
    ADMIN = "admin"


class AttachmentType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


class VendorStatus(str, Enum):
    """Vendor standing. Only active vendors can be assigned."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PROBATION = "probation"
    SUSPENDED = "suspended"
    BLACKLISTED = "blacklisted"


class SLABreachType(str, Enum):
    RESPONSE = "response"
    RESOLUTION = "resolution"


class MaintenanceEventType(str, Enum):
    """Domain events published on the event bus."""

    WORK_ORDER_CREATED = "WorkOrderCreated"
    WORK_ORDER_ASSIGNED = "WorkOrderAssigned"
    WORK_ORDER_COMPLETED = "WorkOrderCompleted"
    WORK_ORDER_VERIFIED = "WorkOrderVerified"
    WORK_ORDER_CANCELLED = "WorkOrderCancelled"
    WORK_ORDER_ESCALATED = "WorkOrderEscalated"
    SLA_BREACHED = "SLABreached"
