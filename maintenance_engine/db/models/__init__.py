"""ORM models."""

from maintenance_engine.db.models.maintenance import (
    MaintenanceSequence,
    MaintenanceVendor,
    MaintenanceWorkOrder,
)

__all__ = [
    "MaintenanceSequence",
    "MaintenanceVendor",
    "MaintenanceWorkOrder",
]
