"""Repository contracts and implementations."""

from maintenance_engine.repositories.base import (
    DuplicateRecordError,
    VendorRepository,
    WorkOrderRepository,
)
from maintenance_engine.repositories.memory import (
    InMemoryVendorRepository,
    InMemoryWorkOrderRepository,
)

__all__ = [
    "DuplicateRecordError",
    "VendorRepository",
    "WorkOrderRepository",
    "InMemoryVendorRepository",
    "InMemoryWorkOrderRepository",
]
