"""Shared branded identifiers."""

from __future__ import annotations

from typing import NewType

# Distinct nominal id types; a WorkOrderId is not accepted where a VendorId is expected.
TenantId = NewType("TenantId", str)
UserId = NewType("UserId", str)
WorkOrderId = NewType("WorkOrderId", str)
VendorId = NewType("VendorId", str)
PropertyId = NewType("PropertyId", str)
UnitId = NewType("UnitId", str)
CustomerId = NewType("CustomerId", str)
