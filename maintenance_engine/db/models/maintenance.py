"""Maintenance ORM models: work orders, vendors and per-tenant sequences."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from maintenance_engine.db.base import Base
from maintenance_engine.db.enums import (
    VendorStatus,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderSource,
    WorkOrderStatus,
)


def _enum_type(enum_cls, *, name: str) -> Enum:
    """Store str-enums by value in a portable VARCHAR column."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


class MaintenanceWorkOrder(Base):
    """
    Work order row.

    Queried fields are scalar columns; nested value objects (SLA clock,
    timeline, attachments, money) are stored as JSON documents.
    """

    __tablename__ = "maintenance_work_orders"
    __table_args__ = (
        UniqueConstraint("tenant_id", "work_order_number", name="uq_maintenance_wo_number"),
        Index("idx_maintenance_wo_tenant_status", "tenant_id", "status"),
        Index("idx_maintenance_wo_tenant_property", "tenant_id", "property_id"),
        Index("idx_maintenance_wo_tenant_vendor", "tenant_id", "vendor_id"),
        Index("idx_maintenance_wo_tenant_created", "tenant_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    work_order_number: Mapped[str] = mapped_column(String(32), nullable=False)
    property_id: Mapped[str] = mapped_column(String(64), nullable=False)
    unit_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    status: Mapped[WorkOrderStatus] = mapped_column(
        _enum_type(WorkOrderStatus, name="work_order_status"), nullable=False
    )
    priority: Mapped[WorkOrderPriority] = mapped_column(
        _enum_type(WorkOrderPriority, name="work_order_priority"), nullable=False
    )
    category: Mapped[WorkOrderCategory] = mapped_column(
        _enum_type(WorkOrderCategory, name="work_order_category"), nullable=False
    )
    source: Mapped[WorkOrderSource] = mapped_column(
        _enum_type(WorkOrderSource, name="work_order_source"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    attachments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    assigned_to_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    vendor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scheduled_date: Mapped[datetime | None] = mapped_column(nullable=True)
    scheduled_time_slot: Mapped[str | None] = mapped_column(String(50), nullable=True)

    estimated_cost: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    actual_cost: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    completion_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    customer_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    customer_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    requires_entry: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    entry_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    permission_to_enter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    sla: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    # Denormalized from ``sla`` for the breached-list query
    response_breached: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolution_breached: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timeline: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)


class MaintenanceVendor(Base):
    """Vendor row scoped to a tenant."""

    __tablename__ = "maintenance_vendors"
    __table_args__ = (
        UniqueConstraint("tenant_id", "vendor_code", name="uq_maintenance_vendor_code"),
        Index("idx_maintenance_vendor_tenant_status", "tenant_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    vendor_code: Mapped[str] = mapped_column(String(32), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[VendorStatus] = mapped_column(
        _enum_type(VendorStatus, name="vendor_status"), nullable=False
    )
    specializations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    service_areas: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    contacts: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    rate_cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    performance_metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    is_preferred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    emergency_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    license_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    insurance_expiry_date: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)


class MaintenanceSequence(Base):
    """Monotonic per-tenant counter backing work order numbers and vendor codes."""

    __tablename__ = "maintenance_sequences"

    tenant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
