"""Pydantic schemas for maintenance vendors."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from maintenance_engine.db.enums import DEFAULT_VENDOR_STATUS, VendorStatus, WorkOrderCategory
from maintenance_engine.schemas.money import Money
from maintenance_engine.types import TenantId, UserId, VendorId


class VendorContact(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)
    is_emergency_contact: bool = False


class VendorRateCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: WorkOrderCategory
    hourly_rate: Money
    minimum_charge: Money
    emergency_multiplier: Decimal = Field(Decimal("1.5"), ge=1)

    def quote(self, hours: Decimal | int | str, *, emergency: bool = False) -> Money:
        """Labour quote: hourly rate × hours, floored at the minimum charge."""
        labour = self.hourly_rate.multiply(hours).max(self.minimum_charge)
        if emergency:
            labour = labour.multiply(self.emergency_multiplier)
        return labour.rounded()


class VendorPerformanceMetrics(BaseModel):
    """Running performance aggregates, updated after each completed job."""

    model_config = ConfigDict(frozen=True)

    total_jobs: int = 0
    completed_jobs: int = 0
    rated_jobs: int = 0
    responded_jobs: int = 0
    average_response_time_minutes: float = 0.0
    average_resolution_time_minutes: float = 0.0
    reopen_rate: float = 0.0
    average_rating: float = 0.0
    # Percentage (0-100) of completed jobs resolved within SLA
    sla_compliance_rate: float = 100.0


class Vendor(BaseModel):
    """Service provider scoped to a tenant."""

    model_config = ConfigDict(frozen=True)

    id: VendorId
    tenant_id: TenantId
    vendor_code: str
    company_name: str
    status: VendorStatus = DEFAULT_VENDOR_STATUS
    specializations: list[WorkOrderCategory] = Field(default_factory=list)
    service_areas: list[str] = Field(default_factory=list)
    contacts: list[VendorContact] = Field(default_factory=list)
    rate_cards: list[VendorRateCard] = Field(default_factory=list)
    performance_metrics: VendorPerformanceMetrics = Field(default_factory=VendorPerformanceMetrics)
    is_preferred: bool = False
    emergency_available: bool = False
    license_number: str | None = None
    insurance_expiry_date: datetime | None = None
    notes: str | None = None

    created_at: datetime
    updated_at: datetime
    created_by: UserId
    updated_by: UserId

    @property
    def is_assignable(self) -> bool:
        return self.status == VendorStatus.ACTIVE

    def rate_card_for(self, category: WorkOrderCategory) -> VendorRateCard | None:
        for card in self.rate_cards:
            if card.category == category:
                return card
        return None


class VendorCreate(BaseModel):
    """Request to create a vendor."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    company_name: str = Field(..., min_length=1, max_length=255)
    specializations: list[WorkOrderCategory] = Field(..., min_length=1)
    service_areas: list[str] = Field(default_factory=list)
    contacts: list[VendorContact] = Field(default_factory=list)
    rate_cards: list[VendorRateCard] = Field(default_factory=list)
    emergency_available: bool = False
    is_preferred: bool = False
    license_number: str | None = Field(None, max_length=100)
    insurance_expiry_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class VendorUpdate(BaseModel):
    """Request to update a vendor (partial)."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    company_name: str | None = Field(None, min_length=1, max_length=255)
    status: VendorStatus | None = None
    specializations: list[WorkOrderCategory] | None = Field(None, min_length=1)
    service_areas: list[str] | None = None
    contacts: list[VendorContact] | None = None
    rate_cards: list[VendorRateCard] | None = None
    emergency_available: bool | None = None
    is_preferred: bool | None = None
    license_number: str | None = Field(None, max_length=100)
    insurance_expiry_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)
