"""Vendor auto-assignment scoring and performance-metric updates (pure functions)."""

from __future__ import annotations

from dataclasses import dataclass

from maintenance_engine.core.constants import (
    VENDOR_BASE_SCORE,
    VENDOR_EMERGENCY_BONUS,
    VENDOR_PREFERRED_BONUS,
    VENDOR_RATING_WEIGHT,
    VENDOR_REOPEN_PENALTY,
    VENDOR_SLA_COMPLIANCE_WEIGHT,
)
from maintenance_engine.db.enums import WorkOrderPriority
from maintenance_engine.schemas.vendor import Vendor, VendorPerformanceMetrics
from maintenance_engine.schemas.work_order import WorkOrder
from maintenance_engine.services import sla_clock


@dataclass(frozen=True)
class ScoredVendor:
    vendor: Vendor
    score: float


def calculate_vendor_score(vendor: Vendor, work_order: WorkOrder) -> float:
    """
    Score a candidate that already passed the availability filter.

    base 50, +20 preferred, +0.1 × SLA compliance, +5 × rating,
    −10 × reopen rate, +30 for an emergency-available vendor on an
    emergency work order.
    """
    metrics = vendor.performance_metrics
    score = VENDOR_BASE_SCORE
    if vendor.is_preferred:
        score += VENDOR_PREFERRED_BONUS
    score += metrics.sla_compliance_rate * VENDOR_SLA_COMPLIANCE_WEIGHT
    score += metrics.average_rating * VENDOR_RATING_WEIGHT
    score -= metrics.reopen_rate * VENDOR_REOPEN_PENALTY
    if work_order.priority == WorkOrderPriority.EMERGENCY and vendor.emergency_available:
        score += VENDOR_EMERGENCY_BONUS
    return score


def rank_vendors(vendors: list[Vendor], work_order: WorkOrder) -> list[ScoredVendor]:
    """Highest score first; equal scores fall back to vendor code order."""
    scored = [ScoredVendor(vendor=v, score=calculate_vendor_score(v, work_order)) for v in vendors]
    return sorted(scored, key=lambda s: (-s.score, s.vendor.vendor_code))


def select_best_vendor(vendors: list[Vendor], work_order: WorkOrder) -> ScoredVendor | None:
    ranked = rank_vendors(vendors, work_order)
    return ranked[0] if ranked else None


# =============================================================================
# Performance metrics
# =============================================================================


def running_mean(previous_mean: float, previous_count: int, value: float) -> float:
    """Incremental mean: weight by the pre-increment count, divide by the post-increment count."""
    return (previous_mean * previous_count + value) / (previous_count + 1)


def apply_rating(metrics: VendorPerformanceMetrics, rating: int) -> VendorPerformanceMetrics:
    return metrics.model_copy(
        update={
            "average_rating": running_mean(metrics.average_rating, metrics.rated_jobs, rating),
            "rated_jobs": metrics.rated_jobs + 1,
        }
    )


def record_completion(
    metrics: VendorPerformanceMetrics, work_order: WorkOrder
) -> VendorPerformanceMetrics:
    """Fold one completed work order into the vendor's running aggregates."""
    sla = work_order.sla
    completed = metrics.completed_jobs
    update: dict[str, float | int] = {
        "total_jobs": metrics.total_jobs + 1,
        "completed_jobs": completed + 1,
        "sla_compliance_rate": running_mean(
            metrics.sla_compliance_rate if completed else 0.0,
            completed,
            0.0 if sla.resolution_breached else 100.0,
        ),
    }

    resolution_minutes = sla_clock.resolution_time_minutes(sla)
    if resolution_minutes is not None:
        update["average_resolution_time_minutes"] = running_mean(
            metrics.average_resolution_time_minutes, completed, resolution_minutes
        )

    response_minutes = sla_clock.response_time_minutes(sla)
    if response_minutes is not None:
        update["average_response_time_minutes"] = running_mean(
            metrics.average_response_time_minutes, metrics.responded_jobs, response_minutes
        )
        update["responded_jobs"] = metrics.responded_jobs + 1

    updated = metrics.model_copy(update=update)
    if work_order.customer_rating is not None:
        updated = apply_rating(updated, work_order.customer_rating)
    return updated
