"""Maintenance error taxonomy and tagged operation results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class MaintenanceErrorCode(str, Enum):
    """Closed set of business-rule failure codes."""

    WORK_ORDER_NOT_FOUND = "WORK_ORDER_NOT_FOUND"
    WORK_ORDER_NUMBER_EXISTS = "WORK_ORDER_NUMBER_EXISTS"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    VENDOR_NOT_FOUND = "VENDOR_NOT_FOUND"
    VENDOR_NOT_AVAILABLE = "VENDOR_NOT_AVAILABLE"
    VENDOR_CODE_EXISTS = "VENDOR_CODE_EXISTS"
    SLA_ALREADY_PAUSED = "SLA_ALREADY_PAUSED"
    SLA_NOT_PAUSED = "SLA_NOT_PAUSED"
    INVALID_WORK_ORDER_DATA = "INVALID_WORK_ORDER_DATA"
    INVALID_VENDOR_DATA = "INVALID_VENDOR_DATA"
    NO_AVAILABLE_VENDOR = "NO_AVAILABLE_VENDOR"
    # Reserved for cost-threshold gating
    COST_APPROVAL_REQUIRED = "COST_APPROVAL_REQUIRED"


@dataclass(frozen=True)
class ServiceError:
    code: MaintenanceErrorCode
    message: str


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: ServiceError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> MaintenanceErrorCode:
        return self.error.code


# Subscriptable: Result[WorkOrder]
Result = Union[Ok[T], Err]


def err(code: MaintenanceErrorCode, message: str) -> Err:
    return Err(ServiceError(code=code, message=message))


# =============================================================================
# Exceptions raised by pure domain functions
# =============================================================================


class MaintenanceDomainError(Exception):
    """Business-rule violation raised by pure domain code; converted to Err by the service."""

    code: MaintenanceErrorCode = MaintenanceErrorCode.INVALID_WORK_ORDER_DATA

    def __init__(self, message: str, code: MaintenanceErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_result(self) -> Err:
        return err(self.code, self.message)


class InvalidTransitionError(MaintenanceDomainError):
    code = MaintenanceErrorCode.INVALID_STATUS_TRANSITION


class SLAStateError(MaintenanceDomainError):
    """Pause/resume called out of sequence."""
