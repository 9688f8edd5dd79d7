"""Application constants."""

from maintenance_engine.types import UserId

# Acting user recorded on timeline entries produced by automated sweeps.
SYSTEM_USER_ID = UserId("system")

WORK_ORDER_NUMBER_PREFIX = "WO"
VENDOR_CODE_PREFIX = "VND"
SEQUENCE_PAD_WIDTH = 4

# Vendor scoring weights
VENDOR_BASE_SCORE = 50.0
VENDOR_PREFERRED_BONUS = 20.0
VENDOR_SLA_COMPLIANCE_WEIGHT = 0.1
VENDOR_RATING_WEIGHT = 5.0
VENDOR_REOPEN_PENALTY = 10.0
VENDOR_EMERGENCY_BONUS = 30.0

MIN_CUSTOMER_RATING = 1
MAX_CUSTOMER_RATING = 5
