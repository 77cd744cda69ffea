from enum import Enum


class LeaseStatus(str, Enum):
    active = "active"
    expired = "expired"
    terminated = "terminated"


class TenantStatus(str, Enum):
    pending = "pending"
    active = "active"
    inactive = "inactive"


class DurationUnit(str, Enum):
    MONTH = "MONTH"
    YEAR = "YEAR"


# Leases a tenant may still renew
RENEWABLE_LEASE_STATUSES = [LeaseStatus.active.value, LeaseStatus.expired.value]
