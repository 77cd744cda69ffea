from .leasing_tenants import leases, tenants
from .payments import payments, utility_profiles
from .space_sites import units

__all__ = ["leases", "tenants", "payments", "utility_profiles", "units"]
