import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, exists, or_
from sqlalchemy.orm import Session

from ...core.exceptions import LeaseNotFound, UnitUnavailable
from ...enum.leasing_tenants_enum import (
    RENEWABLE_LEASE_STATUSES, DurationUnit, LeaseStatus, TenantStatus
)
from ...enum.space_sites_enum import UnitStatus
from ...models.leasing_tenants.leases import Lease
from ...models.leasing_tenants.tenants import Tenant
from ...models.space_sites.units import Unit

logger = logging.getLogger(__name__)


# ----------------------------------------------------
# Duration arithmetic
# ----------------------------------------------------
def add_duration(start: date, value: int, unit: DurationUnit) -> date:
    """Calendar addition: Jan 31 + 1 MONTH is the last day of February."""
    if value < 1:
        raise ValueError("Duration must be at least 1")
    if DurationUnit(unit) == DurationUnit.YEAR:
        return start + relativedelta(years=value)
    return start + relativedelta(months=value)


# ----------------------------------------------------
# Reads
# ----------------------------------------------------
def get_by_id(db: Session, lease_id: Optional[UUID]) -> Optional[Lease]:
    if lease_id is None:
        return None
    return db.query(Lease).filter(Lease.id == lease_id).first()


def get_renewable_lease(db: Session, tenant_id: UUID) -> Optional[Lease]:
    return (
        db.query(Lease)
        .filter(
            Lease.tenant_id == tenant_id,
            Lease.status.in_(RENEWABLE_LEASE_STATUSES),
        )
        .order_by(Lease.end_date.desc())
        .first()
    )


# ----------------------------------------------------
# Transitions
# Both run inside the caller's transaction and never commit.
# ----------------------------------------------------
def occupy_unit(db: Session, unit_id: UUID) -> None:
    """AVAILABLE -> OCCUPIED as a single conditional write.

    Two settlements racing for the same unit both reach this update; only
    the first one to write still sees ``available`` in the WHERE clause.
    """
    changed = (
        db.query(Unit)
        .filter(Unit.id == unit_id, Unit.status == UnitStatus.available.value)
        .update({"status": UnitStatus.occupied.value}, synchronize_session=False)
    )
    if not changed:
        raise UnitUnavailable()


def reclaim_unit(db: Session, lease: Lease) -> None:
    """Re-occupy the unit of a lapsed lease being renewed.

    Refused when another active lease now holds the unit; the check and the
    write are one statement.
    """
    let_to_someone_else = exists().where(
        Lease.unit_id == lease.unit_id,
        Lease.id != lease.id,
        Lease.status == LeaseStatus.active.value,
    )
    changed = (
        db.query(Unit)
        .filter(
            Unit.id == lease.unit_id,
            or_(
                Unit.status == UnitStatus.available.value,
                and_(Unit.status == UnitStatus.occupied.value, ~let_to_someone_else),
            ),
        )
        .update({"status": UnitStatus.occupied.value}, synchronize_session=False)
    )
    if not changed:
        raise UnitUnavailable(
            "The unit was let to another tenant after this lease lapsed. "
            "You have been charged; please contact support.")


def create_lease(
    db: Session,
    tenant_id: UUID,
    unit_id: UUID,
    amount: Decimal,
    duration_value: int,
    duration_unit: DurationUnit,
    today: Optional[date] = None,
) -> Lease:
    today = today or date.today()

    occupy_unit(db, unit_id)

    lease = Lease(
        tenant_id=tenant_id,
        unit_id=unit_id,
        start_date=today,
        end_date=add_duration(today, duration_value, duration_unit),
        rent_amount=amount,
        status=LeaseStatus.active.value,
    )
    db.add(lease)

    # First lease activates the tenant account
    db.query(Tenant).filter(Tenant.id == tenant_id).update(
        {"status": TenantStatus.active.value}, synchronize_session=False)

    db.flush()
    logger.info(f"Lease {lease.id} created for unit {unit_id} until {lease.end_date}")
    return lease


def renew_lease(
    db: Session,
    lease_id: Optional[UUID],
    duration_value: int,
    duration_unit: DurationUnit,
    today: Optional[date] = None,
) -> Lease:
    today = today or date.today()

    lease = get_by_id(db, lease_id)
    if lease is None:
        raise LeaseNotFound()

    if lease.status != LeaseStatus.active.value:
        reclaim_unit(db, lease)

    # Unused term is kept, but a lapsed lease restarts from today
    base = max(today, lease.end_date)
    lease.end_date = add_duration(base, duration_value, duration_unit)
    lease.status = LeaseStatus.active.value

    db.flush()
    logger.info(f"Lease {lease.id} renewed until {lease.end_date}")
    return lease
