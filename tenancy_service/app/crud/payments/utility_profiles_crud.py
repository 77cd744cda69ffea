import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...core.exceptions import MeterProfileNotFound
from ...enum.payments_enum import utility_type_for_service
from ...models.payments.utility_profiles import UtilityProfile

logger = logging.getLogger(__name__)


def get_for_user(db: Session, user_id: UUID) -> List[UtilityProfile]:
    return (
        db.query(UtilityProfile)
        .filter(UtilityProfile.user_id == user_id)
        .order_by(UtilityProfile.created_at.desc())
        .all()
    )


def find_by_meter(db: Session, user_id: UUID, meter_number: str) -> Optional[UtilityProfile]:
    return (
        db.query(UtilityProfile)
        .filter(
            UtilityProfile.user_id == user_id,
            UtilityProfile.identifier == meter_number,
        )
        .first()
    )


def save_meter(
    db: Session,
    user_id: UUID,
    service_id: str,
    meter_number: str,
    label: Optional[str] = None,
) -> UtilityProfile:
    """Keep a meter on the tenant's list; an already saved meter is returned as is."""
    existing = find_by_meter(db, user_id, meter_number)
    if existing is not None:
        return existing

    profile = UtilityProfile(
        user_id=user_id,
        type=utility_type_for_service(service_id).value,
        provider=service_id,
        identifier=meter_number,
        label=label or f"{service_id} Meter",
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # saved by a concurrent purchase for the same meter
        db.rollback()
        return find_by_meter(db, user_id, meter_number)
    db.refresh(profile)
    logger.info(f"Meter {meter_number} saved for tenant {user_id}")
    return profile


def delete_for_user(db: Session, user_id: UUID, profile_id: UUID) -> None:
    profile = (
        db.query(UtilityProfile)
        .filter(UtilityProfile.id == profile_id, UtilityProfile.user_id == user_id)
        .first()
    )
    if profile is None:
        raise MeterProfileNotFound()
    db.delete(profile)
    db.commit()
