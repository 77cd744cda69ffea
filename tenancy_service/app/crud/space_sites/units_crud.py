from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ...enum.space_sites_enum import UnitStatus
from ...models.space_sites.units import Unit


def get_by_id(db: Session, unit_id: UUID) -> Optional[Unit]:
    return db.query(Unit).filter(Unit.id == unit_id).first()


def is_available(unit: Optional[Unit]) -> bool:
    return unit is not None and unit.status == UnitStatus.available.value
