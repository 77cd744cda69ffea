from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ...models.leasing_tenants.tenants import Tenant

# Vending provider insists on a phone number
FALLBACK_PHONE = "08000000000"


def get_by_id(db: Session, tenant_id: UUID) -> Optional[Tenant]:
    return db.query(Tenant).filter(Tenant.id == tenant_id).first()


def contact_phone(tenant: Tenant) -> str:
    return tenant.phone or FALLBACK_PHONE
