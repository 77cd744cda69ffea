import logging
import random
import time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.config import settings
from ..core.exceptions import LeaseNotFound, TenantNotFound, UnitNotFound, UnitUnavailable
from ..crud.leasing_tenants import leases_crud, tenants_crud
from ..crud.payments import payments_crud, utility_profiles_crud
from ..crud.space_sites import units_crud
from ..enum.payments_enum import PaymentType, utility_type_for_service
from ..schemas.payments.payments_schemas import (
    InitiateRentRequest,
    InitiationResult,
    MerchantInfo,
    NewLeaseIntent,
    PurchaseUtilityRequest,
    RenewalIntent,
    UtilityIntent,
)
from .gateway_verifier import GatewayVerifier
from .vending_client import VendingClient

logger = logging.getLogger(__name__)

MINOR_UNITS = 100


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def to_minor_units(amount: Decimal) -> int:
    return int(Decimal(amount) * MINOR_UNITS)


class PaymentInitiation:
    """Opens gateway checkouts and records the PENDING payment with its intent."""

    def __init__(
        self,
        gateway: GatewayVerifier,
        vending: VendingClient,
        callback_url: Optional[str] = None,
    ):
        self.gateway = gateway
        self.vending = vending
        self.callback_url = callback_url

    @classmethod
    def from_settings(cls, gateway: GatewayVerifier, vending: VendingClient, cfg=settings):
        return cls(gateway, vending, callback_url=f"{cfg.FRONTEND_URL}/payment/verify")

    def _tenant(self, db: Session, tenant_id: UUID):
        tenant = tenants_crud.get_by_id(db, tenant_id)
        if tenant is None:
            raise TenantNotFound()
        return tenant

    # ----------------------------------------------------
    # Rent: new move-in or renewal
    # ----------------------------------------------------
    def initiate_rent(self, db: Session, tenant_id: UUID, params: InitiateRentRequest) -> InitiationResult:
        lease_id = None
        if params.unit_id:
            unit = units_crud.get_by_id(db, params.unit_id)
            if unit is None:
                raise UnitNotFound()
            if not units_crud.is_available(unit):
                raise UnitUnavailable(
                    "This unit is already occupied or under maintenance.")
            intent = NewLeaseIntent(
                target_unit_id=params.unit_id,
                duration_value=params.duration_value,
                duration_unit=params.duration_unit,
            )
        else:
            current = leases_crud.get_renewable_lease(db, tenant_id)
            if current is None:
                raise LeaseNotFound(
                    "No existing lease found to renew. Please select a unit to move into.")
            lease_id = current.id
            intent = RenewalIntent(
                duration_value=params.duration_value,
                duration_unit=params.duration_unit,
            )

        tenant = self._tenant(db, tenant_id)
        reference = f"RENT-{str(tenant_id)[:5]}-{_epoch_ms()}"
        url = self.gateway.initialize(
            email=tenant.email,
            amount_minor=to_minor_units(params.amount),
            reference=reference,
            callback_url=self.callback_url,
            metadata={
                "custom_fields": [
                    {"display_name": "Payment Type", "value": "RENT"},
                    {"display_name": "Action", "value": intent.action},
                ]
            },
        )

        payments_crud.create_pending(
            db,
            user_id=tenant_id,
            amount=params.amount,
            reference=reference,
            type=PaymentType.rent,
            meta=intent.to_metadata(),
            lease_id=lease_id,
        )
        logger.info(f"Rent checkout {reference} opened ({intent.action})")
        return InitiationResult(url=url, reference=reference)

    # ----------------------------------------------------
    # Utilities
    # ----------------------------------------------------
    def verify_meter(self, service_id: str, meter_number: str, type: Optional[str] = None) -> MerchantInfo:
        return self.vending.verify_merchant(service_id, meter_number, type)

    def initiate_utility_purchase(self, db: Session, tenant_id: UUID, params: PurchaseUtilityRequest) -> InitiationResult:
        tenant = self._tenant(db, tenant_id)
        if params.save_meter:
            utility_profiles_crud.save_meter(
                db, tenant_id, params.service_id, params.meter_number, params.label)

        reference = f"UTIL-{_epoch_ms()}-{random.randint(0, 999)}"
        intent = UtilityIntent(
            service_id=params.service_id,
            meter_number=params.meter_number,
            variation_type=params.type,
            phone=tenants_crud.contact_phone(tenant),
        )
        metadata = intent.to_metadata()

        url = self.gateway.initialize(
            email=tenant.email,
            amount_minor=to_minor_units(params.amount),
            reference=reference,
            metadata=metadata,
        )

        payments_crud.create_pending(
            db,
            user_id=tenant_id,
            amount=params.amount,
            reference=reference,
            type=PaymentType.utility_token,
            meta=metadata,
            utility_type=utility_type_for_service(params.service_id).value,
            meter_no=params.meter_number,
        )
        logger.info(f"Utility checkout {reference} opened for meter {params.meter_number}")
        return InitiationResult(url=url, reference=reference)
