from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ...core.exceptions import UnsupportedPaymentIntent
from ...enum.leasing_tenants_enum import DurationUnit
from ...enum.payments_enum import PaymentAction

MIN_RENT_AMOUNT = Decimal("1000")
MIN_UTILITY_AMOUNT = Decimal("500")


# ----------------------------------------------------
# Intent metadata stored on the payment row
# ----------------------------------------------------
class _IntentBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Intents that talk to a third party must settle outside a DB transaction
    requires_external_call: ClassVar[bool] = False

    def to_metadata(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class _LeaseIntentBase(_IntentBase):
    duration_value: int = Field(default=1, ge=1, alias="durationValue")
    duration_unit: DurationUnit = Field(
        default=DurationUnit.YEAR, alias="durationUnit")

    @field_validator("duration_value", mode="before")
    @classmethod
    def default_duration_value(cls, v):
        return 1 if v in (None, "", 0) else v

    @field_validator("duration_unit", mode="before")
    @classmethod
    def default_duration_unit(cls, v):
        if v in (None, ""):
            return DurationUnit.YEAR
        return v.upper() if isinstance(v, str) else v


class NewLeaseIntent(_LeaseIntentBase):
    action: Literal["NEW_LEASE"] = "NEW_LEASE"
    target_unit_id: UUID = Field(alias="targetUnitId")


class RenewalIntent(_LeaseIntentBase):
    action: Literal["RENT_RENEWAL"] = "RENT_RENEWAL"


class UtilityIntent(_IntentBase):
    requires_external_call: ClassVar[bool] = True

    action: Literal["UTILITY_PURCHASE"] = "UTILITY_PURCHASE"
    service_id: str = Field(alias="serviceID")
    meter_number: str = Field(alias="meterNumber")
    variation_type: Optional[str] = Field(default=None, alias="type")
    phone: str


LeaseIntent = Union[NewLeaseIntent, RenewalIntent]
PaymentIntent = Annotated[
    Union[NewLeaseIntent, RenewalIntent, UtilityIntent],
    Field(discriminator="action"),
]

_intent_adapter = TypeAdapter(PaymentIntent)


def parse_intent(metadata: Optional[dict]) -> PaymentIntent:
    """Turn the stored metadata blob into one of the closed intent variants."""
    if not isinstance(metadata, dict) or "action" not in metadata:
        raise UnsupportedPaymentIntent()
    if metadata["action"] not in [a.value for a in PaymentAction]:
        raise UnsupportedPaymentIntent(
            f"Unknown payment action {metadata['action']!r}")
    try:
        return _intent_adapter.validate_python(metadata)
    except ValidationError as e:
        raise UnsupportedPaymentIntent(
            f"Invalid payment metadata for action {metadata.get('action')!r}: "
            f"{e.error_count()} error(s)"
        ) from e


# ----------------------------------------------------
# Provider results
# ----------------------------------------------------
class GatewayVerification(BaseModel):
    settled: bool
    raw_status: Optional[str] = None
    # minor units (kobo), as the gateway reports it
    raw_amount: Optional[int] = None
    gateway_response: Optional[str] = None


class VendResult(BaseModel):
    token: Optional[str] = None
    provider_transaction_id: Optional[str] = None


class MerchantInfo(BaseModel):
    customer_name: Optional[str] = None
    address: Optional[str] = None
    valid: bool = True


# ----------------------------------------------------
# Settlement
# ----------------------------------------------------
class VerifyPaymentRequest(BaseModel):
    reference: str = Field(min_length=1)


class SettlementResult(BaseModel):
    success: bool
    message: str
    reference: Optional[str] = None
    token: Optional[str] = None
    requires_attention: bool = False
    lease_id: Optional[UUID] = None


# ----------------------------------------------------
# Initiation
# ----------------------------------------------------
class InitiateRentRequest(BaseModel):
    amount: Decimal = Field(ge=MIN_RENT_AMOUNT)
    # present for a new move-in, absent for a renewal
    unit_id: Optional[UUID] = None
    duration_value: int = Field(default=1, ge=1)
    duration_unit: DurationUnit = DurationUnit.YEAR


class PurchaseUtilityRequest(BaseModel):
    service_id: str = Field(min_length=1, alias="serviceID")
    meter_number: str = Field(min_length=5, alias="meterNumber")
    type: Optional[str] = None
    amount: Decimal = Field(ge=MIN_UTILITY_AMOUNT)
    # keep this meter on the tenant's saved list
    save_meter: bool = Field(default=False, alias="saveMeter")
    label: Optional[str] = Field(default=None, max_length=64)

    model_config = ConfigDict(populate_by_name=True)


class VerifyMeterRequest(BaseModel):
    service_id: str = Field(min_length=1, alias="serviceID")
    meter_number: str = Field(min_length=5, alias="meterNumber")
    type: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class UtilityProfileOut(BaseModel):
    id: UUID
    type: str
    provider: str
    identifier: str
    label: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InitiationResult(BaseModel):
    url: str
    reference: str


class RentHistoryOut(BaseModel):
    payment_id: UUID
    amount: float
    date: datetime
    status: str
    reference: str
    description: str

    model_config = {"from_attributes": True}

