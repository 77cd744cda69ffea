from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from ...core.dependencies import get_payment_initiation
from ...crud.payments import utility_profiles_crud
from ...schemas.payments.payments_schemas import (
    PurchaseUtilityRequest,
    UtilityProfileOut,
    VerifyMeterRequest,
)
from ...services.payment_initiation import PaymentInitiation

router = APIRouter(
    prefix="/api/utilities",
    tags=["utilities"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/verify-meter", response_model=None)
def verify_meter(
    payload: VerifyMeterRequest,
    initiation: PaymentInitiation = Depends(get_payment_initiation),
):
    info = initiation.verify_meter(
        payload.service_id, payload.meter_number, payload.type)
    return success_response(info, "Meter verified")


@router.post("/purchase", response_model=None)
def purchase_utility(
    payload: PurchaseUtilityRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
    initiation: PaymentInitiation = Depends(get_payment_initiation),
):
    result = initiation.initiate_utility_purchase(
        db, current_user.tenant_id, payload)
    return success_response(result, "Payment initialized")


@router.get("/saved-meters", response_model=None)
def saved_meters(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    profiles = utility_profiles_crud.get_for_user(db, current_user.tenant_id)
    return success_response(
        [UtilityProfileOut.model_validate(p) for p in profiles],
        "Saved meters retrieved")


@router.delete("/saved-meters/{profile_id}", response_model=None)
def delete_saved_meter(
    profile_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    utility_profiles_crud.delete_for_user(db, current_user.tenant_id, profile_id)
    return success_response(None, "Meter profile deleted")
