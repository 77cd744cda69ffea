from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from ...core.dependencies import get_payment_initiation
from ...crud.payments import payments_crud
from ...schemas.payments.payments_schemas import InitiateRentRequest
from ...services.payment_initiation import PaymentInitiation

router = APIRouter(
    prefix="/api/rent",
    tags=["rent"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/pay", response_model=None)
def pay_rent(
    payload: InitiateRentRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
    initiation: PaymentInitiation = Depends(get_payment_initiation),
):
    result = initiation.initiate_rent(db, current_user.tenant_id, payload)
    return success_response(result, "Payment initialized")


@router.get("/history", response_model=None)
def rent_history(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    return success_response(payments_crud.get_rent_history(db, current_user.tenant_id))
