from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from ...core.dependencies import get_reconciliation_engine
from ...schemas.payments.payments_schemas import VerifyPaymentRequest
from ...services.reconciliation_engine import ReconciliationEngine

router = APIRouter(
    prefix="/api/payments",
    tags=["Payment Gateway"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/verify", response_model=None)
def verify_payment(
    payload: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    """Called by the frontend after the gateway redirect, and safe to repeat."""
    result = engine.settle(db, payload.reference)
    return success_response(result, "Payment verified successfully")
