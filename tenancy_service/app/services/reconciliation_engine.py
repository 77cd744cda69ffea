"""Payment settlement.

``ReconciliationEngine.settle`` confirms a reference with the gateway and
applies the intent recorded on the payment row. Lease intents run as one
database transaction (``settle_pure_state``); utility intents call the
vending provider with no transaction open and record the outcome afterwards
(``settle_with_external_call``). Which path an intent takes is fixed by its
``requires_external_call`` flag.

Settling the same reference again after it reached PAID returns the stored
outcome and performs no side effect.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    AmountMismatch,
    PaymentAlreadySettled,
    PaymentNotSettled,
    PaymentRecordMissing,
    UnitUnavailable,
    VendingFailed,
)
from ..crud.leasing_tenants import leases_crud
from ..crud.payments import payments_crud
from ..enum.payments_enum import PaymentStatus, VendingStatus
from ..models.payments.payments import Payment
from ..schemas.payments.payments_schemas import (
    GatewayVerification,
    LeaseIntent,
    NewLeaseIntent,
    SettlementResult,
    UtilityIntent,
    parse_intent,
)
from .gateway_verifier import GatewayVerifier
from .vending_client import VendingClient

logger = logging.getLogger(__name__)

# Gateway amounts are in minor units (kobo)
MINOR_UNITS = Decimal(100)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationEngine:

    def __init__(
        self,
        gateway: GatewayVerifier,
        vending: VendingClient,
        amount_tolerance: Optional[Decimal] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.gateway = gateway
        self.vending = vending
        self.amount_tolerance = amount_tolerance
        self.clock = clock

    # ----------------------------------------------------
    # Entry point
    # ----------------------------------------------------
    def settle(self, db: Session, reference: str) -> SettlementResult:
        # UpstreamUnavailable propagates untouched; nothing has been written
        verification = self.gateway.verify(reference)

        if not verification.settled:
            payments_crud.mark_failed(db, reference)
            raise PaymentNotSettled()

        payment = payments_crud.find_by_reference(db, reference)
        if payment is None:
            logger.error(
                f"Gateway settled {reference} but no payment row exists")
            raise PaymentRecordMissing()

        if payment.status == PaymentStatus.paid.value:
            logger.info(f"Replaying recorded outcome for {reference}")
            return payments_crud.settlement_outcome(payment)

        if payment.status == PaymentStatus.failed.value:
            raise PaymentNotSettled("Payment was previously marked as failed.")

        self._check_amount(payment, verification)

        intent = parse_intent(payment.meta)
        if intent.requires_external_call:
            return self.settle_with_external_call(db, payment, intent)
        return self.settle_pure_state(db, payment, intent)

    # ----------------------------------------------------
    # Lease intents: one transaction, all or nothing
    # ----------------------------------------------------
    def settle_pure_state(self, db: Session, payment: Payment, intent: LeaseIntent) -> SettlementResult:
        if intent.requires_external_call:
            raise TypeError(
                f"{type(intent).__name__} needs an external call and cannot run in a transaction")

        reference = payment.reference
        now = self.clock()
        try:
            if isinstance(intent, NewLeaseIntent):
                lease = leases_crud.create_lease(
                    db,
                    tenant_id=payment.user_id,
                    unit_id=intent.target_unit_id,
                    amount=payment.amount,
                    duration_value=intent.duration_value,
                    duration_unit=intent.duration_unit,
                    today=now.date(),
                )
            else:
                lease = leases_crud.renew_lease(
                    db,
                    lease_id=payment.lease_id,
                    duration_value=intent.duration_value,
                    duration_unit=intent.duration_unit,
                    today=now.date(),
                )

            payments_crud.mark_paid(
                db, payment.id, {"lease_id": lease.id}, commit=False, paid_at=now)
            db.commit()
        except PaymentAlreadySettled:
            db.rollback()
            logger.info(
                f"{reference} was settled concurrently; discarding duplicate lease changes")
            return self._recorded_outcome(db, reference)
        except UnitUnavailable:
            db.rollback()
            # A duplicate delivery of this same reference may have taken the unit
            current = payments_crud.find_by_reference(db, reference)
            if current is not None and current.status == PaymentStatus.paid.value:
                logger.info(f"{reference} was settled concurrently; unit already ours")
                return payments_crud.settlement_outcome(current)
            logger.warning(
                f"Settlement of {reference} rolled back: {intent.action} unit is taken")
            raise
        except Exception as e:
            db.rollback()
            logger.warning(
                f"Settlement of {reference} rolled back: {type(e).__name__}: {e}")
            raise

        return self._recorded_outcome(db, reference)

    # ----------------------------------------------------
    # Utility intents: network call first, ledger after
    # ----------------------------------------------------
    def settle_with_external_call(self, db: Session, payment: Payment, intent: UtilityIntent) -> SettlementResult:
        if not intent.requires_external_call:
            raise TypeError(
                f"{type(intent).__name__} is pure state and must settle transactionally")

        reference = payment.reference
        payment_id = payment.id
        amount = payment.amount
        # Release the read transaction before the provider call
        db.rollback()

        try:
            vend = self.vending.purchase(
                reference,
                intent.service_id,
                intent.meter_number,
                intent.variation_type,
                amount,
                intent.phone,
            )
        except VendingFailed as e:
            # Money is captured regardless; flag for manual follow-up
            logger.error(f"Vending failed for {reference}: {e.reason}")
            patch = {
                "meta": {
                    "vending_status": VendingStatus.FAILED.value,
                    "error_msg": e.reason,
                },
            }
        else:
            patch = {
                "utility_token": vend.token,
                "meta": {
                    "vtpass_txn": vend.provider_transaction_id,
                    "vending_status": VendingStatus.SUCCESS.value,
                },
            }

        try:
            payments_crud.mark_paid(db, payment_id, patch, paid_at=self.clock())
        except PaymentAlreadySettled:
            db.rollback()
            logger.info(
                f"{reference} was settled concurrently; keeping the first recorded outcome")

        return self._recorded_outcome(db, reference)

    # ----------------------------------------------------
    # Helpers
    # ----------------------------------------------------
    def _recorded_outcome(self, db: Session, reference: str) -> SettlementResult:
        return payments_crud.settlement_outcome(
            payments_crud.find_by_reference(db, reference))

    def _check_amount(self, payment: Payment, verification: GatewayVerification) -> None:
        if self.amount_tolerance is None or verification.raw_amount is None:
            return
        settled = Decimal(verification.raw_amount) / MINOR_UNITS
        if abs(settled - Decimal(payment.amount)) > self.amount_tolerance:
            logger.error(
                f"Amount mismatch on {payment.reference}: gateway {settled}, recorded {payment.amount}")
            raise AmountMismatch()
