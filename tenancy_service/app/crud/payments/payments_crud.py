import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from ...core.exceptions import PaymentAlreadySettled
from ...enum.payments_enum import PaymentStatus, PaymentType, VendingStatus
from ...models.leasing_tenants.leases import Lease
from ...models.payments.payments import Payment
from ...schemas.payments.payments_schemas import RentHistoryOut, SettlementResult

logger = logging.getLogger(__name__)

LEASE_SETTLED_MESSAGE = "Transaction successful and lease updated."
VEND_SUCCESS_MESSAGE = "Purchase successful!"
VEND_DELAYED_MESSAGE = "Payment received, but token generation delayed."

# Only these columns may be patched when a payment is marked paid
PAID_PATCH_FIELDS = {"utility_token", "lease_id", "meta"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------------------------------
# Reads
# ----------------------------------------------------
def find_by_reference(db: Session, reference: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.reference == reference).first()


def get_rent_history(db: Session, user_id: UUID) -> List[RentHistoryOut]:
    rows = (
        db.query(Payment)
        .options(joinedload(Payment.lease).joinedload(Lease.unit))
        .filter(
            Payment.user_id == user_id,
            Payment.type == PaymentType.rent.value,
            Payment.status == PaymentStatus.paid.value,
        )
        .order_by(Payment.created_at.desc())
        .all()
    )

    history = []
    for p in rows:
        if p.lease is not None and p.lease.unit is not None:
            description = f"Rent for {p.lease.unit.name}"
        else:
            description = "Lease Payment"
        history.append(RentHistoryOut(
            payment_id=p.id,
            amount=float(p.amount),
            date=p.paid_date or p.created_at,
            status="PAID",
            reference=p.reference,
            description=description,
        ))
    return history


def settlement_outcome(payment: Payment) -> SettlementResult:
    """Result for a payment that already reached PAID.

    Built purely from the stored row so every replay for the same reference
    answers identically.
    """
    if payment.type == PaymentType.utility_token.value:
        vend_failed = (payment.meta or {}).get(
            "vending_status") == VendingStatus.FAILED.value
        return SettlementResult(
            success=True,
            message=VEND_DELAYED_MESSAGE if vend_failed else VEND_SUCCESS_MESSAGE,
            reference=payment.reference,
            token=payment.utility_token,
            requires_attention=vend_failed,
        )
    return SettlementResult(
        success=True,
        message=LEASE_SETTLED_MESSAGE,
        reference=payment.reference,
        token=payment.utility_token,
        lease_id=payment.lease_id,
    )


# ----------------------------------------------------
# Writes
# ----------------------------------------------------
def create_pending(
    db: Session,
    user_id: UUID,
    amount: Decimal,
    reference: str,
    type: PaymentType,
    meta: dict,
    lease_id: Optional[UUID] = None,
    utility_type: Optional[str] = None,
    meter_no: Optional[str] = None,
) -> Payment:
    if amount is None or Decimal(amount) <= 0:
        raise ValueError("Payment amount must be greater than zero")

    obj = Payment(
        user_id=user_id,
        lease_id=lease_id,
        amount=amount,
        reference=reference,
        status=PaymentStatus.pending.value,
        type=type.value,
        utility_type=utility_type,
        meter_no=meter_no,
        meta=meta,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def mark_failed(db: Session, reference: str) -> bool:
    """PENDING -> FAILED. Returns False when nothing changed (already
    failed, already paid, or no such row)."""
    changed = (
        db.query(Payment)
        .filter(
            Payment.reference == reference,
            Payment.status == PaymentStatus.pending.value,
        )
        .update({"status": PaymentStatus.failed.value}, synchronize_session=False)
    )
    db.commit()

    if not changed:
        current = find_by_reference(db, reference)
        if current is not None and current.status == PaymentStatus.paid.value:
            logger.warning(
                f"Gateway reports {reference} unsettled but it is already PAID; left as is")
    return bool(changed)


def mark_paid(
    db: Session,
    payment_id: UUID,
    patch: Optional[dict] = None,
    commit: bool = True,
    paid_at: Optional[datetime] = None,
) -> Payment:
    """PENDING -> PAID with ``patch`` merged in.

    ``patch["meta"]`` is merged into the stored metadata rather than
    replacing it. The write only lands while the row is still PENDING; a
    concurrent settlement that got there first raises
    ``PaymentAlreadySettled``. With ``commit=False`` the write joins the
    caller's open transaction.
    """
    patch = dict(patch or {})
    unknown = set(patch) - PAID_PATCH_FIELDS
    if unknown:
        raise ValueError(f"Cannot patch payment fields: {sorted(unknown)}")

    current = db.get(Payment, payment_id)
    if current is None:
        raise PaymentAlreadySettled("Payment row vanished before it could be marked paid.")

    values = {
        "status": PaymentStatus.paid.value,
        "paid_date": paid_at or _utcnow(),
    }
    if "meta" in patch:
        values["meta"] = {**(current.meta or {}), **(patch.pop("meta") or {})}
    values.update(patch)

    changed = (
        db.query(Payment)
        .filter(
            Payment.id == payment_id,
            Payment.status == PaymentStatus.pending.value,
        )
        .update(values, synchronize_session=False)
    )
    if not changed:
        raise PaymentAlreadySettled()

    if commit:
        db.commit()
    db.expire(current)
    return current
