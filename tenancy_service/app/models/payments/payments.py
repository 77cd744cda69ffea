import uuid
from sqlalchemy import (
    CheckConstraint, Column, String, Numeric, ForeignKey, DateTime, Uuid, func
)
from sqlalchemy.orm import relationship

from shared.core.database import Base, JSONVariant


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # gateway-facing idempotency key, never rewritten
    reference = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    lease_id = Column(Uuid, ForeignKey("leases.id"), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    # pending | paid | failed
    status = Column(String(16), default="pending", nullable=False)
    # rent | utility_token
    type = Column(String(24), nullable=False)
    utility_type = Column(String(24), nullable=True)
    meter_no = Column(String(64), nullable=True)
    utility_token = Column(String(255), nullable=True)
    # Column name in DB stays "metadata"
    meta = Column("metadata", JSONVariant)
    paid_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("amount > 0", name="payments_amount_positive"),
        CheckConstraint(
            "status IN ('pending', 'paid', 'failed')", name="payments_status_valid"),
    )

    tenant = relationship("Tenant", back_populates="payments")
    lease = relationship("Lease", back_populates="payments")
