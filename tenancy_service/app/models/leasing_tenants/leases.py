import uuid
from sqlalchemy import CheckConstraint, Column, String, Date, Numeric, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shared.core.database import Base


class Lease(Base):
    __tablename__ = "leases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    rent_amount = Column(Numeric(14, 2), nullable=False)
    # active | expired | terminated
    status = Column(String(16), default="active", nullable=False)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="leases_end_after_start"),
    )

    # relationships
    tenant = relationship("Tenant", back_populates="leases")
    unit = relationship("Unit", back_populates="leases")
    payments = relationship("Payment", back_populates="lease")
