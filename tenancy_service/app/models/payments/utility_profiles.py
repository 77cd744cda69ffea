import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid, UniqueConstraint, func
from sqlalchemy.orm import relationship

from shared.core.database import Base


class UtilityProfile(Base):
    """A meter a tenant chose to keep for repeat purchases."""
    __tablename__ = "utility_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    # electricity | water | waste | service_charge
    type = Column(String(24), nullable=False)
    # VTPass service id, e.g. "ikeja-electric-prepaid"
    provider = Column(String(64), nullable=False)
    # meter number
    identifier = Column(String(64), nullable=False)
    label = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "identifier", name="uq_utility_profile_user_meter"),
    )

    tenant = relationship("Tenant", back_populates="utility_profiles")
