import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleetcaf.database import Base
from fleetcaf.models.enums import StaffUserType


class Staff(Base):
    """
    A person acting inside an organization.

    Capability flags are per-staff and independent of any CAF status.
    user_type "master" marks the master tier, which overrides organization
    scoping and capability checks for approval.
    """

    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(
        String(36), ForeignKey("organizations.id"), nullable=True, index=True
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    position = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    user_type = Column(
        String(20), nullable=False, default=StaffUserType.ORGANIZATION.value
    )
    can_sign_cafs = Column(Boolean, nullable=False, default=False)
    can_approve_cafs = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    organization = relationship("Organization", back_populates="staff")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
