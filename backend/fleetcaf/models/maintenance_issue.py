import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleetcaf.database import Base
from fleetcaf.models.enums import MaintenanceStatus


class MaintenanceIssue(Base):
    """Maintenance work order raised from an equipment CAF."""

    __tablename__ = "maintenance_issues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    caf_id = Column(
        String(36), ForeignKey("corrective_action_forms.id"), nullable=True, index=True
    )
    organization_id = Column(
        String(36), ForeignKey("organizations.id"), nullable=False, index=True
    )
    equipment_id = Column(String(36), nullable=True, index=True)
    issue_type = Column(String(30), nullable=False, default="CORRECTIVE_ACTION")
    priority = Column(String(10), nullable=False)
    status = Column(
        String(20), nullable=False, default=MaintenanceStatus.SCHEDULED.value
    )
    description = Column(Text, nullable=False)
    violation_codes = Column(JSON, nullable=False, default=list)
    due_date = Column(DateTime, nullable=True)
    assigned_staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    created_by = Column(String(36), ForeignKey("staff.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    caf = relationship("CorrectiveActionForm", back_populates="maintenance_issues")
