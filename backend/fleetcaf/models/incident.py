"""
incident.py - Violation-bearing incidents (accidents and roadside inspections).

An incident is the source of one or more CAFs. Its status is derived from
the CAFs that cover its violations: RESOLVED once all of them are approved.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleetcaf.database import Base
from fleetcaf.models.enums import IncidentStatus


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(
        String(36), ForeignKey("organizations.id"), nullable=False, index=True
    )
    incident_type = Column(String(30), nullable=False, index=True)
    reference_number = Column(String(100), nullable=True)
    equipment_id = Column(String(36), nullable=True)
    status = Column(
        String(20), nullable=False, default=IncidentStatus.PENDING.value, index=True
    )
    occurred_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    organization = relationship("Organization")
    violations = relationship(
        "IncidentViolation",
        back_populates="incident",
        cascade="all, delete-orphan",
        order_by="IncidentViolation.violation_code",
    )
    cafs = relationship("CorrectiveActionForm", back_populates="incident")


class IncidentViolation(Base):
    __tablename__ = "incident_violations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    incident_id = Column(
        String(36), ForeignKey("incidents.id"), nullable=False, index=True
    )
    violation_code = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")
    violation_type = Column(String(30), nullable=True)  # ViolationType value
    out_of_service = Column(Boolean, nullable=False, default=False)
    inspector_comments = Column(Text, nullable=True)
    # Set once a CAF covers this violation
    caf_id = Column(
        String(36), ForeignKey("corrective_action_forms.id"), nullable=True, index=True
    )

    incident = relationship("Incident", back_populates="violations")
