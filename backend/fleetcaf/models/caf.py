"""
caf.py - Corrective Action Form model.

A CAF is owned by its organization and mutated only through the workflow
operations in fleetcaf.services.caf_service. It is never deleted; REJECTED
and CANCELLED are terminal.
"""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleetcaf.database import Base
from fleetcaf.models.enums import CafCategory, CafPriority, CafStatus


class CorrectiveActionForm(Base):
    __tablename__ = "corrective_action_forms"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    caf_number = Column(String(30), nullable=False, unique=True, index=True)

    # Classification
    violation_type = Column(String(30), nullable=True)  # ViolationType value
    violation_codes = Column(JSON, nullable=False, default=list)
    category = Column(String(30), nullable=False, default=CafCategory.OTHER.value)
    priority = Column(String(10), nullable=False, default=CafPriority.MEDIUM.value)

    # Workflow state
    status = Column(
        String(20), nullable=False, default=CafStatus.ASSIGNED.value, index=True
    )

    # Assignment
    organization_id = Column(
        String(36), ForeignKey("organizations.id"), nullable=False, index=True
    )
    assigned_staff_id = Column(
        String(36), ForeignKey("staff.id"), nullable=True, index=True
    )
    assigned_by = Column(String(36), ForeignKey("staff.id"), nullable=True)
    created_by = Column(String(36), ForeignKey("staff.id"), nullable=True)
    approved_by = Column(String(36), ForeignKey("staff.id"), nullable=True)

    # Temporal
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
    due_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)

    # Narrative
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    violation_summary = Column(Text, nullable=True)
    completion_notes = Column(Text, nullable=True)

    # Linkage
    incident_id = Column(
        String(36), ForeignKey("incidents.id"), nullable=True, index=True
    )
    # Plain column: maintenance_issues.caf_id carries the foreign key
    maintenance_issue_id = Column(String(36), nullable=True)
    requires_maintenance = Column(Boolean, nullable=False, default=False)

    # Relationships
    organization = relationship("Organization")
    incident = relationship("Incident", back_populates="cafs")
    assigned_staff = relationship("Staff", foreign_keys=[assigned_staff_id])
    created_by_staff = relationship("Staff", foreign_keys=[created_by])
    approved_by_staff = relationship("Staff", foreign_keys=[approved_by])
    signatures = relationship(
        "CafSignature",
        back_populates="caf",
        order_by="CafSignature.signed_at",
    )
    maintenance_issues = relationship("MaintenanceIssue", back_populates="caf")
