import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text

from fleetcaf.database import Base


class ActivityLog(Base):
    """Audit trail entry for a CAF action (status change, signature, export)."""

    __tablename__ = "activity_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    caf_id = Column(
        String(36), ForeignKey("corrective_action_forms.id"), nullable=True, index=True
    )
    activity_type = Column(String(50), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)  # JSON-serialized details
    tags = Column(JSON, nullable=False, default=list)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False)
