"""
caf.py - Pydantic schemas for the CAF API.

Write responses return the full CAF with permission flags recomputed for
the calling actor, so clients never need a second read.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RejectionResponse(BaseModel):
    """Body of every 4xx workflow rejection."""

    status: str = "rejected"
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# --- Requests ---


class CafCreate(BaseModel):
    incident_id: str
    organization_id: str
    violation_type: str = Field(..., description="Violation group: Driver, Equipment or Company")
    violation_codes: list[str] = Field(..., min_length=1)
    assigned_staff_id: str | None = None
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: datetime | None = None
    out_of_service: bool = False


class StatusChangeRequest(BaseModel):
    status: str
    notes: str | None = Field(None, description="Completion notes, required for COMPLETED")


class SignRequest(BaseModel):
    signature_type: str = Field(..., description="COMPLETION or APPROVAL")
    digital_signature: str | None = Field(None, description="Opaque signature payload")
    notes: str | None = None


class CompleteAndSignRequest(BaseModel):
    completion_notes: str | None = None
    digital_signature: str | None = None
    signature_notes: str | None = None


class WorkOrderRequest(BaseModel):
    equipment_id: str | None = None


# --- Responses ---


class StaffSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    position: str | None = None

    class Config:
        from_attributes = True


class OrganizationSummary(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class SignatureRead(BaseModel):
    id: str
    signature_type: str
    staff_id: str
    digital_signature: str
    notes: str | None = None
    ip_address: str | None = None
    signed_at: datetime

    class Config:
        from_attributes = True


class PermissionFlagsRead(BaseModel):
    can_start_work: bool
    can_complete: bool
    can_sign: bool
    can_approve: bool
    can_cancel: bool
    can_create_work_order: bool

    class Config:
        from_attributes = True


class CafRead(BaseModel):
    id: str
    caf_number: str
    incident_id: str | None = None
    organization_id: str
    violation_type: str | None = None
    violation_codes: list[str]
    violation_summary: str | None = None
    title: str | None = None
    description: str | None = None
    category: str
    priority: str
    status: str
    assigned_staff_id: str | None = None
    assigned_by: str | None = None
    created_by: str | None = None
    approved_by: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    approved_at: datetime | None = None
    completion_notes: str | None = None
    maintenance_issue_id: str | None = None
    requires_maintenance: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organization: OrganizationSummary | None = None
    assigned_staff: StaffSummary | None = None
    created_by_staff: StaffSummary | None = None
    approved_by_staff: StaffSummary | None = None
    signatures: list[SignatureRead] = Field(default_factory=list)
    permissions: PermissionFlagsRead | None = None

    class Config:
        from_attributes = True


class MaintenanceIssueRead(BaseModel):
    id: str
    caf_id: str | None = None
    organization_id: str
    equipment_id: str | None = None
    issue_type: str
    priority: str
    status: str
    description: str
    violation_codes: list[str]
    due_date: datetime | None = None
    assigned_staff_id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class WorkOrderResult(BaseModel):
    caf: CafRead
    maintenance_issue: MaintenanceIssueRead


class ActivityRead(BaseModel):
    id: str
    caf_id: str | None = None
    activity_type: str
    title: str
    content: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime

    @field_validator("content", mode="before")
    @classmethod
    def parse_content(cls, value: Any) -> Any:
        # Stored as serialized JSON text
        if value is None:
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return value

    class Config:
        from_attributes = True
