from .organization import Organization
from .staff import Staff
from .incident import Incident, IncidentViolation
from .caf import CorrectiveActionForm
from .signature import CafSignature, SignatureImmutableError
from .maintenance_issue import MaintenanceIssue
from .activity_log import ActivityLog
from .enums import (
    CafCategory,
    CafPriority,
    CafStatus,
    IncidentStatus,
    IncidentType,
    MaintenanceStatus,
    SignatureType,
    StaffUserType,
    ViolationType,
)

__all__ = [
    "Organization",
    "Staff",
    "Incident",
    "IncidentViolation",
    "CorrectiveActionForm",
    "CafSignature",
    "SignatureImmutableError",
    "MaintenanceIssue",
    "ActivityLog",
    "CafCategory",
    "CafPriority",
    "CafStatus",
    "IncidentStatus",
    "IncidentType",
    "MaintenanceStatus",
    "SignatureType",
    "StaffUserType",
    "ViolationType",
]
