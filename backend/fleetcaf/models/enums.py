from enum import Enum


class CafStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class CafPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CafCategory(str, Enum):
    DRIVER_PERFORMANCE = "DRIVER_PERFORMANCE"
    DRIVER_QUALIFICATION = "DRIVER_QUALIFICATION"
    EQUIPMENT_MAINTENANCE = "EQUIPMENT_MAINTENANCE"
    COMPANY_OPERATIONS = "COMPANY_OPERATIONS"
    OTHER = "OTHER"


class ViolationType(str, Enum):
    DRIVER_QUALIFICATION = "Driver_Qualification"
    DRIVER_PERFORMANCE = "Driver_Performance"
    EQUIPMENT = "Equipment"
    COMPANY = "Company"


class SignatureType(str, Enum):
    COMPLETION = "COMPLETION"
    APPROVAL = "APPROVAL"


class StaffUserType(str, Enum):
    MASTER = "master"
    ORGANIZATION = "organization"


class IncidentType(str, Enum):
    ACCIDENT = "ACCIDENT"
    ROADSIDE_INSPECTION = "ROADSIDE_INSPECTION"


class IncidentStatus(str, Enum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"
