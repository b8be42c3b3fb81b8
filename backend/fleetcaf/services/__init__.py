"""Database-facing CAF workflow services."""

from .caf_service import CafService, PdfDocument
from .incident_service import CompletionResult, GenerationResult, IncidentService
from .maintenance import MaintenanceService

__all__ = [
    "CafService",
    "CompletionResult",
    "GenerationResult",
    "IncidentService",
    "MaintenanceService",
    "PdfDocument",
]
