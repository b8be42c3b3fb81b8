"""
json_export.py - Document data for a CAF.

Builds the plain dict that the PDF renderer consumes. The PDF never reads
ORM rows directly; every value it prints comes from this dict.
"""

from datetime import datetime
from typing import Any

from fleetcaf.models import CorrectiveActionForm
from fleetcaf.workflow.transitions import utcnow


def _format_iso8601(dt: datetime | None) -> str | None:
    """Format a naive-UTC timestamp as ISO 8601 with a trailing 'Z'."""
    if dt is None:
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + "Z"


def _staff_block(staff: Any) -> dict[str, Any] | None:
    if staff is None:
        return None
    return {
        "id": staff.id,
        "name": staff.full_name,
        "position": staff.position or "N/A",
    }


def generate_caf_export(caf: CorrectiveActionForm) -> dict[str, Any]:
    """
    Build the export dictionary for caf.

    Signatures are listed in signed_at order; timestamps are ISO 8601 UTC.
    """
    signatures = [
        {
            "signature_type": sig.signature_type,
            "signed_at": _format_iso8601(sig.signed_at),
            "digital_signature": sig.digital_signature or "",
            "notes": sig.notes,
            "staff_name": sig.staff.full_name if sig.staff else sig.staff_id,
        }
        for sig in sorted(caf.signatures, key=lambda s: s.signed_at)
    ]

    return {
        "export_timestamp": _format_iso8601(utcnow()),
        "id": caf.id,
        "caf_number": caf.caf_number,
        "incident_id": caf.incident_id or "N/A",
        "violation_type": caf.violation_type or "Unknown",
        "violation_codes": list(caf.violation_codes or []),
        "violation_summary": caf.violation_summary or "No summary provided",
        "title": caf.title,
        "description": caf.description,
        "priority": caf.priority,
        "category": caf.category,
        "status": caf.status,
        "due_date": _format_iso8601(caf.due_date),
        "completion_notes": caf.completion_notes,
        "completed_at": _format_iso8601(caf.completed_at),
        "approved_at": _format_iso8601(caf.approved_at),
        "created_at": _format_iso8601(caf.created_at),
        "organization": {"name": caf.organization.name} if caf.organization else None,
        "assigned_staff": _staff_block(caf.assigned_staff),
        "created_by_staff": _staff_block(caf.created_by_staff),
        "approved_by_staff": _staff_block(caf.approved_by_staff),
        "signatures": signatures,
    }
