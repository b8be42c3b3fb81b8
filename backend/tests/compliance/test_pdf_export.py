"""
test_pdf_export.py - CAF document rendering.

Verifies:
1. Both variants render valid PDF bytes; only the fillable one carries form fields
2. Unknown variants are refused
3. The export dict carries signatures in signing order with ISO timestamps
"""

from datetime import datetime

import pytest

from fleetcaf.compliance import generate_caf_export, generate_caf_pdf, pdf_filename
from fleetcaf.compliance.pdf_export import template_type
from fleetcaf.models import CafSignature


def sample_export(**overrides):
    data = {
        "caf_number": "CAF-2026-0001",
        "status": "ASSIGNED",
        "created_at": "2026-03-01T14:30:00Z",
        "organization": {"name": "Acme Freight"},
        "incident_id": "inc-1",
        "violation_type": "Equipment",
        "category": "EQUIPMENT_MAINTENANCE",
        "priority": "CRITICAL",
        "violation_codes": ["393.9", "393.47E"],
        "violation_summary": "Equipment violations: 393.9, 393.47E",
        "description": "Corrective action required for the following violations:\n\n393.9",
        "assigned_staff": {"id": "s-1", "name": "Pat Mechanic", "position": "Shop Lead"},
        "due_date": "2026-03-02T14:30:00Z",
        "completion_notes": None,
        "completed_at": None,
        "approved_at": None,
        "approved_by_staff": None,
        "signatures": [],
    }
    data.update(overrides)
    return data


def test_fillable_pdf():
    pdf_bytes = generate_caf_pdf(sample_export(), "fillable")
    assert pdf_bytes.startswith(b"%PDF")
    assert len(pdf_bytes) > 1000


def test_fillable_pdf_has_form_fields():
    pdf_bytes = generate_caf_pdf(sample_export(), "fillable")
    assert b"/AcroForm" in pdf_bytes


def test_completed_pdf_has_no_form_fields():
    pdf_bytes = generate_caf_pdf(sample_export(status="COMPLETED", completion_notes="Done"), "completed")
    assert b"/AcroForm" not in pdf_bytes


def test_completed_approved_pdf_with_signatures():
    data = sample_export(
        status="APPROVED",
        completion_notes="Lamp replaced & brakes adjusted <shop ticket 55>",
        completed_at="2026-03-02T09:00:00Z",
        approved_at="2026-03-02T11:00:00Z",
        approved_by_staff={"id": "s-2", "name": "Sam Safety", "position": "Safety Officer"},
        signatures=[
            {"signature_type": "COMPLETION", "staff_name": "Pat Mechanic",
             "signed_at": "2026-03-02T09:05:00Z"},
        ],
    )
    pdf_bytes = generate_caf_pdf(data, "completed")
    assert pdf_bytes.startswith(b"%PDF")


def test_missing_fields_render_as_placeholders():
    pdf_bytes = generate_caf_pdf({"caf_number": "CAF-2026-0002"}, "fillable")
    assert pdf_bytes.startswith(b"%PDF")


def test_invalid_variant():
    with pytest.raises(ValueError):
        generate_caf_pdf(sample_export(), "docx")


def test_filename():
    assert pdf_filename("CAF-2026-0001", "completed", "2026-03-02") == (
        "CAF_CAF-2026-0001_completed_2026-03-02.pdf"
    )


@pytest.mark.parametrize("category,expected", [
    ("DRIVER_PERFORMANCE", "DRIVER"),
    ("DRIVER_QUALIFICATION", "DRIVER"),
    ("EQUIPMENT_MAINTENANCE", "EQUIPMENT"),
    ("COMPANY_OPERATIONS", "COMPANY"),
    ("OTHER", "GENERAL"),
    (None, "GENERAL"),
])
def test_template_type(category, expected):
    assert template_type(category) == expected


def test_export_from_database(db, make_caf, assignee, approver):
    caf = make_caf(assignee, status="COMPLETED")
    db.add_all([
        CafSignature(caf_id=caf.id, staff_id=approver.id, signature_type="COMPLETION",
                     digital_signature="sig-b", signed_at=datetime(2026, 3, 2, 10, 0, 0)),
        CafSignature(caf_id=caf.id, staff_id=assignee.id, signature_type="COMPLETION",
                     digital_signature="sig-a", signed_at=datetime(2026, 3, 2, 9, 0, 0)),
    ])
    db.commit()

    export = generate_caf_export(caf)

    assert export["caf_number"] == caf.caf_number
    assert export["organization"] == {"name": "Acme Freight"}
    assert export["assigned_staff"]["id"] == assignee.id
    assert export["approved_by_staff"] is None
    assert [s["digital_signature"] for s in export["signatures"]] == ["sig-a", "sig-b"]
    assert export["signatures"][0]["signed_at"] == "2026-03-02T09:00:00Z"
    assert export["signatures"][0]["staff_name"] == assignee.full_name
    assert export["due_date"].endswith("Z")

    assert generate_caf_pdf(export, "completed").startswith(b"%PDF")
