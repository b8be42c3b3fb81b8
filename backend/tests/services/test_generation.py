"""Derivation of CAF fields from violations."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from fleetcaf.models.enums import CafCategory, CafPriority
from fleetcaf.services import generation


def violation(code, violation_type):
    return SimpleNamespace(violation_code=code, violation_type=violation_type)


class TestPriority:
    def test_out_of_service_is_critical(self):
        assert generation.calculate_priority(["390.15"], out_of_service=True) == CafPriority.CRITICAL

    @pytest.mark.parametrize("code", ["392.2-SLLS2", "392.4A", "393.47E", "396.3A1", "391.11"])
    def test_serious_codes_are_high(self, code):
        assert generation.calculate_priority(["390.15", code]) == CafPriority.HIGH

    def test_many_codes_are_medium(self):
        assert generation.calculate_priority(["390.15", "395.8", "393.9"]) == CafPriority.MEDIUM

    def test_default_is_low(self):
        assert generation.calculate_priority(["395.8"]) == CafPriority.LOW


@pytest.mark.parametrize("priority,days", [
    ("CRITICAL", 1),
    ("HIGH", 3),
    ("MEDIUM", 7),
    (CafPriority.LOW, 14),
])
def test_due_date(priority, days):
    now = datetime(2026, 6, 1, 8, 0)
    assert (generation.calculate_due_date(priority, now) - now).days == days


def test_caf_number_format():
    assert generation.format_caf_number("CAF", 2026, 7) == "CAF-2026-0007"
    assert generation.format_caf_number("CAF", 2026, 12345) == "CAF-2026-12345"


def test_group_violations_skips_empty_groups():
    groups = generation.group_violations([
        violation("391.11", "Driver_Qualification"),
        violation("395.8", "Driver_Performance"),
        violation("393.9", "Equipment"),
    ])

    assert [g.group for g in groups] == ["Driver", "Equipment"]
    assert groups[0].codes == ["391.11", "395.8"]
    assert groups[1].codes == ["393.9"]


def test_unclassified_violations_are_company():
    groups = generation.group_violations([violation("390.15", None)])
    assert groups[0].group == "Company"


def test_group_mappings():
    assert generation.category_for_group("Equipment") == CafCategory.EQUIPMENT_MAINTENANCE
    assert generation.category_for_group("Unknown") == CafCategory.OTHER
    assert generation.violation_type_for_group("Driver").value == "Driver_Performance"


def test_text_fields():
    assert generation.generate_title("Equipment", ["393.9", "393.47E"]) == (
        "Equipment Maintenance - 393.9, 393.47E"
    )
    assert generation.generate_summary("Company", ["390.15"]) == "Company violations: 390.15"

    description = generation.generate_description([("393.9", "Inoperable lamp"), ("393.47E", None)])
    assert description.startswith("Corrective action required")
    assert "393.9: Inoperable lamp" in description
    assert description.endswith("393.47E")
