"""
generation.py - Rules for deriving CAF fields from violations.

Pure functions only: category, priority, due date, numbering format, title
and description. The database-facing callers live in caf_service and
incident_service.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from fleetcaf.models.enums import CafCategory, CafPriority, ViolationType

# Group names used when creating CAFs (one CAF per group)
DRIVER = "Driver"
EQUIPMENT = "Equipment"
COMPANY = "Company"
VIOLATION_GROUPS = (DRIVER, EQUIPMENT, COMPANY)

GROUP_CATEGORY = {
    DRIVER: CafCategory.DRIVER_PERFORMANCE,
    EQUIPMENT: CafCategory.EQUIPMENT_MAINTENANCE,
    COMPANY: CafCategory.COMPANY_OPERATIONS,
}

GROUP_VIOLATION_TYPE = {
    DRIVER: ViolationType.DRIVER_PERFORMANCE,
    EQUIPMENT: ViolationType.EQUIPMENT,
    COMPANY: ViolationType.COMPANY,
}

GROUP_TITLE = {
    DRIVER: "Driver Corrective Action",
    EQUIPMENT: "Equipment Maintenance",
    COMPANY: "Company Operations",
}

HIGH_PRIORITY_CODES = ("392.2", "392.4", "393.47", "396.3", "391.11")

DUE_DAYS = {
    CafPriority.CRITICAL: 1,
    CafPriority.HIGH: 3,
    CafPriority.MEDIUM: 7,
    CafPriority.LOW: 14,
}


@dataclass
class ViolationGroup:
    group: str
    violations: list[Any] = field(default_factory=list)

    @property
    def codes(self) -> list[str]:
        return [v.violation_code for v in self.violations]


def category_for_group(group: str) -> CafCategory:
    return GROUP_CATEGORY.get(group, CafCategory.OTHER)


def violation_type_for_group(group: str) -> ViolationType:
    # Unknown groups are filed as company operations
    return GROUP_VIOLATION_TYPE.get(group, ViolationType.COMPANY)


def group_for_violation_type(violation_type: str | None) -> str:
    if violation_type in (
        ViolationType.DRIVER_QUALIFICATION.value,
        ViolationType.DRIVER_PERFORMANCE.value,
    ):
        return DRIVER
    if violation_type == ViolationType.EQUIPMENT.value:
        return EQUIPMENT
    return COMPANY


def group_violations(violations: Iterable[Any]) -> list[ViolationGroup]:
    """Group violations into Driver, Equipment and Company, skipping empty groups."""
    groups = {name: ViolationGroup(name) for name in VIOLATION_GROUPS}
    for violation in violations:
        groups[group_for_violation_type(violation.violation_type)].violations.append(violation)
    return [g for g in groups.values() if g.violations]


def calculate_priority(codes: Sequence[str], out_of_service: bool = False) -> CafPriority:
    if out_of_service:
        return CafPriority.CRITICAL
    if any(code.startswith(HIGH_PRIORITY_CODES) for code in codes):
        return CafPriority.HIGH
    if len(codes) > 2:
        return CafPriority.MEDIUM
    return CafPriority.LOW


def calculate_due_date(priority: CafPriority | str, now: datetime) -> datetime:
    return now + timedelta(days=DUE_DAYS.get(CafPriority(priority), 14))


def format_caf_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:04d}"


def generate_title(group: str, codes: Sequence[str]) -> str:
    return f"{GROUP_TITLE.get(group, 'Corrective Action')} - {', '.join(codes)}"


def generate_summary(group: str, codes: Sequence[str]) -> str:
    return f"{group} violations: {', '.join(codes)}"


def generate_description(violations: Iterable[tuple[str, str | None]]) -> str:
    lines = [
        f"{code}: {description}" if description else code
        for code, description in violations
    ]
    body = "\n\n".join(lines)
    return f"Corrective action required for the following violations:\n\n{body}"
