"""
permissions.py - Actor capabilities and CAF permission predicates.

PURITY:
- Predicates are pure functions of (caf status, assignee, signatures, actor)
- No database, request or session access
- Never cached; callers evaluate them against freshly loaded state

The Actor is the single normalized capability value for the caller. It is
built once at the API boundary and passed explicitly into every predicate
and workflow operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fleetcaf.models.enums import (
    CafCategory,
    CafStatus,
    SignatureType,
    StaffUserType,
    ViolationType,
)

TERMINAL_STATUSES = frozenset(
    {CafStatus.APPROVED, CafStatus.REJECTED, CafStatus.CANCELLED}
)


@dataclass(frozen=True)
class Actor:
    """Normalized identity and capability set of the calling staff member."""

    staff_id: str
    organization_id: str | None
    can_sign_cafs: bool = False
    can_approve_cafs: bool = False
    is_master: bool = False
    name: str = ""

    @classmethod
    def from_staff(cls, staff: Any) -> Actor:
        return cls(
            staff_id=staff.id,
            organization_id=staff.organization_id,
            can_sign_cafs=bool(staff.can_sign_cafs),
            can_approve_cafs=bool(staff.can_approve_cafs),
            is_master=staff.user_type == StaffUserType.MASTER.value,
            name=getattr(staff, "full_name", ""),
        )

    @property
    def user_type(self) -> str:
        if self.is_master:
            return StaffUserType.MASTER.value
        return StaffUserType.ORGANIZATION.value

    @property
    def may_sign(self) -> bool:
        return self.can_sign_cafs or self.is_master

    @property
    def may_approve(self) -> bool:
        return self.can_approve_cafs or self.is_master

    @property
    def may_create_cafs(self) -> bool:
        return self.can_approve_cafs or self.is_master

    def can_view(self, organization_id: str | None) -> bool:
        """Master tier sees every organization; staff only their own."""
        return self.is_master or (
            organization_id is not None and organization_id == self.organization_id
        )


@dataclass(frozen=True)
class PermissionFlags:
    can_start_work: bool
    can_complete: bool
    can_sign: bool
    can_approve: bool
    can_cancel: bool
    can_create_work_order: bool


def status_of(caf: Any) -> CafStatus:
    return CafStatus(caf.status)


def has_signature(caf: Any, signature_type: SignatureType, staff_id: str | None = None) -> bool:
    """True if caf carries a signature of this type (optionally by this signer)."""
    for sig in caf.signatures or []:
        if sig.signature_type != signature_type.value:
            continue
        if staff_id is None or sig.staff_id == staff_id:
            return True
    return False


def is_equipment_caf(caf: Any) -> bool:
    return (
        caf.category == CafCategory.EQUIPMENT_MAINTENANCE.value
        or caf.violation_type == ViolationType.EQUIPMENT.value
    )


def can_start_work(caf: Any, actor: Actor) -> bool:
    return (
        caf.assigned_staff_id == actor.staff_id
        and status_of(caf) == CafStatus.ASSIGNED
    )


def can_complete(caf: Any, actor: Actor) -> bool:
    return (
        caf.assigned_staff_id == actor.staff_id
        and status_of(caf) == CafStatus.IN_PROGRESS
    )


def can_sign(caf: Any, actor: Actor) -> bool:
    return (
        status_of(caf) == CafStatus.COMPLETED
        and not has_signature(caf, SignatureType.COMPLETION, actor.staff_id)
        and actor.may_sign
    )


def can_approve(caf: Any, actor: Actor) -> bool:
    return (
        status_of(caf) == CafStatus.COMPLETED
        and has_signature(caf, SignatureType.COMPLETION)
        and actor.may_approve
    )


def can_cancel(caf: Any, actor: Actor) -> bool:
    """Manual REJECTED/CANCELLED from any non-terminal status."""
    return status_of(caf) not in TERMINAL_STATUSES and actor.may_approve


def can_create_work_order(caf: Any, actor: Actor) -> bool:
    return (
        is_equipment_caf(caf)
        and not caf.maintenance_issue_id
        and actor.can_view(caf.organization_id)
    )


def evaluate(caf: Any, actor: Actor) -> PermissionFlags:
    return PermissionFlags(
        can_start_work=can_start_work(caf, actor),
        can_complete=can_complete(caf, actor),
        can_sign=can_sign(caf, actor),
        can_approve=can_approve(caf, actor),
        can_cancel=can_cancel(caf, actor),
        can_create_work_order=can_create_work_order(caf, actor),
    )
