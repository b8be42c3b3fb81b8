"""
transitions.py - CAF status transition engine.

Legal transitions (no backward edges):

    ASSIGNED    -> IN_PROGRESS   actor = assignee
    IN_PROGRESS -> COMPLETED     actor = assignee, completion notes required
    COMPLETED   -> APPROVED      actor = approver, COMPLETION signature present
    ASSIGNED | IN_PROGRESS | COMPLETED -> REJECTED | CANCELLED   manual override

APPROVED, REJECTED and CANCELLED are terminal.

plan_status_change() is a PURE FUNCTION: it validates against the given
state and returns the field changes to apply. It never mutates the CAF and
never clamps an invalid request to some other state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fleetcaf.models.enums import CafStatus, SignatureType
from fleetcaf.workflow.errors import (
    BadRequestError,
    PermissionDeniedError,
    StateConflictError,
)
from fleetcaf.workflow.permissions import (
    TERMINAL_STATUSES,
    Actor,
    can_approve,
    can_cancel,
    can_complete,
    can_start_work,
    has_signature,
    status_of,
)

UTC = timezone.utc

Predicate = Callable[[Any, Actor], bool]

FORWARD_TRANSITIONS: dict[CafStatus, dict[CafStatus, Predicate]] = {
    CafStatus.ASSIGNED: {CafStatus.IN_PROGRESS: can_start_work},
    CafStatus.IN_PROGRESS: {CafStatus.COMPLETED: can_complete},
    CafStatus.COMPLETED: {CafStatus.APPROVED: can_approve},
}

MANUAL_TARGETS = frozenset({CafStatus.REJECTED, CafStatus.CANCELLED})


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an offset-aware datetime to naive UTC; naive values are taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def reachable_targets(current: CafStatus) -> set[CafStatus]:
    targets = set(FORWARD_TRANSITIONS.get(current, {}))
    if current not in TERMINAL_STATUSES:
        targets |= MANUAL_TARGETS
    return targets


def is_reachable(current: CafStatus, target: CafStatus) -> bool:
    return target in reachable_targets(current)


def _edge_predicate(current: CafStatus, target: CafStatus) -> Predicate:
    if target in MANUAL_TARGETS:
        return can_cancel
    return FORWARD_TRANSITIONS[current][target]


@dataclass(frozen=True)
class StatusChange:
    """Field updates produced by a validated transition."""

    previous_status: CafStatus
    new_status: CafStatus
    completion_notes: str | None = None
    completed_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None

    def apply_to(self, caf: Any) -> None:
        caf.status = self.new_status.value
        if self.completed_at is not None:
            caf.completed_at = self.completed_at
            caf.completion_notes = self.completion_notes
        if self.approved_at is not None:
            caf.approved_at = self.approved_at
            caf.approved_by = self.approved_by


def parse_status(value: Any) -> CafStatus:
    try:
        return CafStatus(value)
    except ValueError:
        raise BadRequestError(
            "INVALID_STATUS",
            f"Unknown CAF status: {value}",
            {"allowed": [s.value for s in CafStatus]},
        ) from None


def plan_status_change(
    caf: Any,
    new_status: Any,
    actor: Actor,
    notes: str | None = None,
    now: datetime | None = None,
) -> StatusChange:
    """
    Validate a transition of caf to new_status by actor.

    Raises:
        BadRequestError: unknown status, or COMPLETED without notes
        StateConflictError: target not reachable from the current status,
            or approval attempted before any COMPLETION signature
        PermissionDeniedError: actor fails the edge predicate
    """
    current = status_of(caf)
    target = parse_status(new_status)

    if not is_reachable(current, target):
        raise StateConflictError(
            "INVALID_TRANSITION",
            f"Invalid status transition from {current.value} to {target.value}",
            {
                "from": current.value,
                "to": target.value,
                "allowed": sorted(s.value for s in reachable_targets(current)),
            },
        )

    if target == CafStatus.APPROVED and not has_signature(caf, SignatureType.COMPLETION):
        raise StateConflictError(
            "COMPLETION_SIGNATURE_REQUIRED",
            "CAF must have a completion signature before approval",
        )

    predicate = _edge_predicate(current, target)
    if not predicate(caf, actor):
        raise PermissionDeniedError(
            "INSUFFICIENT_PERMISSIONS",
            f"Staff {actor.staff_id} may not move CAF from {current.value} to {target.value}",
            {"from": current.value, "to": target.value},
        )

    now = now or utcnow()

    if target == CafStatus.COMPLETED:
        cleaned = (notes or "").strip()
        if not cleaned:
            raise BadRequestError(
                "COMPLETION_NOTES_REQUIRED",
                "Completion notes are required to mark a CAF complete",
            )
        return StatusChange(
            previous_status=current,
            new_status=target,
            completion_notes=cleaned,
            completed_at=now,
        )

    if target == CafStatus.APPROVED:
        return StatusChange(
            previous_status=current,
            new_status=target,
            approved_at=now,
            approved_by=actor.staff_id,
        )

    return StatusChange(previous_status=current, new_status=target)
