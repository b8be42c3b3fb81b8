"""
signatures.py - Signature validation rules.

Signatures are append-only. plan_signature() validates a request against the
current CAF state and returns a draft; it never changes the CAF status.
Signing requires COMPLETED status (complete-then-sign), so the status gate
here and the can_sign predicate always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fleetcaf.models.enums import CafStatus, SignatureType
from fleetcaf.workflow.errors import (
    BadRequestError,
    PermissionDeniedError,
    StateConflictError,
)
from fleetcaf.workflow.permissions import Actor, has_signature, status_of
from fleetcaf.workflow.transitions import utcnow


@dataclass(frozen=True)
class SignatureDraft:
    signature_type: SignatureType
    staff_id: str
    digital_signature: str
    signed_at: datetime
    notes: str | None = None


def parse_signature_type(value: Any) -> SignatureType:
    try:
        return SignatureType(value)
    except ValueError:
        raise BadRequestError(
            "INVALID_SIGNATURE_TYPE",
            f"Unknown signature type: {value}",
            {"allowed": [t.value for t in SignatureType]},
        ) from None


def plan_signature(
    caf: Any,
    signature_type: Any,
    actor: Actor,
    digital_signature: str | None,
    notes: str | None = None,
    now: datetime | None = None,
) -> SignatureDraft:
    """
    Validate a signature by actor on caf.

    Raises:
        BadRequestError: unknown type or empty signature payload
        PermissionDeniedError: actor lacks the sign/approve capability
        StateConflictError: CAF not COMPLETED, duplicate signature, or an
            APPROVAL signature without a prior COMPLETION signature
    """
    sig_type = parse_signature_type(signature_type)

    if not digital_signature or not digital_signature.strip():
        raise BadRequestError(
            "SIGNATURE_REQUIRED", "A digital signature payload is required"
        )

    if sig_type == SignatureType.COMPLETION and not actor.may_sign:
        raise PermissionDeniedError(
            "SIGN_NOT_PERMITTED",
            "Staff member does not have permission to sign CAFs",
        )
    if sig_type == SignatureType.APPROVAL and not actor.may_approve:
        raise PermissionDeniedError(
            "APPROVE_NOT_PERMITTED",
            "Staff member does not have permission to approve CAFs",
        )

    current = status_of(caf)
    if current != CafStatus.COMPLETED:
        raise StateConflictError(
            "INVALID_STATUS_FOR_SIGNATURE",
            f"CAF must be in COMPLETED status to receive a {sig_type.value} signature",
            {"status": current.value},
        )

    if has_signature(caf, sig_type, actor.staff_id):
        raise StateConflictError(
            "ALREADY_SIGNED",
            "This staff member has already provided this type of signature",
            {"signature_type": sig_type.value, "staff_id": actor.staff_id},
        )

    if sig_type == SignatureType.APPROVAL and not has_signature(caf, SignatureType.COMPLETION):
        raise StateConflictError(
            "COMPLETION_SIGNATURE_REQUIRED",
            "CAF must have a completion signature before an approval signature",
        )

    return SignatureDraft(
        signature_type=sig_type,
        staff_id=actor.staff_id,
        digital_signature=digital_signature,
        signed_at=now or utcnow(),
        notes=notes,
    )
