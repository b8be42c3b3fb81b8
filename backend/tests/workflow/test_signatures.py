"""Signature validation rules."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from fleetcaf.models.enums import SignatureType
from fleetcaf.workflow import (
    Actor,
    BadRequestError,
    PermissionDeniedError,
    StateConflictError,
    plan_signature,
)

NOW = datetime(2026, 5, 2, 9, 30, 0)

SIGNER = Actor(staff_id="staff-1", organization_id="org-1", can_sign_cafs=True)
APPROVER = Actor(
    staff_id="staff-2", organization_id="org-1", can_sign_cafs=True, can_approve_cafs=True
)
PLAIN = Actor(staff_id="staff-3", organization_id="org-1")


def make_caf(status="COMPLETED", signatures=()):
    return SimpleNamespace(status=status, signatures=list(signatures))


def signature(signature_type, staff_id):
    return SimpleNamespace(signature_type=signature_type, staff_id=staff_id)


def test_completion_signature_draft():
    draft = plan_signature(make_caf(), "COMPLETION", SIGNER, "sig-payload", "ok", now=NOW)

    assert draft.signature_type == SignatureType.COMPLETION
    assert draft.staff_id == "staff-1"
    assert draft.digital_signature == "sig-payload"
    assert draft.notes == "ok"
    assert draft.signed_at == NOW


def test_signing_does_not_change_status():
    caf = make_caf()
    plan_signature(caf, "COMPLETION", SIGNER, "sig-payload")
    assert caf.status == "COMPLETED"


@pytest.mark.parametrize("payload", [None, "", "   "])
def test_empty_payload_rejected(payload):
    with pytest.raises(BadRequestError) as exc_info:
        plan_signature(make_caf(), "COMPLETION", SIGNER, payload)
    assert exc_info.value.code == "SIGNATURE_REQUIRED"


def test_unknown_signature_type():
    with pytest.raises(BadRequestError) as exc_info:
        plan_signature(make_caf(), "WITNESS", SIGNER, "sig")
    assert exc_info.value.code == "INVALID_SIGNATURE_TYPE"
    assert exc_info.value.__cause__ is None
    assert exc_info.value.__suppress_context__


def test_completion_requires_sign_capability():
    with pytest.raises(PermissionDeniedError) as exc_info:
        plan_signature(make_caf(), "COMPLETION", PLAIN, "sig")
    assert exc_info.value.code == "SIGN_NOT_PERMITTED"


def test_approval_requires_approve_capability():
    caf = make_caf(signatures=[signature("COMPLETION", "staff-1")])
    with pytest.raises(PermissionDeniedError) as exc_info:
        plan_signature(caf, "APPROVAL", SIGNER, "sig")
    assert exc_info.value.code == "APPROVE_NOT_PERMITTED"


@pytest.mark.parametrize("status", ["ASSIGNED", "IN_PROGRESS", "APPROVED", "CANCELLED"])
def test_only_completed_cafs_accept_signatures(status):
    with pytest.raises(StateConflictError) as exc_info:
        plan_signature(make_caf(status), "COMPLETION", SIGNER, "sig")
    assert exc_info.value.code == "INVALID_STATUS_FOR_SIGNATURE"
    assert exc_info.value.details == {"status": status}


def test_duplicate_signature_by_same_signer():
    caf = make_caf(signatures=[signature("COMPLETION", "staff-1")])
    with pytest.raises(StateConflictError) as exc_info:
        plan_signature(caf, "COMPLETION", SIGNER, "sig")
    assert exc_info.value.code == "ALREADY_SIGNED"


def test_second_signer_may_add_completion_signature():
    caf = make_caf(signatures=[signature("COMPLETION", "staff-1")])
    draft = plan_signature(caf, "COMPLETION", APPROVER, "sig")
    assert draft.staff_id == "staff-2"


def test_approval_requires_prior_completion_signature():
    with pytest.raises(StateConflictError) as exc_info:
        plan_signature(make_caf(), "APPROVAL", APPROVER, "sig")
    assert exc_info.value.code == "COMPLETION_SIGNATURE_REQUIRED"


def test_approval_after_completion_signature():
    caf = make_caf(signatures=[signature("COMPLETION", "staff-1")])
    draft = plan_signature(caf, SignatureType.APPROVAL, APPROVER, "sig")
    assert draft.signature_type == SignatureType.APPROVAL
