"""Permission predicates and actor capabilities."""

from types import SimpleNamespace

import pytest

from fleetcaf.workflow import Actor, evaluate
from fleetcaf.workflow.permissions import (
    can_approve,
    can_cancel,
    can_complete,
    can_create_work_order,
    can_sign,
    can_start_work,
)

ASSIGNEE = Actor(staff_id="staff-1", organization_id="org-1", can_sign_cafs=True)
APPROVER = Actor(
    staff_id="staff-2", organization_id="org-1", can_sign_cafs=True, can_approve_cafs=True
)
PLAIN = Actor(staff_id="staff-3", organization_id="org-1")
OUTSIDER = Actor(staff_id="staff-4", organization_id="org-2", can_approve_cafs=True)
MASTER = Actor(staff_id="staff-9", organization_id=None, is_master=True)


def make_caf(status="ASSIGNED", signatures=(), category="DRIVER_PERFORMANCE",
             violation_type="Driver_Performance", maintenance_issue_id=None):
    return SimpleNamespace(
        status=status,
        assigned_staff_id="staff-1",
        organization_id="org-1",
        signatures=list(signatures),
        category=category,
        violation_type=violation_type,
        maintenance_issue_id=maintenance_issue_id,
    )


def completion_by(staff_id):
    return SimpleNamespace(signature_type="COMPLETION", staff_id=staff_id)


class TestActor:
    def test_from_staff(self):
        staff = SimpleNamespace(
            id="s-1",
            organization_id="org-1",
            can_sign_cafs=True,
            can_approve_cafs=False,
            user_type="organization",
            full_name="Pat Driver",
        )
        actor = Actor.from_staff(staff)

        assert actor.staff_id == "s-1"
        assert actor.may_sign
        assert not actor.may_approve
        assert not actor.may_create_cafs
        assert actor.user_type == "organization"
        assert actor.name == "Pat Driver"

    def test_master_overrides_capabilities(self):
        assert MASTER.may_sign
        assert MASTER.may_approve
        assert MASTER.may_create_cafs
        assert MASTER.user_type == "master"

    def test_organization_scope(self):
        assert ASSIGNEE.can_view("org-1")
        assert not ASSIGNEE.can_view("org-2")
        assert not ASSIGNEE.can_view(None)
        assert MASTER.can_view("org-2")


class TestPredicates:
    def test_start_work_only_for_assignee_on_assigned(self):
        assert can_start_work(make_caf("ASSIGNED"), ASSIGNEE)
        assert not can_start_work(make_caf("ASSIGNED"), APPROVER)
        assert not can_start_work(make_caf("IN_PROGRESS"), ASSIGNEE)

    def test_complete_only_for_assignee_in_progress(self):
        assert can_complete(make_caf("IN_PROGRESS"), ASSIGNEE)
        assert not can_complete(make_caf("IN_PROGRESS"), MASTER)
        assert not can_complete(make_caf("COMPLETED"), ASSIGNEE)

    def test_sign_requires_completed_and_capability(self):
        assert can_sign(make_caf("COMPLETED"), ASSIGNEE)
        assert not can_sign(make_caf("IN_PROGRESS"), ASSIGNEE)
        assert not can_sign(make_caf("COMPLETED"), PLAIN)

    def test_sign_false_once_signed_by_actor(self):
        caf = make_caf("COMPLETED", [completion_by("staff-1")])
        assert not can_sign(caf, ASSIGNEE)
        assert can_sign(caf, APPROVER)

    def test_approve_requires_completion_signature(self):
        assert not can_approve(make_caf("COMPLETED"), APPROVER)
        caf = make_caf("COMPLETED", [completion_by("staff-1")])
        assert can_approve(caf, APPROVER)
        assert can_approve(caf, MASTER)
        assert not can_approve(caf, ASSIGNEE)

    @pytest.mark.parametrize("status,expected", [
        ("ASSIGNED", True),
        ("IN_PROGRESS", True),
        ("COMPLETED", True),
        ("APPROVED", False),
        ("REJECTED", False),
        ("CANCELLED", False),
    ])
    def test_cancel_only_from_open_states(self, status, expected):
        assert can_cancel(make_caf(status), APPROVER) is expected

    def test_cancel_requires_approval_rights(self):
        assert not can_cancel(make_caf("ASSIGNED"), ASSIGNEE)

    def test_work_order_for_equipment_cafs(self):
        equipment = make_caf(category="EQUIPMENT_MAINTENANCE", violation_type="Equipment")
        assert can_create_work_order(equipment, ASSIGNEE)
        assert not can_create_work_order(equipment, OUTSIDER)
        assert not can_create_work_order(make_caf(), ASSIGNEE)

    def test_work_order_only_once(self):
        linked = make_caf(category="EQUIPMENT_MAINTENANCE", maintenance_issue_id="mi-1")
        assert not can_create_work_order(linked, MASTER)


def test_evaluate_collects_every_flag():
    flags = evaluate(make_caf("IN_PROGRESS"), ASSIGNEE)

    assert flags.can_complete
    assert not flags.can_start_work
    assert not flags.can_sign
    assert not flags.can_approve
    assert not flags.can_cancel
    assert not flags.can_create_work_order
