"""Maintenance work orders raised from equipment CAFs."""

import pytest

from fleetcaf.models import CorrectiveActionForm, MaintenanceIssue
from fleetcaf.services import MaintenanceService
from fleetcaf.workflow import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
)


@pytest.fixture
def service(db):
    return MaintenanceService(db)


@pytest.fixture
def equipment_caf(make_caf, assignee):
    return make_caf(
        assignee,
        category="EQUIPMENT_MAINTENANCE",
        violation_type="Equipment",
        codes=("393.47E", "396.3A1"),
    )


def test_create_links_work_order(db, service, equipment_caf, assignee, actor_for):
    caf, issue = service.create_work_order(equipment_caf.id, actor_for(assignee))
    db.commit()

    assert caf.maintenance_issue_id == issue.id
    assert caf.requires_maintenance is True
    assert issue.caf_id == caf.id
    assert issue.organization_id == caf.organization_id
    assert issue.issue_type == "CORRECTIVE_ACTION"
    assert issue.status == "SCHEDULED"
    assert issue.priority == caf.priority
    assert issue.violation_codes == ["393.47E", "396.3A1"]
    assert issue.due_date == caf.due_date
    assert issue.assigned_staff_id == assignee.id
    assert issue.description.startswith(f"Maintenance required for CAF {caf.caf_number}")


def test_equipment_defaults_to_incident_vehicle(db, service, equipment_caf, assignee, actor_for):
    _, issue = service.create_work_order(equipment_caf.id, actor_for(assignee))
    assert issue.equipment_id == "TRUCK-42"


def test_explicit_equipment(db, service, equipment_caf, assignee, actor_for):
    _, issue = service.create_work_order(equipment_caf.id, actor_for(assignee), "TRAILER-7")
    assert issue.equipment_id == "TRAILER-7"


def test_second_work_order_conflicts(db, service, equipment_caf, assignee, actor_for):
    _, first = service.create_work_order(equipment_caf.id, actor_for(assignee))
    db.commit()

    with pytest.raises(StateConflictError) as exc_info:
        service.create_work_order(equipment_caf.id, actor_for(assignee))
    assert exc_info.value.code == "WORK_ORDER_EXISTS"
    assert exc_info.value.details == {"maintenance_issue_id": first.id}
    db.rollback()

    assert db.query(MaintenanceIssue).count() == 1


def test_driver_caf_rejected(db, service, make_caf, assignee, actor_for):
    caf = make_caf(assignee)
    with pytest.raises(BadRequestError) as exc_info:
        service.create_work_order(caf.id, actor_for(assignee))
    assert exc_info.value.code == "NOT_EQUIPMENT_CAF"
    db.rollback()

    assert db.get(CorrectiveActionForm, caf.id).maintenance_issue_id is None
    assert db.query(MaintenanceIssue).count() == 0


def test_get_scoped_to_organization(
    db, service, equipment_caf, assignee, make_staff, other_organization, actor_for
):
    _, issue = service.create_work_order(equipment_caf.id, actor_for(assignee))
    db.commit()

    assert service.get(issue.id, actor_for(assignee)).id == issue.id

    outsider = make_staff(other_organization)
    with pytest.raises(PermissionDeniedError):
        service.get(issue.id, actor_for(outsider))


def test_get_missing(service, assignee, actor_for):
    with pytest.raises(NotFoundError) as exc_info:
        service.get("missing", actor_for(assignee))
    assert exc_info.value.code == "WORK_ORDER_NOT_FOUND"
