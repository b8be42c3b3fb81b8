"""
maintenance.py - Maintenance work orders raised from equipment CAFs.

The work order is created and linked back onto the CAF in the caller's
single transaction, so a work order never exists without its CAF link.
"""

import logging
import uuid

from sqlalchemy.orm import Session as DBSession

from fleetcaf.models import CorrectiveActionForm, MaintenanceIssue
from fleetcaf.services.activity import record_activity
from fleetcaf.services.caf_service import CafService
from fleetcaf.workflow import (
    Actor,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
)
from fleetcaf.workflow.permissions import is_equipment_caf

logger = logging.getLogger(__name__)


class MaintenanceService:
    def __init__(self, db: DBSession):
        self.db = db

    def get(self, issue_id: str, actor: Actor) -> MaintenanceIssue:
        issue = self.db.get(MaintenanceIssue, issue_id)
        if issue is None:
            raise NotFoundError(
                "WORK_ORDER_NOT_FOUND", f"Maintenance issue {issue_id} not found"
            )
        if not actor.can_view(issue.organization_id):
            raise PermissionDeniedError(
                "ACCESS_DENIED", "Access denied to this work order's organization"
            )
        return issue

    def create_work_order(
        self,
        caf_id: str,
        actor: Actor,
        equipment_id: str | None = None,
    ) -> tuple[CorrectiveActionForm, MaintenanceIssue]:
        """
        Create a work order for an equipment CAF and link it.

        Raises:
            BadRequestError: CAF is not an equipment CAF
            StateConflictError: CAF already links a work order
        """
        caf = CafService(self.db).get(caf_id, actor)

        if not is_equipment_caf(caf):
            raise BadRequestError(
                "NOT_EQUIPMENT_CAF",
                "Maintenance work orders can only be created for equipment CAFs",
                {"category": caf.category, "violation_type": caf.violation_type},
            )
        if caf.maintenance_issue_id:
            raise StateConflictError(
                "WORK_ORDER_EXISTS",
                "A maintenance work order is already linked to this CAF",
                {"maintenance_issue_id": caf.maintenance_issue_id},
            )

        if equipment_id is None and caf.incident is not None:
            equipment_id = caf.incident.equipment_id

        issue = MaintenanceIssue(
            id=str(uuid.uuid4()),
            caf_id=caf.id,
            organization_id=caf.organization_id,
            equipment_id=equipment_id,
            issue_type="CORRECTIVE_ACTION",
            priority=caf.priority,
            description=f"Maintenance required for CAF {caf.caf_number}: {caf.violation_summary}",
            violation_codes=list(caf.violation_codes or []),
            due_date=caf.due_date,
            assigned_staff_id=caf.assigned_staff_id,
            created_by=actor.staff_id,
        )
        self.db.add(issue)

        caf.maintenance_issue_id = issue.id
        caf.requires_maintenance = True

        record_activity(
            self.db,
            caf.id,
            "Maintenance work order created",
            {"maintenance_issue_id": issue.id, "equipment_id": equipment_id},
            ["caf", "maintenance"],
            actor.staff_id,
        )
        self.db.flush()

        logger.info("Work order %s linked to CAF %s", issue.id, caf.caf_number)
        return caf, issue
