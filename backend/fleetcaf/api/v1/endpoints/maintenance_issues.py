from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from fleetcaf.api.deps import get_current_actor
from fleetcaf.api.errors import rejection
from fleetcaf.api.v1.endpoints.cafs import REJECTIONS
from fleetcaf.database import get_db
from fleetcaf.schemas.caf import MaintenanceIssueRead
from fleetcaf.services import MaintenanceService
from fleetcaf.workflow import Actor, WorkflowError

router = APIRouter()


@router.get("/{issue_id}", response_model=MaintenanceIssueRead, responses=REJECTIONS)
def get_maintenance_issue(
    issue_id: str,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        issue = MaintenanceService(db).get(issue_id, actor)
    except WorkflowError as e:
        raise rejection(db, e, "Work order read")
    return issue
