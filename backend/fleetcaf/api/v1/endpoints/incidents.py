"""
incidents.py - Incident endpoints: CAF generation and completion status.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session as DBSession

from fleetcaf.api.deps import get_current_actor
from fleetcaf.api.errors import internal_error, rejection
from fleetcaf.api.v1.endpoints.cafs import REJECTIONS, to_caf_read
from fleetcaf.database import get_db
from fleetcaf.schemas.incident import GeneratedCafsRead, IncidentCompletionRead
from fleetcaf.services import IncidentService
from fleetcaf.workflow import Actor, WorkflowError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{incident_id}/generate-cafs",
    response_model=GeneratedCafsRead,
    status_code=status.HTTP_201_CREATED,
    responses=REJECTIONS,
)
def generate_cafs(
    incident_id: str,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    """Create one CAF per violation group not yet covered; repeat calls create nothing."""
    service = IncidentService(db)
    try:
        result = service.generate_cafs(incident_id, actor)
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "CAF generation")
    except Exception as e:
        raise internal_error(db, e, "CAF generation")

    if result.generated:
        service.refresh_completion_safely(incident_id)

    return GeneratedCafsRead(
        incident_id=result.incident_id,
        generated_count=len(result.generated),
        cafs=[to_caf_read(caf, actor) for caf in result.generated],
    )


@router.get(
    "/{incident_id}/completion",
    response_model=IncidentCompletionRead,
    responses=REJECTIONS,
)
def get_incident_completion(
    incident_id: str,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        result = IncidentService(db).check_completion(incident_id, actor)
    except WorkflowError as e:
        raise rejection(db, e, "Completion check")
    return IncidentCompletionRead.model_validate(result)
