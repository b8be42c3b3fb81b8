"""
cafs.py - Corrective Action Form API endpoints.

Every write commits once, after the workflow operation has fully
validated and applied. The owning incident's completion status is
refreshed afterwards on a best-effort basis.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session as DBSession

from fleetcaf.api.deps import get_current_actor
from fleetcaf.api.errors import internal_error, rejection
from fleetcaf.database import get_db
from fleetcaf.models import CorrectiveActionForm
from fleetcaf.schemas.caf import (
    ActivityRead,
    CafCreate,
    CafRead,
    CompleteAndSignRequest,
    MaintenanceIssueRead,
    PermissionFlagsRead,
    RejectionResponse,
    SignRequest,
    StatusChangeRequest,
    WorkOrderRequest,
    WorkOrderResult,
)
from fleetcaf.services import CafService, IncidentService, MaintenanceService
from fleetcaf.workflow import Actor, WorkflowError, evaluate

logger = logging.getLogger(__name__)

router = APIRouter()

REJECTIONS = {
    400: {"model": RejectionResponse, "description": "Bad request"},
    403: {"model": RejectionResponse, "description": "Permission denied"},
    404: {"model": RejectionResponse, "description": "Not found"},
    409: {"model": RejectionResponse, "description": "State conflict"},
}


def to_caf_read(caf: CorrectiveActionForm, actor: Actor) -> CafRead:
    """Serialize caf with permission flags evaluated for actor."""
    read = CafRead.model_validate(caf)
    read.permissions = PermissionFlagsRead.model_validate(evaluate(caf, actor))
    return read


def _client_ip(request: Request) -> str | None:
    # First forwarded hop is the original client
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


def _refresh_incident(db: DBSession, caf: CorrectiveActionForm) -> None:
    if caf.incident_id:
        IncidentService(db).refresh_completion_safely(caf.incident_id)


@router.get("", response_model=list[CafRead], responses=REJECTIONS)
def list_cafs(
    organization_id: str | None = None,
    incident_id: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        cafs = CafService(db).list_cafs(actor, organization_id, incident_id, status_filter)
    except WorkflowError as e:
        raise rejection(db, e, "CAF list")
    return [to_caf_read(caf, actor) for caf in cafs]


@router.post(
    "",
    response_model=CafRead,
    status_code=status.HTTP_201_CREATED,
    responses=REJECTIONS,
)
def create_caf(
    request: CafCreate,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        caf = CafService(db).create(
            actor,
            incident_id=request.incident_id,
            violation_group=request.violation_type,
            violation_codes=request.violation_codes,
            organization_id=request.organization_id,
            assigned_staff_id=request.assigned_staff_id,
            title=request.title,
            description=request.description,
            priority=request.priority,
            due_date=request.due_date,
            out_of_service=request.out_of_service,
        )
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "CAF creation")
    except Exception as e:
        raise internal_error(db, e, "CAF creation")

    _refresh_incident(db, caf)
    return to_caf_read(caf, actor)


@router.get("/{caf_id}", response_model=CafRead, responses=REJECTIONS)
def get_caf(
    caf_id: str,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        caf = CafService(db).get(caf_id, actor)
    except WorkflowError as e:
        raise rejection(db, e, "CAF read")
    return to_caf_read(caf, actor)


@router.get("/{caf_id}/activity", response_model=list[ActivityRead], responses=REJECTIONS)
def get_caf_activity(
    caf_id: str,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    """Audit trail of every action recorded against the CAF, oldest first."""
    try:
        entries = CafService(db).activity(caf_id, actor)
    except WorkflowError as e:
        raise rejection(db, e, "CAF activity")
    return [ActivityRead.model_validate(entry) for entry in entries]


@router.patch(
    "/{caf_id}/status",
    response_model=CafRead,
    responses=REJECTIONS,
    summary="Change CAF status",
    description="""
Move a CAF along its workflow.

**Forward edges:** ASSIGNED -> IN_PROGRESS -> COMPLETED -> APPROVED.
COMPLETED requires completion notes; APPROVED requires a COMPLETION signature.

**Manual edges:** REJECTED or CANCELLED from any non-terminal status.
""",
)
def update_caf_status(
    caf_id: str,
    request: StatusChangeRequest,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    try:
        caf = CafService(db).change_status(caf_id, actor, request.status, request.notes)
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "Status change")
    except Exception as e:
        raise internal_error(db, e, "status change")

    _refresh_incident(db, caf)
    return to_caf_read(caf, actor)


@router.post(
    "/{caf_id}/signatures",
    response_model=CafRead,
    status_code=status.HTTP_201_CREATED,
    responses=REJECTIONS,
)
def sign_caf(
    caf_id: str,
    body: SignRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    """Append a COMPLETION or APPROVAL signature to a COMPLETED CAF."""
    try:
        caf = CafService(db).sign(
            caf_id,
            actor,
            body.signature_type,
            body.digital_signature,
            notes=body.notes,
            ip_address=_client_ip(request),
        )
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "Signature")
    except Exception as e:
        raise internal_error(db, e, "signature")

    _refresh_incident(db, caf)
    return to_caf_read(caf, actor)


@router.post(
    "/{caf_id}/complete-and-sign",
    response_model=CafRead,
    responses=REJECTIONS,
)
def complete_and_sign_caf(
    caf_id: str,
    body: CompleteAndSignRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    """Complete an IN_PROGRESS CAF and record the COMPLETION signature in one step."""
    try:
        caf = CafService(db).complete_and_sign(
            caf_id,
            actor,
            body.completion_notes,
            body.digital_signature,
            signature_notes=body.signature_notes,
            ip_address=_client_ip(request),
        )
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "Complete and sign")
    except Exception as e:
        raise internal_error(db, e, "complete and sign")

    _refresh_incident(db, caf)
    return to_caf_read(caf, actor)


@router.get("/{caf_id}/pdf", responses=REJECTIONS)
def export_caf_pdf(
    caf_id: str,
    format: str = "fillable",
    download: bool = False,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    """
    Render the CAF as a PDF.

    Args:
        format: "fillable" (blank template) or "completed"
        download: attachment when true, inline otherwise
    """
    try:
        document = CafService(db).export_pdf(caf_id, actor, format, download)
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "PDF export")
    except Exception as e:
        raise internal_error(db, e, "PDF export")

    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": document.content_disposition},
    )


@router.post(
    "/{caf_id}/maintenance-work-order",
    response_model=WorkOrderResult,
    status_code=status.HTTP_201_CREATED,
    responses=REJECTIONS,
)
def create_maintenance_work_order(
    caf_id: str,
    body: WorkOrderRequest | None = None,
    actor: Actor = Depends(get_current_actor),
    db: DBSession = Depends(get_db),
):
    equipment_id = body.equipment_id if body else None
    try:
        caf, issue = MaintenanceService(db).create_work_order(caf_id, actor, equipment_id)
        db.commit()
    except WorkflowError as e:
        raise rejection(db, e, "Work order creation")
    except Exception as e:
        raise internal_error(db, e, "work order creation")

    return WorkOrderResult(
        caf=to_caf_read(caf, actor),
        maintenance_issue=MaintenanceIssueRead.model_validate(issue),
    )
