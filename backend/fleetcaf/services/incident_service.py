"""
incident_service.py - CAF generation from incidents and RINS completion.

An incident (accident or roadside inspection) is RESOLVED when every CAF
raised for it is:
- APPROVED
- carrying a COMPLETION signature
- carrying an APPROVAL signature, or stamped approved_at
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from fleetcaf.models import (
    CafStatus,
    CorrectiveActionForm,
    Incident,
    IncidentStatus,
    SignatureType,
)
from fleetcaf.services import generation
from fleetcaf.services.caf_service import CafService
from fleetcaf.workflow import Actor, NotFoundError, PermissionDeniedError, utcnow
from fleetcaf.workflow.permissions import has_signature

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    incident_id: str
    status: str
    is_complete: bool
    caf_count: int
    completed_at: object = None


@dataclass
class GenerationResult:
    incident_id: str
    generated: list[CorrectiveActionForm] = field(default_factory=list)


def caf_is_closed_out(caf: CorrectiveActionForm) -> bool:
    if caf.status != CafStatus.APPROVED.value:
        return False
    if not has_signature(caf, SignatureType.COMPLETION):
        return False
    return has_signature(caf, SignatureType.APPROVAL) or caf.approved_at is not None


class IncidentService:
    def __init__(self, db: DBSession):
        self.db = db

    def _load(self, incident_id: str, actor: Actor) -> Incident:
        incident = self.db.get(Incident, incident_id)
        if incident is None:
            raise NotFoundError("INCIDENT_NOT_FOUND", f"Incident {incident_id} not found")
        if not actor.can_view(incident.organization_id):
            raise PermissionDeniedError(
                "ACCESS_DENIED", "Access denied to this incident's organization"
            )
        return incident

    def generate_cafs(self, incident_id: str, actor: Actor) -> GenerationResult:
        """
        Create one ASSIGNED CAF per violation group not yet covered by a CAF.

        Violations are marked as covered, so running this twice creates
        nothing the second time.
        """
        incident = self._load(incident_id, actor)
        pending = [v for v in incident.violations if v.caf_id is None]
        result = GenerationResult(incident_id=incident.id)

        cafs = CafService(self.db)
        for group in generation.group_violations(pending):
            caf = cafs.create(
                actor,
                incident_id=incident.id,
                violation_group=group.group,
                violation_codes=group.codes,
                organization_id=incident.organization_id,
                description=generation.generate_description(
                    (v.violation_code, v.description) for v in group.violations
                ),
                out_of_service=any(v.out_of_service for v in group.violations),
            )
            for violation in group.violations:
                violation.caf_id = caf.id
            result.generated.append(caf)

        self.db.flush()
        logger.info(
            "Generated %d CAF(s) for incident %s", len(result.generated), incident.id
        )
        return result

    def check_completion(self, incident_id: str, actor: Actor) -> CompletionResult:
        incident = self._load(incident_id, actor)
        return self._evaluate(incident)

    def _evaluate(self, incident: Incident) -> CompletionResult:
        cafs = (
            self.db.query(CorrectiveActionForm)
            .filter(CorrectiveActionForm.incident_id == incident.id)
            .all()
        )
        is_complete = bool(cafs) and all(caf_is_closed_out(c) for c in cafs)
        return CompletionResult(
            incident_id=incident.id,
            status=incident.status,
            is_complete=is_complete,
            caf_count=len(cafs),
            completed_at=incident.completed_at,
        )

    def refresh_completion(self, incident_id: str) -> CompletionResult | None:
        """Recompute and store the incident status from its CAFs."""
        incident = self.db.get(Incident, incident_id)
        if incident is None:
            return None

        result = self._evaluate(incident)
        if result.is_complete:
            if incident.status != IncidentStatus.RESOLVED.value:
                incident.status = IncidentStatus.RESOLVED.value
                incident.completed_at = utcnow()
        else:
            incident.status = IncidentStatus.PENDING.value
            incident.completed_at = None
        self.db.flush()

        result.status = incident.status
        result.completed_at = incident.completed_at
        return result

    def refresh_completion_safely(self, incident_id: str) -> CompletionResult | None:
        """
        Refresh and commit the incident status in its own transaction.

        Called after a CAF change has been committed; a failure here is
        logged and never undoes the CAF change.
        """
        try:
            result = self.refresh_completion(incident_id)
            self.db.commit()
            return result
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error updating completion status for incident %s", incident_id)
            return None
