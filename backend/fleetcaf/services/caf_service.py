"""
caf_service.py - CAF workflow orchestrator.

Applies the pure workflow rules (fleetcaf.workflow) to persisted CAFs.

INVARIANTS:
1. Every operation validates against freshly loaded state before mutating
2. A rejected operation raises WorkflowError and mutates nothing
3. Signatures are appended, never edited or removed
4. Every mutation writes an activity log entry in the same transaction
5. The service flushes but never commits; the caller owns the transaction

Operations return the full updated CAF so callers need no second read.
"""

import logging
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from fleetcaf.compliance import PDF_FORMATS, generate_caf_export, generate_caf_pdf, pdf_filename
from fleetcaf.config import settings
from fleetcaf.models import (
    ActivityLog,
    CafPriority,
    CafSignature,
    CafStatus,
    CorrectiveActionForm,
    Incident,
    Organization,
    SignatureType,
    Staff,
)
from fleetcaf.services import generation
from fleetcaf.services.activity import record_activity
from fleetcaf.workflow import (
    Actor,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    plan_signature,
    plan_status_change,
    to_naive_utc,
    utcnow,
)

logger = logging.getLogger(__name__)


@dataclass
class PdfDocument:
    content: bytes
    filename: str
    disposition: str  # "attachment" or "inline"

    @property
    def content_disposition(self) -> str:
        return f'{self.disposition}; filename="{self.filename}"'


class CafService:
    """Workflow operations on corrective action forms."""

    def __init__(self, db: DBSession):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, caf_id: str, actor: Actor) -> CorrectiveActionForm:
        """Load a CAF the actor may see, or raise NotFound / PermissionDenied."""
        caf = self.db.get(CorrectiveActionForm, caf_id)
        if caf is None:
            raise NotFoundError("CAF_NOT_FOUND", f"CAF {caf_id} not found")
        if not actor.can_view(caf.organization_id):
            raise PermissionDeniedError(
                "ACCESS_DENIED", "Access denied to this CAF's organization"
            )
        return caf

    def list_cafs(
        self,
        actor: Actor,
        organization_id: str | None = None,
        incident_id: str | None = None,
        status: str | None = None,
    ) -> list[CorrectiveActionForm]:
        query = self.db.query(CorrectiveActionForm)

        if not actor.is_master:
            if organization_id and organization_id != actor.organization_id:
                raise PermissionDeniedError(
                    "ACCESS_DENIED", "Access denied to this organization"
                )
            organization_id = actor.organization_id

        if organization_id:
            query = query.filter(CorrectiveActionForm.organization_id == organization_id)
        if incident_id:
            query = query.filter(CorrectiveActionForm.incident_id == incident_id)
        if status:
            query = query.filter(CorrectiveActionForm.status == status)

        return query.order_by(
            CorrectiveActionForm.created_at.desc(), CorrectiveActionForm.caf_number.desc()
        ).all()

    def activity(self, caf_id: str, actor: Actor) -> list[ActivityLog]:
        """Audit trail of a CAF, oldest first."""
        caf = self.get(caf_id, actor)
        return (
            self.db.query(ActivityLog)
            .filter(ActivityLog.caf_id == caf.id)
            .order_by(ActivityLog.created_at, ActivityLog.id)
            .all()
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def next_caf_number(self) -> str:
        year = utcnow().year
        prefix = f"{settings.CAF_NUMBER_PREFIX}-{year}-"
        count = (
            self.db.query(func.count(CorrectiveActionForm.id))
            .filter(CorrectiveActionForm.caf_number.like(f"{prefix}%"))
            .scalar()
        )
        return generation.format_caf_number(settings.CAF_NUMBER_PREFIX, year, count + 1)

    def default_assignee(self, organization_id: str, actor: Actor) -> str | None:
        """Organization staff own what they create; master picks an org approver."""
        if not actor.is_master:
            return actor.staff_id
        staff = (
            self.db.query(Staff)
            .filter(
                Staff.organization_id == organization_id,
                Staff.is_active.is_(True),
                Staff.can_approve_cafs.is_(True),
            )
            .order_by(Staff.created_at, Staff.id)
            .first()
        )
        return staff.id if staff else None

    def create(
        self,
        actor: Actor,
        incident_id: str,
        violation_group: str,
        violation_codes: list[str],
        organization_id: str,
        assigned_staff_id: str | None = None,
        title: str | None = None,
        description: str | None = None,
        priority: str | None = None,
        due_date: Any = None,
        out_of_service: bool = False,
    ) -> CorrectiveActionForm:
        """
        Create an ASSIGNED CAF.

        Raises:
            PermissionDeniedError: actor is neither master nor a CAF approver,
                or targets another organization
            NotFoundError: organization, incident or assignee missing
            BadRequestError: unknown group, no codes, incident of another org
        """
        if not actor.may_create_cafs:
            raise PermissionDeniedError(
                "CREATE_NOT_PERMITTED",
                "Must be a master user or organization staff with CAF approval rights",
            )
        if not actor.can_view(organization_id):
            raise PermissionDeniedError(
                "ACCESS_DENIED", "Cannot create CAFs for another organization"
            )
        if violation_group not in generation.VIOLATION_GROUPS:
            raise BadRequestError(
                "INVALID_VIOLATION_TYPE",
                f"Unknown violation type: {violation_group}",
                {"allowed": list(generation.VIOLATION_GROUPS)},
            )
        if not violation_codes:
            raise BadRequestError(
                "VIOLATION_CODES_REQUIRED", "At least one violation code is required"
            )
        if priority and priority not in {p.value for p in CafPriority}:
            raise BadRequestError(
                "INVALID_PRIORITY",
                f"Unknown priority: {priority}",
                {"allowed": [p.value for p in CafPriority]},
            )

        if self.db.get(Organization, organization_id) is None:
            raise NotFoundError(
                "ORGANIZATION_NOT_FOUND", f"Organization {organization_id} not found"
            )
        incident = self.db.get(Incident, incident_id)
        if incident is None:
            raise NotFoundError("INCIDENT_NOT_FOUND", f"Incident {incident_id} not found")
        if incident.organization_id != organization_id:
            raise BadRequestError(
                "INCIDENT_ORGANIZATION_MISMATCH",
                "Incident belongs to a different organization",
            )

        if assigned_staff_id:
            assignee = self.db.get(Staff, assigned_staff_id)
            if assignee is None or not assignee.is_active:
                raise NotFoundError(
                    "STAFF_NOT_FOUND", f"Staff member {assigned_staff_id} not found"
                )
        else:
            assigned_staff_id = self.default_assignee(organization_id, actor)

        now = utcnow()
        resolved_priority = priority or generation.calculate_priority(
            violation_codes, out_of_service
        ).value

        caf = CorrectiveActionForm(
            caf_number=self.next_caf_number(),
            incident_id=incident_id,
            violation_type=generation.violation_type_for_group(violation_group).value,
            violation_codes=list(violation_codes),
            violation_summary=generation.generate_summary(violation_group, violation_codes),
            title=title or generation.generate_title(violation_group, violation_codes),
            description=description
            or generation.generate_description((code, None) for code in violation_codes),
            category=generation.category_for_group(violation_group).value,
            priority=resolved_priority,
            status=CafStatus.ASSIGNED.value,
            organization_id=organization_id,
            assigned_staff_id=assigned_staff_id,
            assigned_by=actor.staff_id,
            created_by=actor.staff_id,
            due_date=(
                to_naive_utc(due_date)
                or generation.calculate_due_date(resolved_priority, now)
            ),
        )
        self.db.add(caf)
        self.db.flush()

        record_activity(
            self.db,
            caf.id,
            "CAF created",
            {
                "caf_number": caf.caf_number,
                "incident_id": incident_id,
                "assigned_staff_id": assigned_staff_id,
            },
            ["caf", "created"],
            actor.staff_id,
        )
        logger.info("Created %s for incident %s", caf.caf_number, incident_id)
        return caf

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def change_status(
        self,
        caf_id: str,
        actor: Actor,
        new_status: str,
        notes: str | None = None,
    ) -> CorrectiveActionForm:
        caf = self.get(caf_id, actor)
        change = plan_status_change(caf, new_status, actor, notes)
        change.apply_to(caf)

        record_activity(
            self.db,
            caf.id,
            "CAF status updated",
            {
                "previous_status": change.previous_status.value,
                "new_status": change.new_status.value,
                "updated_by": actor.name or actor.staff_id,
                "completion_notes": change.completion_notes,
            },
            ["caf", "status"],
            actor.staff_id,
        )
        self.db.flush()

        logger.info(
            "CAF %s: %s -> %s by %s",
            caf.caf_number,
            change.previous_status.value,
            change.new_status.value,
            actor.staff_id,
        )
        return caf

    def sign(
        self,
        caf_id: str,
        actor: Actor,
        signature_type: str,
        digital_signature: str | None,
        notes: str | None = None,
        ip_address: str | None = None,
    ) -> CorrectiveActionForm:
        caf = self.get(caf_id, actor)
        draft = plan_signature(caf, signature_type, actor, digital_signature, notes)
        self._append_signature(caf, draft, ip_address)
        self.db.flush()

        logger.info(
            "CAF %s signed (%s) by %s",
            caf.caf_number,
            draft.signature_type.value,
            actor.staff_id,
        )
        return caf

    def complete_and_sign(
        self,
        caf_id: str,
        actor: Actor,
        completion_notes: str | None,
        digital_signature: str | None,
        signature_notes: str | None = None,
        ip_address: str | None = None,
    ) -> CorrectiveActionForm:
        """
        Mark an IN_PROGRESS CAF complete and record the COMPLETION signature.

        Both steps are validated before either is applied, so a rejected
        signature leaves the CAF IN_PROGRESS.
        """
        caf = self.get(caf_id, actor)
        change = plan_status_change(caf, CafStatus.COMPLETED, actor, completion_notes)
        completed_view = SimpleNamespace(
            status=change.new_status.value,
            signatures=list(caf.signatures),
        )
        draft = plan_signature(
            completed_view,
            SignatureType.COMPLETION,
            actor,
            digital_signature,
            signature_notes,
        )

        change.apply_to(caf)
        record_activity(
            self.db,
            caf.id,
            "CAF status updated",
            {
                "previous_status": change.previous_status.value,
                "new_status": change.new_status.value,
                "updated_by": actor.name or actor.staff_id,
                "completion_notes": change.completion_notes,
            },
            ["caf", "status"],
            actor.staff_id,
        )
        self._append_signature(caf, draft, ip_address)
        self.db.flush()

        logger.info("CAF %s completed and signed by %s", caf.caf_number, actor.staff_id)
        return caf

    def _append_signature(self, caf, draft, ip_address: str | None) -> CafSignature:
        signature = CafSignature(
            caf_id=caf.id,
            staff_id=draft.staff_id,
            signature_type=draft.signature_type.value,
            digital_signature=draft.digital_signature,
            notes=draft.notes,
            ip_address=ip_address or "unknown",
            signed_at=draft.signed_at,
        )
        caf.signatures.append(signature)
        self.db.add(signature)
        self.db.flush()

        record_activity(
            self.db,
            caf.id,
            "CAF signed",
            {
                "signature_type": draft.signature_type.value,
                "signed_by": draft.staff_id,
                "signature_id": signature.id,
            },
            ["caf", "signature"],
            draft.staff_id,
        )
        return signature

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def export_pdf(
        self,
        caf_id: str,
        actor: Actor,
        variant: str = "fillable",
        download: bool = False,
    ) -> PdfDocument:
        if variant not in PDF_FORMATS:
            raise BadRequestError(
                "INVALID_FORMAT",
                f"Invalid format: {variant}. Must be 'fillable' or 'completed'",
            )
        caf = self.get(caf_id, actor)

        content = generate_caf_pdf(generate_caf_export(caf), variant)
        filename = pdf_filename(caf.caf_number, variant, utcnow().strftime("%Y-%m-%d"))

        record_activity(
            self.db,
            caf.id,
            "CAF PDF generated",
            {"format": variant, "filename": filename, "file_size": len(content)},
            ["caf", "pdf"],
            actor.staff_id,
        )
        self.db.flush()

        return PdfDocument(
            content=content,
            filename=filename,
            disposition="attachment" if download else "inline",
        )
