"""
pdf_export.py - Corrective Action Form PDF rendering.

Two variants:
1. "fillable"  - blank AcroForm template: violation details, fillable text
                 fields for corrective actions, completion notes and
                 supervisor comments, status checkboxes, and blank lines for
                 the handwritten signatures
2. "completed" - populated with completion notes, recorded digital
                 signatures and an APPROVED stamp once approved

Input is the dict from json_export.generate_caf_export(), never ORM rows.
"""

from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Flowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from fleetcaf.config import settings

FILLABLE = "fillable"
COMPLETED = "completed"
PDF_FORMATS = (FILLABLE, COMPLETED)

BLANK_LINE = "_" * 70

TEMPLATE_TYPES = {
    "DRIVER_PERFORMANCE": "DRIVER",
    "DRIVER_QUALIFICATION": "DRIVER",
    "EQUIPMENT_MAINTENANCE": "EQUIPMENT",
    "COMPANY_OPERATIONS": "COMPANY",
}


def template_type(category: str | None) -> str:
    return TEMPLATE_TYPES.get(category or "", "GENERAL")


def pdf_filename(caf_number: str, variant: str, date_str: str) -> str:
    return f"CAF_{caf_number}_{variant}_{date_str}.pdf"


def generate_caf_pdf(export_data: dict[str, Any], variant: str = FILLABLE) -> bytes:
    """
    Render a CAF document.

    Args:
        export_data: Dict from generate_caf_export()
        variant: "fillable" or "completed"

    Returns:
        PDF bytes

    Raises:
        ValueError: If variant is not a known format
    """
    if variant not in PDF_FORMATS:
        raise ValueError(f"Invalid PDF format: {variant}")
    return _render_pdf(export_data, variant)


def _text(value: Any, default: str = "N/A") -> str:
    if value is None or value == "":
        return default
    return escape(str(value))


def _date(value: str | None) -> str:
    # ISO strings from the export; the date part is enough on paper
    return value[:10] if value else "N/A"


class TextAreaField(Flowable):
    """Fillable multi-line AcroForm text field."""

    def __init__(self, name: str, tooltip: str, width: float = 6.5 * inch,
                 height: float = 1.1 * inch):
        super().__init__()
        self.name = name
        self.tooltip = tooltip
        self.width = width
        self.height = height

    def wrap(self, availWidth, availHeight):
        self.width = min(self.width, availWidth)
        return self.width, self.height

    def draw(self):
        self.canv.acroForm.textfield(
            name=self.name,
            tooltip=self.tooltip,
            value="",
            x=0,
            y=0,
            width=self.width,
            height=self.height,
            fontSize=10,
            fieldFlags="multiline",
            borderColor=colors.grey,
            fillColor=colors.white,
            forceBorder=True,
            relative=True,
        )


class CheckboxRow(Flowable):
    """A row of labelled AcroForm checkboxes, one per (name, label) pair."""

    BOX_SIZE = 12
    SPACING = 1.8 * inch

    def __init__(self, boxes: list[tuple[str, str]]):
        super().__init__()
        self.boxes = boxes
        self.width = self.SPACING * len(boxes)
        self.height = self.BOX_SIZE + 4

    def wrap(self, availWidth, availHeight):
        return self.width, self.height

    def draw(self):
        self.canv.setFont("Helvetica", 10)
        for index, (name, label) in enumerate(self.boxes):
            x = index * self.SPACING
            self.canv.acroForm.checkbox(
                name=name,
                tooltip=label,
                checked=False,
                x=x,
                y=2,
                size=self.BOX_SIZE,
                buttonStyle="check",
                borderColor=colors.grey,
                fillColor=colors.white,
                forceBorder=True,
                relative=True,
            )
            self.canv.drawString(x + self.BOX_SIZE + 6, 4, label)


STATUS_CHECKBOXES = [
    ("status_in_progress", "In Progress"),
    ("status_completed", "Completed"),
    ("status_approved", "Approved"),
]


def _draw_approved_stamp(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFillColor(colors.HexColor("#2e7d32"))
    canvas.setFont("Helvetica-Bold", 36)
    canvas.translate(letter[0] - 2.6 * inch, letter[1] - 1.4 * inch)
    canvas.rotate(15)
    canvas.drawString(0, 0, "APPROVED")
    canvas.restoreState()


def _render_pdf(export_data: dict[str, Any], variant: str) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter,
                            topMargin=0.75*inch, bottomMargin=0.75*inch)

    # Styles
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'CafTitle',
        parent=styles['Title'],
        fontSize=18,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=6
    )
    heading_style = ParagraphStyle(
        'CafHeading',
        parent=styles['Heading2'],
        fontSize=12,
        textColor=colors.HexColor('#2a2a2a'),
        spaceAfter=6,
        spaceBefore=12
    )
    body_style = styles['BodyText']
    key_value_style = TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#e0e0e0')),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('PADDING', (0, 0), (-1, -1), 6),
    ])

    story = []

    # === HEADER ===
    story.append(Paragraph("CORRECTIVE ACTION FORM (CAF)", title_style))
    story.append(Paragraph(
        f"{_text(settings.PDF_ISSUER_NAME)} - {template_type(export_data.get('category'))} CAF",
        styles['Heading3']
    ))
    header_table = Table([
        ["CAF Number", _text(export_data.get('caf_number'))],
        ["Status", _text(export_data.get('status'))],
        ["Date Created", _date(export_data.get('created_at'))],
    ], colWidths=[2*inch, 4.5*inch])
    header_table.setStyle(key_value_style)
    story.append(header_table)

    # === ORGANIZATION ===
    story.append(Paragraph("ORGANIZATION INFORMATION", heading_style))
    organization = export_data.get('organization') or {}
    org_table = Table([
        ["Organization", _text(organization.get('name'))],
        ["Incident ID", _text(export_data.get('incident_id'))],
    ], colWidths=[2*inch, 4.5*inch])
    org_table.setStyle(key_value_style)
    story.append(org_table)

    # === VIOLATIONS ===
    story.append(Paragraph("VIOLATION INFORMATION", heading_style))
    violation_table = Table([
        ["Violation Type", _text(export_data.get('violation_type'))],
        ["Category", _text(export_data.get('category'))],
        ["Priority", _text(export_data.get('priority'))],
    ], colWidths=[2*inch, 4.5*inch])
    violation_table.setStyle(key_value_style)
    story.append(violation_table)
    story.append(Spacer(1, 0.1*inch))

    codes = export_data.get('violation_codes') or []
    codes_text = "<br/>".join(f"- {_text(code)}" for code in codes) or "None listed"
    story.append(Paragraph(f"<b>Violation Codes:</b><br/>{codes_text}", body_style))
    story.append(Paragraph(
        f"<b>Violation Summary:</b><br/>{_text(export_data.get('violation_summary'))}",
        body_style
    ))
    if export_data.get('description'):
        description = _text(export_data['description']).replace('\n', '<br/>')
        story.append(Paragraph(f"<b>Description:</b><br/>{description}", body_style))

    # === ASSIGNMENT ===
    story.append(Paragraph("ASSIGNMENT INFORMATION", heading_style))
    assigned = export_data.get('assigned_staff') or {}
    assignment_table = Table([
        ["Assigned To", _text(assigned.get('name'))],
        ["Position", _text(assigned.get('position'))],
        ["Due Date", _date(export_data.get('due_date'))],
    ], colWidths=[2*inch, 4.5*inch])
    assignment_table.setStyle(key_value_style)
    story.append(assignment_table)

    # === CORRECTIVE ACTIONS ===
    story.append(Paragraph("CORRECTIVE ACTIONS TAKEN", heading_style))
    if variant == COMPLETED and export_data.get('completion_notes'):
        notes = _text(export_data['completion_notes']).replace('\n', '<br/>')
        story.append(Paragraph(notes, body_style))
        story.append(Paragraph(
            f"<b>Completed:</b> {_date(export_data.get('completed_at'))}", body_style
        ))
    elif variant == FILLABLE:
        story.append(TextAreaField("corrective_actions", "Corrective actions taken"))
        story.append(Paragraph("<b>Completion Notes:</b>", body_style))
        story.append(TextAreaField("completion_notes", "Completion notes", height=0.8*inch))
        story.append(Paragraph("<b>Supervisor Comments:</b>", body_style))
        story.append(TextAreaField("supervisor_comments", "Supervisor comments", height=0.8*inch))
        story.append(Spacer(1, 0.1*inch))
        story.append(Paragraph("<b>Status:</b>", body_style))
        story.append(CheckboxRow(STATUS_CHECKBOXES))
    else:
        for _ in range(4):
            story.append(Paragraph(BLANK_LINE, body_style))

    # === SIGNATURE BLOCKS ===
    story.append(Paragraph("SUPERVISOR SIGNATURE", heading_style))
    story.append(Paragraph(
        "I certify that the corrective actions have been completed satisfactorily:",
        body_style
    ))
    story.append(Spacer(1, 0.2*inch))
    story.append(Paragraph("Supervisor Signature ____________________  Date: ____________", body_style))

    story.append(Paragraph("SAFETY OFFICE APPROVAL", heading_style))
    story.append(Paragraph("I approve the completion of this corrective action:", body_style))
    story.append(Spacer(1, 0.2*inch))
    if variant == COMPLETED and export_data.get('approved_at'):
        approver = export_data.get('approved_by_staff') or {}
        story.append(Paragraph(
            f"<b>Approved by:</b> {_text(approver.get('name'))} "
            f"<b>on</b> {_date(export_data.get('approved_at'))}",
            body_style
        ))
    else:
        story.append(Paragraph("Safety Office Signature ____________________  Date: ____________", body_style))

    # === DIGITAL SIGNATURES ON FILE ===
    signatures = export_data.get('signatures') or []
    if signatures:
        story.append(Paragraph("DIGITAL SIGNATURES ON FILE", heading_style))
        signature_data = [["Type", "Signed By", "Signed At"]]
        for sig in signatures:
            signature_data.append([
                _text(sig.get('signature_type')),
                _text(sig.get('staff_name')),
                _text(sig.get('signed_at')),
            ])
        signature_table = Table(signature_data, colWidths=[1.4*inch, 2.6*inch, 2.5*inch])
        signature_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4a4a4a')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f0f0f0')]),
        ]))
        story.append(signature_table)

    stamp = variant == COMPLETED and export_data.get('status') == "APPROVED"
    if stamp:
        doc.build(story, onFirstPage=_draw_approved_stamp)
    else:
        doc.build(story)

    pdf_bytes = buffer.getvalue()
    buffer.close()

    return pdf_bytes
