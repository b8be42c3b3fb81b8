"""create caf workflow schema

Revision ID: 001_caf_workflow
Revises:
Create Date: 2026-10-19 09:00:00

Organizations, staff, incidents, corrective action forms, signatures,
maintenance work orders and the activity log. Signatures are append-only.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_caf_workflow'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_organizations_name', 'organizations', ['name'])

    op.create_table(
        'staff',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('user_type', sa.String(20), nullable=False, server_default='organization'),
        sa.Column('can_sign_cafs', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_approve_cafs', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_staff_organization_id', 'staff', ['organization_id'])
    op.create_index('ix_staff_email', 'staff', ['email'])

    op.create_table(
        'incidents',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('incident_type', sa.String(30), nullable=False),
        sa.Column('reference_number', sa.String(100), nullable=True),
        sa.Column('equipment_id', sa.String(36), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('occurred_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_incidents_organization_id', 'incidents', ['organization_id'])
    op.create_index('ix_incidents_incident_type', 'incidents', ['incident_type'])
    op.create_index('ix_incidents_status', 'incidents', ['status'])

    op.create_table(
        'corrective_action_forms',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('caf_number', sa.String(30), nullable=False),
        sa.Column('violation_type', sa.String(30), nullable=True),
        sa.Column('violation_codes', sa.JSON(), nullable=False),
        sa.Column('category', sa.String(30), nullable=False, server_default='OTHER'),
        sa.Column('priority', sa.String(10), nullable=False, server_default='MEDIUM'),
        sa.Column('status', sa.String(20), nullable=False, server_default='ASSIGNED'),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('assigned_staff_id', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('assigned_by', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('approved_by', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('violation_summary', sa.Text(), nullable=True),
        sa.Column('completion_notes', sa.Text(), nullable=True),
        sa.Column('incident_id', sa.String(36), sa.ForeignKey('incidents.id'), nullable=True),
        sa.Column('maintenance_issue_id', sa.String(36), nullable=True),
        sa.Column('requires_maintenance', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_corrective_action_forms_caf_number', 'corrective_action_forms', ['caf_number'], unique=True)
    op.create_index('ix_corrective_action_forms_status', 'corrective_action_forms', ['status'])
    op.create_index('ix_corrective_action_forms_organization_id', 'corrective_action_forms', ['organization_id'])
    op.create_index('ix_corrective_action_forms_assigned_staff_id', 'corrective_action_forms', ['assigned_staff_id'])
    op.create_index('ix_corrective_action_forms_incident_id', 'corrective_action_forms', ['incident_id'])

    op.create_table(
        'incident_violations',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('incident_id', sa.String(36), sa.ForeignKey('incidents.id'), nullable=False),
        sa.Column('violation_code', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('violation_type', sa.String(30), nullable=True),
        sa.Column('out_of_service', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('inspector_comments', sa.Text(), nullable=True),
        sa.Column('caf_id', sa.String(36), sa.ForeignKey('corrective_action_forms.id'), nullable=True),
    )
    op.create_index('ix_incident_violations_incident_id', 'incident_violations', ['incident_id'])
    op.create_index('ix_incident_violations_caf_id', 'incident_violations', ['caf_id'])

    op.create_table(
        'caf_signatures',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('caf_id', sa.String(36), sa.ForeignKey('corrective_action_forms.id'), nullable=False),
        sa.Column('staff_id', sa.String(36), sa.ForeignKey('staff.id'), nullable=False),
        sa.Column('signature_type', sa.String(20), nullable=False),
        sa.Column('digital_signature', sa.Text(), nullable=False),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('signed_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_caf_signatures_caf_id', 'caf_signatures', ['caf_id'])
    op.create_index('ix_caf_signatures_staff_id', 'caf_signatures', ['staff_id'])
    op.create_index('ix_caf_signatures_signed_at', 'caf_signatures', ['signed_at'])

    # Append-only signatures
    op.execute("""
        CREATE OR REPLACE FUNCTION reject_signature_mutation()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'CAF signatures are append-only. Operation % is forbidden on caf_signatures.', TG_OP;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER prevent_signature_mutation
        BEFORE UPDATE OR DELETE ON caf_signatures
        FOR EACH ROW EXECUTE FUNCTION reject_signature_mutation();
    """)

    op.create_table(
        'maintenance_issues',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('caf_id', sa.String(36), sa.ForeignKey('corrective_action_forms.id'), nullable=True),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('equipment_id', sa.String(36), nullable=True),
        sa.Column('issue_type', sa.String(30), nullable=False, server_default='CORRECTIVE_ACTION'),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='SCHEDULED'),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('violation_codes', sa.JSON(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('assigned_staff_id', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_maintenance_issues_caf_id', 'maintenance_issues', ['caf_id'])
    op.create_index('ix_maintenance_issues_organization_id', 'maintenance_issues', ['organization_id'])
    op.create_index('ix_maintenance_issues_equipment_id', 'maintenance_issues', ['equipment_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.String(36), primary_key=True, nullable=False),
        sa.Column('caf_id', sa.String(36), sa.ForeignKey('corrective_action_forms.id'), nullable=True),
        sa.Column('activity_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_activity_logs_caf_id', 'activity_logs', ['caf_id'])
    op.create_index('ix_activity_logs_activity_type', 'activity_logs', ['activity_type'])


def downgrade():
    op.drop_table('activity_logs')
    op.drop_table('maintenance_issues')
    op.execute("DROP TRIGGER IF EXISTS prevent_signature_mutation ON caf_signatures")
    op.execute("DROP FUNCTION IF EXISTS reject_signature_mutation()")
    op.drop_table('caf_signatures')
    op.drop_table('incident_violations')
    op.drop_table('corrective_action_forms')
    op.drop_table('incidents')
    op.drop_table('staff')
    op.drop_table('organizations')
