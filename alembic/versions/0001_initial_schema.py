"""initial schema: departments, issues, timeline, status history, alerts

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

issue_status = sa.Enum('pending', 'in_review', 'forwarded', 'completed', 'reopened', name='issuestatus')
severity = sa.Enum('low', 'medium', 'high', 'critical', name='severity')
recurrence = sa.Enum('new', 'recurring', 'ongoing', name='recurrence')
contact_method = sa.Enum('phone', 'email', 'none', name='contactmethod')
geo_source = sa.Enum('device_location', 'map_click', 'manual', 'search', name='geosource')
alert_type = sa.Enum('info', 'warning', 'urgent', name='alerttype')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'departments',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
    )
    op.create_index('ix_departments_name', 'departments', ['name'], unique=True)

    op.create_table(
        'issues',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('issue_type', sa.String(length=120), nullable=False),
        sa.Column('location', sa.String(length=300), nullable=False),
        sa.Column('landmark', sa.String(length=300), nullable=True),
        sa.Column('description', sa.String(length=4000), nullable=False),
        sa.Column('impact', sa.String(length=1000), nullable=True),
        sa.Column('severity', severity, nullable=False),
        sa.Column('recurrence', recurrence, nullable=False),
        sa.Column('status', issue_status, nullable=False),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lng', sa.Float(), nullable=True),
        sa.Column('geo_accuracy', sa.Float(), nullable=True),
        sa.Column('geo_source', geo_source, nullable=True),
        sa.Column('evidence_urls', sa.JSON(), nullable=False),
        sa.Column('resolution_evidence', sa.JSON(), nullable=False),
        sa.Column('contact_name', sa.String(length=120), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('preferred_contact_method', contact_method, nullable=False),
        sa.Column('summary', sa.String(length=6000), nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('forwarded_to', sa.String(length=32), sa.ForeignKey('departments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('review', sa.String(length=2000), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
    )
    op.create_index('ix_issues_issue_type', 'issues', ['issue_type'])
    op.create_index('ix_issues_severity', 'issues', ['severity'])
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_created_by', 'issues', ['created_by'])
    op.create_index('ix_issues_forwarded_to', 'issues', ['forwarded_to'])
    op.create_index('ix_issues_created_at', 'issues', ['created_at'])
    op.create_index('ix_issues_lat_lng', 'issues', ['lat', 'lng'])

    op.create_table(
        'department_updates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.String(length=32), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.String(length=4000), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('added_by', sa.String(length=64), nullable=True),
        sa.Column('department', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_department_updates_issue_id', 'department_updates', ['issue_id'])

    op.create_table(
        'issue_activity',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.String(length=32), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_status', sa.String(length=20), nullable=True),
        sa.Column('to_status', sa.String(length=20), nullable=False),
        sa.Column('actor', sa.String(length=64), nullable=True),
        sa.Column('at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_issue_activity_issue_id', 'issue_activity', ['issue_id'])
    op.create_index('ix_issue_activity_at', 'issue_activity', ['at'])

    op.create_table(
        'alerts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.String(length=2000), nullable=False),
        sa.Column('type', alert_type, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_alerts_created_at', 'alerts', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('alerts')
    op.drop_table('issue_activity')
    op.drop_table('department_updates')
    op.drop_table('issues')
    op.drop_table('departments')
    bind = op.get_bind()
    for enum in (alert_type, geo_source, contact_method, recurrence, severity, issue_status):
        enum.drop(bind, checkfirst=True)
