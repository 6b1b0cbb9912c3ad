"""initial_schema

Revision ID: c7d1e2f3a4b5
Revises:
Create Date: 2026-10-18 09:00:00.000000

초기 스키마: companies, users, authorized_devices, time_records, absences,
adjustments, tickets, ticket_responses.
Initial schema for the time-tracking backend.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'c7d1e2f3a4b5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # companies — 회사 (tenants)
    op.create_table(
        'companies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('legal_id', sa.String(32), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('email_domain', sa.String(255), nullable=False),
        sa.Column('address', JSONB, nullable=True),
        sa.Column('workplace_latitude', sa.Float(), nullable=True),
        sa.Column('workplace_longitude', sa.Float(), nullable=True),
        sa.Column('geofence_radius_m', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # users — 사용자 (employees, managers, hr, admins)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('national_id', sa.String(32), nullable=False, unique=True),
        sa.Column('role', sa.String(20), server_default='employee', nullable=False),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('profile_image_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    # authorized_devices — 인증 기기 (max 3 per user, enforced by the service)
    op.create_table(
        'authorized_devices',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('device_id', sa.String(255), nullable=False),
        sa.Column('device_name', sa.String(255), nullable=True),
        sa.Column('authorized_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'device_id', name='uq_authorized_device_user_device'),
    )

    # time_records — 출퇴근 이벤트 (append-only)
    op.create_table(
        'time_records',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', JSONB, nullable=False),
        sa.Column('device_info', JSONB, nullable=False),
        sa.Column('validation', JSONB, nullable=False),
        sa.Column('overall_status', sa.String(20), nullable=False),
        sa.Column('is_synced', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('metadata', JSONB, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_time_records_user_timestamp', 'time_records', ['user_id', 'timestamp'])
    op.create_index('ix_time_records_company_timestamp', 'time_records', ['company_id', 'timestamp'])

    # absences — 결근 신청
    op.create_table(
        'absences',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('type', sa.String(30), server_default='justified', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('attachment', JSONB, nullable=True),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_absences_company_id', 'absences', ['company_id'])

    # adjustments — 시간 조정 요청
    op.create_table(
        'adjustments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('time_record_id', UUID(as_uuid=True), sa.ForeignKey('time_records.id', ondelete='SET NULL'), nullable=True),
        sa.Column('record_type', sa.String(20), nullable=False),
        sa.Column('date', sa.String(20), nullable=False),
        sa.Column('start', sa.String(20), nullable=True),
        sa.Column('end', sa.String(20), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('justification', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('attachment', JSONB, nullable=True),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_adjustments_company_id', 'adjustments', ['company_id'])

    # tickets / ticket_responses — 문의 티켓과 답변
    op.create_table(
        'tickets',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('subject', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(10), server_default='medium', nullable=False),
        sa.Column('category', sa.String(20), server_default='other', nullable=False),
        sa.Column('status', sa.String(20), server_default='open', nullable=False),
        sa.Column('resolved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_tickets_company_id', 'tickets', ['company_id'])

    op.create_table(
        'ticket_responses',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('ticket_id', UUID(as_uuid=True), sa.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_ticket_responses_ticket_id', 'ticket_responses', ['ticket_id'])


def downgrade() -> None:
    op.drop_index('ix_ticket_responses_ticket_id', table_name='ticket_responses')
    op.drop_table('ticket_responses')
    op.drop_index('ix_tickets_company_id', table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('ix_adjustments_company_id', table_name='adjustments')
    op.drop_table('adjustments')
    op.drop_index('ix_absences_company_id', table_name='absences')
    op.drop_table('absences')
    op.drop_index('ix_time_records_company_timestamp', table_name='time_records')
    op.drop_index('ix_time_records_user_timestamp', table_name='time_records')
    op.drop_table('time_records')
    op.drop_table('authorized_devices')
    op.drop_index('ix_users_company_id', table_name='users')
    op.drop_table('users')
    op.drop_table('companies')
