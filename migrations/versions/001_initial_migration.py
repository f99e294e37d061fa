"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2026-01-05 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create devices table
    op.create_table('devices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_devices_id'), 'devices', ['id'], unique=False)
    op.create_index(op.f('ix_devices_token'), 'devices', ['token'], unique=True)

    # Create subjects table
    op.create_table('subjects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(length=16), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('group_label', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_subjects_id'), 'subjects', ['id'], unique=False)
    op.create_index(op.f('ix_subjects_external_id'), 'subjects', ['external_id'], unique=True)

    # Create settings table (single row)
    op.create_table('settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_cutoff', sa.String(length=5), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    # Create daily_records table
    op.create_table('daily_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.String(length=16), nullable=False),
        sa.Column('subject_name', sa.String(length=100), nullable=True),
        sa.Column('group_label', sa.String(length=100), nullable=True),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('ordered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('taken_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('device_ip', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('subject_id', 'date', name='uix_daily_record_subject_date')
    )
    op.create_index(op.f('ix_daily_records_id'), 'daily_records', ['id'], unique=False)
    op.create_index(op.f('ix_daily_records_subject_id'), 'daily_records', ['subject_id'], unique=False)
    op.create_index(op.f('ix_daily_records_date'), 'daily_records', ['date'], unique=False)
    op.create_index('ix_daily_records_date_updated', 'daily_records', ['date', 'updated_at'], unique=False)

    # Create attendance_logs table
    op.create_table('attendance_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.String(length=16), nullable=False),
        sa.Column('subject_name', sa.String(length=100), nullable=True),
        sa.Column('group_label', sa.String(length=100), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('device_ip', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_attendance_logs_id'), 'attendance_logs', ['id'], unique=False)
    op.create_index(op.f('ix_attendance_logs_subject_id'), 'attendance_logs', ['subject_id'], unique=False)
    op.create_index(op.f('ix_attendance_logs_timestamp'), 'attendance_logs', ['timestamp'], unique=False)
    op.create_index('ix_attendance_logs_timestamp_subject', 'attendance_logs', ['timestamp', 'subject_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_attendance_logs_timestamp_subject', table_name='attendance_logs')
    op.drop_index(op.f('ix_attendance_logs_timestamp'), table_name='attendance_logs')
    op.drop_index(op.f('ix_attendance_logs_subject_id'), table_name='attendance_logs')
    op.drop_index(op.f('ix_attendance_logs_id'), table_name='attendance_logs')
    op.drop_table('attendance_logs')
    op.drop_index('ix_daily_records_date_updated', table_name='daily_records')
    op.drop_index(op.f('ix_daily_records_date'), table_name='daily_records')
    op.drop_index(op.f('ix_daily_records_subject_id'), table_name='daily_records')
    op.drop_index(op.f('ix_daily_records_id'), table_name='daily_records')
    op.drop_table('daily_records')
    op.drop_table('settings')
    op.drop_index(op.f('ix_subjects_external_id'), table_name='subjects')
    op.drop_index(op.f('ix_subjects_id'), table_name='subjects')
    op.drop_table('subjects')
    op.drop_index(op.f('ix_devices_token'), table_name='devices')
    op.drop_index(op.f('ix_devices_id'), table_name='devices')
    op.drop_table('devices')
