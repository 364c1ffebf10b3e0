"""Initial netwatch schema

Revision ID: 4f2a9c1d7e30
Revises:
Create Date: 2025-11-03 10:12:44.218311

"""
from datetime import datetime
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'devices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('ip', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('lane_name', sa.String(), nullable=False),
        sa.Column('netwatch_timeout', sa.Integer(), nullable=False),
        sa.Column('netwatch_interval', sa.Integer(), nullable=False),
        sa.Column('netwatch_up_script', sa.String(), nullable=True),
        sa.Column('netwatch_down_script', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('status_since', sa.DateTime(), nullable=True),
        sa.Column('last_seen', sa.DateTime(), nullable=True),
        sa.Column('needs_sync', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_devices_id'), 'devices', ['id'], unique=False)
    op.create_index(op.f('ix_devices_name'), 'devices', ['name'], unique=False)
    op.create_index(op.f('ix_devices_ip'), 'devices', ['ip'], unique=True)

    op.create_table(
        'device_status_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.Column('device_ip', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_device_status_history_id'), 'device_status_history', ['id'], unique=False)
    op.create_index(op.f('ix_device_status_history_device_id'), 'device_status_history', ['device_id'], unique=False)
    op.create_index(op.f('ix_device_status_history_timestamp'), 'device_status_history', ['timestamp'], unique=False)

    system_config = op.create_table(
        'system_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('remote_host', sa.String(), nullable=False),
        sa.Column('remote_user', sa.String(), nullable=False),
        sa.Column('remote_secret', sa.String(), nullable=False),
        sa.Column('remote_port', sa.Integer(), nullable=False),
        sa.Column('remote_vendor', sa.String(), nullable=False),
        sa.Column('polling_interval_seconds', sa.Integer(), nullable=False),
        sa.Column('default_timeout_ms', sa.Integer(), nullable=False),
        sa.Column('default_interval_seconds', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # 단일 설정 행 (id = 1)
    op.bulk_insert(system_config, [{
        'id': 1,
        'remote_host': '',
        'remote_user': '',
        'remote_secret': '',
        'remote_port': 22,
        'remote_vendor': 'routeros',
        'polling_interval_seconds': 30,
        'default_timeout_ms': 1000,
        'default_interval_seconds': 5,
        'updated_at': datetime.now(),
    }])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('system_config')
    op.drop_index(op.f('ix_device_status_history_timestamp'), table_name='device_status_history')
    op.drop_index(op.f('ix_device_status_history_device_id'), table_name='device_status_history')
    op.drop_index(op.f('ix_device_status_history_id'), table_name='device_status_history')
    op.drop_table('device_status_history')
    op.drop_index(op.f('ix_devices_ip'), table_name='devices')
    op.drop_index(op.f('ix_devices_name'), table_name='devices')
    op.drop_index(op.f('ix_devices_id'), table_name='devices')
    op.drop_table('devices')
