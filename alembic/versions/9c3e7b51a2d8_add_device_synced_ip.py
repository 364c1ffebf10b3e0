"""Add devices.synced_ip

Revision ID: 9c3e7b51a2d8
Revises: 4f2a9c1d7e30
Create Date: 2025-11-17 14:05:31.904126

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9c3e7b51a2d8'
down_revision: Union[str, Sequence[str], None] = '4f2a9c1d7e30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table('devices') as batch_op:
        batch_op.add_column(sa.Column('synced_ip', sa.String(), nullable=True))

    # 이미 반영된 장비는 현재 IP로 원격 규칙이 존재한다고 본다
    op.execute("UPDATE devices SET synced_ip = ip WHERE needs_sync = 0")


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('devices') as batch_op:
        batch_op.drop_column('synced_ip')
