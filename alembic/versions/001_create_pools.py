"""Pool metadata table.

Revision ID: 001_pools
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_pools'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'pools',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('state', sa.String(20), nullable=False, server_default='COLLECTING'),
        sa.Column('tvl', sa.String(78), nullable=False, server_default='0'),
        sa.Column('cap', sa.String(78), nullable=False),
        sa.Column('apy', sa.String(32), nullable=False, server_default='0'),
        sa.Column('wait_time', sa.Integer(), nullable=False, server_default='420'),
        sa.Column('min_deposit', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('contract_address', sa.String(42), nullable=False),
        sa.Column('chain_id', sa.Integer(), nullable=False),
        sa.Column('risk_level', sa.String(10), nullable=False, server_default='low'),
        sa.Column('adapter_type', sa.String(20), nullable=False, server_default='aave'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('contract_address', 'chain_id', name='uq_pool_contract_chain')
    )
    op.create_index('ix_pools_state', 'pools', ['state'])


def downgrade() -> None:
    op.drop_index('ix_pools_state', table_name='pools')
    op.drop_table('pools')
