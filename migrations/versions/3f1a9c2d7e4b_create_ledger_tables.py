"""create ledger tables

Revision ID: 3f1a9c2d7e4b
Revises: 
Create Date: 2026-10-19 10:12:41.508213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e4b'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_groups_id', 'groups', ['id'])

    op.create_table(
        'group_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='member'),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.ForeignKeyConstraint(['group_id'], ['groups.id']),
        sa.UniqueConstraint('group_id', 'user_id', name='uq_group_member_user'),
    )
    op.create_index('ix_group_members_id', 'group_members', ['id'])
    op.create_index('ix_group_members_group_id', 'group_members', ['group_id'])

    op.create_table(
        'group_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('paid_by', sa.Integer(), nullable=False),
        sa.Column('split_type', sa.String(), nullable=False, server_default='custom'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('category_id', sa.String(), nullable=True),
        sa.Column('is_settlement', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('version_id', sa.Integer(), nullable=False),

        sa.ForeignKeyConstraint(['group_id'], ['groups.id']),
        sa.CheckConstraint('amount > 0', name='ck_group_transaction_amount_positive'),
    )
    op.create_index('ix_group_transactions_id', 'group_transactions', ['id'])
    op.create_index('ix_group_transactions_group_id', 'group_transactions', ['group_id'])

    op.create_table(
        'transaction_splits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),

        sa.ForeignKeyConstraint(
            ['transaction_id'],
            ['group_transactions.id'],
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint('transaction_id', 'user_id', name='uq_transaction_split_user'),
    )
    op.create_index('ix_transaction_splits_transaction_id', 'transaction_splits', ['transaction_id'])


def downgrade() -> None:
    op.drop_table('transaction_splits')
    op.drop_table('group_transactions')
    op.drop_table('group_members')
    op.drop_table('groups')
