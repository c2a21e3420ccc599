"""add_feedback

Revision ID: 002_add_feedback
Revises: 001_initial
Create Date: 2026-01-12

Customer feedback, one entry per user, shown publicly once approved.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_add_feedback'
down_revision: Union[str, None] = '001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'feedback',
        sa.Column('feedback_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(),
                  sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', name='uq_feedback_user'),
    )


def downgrade() -> None:
    op.drop_table('feedback')
