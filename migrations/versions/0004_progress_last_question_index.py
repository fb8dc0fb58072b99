"""Add last_question_index to user_progress.

Revision ID: 0004
Revises: 0003
Create Date: 2024-10-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from quizhub.db import migration_ops as ops

revision: str = "0004"
down_revision: Union[str, None] = "0003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    ops.add_column_if_missing(
        op, "user_progress", sa.Column("last_question_index", sa.Integer(), nullable=True)
    )


def downgrade() -> None:
    ops.drop_column_if_exists(op, "user_progress", "last_question_index")
