"""Add exam_countdowns to users.

Revision ID: 0003
Revises: 0002
Create Date: 2024-09-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from quizhub.db import migration_ops as ops

revision: str = "0003"
down_revision: Union[str, None] = "0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    ops.add_column_if_missing(op, "users", sa.Column("exam_countdowns", sa.JSON(), nullable=True))


def downgrade() -> None:
    ops.drop_column_if_exists(op, "users", "exam_countdowns")
