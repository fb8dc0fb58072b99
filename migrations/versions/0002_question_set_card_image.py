"""Add card_image to question_sets.

Revision ID: 0002
Revises: 0001
Create Date: 2024-05-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from quizhub.db import migration_ops as ops

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    ops.add_column_if_missing(op, "question_sets", sa.Column("card_image", sa.String(500), nullable=True))


def downgrade() -> None:
    ops.drop_column_if_exists(op, "question_sets", "card_image")
