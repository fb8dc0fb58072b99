"""Baseline schema: users, question bank, entitlements, progress, homepage.

Revision ID: 0001
Revises:
Create Date: 2024-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from quizhub.db import migration_ops as ops

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _per_question_table(table, *payload):
    """Rows keyed by (user, question) within a question set"""
    ops.create_table_if_missing(
        op,
        table,
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("question_set_id", sa.String(36), nullable=False),
        sa.Column("question_id", sa.String(36), nullable=False),
        *payload,
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=f"fk_{table}_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["question_set_id"], ["question_sets.id"],
            name=f"fk_{table}_question_set_id_question_sets", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"],
            name=f"fk_{table}_question_id_questions", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        sa.UniqueConstraint("user_id", "question_id", name=f"uq_{table}_user_id_question_id"),
    )
    ops.create_index_if_missing(op, f"ix_{table}_user_id", table, ["user_id"])
    ops.create_index_if_missing(op, f"ix_{table}_question_set_id", table, ["question_set_id"])


def upgrade() -> None:
    ops.create_table_if_missing(
        op,
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    ops.create_table_if_missing(
        op,
        "question_sets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(255), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("trial_questions", sa.Integer(), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("featured_category", sa.String(100), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_question_sets"),
    )
    ops.create_index_if_missing(op, "ix_question_sets_category", "question_sets", ["category"])

    ops.create_table_if_missing(
        op,
        "questions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("question_set_id", sa.String(36), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(20), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("difficulty", sa.Integer(), nullable=True),
        sa.Column("time_limit", sa.Integer(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["question_set_id"], ["question_sets.id"],
            name="fk_questions_question_set_id_question_sets", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
    )
    ops.create_index_if_missing(op, "ix_questions_question_set_id", "questions", ["question_set_id"])
    ops.create_index_if_missing(op, "ix_questions_set_order", "questions", ["question_set_id", "order_index"])

    ops.create_table_if_missing(
        op,
        "options",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("question_id", sa.String(36), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("option_index", sa.String(5), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"],
            name="fk_options_question_id_questions", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_options"),
    )
    ops.create_index_if_missing(op, "ix_options_question_id", "options", ["question_id"])

    ops.create_table_if_missing(
        op,
        "purchases",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("question_set_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("purchase_date", sa.DateTime(), nullable=False),
        sa.Column("expiry_date", sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_purchases_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["question_set_id"], ["question_sets.id"],
            name="fk_purchases_question_set_id_question_sets", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_purchases"),
    )
    ops.create_index_if_missing(op, "ix_purchases_user_set", "purchases", ["user_id", "question_set_id"])

    ops.create_table_if_missing(
        op,
        "redeem_codes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("question_set_id", sa.String(36), nullable=False),
        sa.Column("validity_days", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.DateTime(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("used_by", sa.String(36), nullable=True),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["question_set_id"], ["question_sets.id"],
            name="fk_redeem_codes_question_set_id_question_sets", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["used_by"], ["users.id"], name="fk_redeem_codes_used_by_users", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"], name="fk_redeem_codes_created_by_users", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_redeem_codes"),
        sa.UniqueConstraint("code", name="uq_redeem_codes_code"),
    )
    ops.create_index_if_missing(op, "ix_redeem_codes_question_set_id", "redeem_codes", ["question_set_id"])

    _per_question_table(
        "user_progress",
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("time_spent", sa.Integer(), nullable=False),
        sa.Column("last_accessed", sa.DateTime(), nullable=False),
    )
    _per_question_table(
        "wrong_answers",
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(20), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("selected_option", sa.String(36), nullable=True),
        sa.Column("selected_options", sa.JSON(), nullable=True),
        sa.Column("correct_option", sa.String(36), nullable=True),
        sa.Column("correct_options", sa.JSON(), nullable=True),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
    )

    ops.create_table_if_missing(
        op,
        "homepage_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("welcome_title", sa.String(255), nullable=False),
        sa.Column("welcome_description", sa.Text(), nullable=False),
        sa.Column("featured_categories", sa.JSON(), nullable=False),
        sa.Column("announcements", sa.Text(), nullable=True),
        sa.Column("footer_text", sa.String(255), nullable=True),
        sa.Column("banner_image", sa.String(500), nullable=True),
        sa.Column("theme", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_homepage_settings"),
    )


def downgrade() -> None:
    for table in (
        "homepage_settings",
        "wrong_answers",
        "user_progress",
        "redeem_codes",
        "purchases",
        "options",
        "questions",
        "question_sets",
        "users",
    ):
        ops.drop_table_if_exists(op, table)
