from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config
from alembic.migration import MigrationContext
from alembic.operations import Operations

from quizhub.db.migration_ops import (
    SchemaConflictError,
    add_column_if_missing,
    create_index_if_missing,
    create_table_if_missing,
    drop_column_if_exists,
    drop_index_if_exists,
)
from quizhub.db.schema_check import verify_schema

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def scratch_engine(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'scratch.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def op(scratch_engine):
    with scratch_engine.begin() as connection:
        yield Operations(MigrationContext.configure(connection))


def _widgets(op):
    return create_table_if_missing(
        op,
        "widgets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
    )


def test_create_table_is_idempotent(op):
    assert _widgets(op) is True
    assert _widgets(op) is False


def test_create_table_conflict_when_columns_differ(op):
    op.create_table("widgets", sa.Column("id", sa.Integer(), primary_key=True))
    with pytest.raises(SchemaConflictError) as excinfo:
        _widgets(op)
    assert excinfo.value.table == "widgets"


def test_add_and_drop_column(op):
    _widgets(op)
    column = sa.Column("color", sa.String(20), nullable=True)
    assert add_column_if_missing(op, "widgets", column) is True
    assert add_column_if_missing(op, "widgets", sa.Column("color", sa.String(20), nullable=True)) is False

    assert drop_column_if_exists(op, "widgets", "color") is True
    assert drop_column_if_exists(op, "widgets", "color") is False
    assert drop_column_if_exists(op, "no_such_table", "color") is False


def test_add_column_conflict_on_incompatible_type(op):
    _widgets(op)
    with pytest.raises(SchemaConflictError) as excinfo:
        add_column_if_missing(op, "widgets", sa.Column("name", sa.Integer()))
    assert excinfo.value.column == "name"


def test_indexes(op):
    _widgets(op)
    assert create_index_if_missing(op, "ix_widgets_name", "widgets", ["name"]) is True
    assert create_index_if_missing(op, "ix_widgets_name", "widgets", ["name"]) is False
    with pytest.raises(SchemaConflictError):
        create_index_if_missing(op, "ix_widgets_name", "widgets", ["id", "name"])

    assert drop_index_if_exists(op, "ix_widgets_name", "widgets") is True
    assert drop_index_if_exists(op, "ix_widgets_name", "widgets") is False


def _alembic_config(connection):
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "migrations"))
    config.attributes["connection"] = connection
    return config


def test_revisions_upgrade_and_downgrade(scratch_engine):
    with scratch_engine.begin() as connection:
        command.upgrade(_alembic_config(connection), "head")
    report = verify_schema(scratch_engine)
    assert report["ok"], report

    with scratch_engine.begin() as connection:
        command.downgrade(_alembic_config(connection), "0001")
    report = verify_schema(scratch_engine)
    assert report["missingColumns"] == {
        "users": ["exam_countdowns"],
        "question_sets": ["card_image"],
        "user_progress": ["last_question_index"],
    }

    with scratch_engine.begin() as connection:
        command.downgrade(_alembic_config(connection), "base")
    assert "users" in verify_schema(scratch_engine)["missingTables"]


def test_upgrade_skips_steps_already_applied(scratch_engine):
    from quizhub.core.database import Base
    import quizhub.models  # noqa: F401

    # A database created straight from the models already has every column
    Base.metadata.create_all(bind=scratch_engine)
    with scratch_engine.begin() as connection:
        command.upgrade(_alembic_config(connection), "head")
    assert verify_schema(scratch_engine)["ok"]
