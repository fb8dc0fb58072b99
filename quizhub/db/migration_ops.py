"""
Idempotent migration helpers

Every helper inspects the live schema before acting. A step whose target is
already in place is logged and skipped, so a revision can be re-run against a
database that was partly migrated by hand. A target that exists in a shape the
step cannot reconcile raises SchemaConflictError instead.

``op`` is the alembic ``op`` proxy inside a revision, or any
``alembic.operations.Operations`` instance.
"""

import logging
from typing import Iterable, List, Optional

import sqlalchemy as sa

logger = logging.getLogger("quizhub.migrations")


class SchemaConflictError(Exception):
    """The schema holds an object that contradicts a migration step"""

    def __init__(self, message: str, table: Optional[str] = None, column: Optional[str] = None):
        self.message = message
        self.table = table
        self.column = column
        super().__init__(message)


def _inspector(op):
    return sa.inspect(op.get_bind())


def _python_type(column_type) -> Optional[type]:
    if isinstance(column_type, sa.Enum):
        return str
    try:
        python_type = column_type.python_type
    except NotImplementedError:
        return None
    # Booleans come back as small integers on some backends
    if python_type is bool:
        return int
    return python_type


def _compatible(declared, reflected) -> bool:
    expected, actual = _python_type(declared), _python_type(reflected)
    if expected is None or actual is None:
        return True
    return expected is actual or issubclass(actual, expected) or issubclass(expected, actual)


def table_exists(op, table_name: str) -> bool:
    return _inspector(op).has_table(table_name)


def column_names(op, table_name: str) -> List[str]:
    return [column["name"] for column in _inspector(op).get_columns(table_name)]


def create_table_if_missing(op, table_name: str, *columns, **kw) -> bool:
    """Create ``table_name`` unless it exists with every declared column"""
    if table_exists(op, table_name):
        present = set(column_names(op, table_name))
        declared = [c.name for c in columns if isinstance(c, sa.Column)]
        missing = [name for name in declared if name not in present]
        if missing:
            raise SchemaConflictError(
                f"Table '{table_name}' exists without columns {missing}", table=table_name
            )
        logger.info(f"Table '{table_name}' already exists, skipping")
        return False
    op.create_table(table_name, *columns, **kw)
    logger.info(f"Created table '{table_name}'")
    return True


def add_column_if_missing(op, table_name: str, column: sa.Column) -> bool:
    reflected = {c["name"]: c for c in _inspector(op).get_columns(table_name)}
    existing = reflected.get(column.name)
    if existing is not None:
        if not _compatible(column.type, existing["type"]):
            raise SchemaConflictError(
                f"Column '{table_name}.{column.name}' exists as {existing['type']}, expected {column.type}",
                table=table_name,
                column=column.name,
            )
        logger.info(f"Column '{table_name}.{column.name}' already exists, skipping")
        return False
    with op.batch_alter_table(table_name) as batch_op:
        batch_op.add_column(column)
    logger.info(f"Added column '{table_name}.{column.name}'")
    return True


def drop_column_if_exists(op, table_name: str, column_name: str) -> bool:
    if not table_exists(op, table_name) or column_name not in column_names(op, table_name):
        logger.info(f"Column '{table_name}.{column_name}' does not exist, skipping")
        return False
    with op.batch_alter_table(table_name) as batch_op:
        batch_op.drop_column(column_name)
    logger.info(f"Dropped column '{table_name}.{column_name}'")
    return True


def create_index_if_missing(
    op, index_name: str, table_name: str, columns: Iterable[str], unique: bool = False
) -> bool:
    columns = list(columns)
    for index in _inspector(op).get_indexes(table_name):
        if index["name"] != index_name:
            continue
        if list(index["column_names"]) != columns or bool(index.get("unique")) != unique:
            raise SchemaConflictError(
                f"Index '{index_name}' exists on {index['column_names']}, expected {columns}",
                table=table_name,
            )
        logger.info(f"Index '{index_name}' already exists, skipping")
        return False
    op.create_index(index_name, table_name, columns, unique=unique)
    logger.info(f"Created index '{index_name}' on {table_name}{columns}")
    return True


def drop_index_if_exists(op, index_name: str, table_name: str) -> bool:
    if not table_exists(op, table_name):
        logger.info(f"Table '{table_name}' does not exist, skipping index '{index_name}'")
        return False
    names = {index["name"] for index in _inspector(op).get_indexes(table_name)}
    if index_name not in names:
        logger.info(f"Index '{index_name}' does not exist, skipping")
        return False
    op.drop_index(index_name, table_name=table_name)
    logger.info(f"Dropped index '{index_name}'")
    return True


def drop_table_if_exists(op, table_name: str) -> bool:
    if not table_exists(op, table_name):
        logger.info(f"Table '{table_name}' does not exist, skipping")
        return False
    op.drop_table(table_name)
    logger.info(f"Dropped table '{table_name}'")
    return True
