"""
Compare the declared models against the live database
"""

import logging
from typing import Dict, List

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def verify_schema(engine: Engine) -> Dict[str, object]:
    """
    Report tables and columns that the models declare but the database lacks.

    Returns ``{"ok": bool, "missingTables": [...], "missingColumns": {table: [...]}}``.
    Nothing is changed; apply migrations to fix drift.
    """
    from quizhub.core.database import Base
    import quizhub.models  # noqa: F401

    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    missing_tables: List[str] = []
    missing_columns: Dict[str, List[str]] = {}
    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            missing_tables.append(table.name)
            continue
        present = {column["name"] for column in inspector.get_columns(table.name)}
        absent = [column.name for column in table.columns if column.name not in present]
        if absent:
            missing_columns[table.name] = absent

    for name in missing_tables:
        logger.warning(f"Schema drift: table '{name}' is missing")
    for name, columns in missing_columns.items():
        logger.warning(f"Schema drift: table '{name}' is missing columns {columns}")

    return {
        "ok": not missing_tables and not missing_columns,
        "missingTables": missing_tables,
        "missingColumns": missing_columns,
    }
