"""
Central field naming for QuizHub

Storage columns are snake_case; the JSON API exposes the camelCase rendering
of the same name. Everything that converts between the two (pydantic schemas,
sort parameters, the bulk importer) goes through this module.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic.alias_generators import to_camel, to_snake

# Constraint/index names are deterministic so migrations can find them again
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Historical spellings still accepted on input, mapped to the storage column
LEGACY_ALIASES: Dict[str, str] = {
    "quizId": "question_set_id",
    "quiz_id": "question_set_id",
    "questionSetID": "question_set_id",
    "question": "text",
    "content": "text",
    "optionText": "text",
    "correct": "is_correct",
    "type": "question_type",
    "index": "option_index",
}


def api_name(column: str) -> str:
    """Return the API (camelCase) name for a storage column"""
    return to_camel(column)


def storage_name(field: str) -> str:
    """Return the storage column for an API name, honouring legacy aliases"""
    if field in LEGACY_ALIASES:
        return LEGACY_ALIASES[field]
    return to_snake(field)


def resolve_sort_column(model, field: str, allowed: Optional[Iterable[str]] = None):
    """
    Resolve an API sort field to a mapped column of ``model``

    Returns None when the field does not name a sortable column.
    """
    column = storage_name(field)
    if allowed is not None and column not in set(allowed):
        return None
    table_columns = model.__table__.columns
    if column not in table_columns:
        return None
    return getattr(model, column)


def normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert an incoming mapping (camelCase, snake_case or legacy keys) to
    storage names. Canonical keys win over legacy spellings of the same column.
    """
    normalized: Dict[str, Any] = {}
    legacy: Dict[str, Any] = {}
    for key, value in data.items():
        if key in LEGACY_ALIASES and LEGACY_ALIASES[key] != to_snake(key):
            legacy.setdefault(LEGACY_ALIASES[key], value)
        else:
            normalized[storage_name(key)] = value
    for key, value in legacy.items():
        normalized.setdefault(key, value)
    return normalized
