"""
Shared column helpers for QuizHub models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (all stored timestamps are UTC)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def string_enum(enum_cls) -> Enum:
    """Store a str-valued enum by value in a plain VARCHAR column"""
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=20,
    )


class TimestampMixin:
    """created_at / updated_at columns maintained by the ORM"""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
