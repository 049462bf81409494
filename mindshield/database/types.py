"""
Column types that behave the same on SQLite (tests, local runs) and PostgreSQL.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import TypeDecorator, String, DateTime
from sqlalchemy.dialects import postgresql
from sqlalchemy.types import JSON


def _is_postgres(dialect) -> bool:
    return dialect.name == "postgresql"


class UUID(TypeDecorator):
    """Native UUID on PostgreSQL, canonical 36 character text elsewhere."""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if _is_postgres(dialect):
            return dialect.type_descriptor(postgresql.UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        as_uuid = value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return as_uuid if _is_postgres(dialect) else str(as_uuid)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class StringList(TypeDecorator):
    """
    Ordered list of strings (scam categories, tactics) kept in one JSON
    column, JSONB on PostgreSQL.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if _is_postgres(dialect):
            return dialect.type_descriptor(postgresql.JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            raise TypeError("StringList expects a list of strings, not a single string")
        return [str(item) for item in value]

    def process_result_value(self, value, dialect):
        return None if value is None else list(value)


class UTCDateTime(TypeDecorator):
    """
    Timestamps stored as UTC and always returned timezone-aware.

    Naive datetimes are taken to be UTC already. SQLite keeps no offset, so
    values are normalised before they are written.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value if _is_postgres(dialect) else value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
