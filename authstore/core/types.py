"""Column types shared by the models."""

import json
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import JSON, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

LEGACY_SEPARATOR = ";"

JSONType = JSON().with_variant(JSONB(), "postgresql")


def encode_string_list(values: Iterable[str] | None) -> str:
    """Serialize an ordered list of strings to a JSON array."""
    if values is None:
        return "[]"
    return json.dumps([str(v) for v in values], ensure_ascii=False)


def decode_string_list(raw: str | None) -> list[str]:
    """Rebuild the ordered list written by `encode_string_list`.

    Values that are not JSON arrays are treated as the older
    `;`-joined format.
    """
    if raw is None or raw == "":
        return []
    if raw.startswith("["):
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if isinstance(data, list):
            return [str(v) for v in data]
    return raw.split(LEGACY_SEPARATOR)


class StringList(TypeDecorator):
    """Ordered list of strings stored in a single text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert the Python value for the database."""
        return encode_string_list(value)

    def process_result_value(self, value, dialect):
        """Convert the database value for Python."""
        return decode_string_list(value)


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always returned timezone-aware."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Normalize to UTC; SQLite stores it naive."""
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        """Return an aware UTC datetime."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
