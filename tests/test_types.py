"""Tests for the list codec and timestamp column types."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from authstore.core.types import (
    UTCDateTime,
    decode_string_list,
    encode_string_list,
)


class TestStringListCodec:
    """Lists survive storage in order, whatever their contents."""

    @pytest.mark.parametrize(
        "values",
        [
            ["fosite", "photos", "offline"],
            ["a;b", "c"],
            ["", "x", ""],
            ["https://example.com/cb?x=1;y=2"],
            ["ünïcode", "scope with space"],
        ],
    )
    def test_round_trip(self, values):
        assert decode_string_list(encode_string_list(values)) == values

    def test_empty_and_missing(self):
        assert encode_string_list(None) == "[]"
        assert encode_string_list([]) == "[]"
        assert decode_string_list(None) == []
        assert decode_string_list("") == []
        assert decode_string_list("[]") == []

    def test_legacy_separator_format(self):
        assert decode_string_list("fosite;photos;offline") == [
            "fosite",
            "photos",
            "offline",
        ]
        assert decode_string_list("single") == ["single"]

    def test_bracket_prefixed_legacy_value(self):
        assert decode_string_list("[not json;x") == ["[not json", "x"]


class TestUTCDateTime:
    """Timestamps are stored in UTC and read back timezone-aware."""

    def test_sqlite_binds_naive_utc(self):
        col = UTCDateTime()
        when = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        bound = col.process_bind_param(when, sqlite.dialect())

        assert bound == datetime(2024, 1, 1, 10, 0)

    def test_postgres_binds_aware_utc(self):
        col = UTCDateTime()
        when = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        bound = col.process_bind_param(when, postgresql.dialect())

        assert bound == when
        assert bound.tzinfo == timezone.utc

    def test_naive_values_are_assumed_utc(self):
        col = UTCDateTime()

        loaded = col.process_result_value(datetime(2024, 1, 1, 10, 0), sqlite.dialect())

        assert loaded == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert col.process_result_value(None, sqlite.dialect()) is None
