"""Tests for boundary normalisation helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from tutor_insights.domain.records import SessionRecord
from tutor_insights.normalization import (
    as_id_tuple,
    as_record_tuple,
    ensure_aware,
    mean,
    parse_timestamp,
    round_2dp,
    round_half_up,
    text_or_none,
)


class TestAsRecordTuple:
    """Tests for as_record_tuple function."""

    def test_non_sequences_become_empty(self):
        assert as_record_tuple(None, SessionRecord) == ()
        assert as_record_tuple("abc", SessionRecord) == ()
        assert as_record_tuple({"id": "x"}, SessionRecord) == ()

    def test_drops_items_of_other_types(self):
        record = SessionRecord(id="a")
        assert as_record_tuple([record, {"id": "b"}, None], SessionRecord) == (record,)


class TestAsIdTuple:
    """Tests for as_id_tuple function."""

    def test_scalar_id(self):
        assert as_id_tuple(" s1 ") == ("s1",)
        assert as_id_tuple(42) == ("42",)

    def test_sequence_skips_blanks_and_none(self):
        assert as_id_tuple(["s1", " ", None, "s2"]) == ("s1", "s2")

    def test_absent_values(self):
        assert as_id_tuple(None) == ()
        assert as_id_tuple("") == ()
        assert as_id_tuple(True) == ()


class TestTextOrNone:
    def test_blank_is_none(self):
        assert text_or_none("   ") is None
        assert text_or_none(None) is None

    def test_strips(self):
        assert text_or_none(" MIT ") == "MIT"


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-03-04T10:00:00") == datetime(2024, 3, 4, 10, tzinfo=UTC)

    def test_offsets_convert_to_utc(self):
        assert parse_timestamp("2024-03-04T10:00:00-05:00") == datetime(
            2024, 3, 4, 15, tzinfo=UTC
        )

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-03-04T10:00:00Z") == datetime(2024, 3, 4, 10, tzinfo=UTC)

    def test_datetimes_pass_through(self):
        moment = datetime(2024, 3, 4, 10, tzinfo=timezone(timedelta(hours=1)))
        assert parse_timestamp(moment) == datetime(2024, 3, 4, 9, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "not a date", None, 1709546400])
    def test_unparsable_values_are_none(self, value):
        assert parse_timestamp(value) is None


class TestRounding:
    """Halves round towards positive infinity."""

    @pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_round_2dp(self):
        assert round_2dp(4.375) == 4.38
        assert round_2dp(66.666666) == 66.67
        assert round_2dp(0.0) == 0.0


class TestMean:
    def test_empty_is_zero(self):
        assert mean([]) == 0.0

    def test_average(self):
        assert mean([1.0, 2.0, 4.5]) == 2.5


class TestEnsureAware:
    def test_naive_gets_utc(self):
        assert ensure_aware(datetime(2024, 1, 1)).tzinfo is UTC

    def test_aware_keeps_offset(self):
        zone = timezone(timedelta(hours=-3))
        assert ensure_aware(datetime(2024, 1, 1, tzinfo=zone)).tzinfo is zone
