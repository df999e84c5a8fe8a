"""Tests for time filter range resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from merchant_ledger.data.keys import KEY_CEILING, RecordKind, encode_sort_key
from merchant_ledger.data.ranges import KeyRange, TimeFilter, build_range
from merchant_ledger.errors import ValidationError


UTC = timezone.utc
PREFIX = "TRANSACTION#"


def key_at(ts: datetime, txn_id: str = "txn-1") -> str:
    return encode_sort_key(RecordKind.TRANSACTION, ts, txn_id)


def range_for(now, **components) -> KeyRange:
    return build_range(RecordKind.TRANSACTION, TimeFilter.parse(**components), now=now)


class TestNoFilter:
    """Without a filter the range covers all time up to now."""

    def test_bounds(self, now):
        key_range = build_range(RecordKind.TRANSACTION, None, now=now)
        assert key_range.lower == PREFIX
        assert key_range.upper == PREFIX + "2026-10-19T12:00:00.000Z"

    def test_empty_filter_behaves_like_none(self, now):
        assert build_range(RecordKind.TRANSACTION, TimeFilter(), now=now) == build_range(
            RecordKind.TRANSACTION, None, now=now
        )

    def test_past_included_future_excluded(self, now):
        key_range = build_range(RecordKind.TRANSACTION, None, now=now)
        assert key_at(datetime(1999, 1, 1, tzinfo=UTC)) in key_range
        assert key_at(now - timedelta(milliseconds=1), "zzz") in key_range
        assert key_at(now + timedelta(seconds=1)) not in key_range


class TestYearRange:
    def test_bounds(self, now):
        key_range = range_for(now, year=2025)
        assert key_range.lower == PREFIX + "2025-01-01T00:00:00.000Z"
        assert key_range.upper == PREFIX + "2026-01-01T00:00:00.000Z"

    def test_edges(self, now):
        key_range = range_for(now, year=2025)
        assert key_at(datetime(2025, 1, 1, tzinfo=UTC)) in key_range
        assert key_at(datetime(2025, 12, 31, 23, 59, 59, 999000, tzinfo=UTC), "zzz") in key_range
        assert key_at(datetime(2024, 12, 31, 23, 59, 59, 999000, tzinfo=UTC)) not in key_range
        assert key_at(datetime(2026, 1, 1, tzinfo=UTC), "a") not in key_range

    def test_last_representable_year(self, now):
        key_range = range_for(now, year=9999)
        assert key_range.upper == PREFIX + KEY_CEILING
        assert key_at(datetime(9999, 12, 31, 23, 59, 59, tzinfo=UTC)) in key_range


class TestMonthRange:
    def test_december_rolls_over_to_january(self, now):
        key_range = range_for(now, year=2025, month=12)
        assert key_range.lower == PREFIX + "2025-12-01T00:00:00.000Z"
        assert key_range.upper == PREFIX + "2026-01-01T00:00:00.000Z"

    @pytest.mark.parametrize(
        "year,month,last_day",
        [(2025, 1, 31), (2025, 2, 28), (2024, 2, 29), (2025, 4, 30), (2025, 11, 30), (2025, 12, 31)],
    )
    def test_month_lengths(self, now, year, month, last_day):
        key_range = range_for(now, year=year, month=month)
        last_instant = datetime(year, month, last_day, 23, 59, 59, 999000, tzinfo=UTC)
        assert key_at(last_instant) in key_range
        assert key_at(last_instant + timedelta(milliseconds=1)) not in key_range
        assert key_at(datetime(year, month, 1, tzinfo=UTC)) in key_range
        assert key_at(datetime(year, month, 1, tzinfo=UTC) - timedelta(milliseconds=1)) not in key_range

    def test_month_without_year_uses_current_year(self, now):
        assert range_for(now, month=3) == range_for(now, year=2026, month=3)


class TestDayRange:
    def test_bounds(self, now):
        key_range = range_for(now, year=2025, month=1, day=5)
        assert key_range.lower == PREFIX + "2025-01-05T00:00:00.000Z"
        assert key_range.upper == PREFIX + "2025-01-06T00:00:00.000Z"

    @pytest.mark.parametrize(
        "year,month,day,following",
        [
            (2025, 12, 31, "2026-01-01"),
            (2025, 2, 28, "2025-03-01"),
            (2024, 2, 29, "2024-03-01"),
            (2025, 4, 30, "2025-05-01"),
            (2025, 1, 31, "2025-02-01"),
        ],
    )
    def test_rollover(self, now, year, month, day, following):
        key_range = range_for(now, year=year, month=month, day=day)
        assert key_range.upper == PREFIX + f"{following}T00:00:00.000Z"
        assert key_at(datetime(year, month, day, 23, 59, 59, 999000, tzinfo=UTC)) in key_range
        assert key_at(datetime.fromisoformat(following).replace(tzinfo=UTC)) not in key_range

    def test_day_without_month_uses_current_month(self, now):
        assert range_for(now, day=5) == range_for(now, year=2026, month=10, day=5)

    def test_day_and_year_without_month_uses_current_month(self, now):
        assert range_for(now, year=2024, day=5) == range_for(now, year=2024, month=10, day=5)

    def test_nonexistent_day(self, now):
        with pytest.raises(ValidationError):
            range_for(now, year=2025, month=2, day=29)

    def test_day_31_in_current_30_day_month(self):
        november = datetime(2026, 11, 10, tzinfo=UTC)
        with pytest.raises(ValidationError):
            range_for(november, day=31)


class TestTimeFilterValidation:
    @pytest.mark.parametrize(
        "components",
        [
            {"month": 13},
            {"month": 0},
            {"day": 32},
            {"year": 0},
            {"year": 10000},
            {"year": 2025, "month": "march"},
            {"year": "twenty"},
        ],
    )
    def test_rejects_out_of_domain_components(self, components):
        with pytest.raises(ValidationError):
            TimeFilter.parse(**components)

    def test_numeric_strings_are_accepted(self):
        assert TimeFilter.parse(year="2025", month="02") == TimeFilter(year=2025, month=2)


class TestKeyRange:
    def test_empty(self):
        assert KeyRange("b", "a").is_empty
        assert not KeyRange("a", "a").is_empty
