"""Time filter to sort-key range resolution."""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from merchant_ledger.data.keys import (
    KEY_CEILING,
    RecordKind,
    encode_timestamp,
    kind_prefix,
)
from merchant_ledger.errors import ValidationError


@dataclass(frozen=True)
class KeyRange:
    """Closed interval ``[lower, upper]`` of sort keys."""

    lower: str
    upper: str

    @property
    def is_empty(self) -> bool:
        return self.lower > self.upper

    def __contains__(self, key: str) -> bool:
        return self.lower <= key <= self.upper


class TimeFilter(BaseModel):
    """Optional (year, month, day) filter.

    Components layer: a day without a month means the current month, and a
    month without a year means the current year.
    """

    year: int | None = Field(default=None, ge=1, le=9999)
    month: int | None = Field(default=None, ge=1, le=12)
    day: int | None = Field(default=None, ge=1, le=31)

    @classmethod
    def parse(cls, year=None, month=None, day=None) -> "TimeFilter":
        """Build a filter from raw caller input, raising the ledger's ValidationError."""
        try:
            return cls(year=year, month=month, day=day)
        except PydanticValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ValidationError(f"Invalid time filter ({fields}): {e.error_count()} error(s)") from e

    @property
    def is_empty(self) -> bool:
        return self.year is None and self.month is None and self.day is None

    def resolve(self, now: datetime) -> "Period":
        """Fill the missing leading components from ``now`` and return the period."""
        if self.is_empty:
            raise ValidationError("An empty filter has no period")

        month = self.month
        if self.day is not None and month is None:
            month = now.month
        year = self.year if self.year is not None else now.year

        if month is None:
            start = datetime(year, 1, 1, tzinfo=timezone.utc)
            following = _safe(lambda: datetime(year + 1, 1, 1, tzinfo=timezone.utc))
            return Period("year", start, following)

        if self.day is None:
            start = datetime(year, month, 1, tzinfo=timezone.utc)
            if month == 12:
                following = _safe(lambda: datetime(year + 1, 1, 1, tzinfo=timezone.utc))
            else:
                following = datetime(year, month + 1, 1, tzinfo=timezone.utc)
            return Period("month", start, following)

        last_day = calendar.monthrange(year, month)[1]
        if self.day > last_day:
            raise ValidationError(
                f"Day {self.day} does not exist in {year:04d}-{month:02d}"
            )
        start = datetime(year, month, self.day, tzinfo=timezone.utc)
        following = _safe(lambda: start + timedelta(days=1))
        return Period("day", start, following)


@dataclass(frozen=True)
class Period:
    granularity: str
    start: datetime
    # None when the period runs to the end of the representable calendar.
    following: datetime | None


def _safe(make):
    try:
        return make()
    except (OverflowError, ValueError):
        return None


def build_range(
    kind: RecordKind,
    time_filter: TimeFilter | None = None,
    now: datetime | None = None,
) -> KeyRange:
    """Return the inclusive key range covering exactly the filtered period.

    Without a filter the range spans all time up to ``now``. With a filter the
    lower bound is the encoded start of the period and the upper bound is the
    encoded start of the following period: keys inside the period extend that
    string with ``#<id>`` and so sort after it, keys of the following period
    sort at or after it.
    """
    now = now or datetime.now(timezone.utc)
    prefix = kind_prefix(kind)

    if time_filter is None or time_filter.is_empty:
        return KeyRange(prefix, prefix + encode_timestamp(now))

    period = time_filter.resolve(now)
    lower = prefix + encode_timestamp(period.start)
    if period.following is None:
        upper = prefix + KEY_CEILING
    else:
        upper = prefix + encode_timestamp(period.following)
    return KeyRange(lower, upper)
