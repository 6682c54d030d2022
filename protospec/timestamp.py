"""Timestamps, durations and their calendar representation in UTC."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

NANOS_PER_SECOND = 1_000_000_000

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

_SECONDS_PER_DAY = 86_400

# 2000-03-01, the start of a 400 year cycle immediately after a leap day.
_LEAPOCH = 946_684_800 + _SECONDS_PER_DAY * (31 + 29)
_DAYS_PER_400Y = 365 * 400 + 97
_DAYS_PER_100Y = 365 * 100 + 24
_DAYS_PER_4Y = 365 * 4 + 1
# Month lengths starting from March.
_DAYS_IN_MONTH_FROM_MARCH = (31, 30, 31, 30, 31, 31, 30, 31, 30, 31, 31, 29)

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_SECS_THROUGH_MONTH = tuple(
    _SECONDS_PER_DAY * days
    for days in (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)
)


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} {value} is out of range [{low}, {high}]")


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division rounding towards zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


@dataclass(frozen=True)
class Timestamp:
    """A point in time as seconds and nanoseconds since the Unix epoch."""

    seconds: int = 0
    nanos: int = 0

    def __post_init__(self) -> None:
        _check_range("seconds", self.seconds, I64_MIN, I64_MAX)
        _check_range("nanos", self.nanos, I32_MIN, I32_MAX)

    def normalize(self) -> Timestamp:
        """Return an equivalent timestamp whose nanos lie in [0, 999_999_999].

        Values beyond the representable range saturate at the minimum or maximum.
        """
        seconds, nanos = self.seconds, self.nanos
        if nanos <= -NANOS_PER_SECOND or nanos >= NANOS_PER_SECOND:
            carry = _trunc_div(nanos, NANOS_PER_SECOND)
            if I64_MIN <= seconds + carry <= I64_MAX:
                seconds += carry
                nanos -= carry * NANOS_PER_SECOND
            elif nanos < 0:
                seconds, nanos = I64_MIN, 0
            else:
                seconds, nanos = I64_MAX, NANOS_PER_SECOND - 1
        if nanos < 0:
            if seconds > I64_MIN:
                seconds -= 1
                nanos += NANOS_PER_SECOND
            else:
                nanos = 0
        return Timestamp(seconds, nanos)

    def __str__(self) -> str:
        return str(DateTime.from_timestamp(self))


@dataclass(frozen=True)
class Duration:
    """A signed span of time as seconds and nanoseconds."""

    seconds: int = 0
    nanos: int = 0

    def __post_init__(self) -> None:
        _check_range("seconds", self.seconds, I64_MIN, I64_MAX)
        _check_range("nanos", self.nanos, I32_MIN, I32_MAX)


@dataclass(frozen=True, order=True)
class DateTime:
    """A date and time of day in the UTC time zone."""

    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanos: int = 0

    MIN: ClassVar[DateTime]
    MAX: ClassVar[DateTime]

    def is_valid(self) -> bool:
        """Return True if this is a calendar date within the Timestamp range."""
        return (
            DateTime.MIN <= self <= DateTime.MAX
            and 1 <= self.month <= 12
            and 1 <= self.day <= days_in_month(self.year, self.month)
            and 0 <= self.hour < 24
            and 0 <= self.minute < 60
            and 0 <= self.second < 60
            and 0 <= self.nanos < NANOS_PER_SECOND
        )

    @classmethod
    def from_timestamp(cls, timestamp: Timestamp) -> DateTime:
        """Convert a timestamp, normalizing it first, to a calendar date and time."""
        timestamp = timestamp.normalize()

        days, remsecs = divmod(timestamp.seconds, _SECONDS_PER_DAY)
        days -= _LEAPOCH // _SECONDS_PER_DAY

        qc_cycles, remdays = divmod(days, _DAYS_PER_400Y)

        c_cycles = min(remdays // _DAYS_PER_100Y, 3)
        remdays -= c_cycles * _DAYS_PER_100Y

        q_cycles = min(remdays // _DAYS_PER_4Y, 24)
        remdays -= q_cycles * _DAYS_PER_4Y

        remyears = min(remdays // 365, 3)
        remdays -= remyears * 365

        years = remyears + 4 * q_cycles + 100 * c_cycles + 400 * qc_cycles

        months = 0
        for length in _DAYS_IN_MONTH_FROM_MARCH:
            if length > remdays:
                break
            remdays -= length
            months += 1

        if months >= 10:
            months -= 12
            years += 1

        return cls(
            year=years + 2000,
            month=months + 3,
            day=remdays + 1,
            hour=remsecs // 3600,
            minute=remsecs // 60 % 60,
            second=remsecs % 60,
            nanos=timestamp.nanos,
        )

    def to_timestamp(self) -> Timestamp:
        """Return the timestamp of this date and time."""
        return Timestamp(datetime_to_seconds(self), self.nanos)

    def __str__(self) -> str:
        if self.year > 9999:
            year = f"+{self.year}"
        elif self.year < 0:
            year = f"{self.year:05}"
        else:
            year = f"{self.year:04}"

        text = (
            f"{year}-{self.month:02}-{self.day:02}"
            f"T{self.hour:02}:{self.minute:02}:{self.second:02}"
        )

        nanos = self.nanos
        if nanos == 0:
            return f"{text}Z"
        if nanos % 1_000_000 == 0:
            return f"{text}.{nanos // 1_000_000:03}Z"
        if nanos % 1_000 == 0:
            return f"{text}.{nanos // 1_000:06}Z"
        return f"{text}.{nanos:09}Z"


DateTime.MIN = DateTime(
    year=-292_277_022_657, month=1, day=27, hour=8, minute=29, second=52, nanos=0
)
DateTime.MAX = DateTime(
    year=292_277_026_596,
    month=12,
    day=4,
    hour=15,
    minute=30,
    second=7,
    nanos=999_999_999,
)


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the given month of the given year."""
    if not 1 <= month <= 12:
        raise ValueError(f"month {month} is out of range [1, 12]")
    _, is_leap = year_to_seconds(year)
    return _DAYS_IN_MONTH[month - 1] + (1 if is_leap and month == 2 else 0)


def _month_to_seconds(month: int, is_leap: bool) -> int:
    seconds = _SECS_THROUGH_MONTH[month - 1]
    return seconds + _SECONDS_PER_DAY if is_leap and month > 2 else seconds


def year_to_seconds(year: int) -> tuple[int, bool]:
    """Return the Unix time of the start of a year and whether it is a leap year."""
    year -= 1900

    # Fast path for years 1900 - 2038.
    if 0 <= year <= 138:
        leaps = (year - 68) >> 2
        is_leap = (year - 68) % 4 == 0
        if is_leap:
            leaps -= 1
        return 31_536_000 * (year - 70) + _SECONDS_PER_DAY * leaps, is_leap

    cycles, rem = divmod(year - 100, 400)
    if rem == 0:
        is_leap = True
        centuries = 0
        leaps = 0
    else:
        centuries, rem = divmod(rem, 100)
        if rem == 0:
            is_leap = False
            leaps = 0
        else:
            leaps, rem = divmod(rem, 4)
            is_leap = rem == 0
    leaps += 97 * cycles + 24 * centuries - int(is_leap)

    seconds = (
        (year - 100) * 31_536_000
        + leaps * _SECONDS_PER_DAY
        + 946_684_800
        + _SECONDS_PER_DAY
    )
    return seconds, is_leap


def datetime_to_seconds(date_time: DateTime) -> int:
    """Return the offset in seconds from the Unix epoch of a date and time."""
    start_of_year, is_leap = year_to_seconds(date_time.year)
    within_year = (
        _month_to_seconds(date_time.month, is_leap)
        + _SECONDS_PER_DAY * (date_time.day - 1)
        + 3600 * date_time.hour
        + 60 * date_time.minute
        + date_time.second
    )
    return start_of_year + within_year