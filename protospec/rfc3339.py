"""Parsing of RFC 3339 timestamps and protobuf JSON durations."""

from __future__ import annotations

from typing import Optional

from protospec.timestamp import (
    I64_MAX,
    I64_MIN,
    NANOS_PER_SECOND,
    DateTime,
    Duration,
    Timestamp,
)

_DIGITS = frozenset("0123456789")


def _take(s: str, c: str, ignore_case: bool = False) -> Optional[str]:
    """Return the rest of ``s`` after a leading ``c``, or None if it is absent."""
    head = s[:1]
    if ignore_case:
        matched = head.lower() == c.lower() and head != ""
    else:
        matched = head == c
    return s[1:] if matched else None


def _expect(s: str, c: str) -> str:
    rest = _take(s, c)
    if rest is None:
        raise ValueError(f"expected {c!r}")
    return rest


def _split_digits(s: str) -> tuple[str, str]:
    index = next((i for i, c in enumerate(s) if c not in _DIGITS), len(s))
    return s[:index], s[index:]


def _two_digits(s: str) -> tuple[int, str]:
    if len(s) < 2:
        raise ValueError("expected two digits")
    chunk = s[:2]
    body = chunk[1:] if chunk[0] == "+" else chunk
    if not body or any(c not in _DIGITS for c in body):
        raise ValueError(f"invalid number {chunk!r}")
    return int(body), s[2:]


def _i64(digits: str) -> int:
    if not digits:
        raise ValueError("expected digits")
    value = int(digits)
    if value > I64_MAX:
        raise ValueError(f"number {digits} is too large")
    return value


def _parse_date(s: str) -> tuple[int, int, int, str]:
    # The smallest valid date is YYYY-MM-DD.
    if len(s) < 10:
        raise ValueError("date is too short")

    if s[0] == "+":
        digits, rest = _split_digits(s[1:])
        if len(digits) < 5:
            raise ValueError("a year with a plus sign needs at least five digits")
        year = _i64(digits)
    elif s[0] == "-":
        digits, rest = _split_digits(s[1:])
        if len(digits) < 4:
            raise ValueError("a negative year needs at least four digits")
        year = -_i64(digits)
    else:
        high, rest = _two_digits(s)
        low, rest = _two_digits(rest)
        year = high * 100 + low

    rest = _expect(rest, "-")
    month, rest = _two_digits(rest)
    rest = _expect(rest, "-")
    day, rest = _two_digits(rest)
    return year, month, day, rest


def _parse_nanos(s: str) -> tuple[int, str]:
    rest = _take(s, ".")
    if rest is None:
        return 0, s
    digits, rest = _split_digits(rest)
    if not digits or len(digits) > 9:
        raise ValueError("fractional seconds need between one and nine digits")
    return 10 ** (9 - len(digits)) * int(digits), rest


def _parse_time(s: str) -> tuple[int, int, int, int, str]:
    hour, rest = _two_digits(s)
    rest = _expect(rest, ":")
    minute, rest = _two_digits(rest)
    rest = _expect(rest, ":")
    second, rest = _two_digits(rest)
    nanos, rest = _parse_nanos(rest)
    return hour, minute, second, nanos, rest


def _parse_offset(s: str) -> tuple[int, int, str]:
    if not s:
        # No time zone means UTC.
        return 0, 0, s

    # Some producers put a space before the offset.
    spaced = _take(s, " ")
    if spaced is not None:
        s = spaced

    after_z = _take(s, "Z", ignore_case=True)
    if after_z is not None:
        return 0, 0, after_z

    if (rest := _take(s, "+")) is not None:
        is_positive = True
    elif (rest := _take(s, "-")) is not None:
        is_positive = False
    else:
        raise ValueError("expected a time zone offset")

    hour, rest = _two_digits(rest)
    if rest:
        colon = _take(rest, ":")
        if colon is not None:
            rest = colon
        minute, rest = _two_digits(rest)
    else:
        minute = 0

    # '-00:00' denotes an unknown local offset.
    if not (is_positive or hour > 0 or minute > 0):
        raise ValueError("unknown local offset")
    if hour >= 24 or minute >= 60:
        raise ValueError("time zone offset out of range")

    if is_positive:
        return hour, minute, rest
    return -hour, -minute, rest


def _valid(date_time: DateTime) -> DateTime:
    if not date_time.is_valid():
        raise ValueError(f"invalid date and time {date_time!r}")
    return date_time


def _parse_timestamp(s: str) -> Timestamp:
    if not s.isascii():
        raise ValueError("not ASCII")

    year, month, day, rest = _parse_date(s)
    if not rest:
        return _valid(DateTime(year, month, day)).to_timestamp()

    after = _take(rest, "T", ignore_case=True)
    if after is None:
        after = _take(rest, " ")
    if after is None:
        raise ValueError("expected a date and time separator")

    hour, minute, second, nanos, rest = _parse_time(after)
    offset_hour, offset_minute, rest = _parse_offset(rest)
    if rest:
        raise ValueError(f"unexpected trailing input {rest!r}")

    # A leap second is rolled back to the previous second.
    if second == 60:
        second = 59

    stamp = _valid(
        DateTime(year, month, day, hour, minute, second, nanos)
    ).to_timestamp()
    seconds = stamp.seconds - (offset_hour * 3600 + offset_minute * 60)
    if not I64_MIN <= seconds <= I64_MAX:
        raise ValueError("timestamp out of range")
    return Timestamp(seconds, stamp.nanos)


def parse_timestamp(s: str) -> Timestamp:
    """Parse an RFC 3339 timestamp, with a few common extensions.

    Raises ValueError if the text is not a valid timestamp.
    """
    try:
        return _parse_timestamp(s)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp: {s!r}") from exc


def _parse_duration(s: str) -> Duration:
    if not s.isascii():
        raise ValueError("not ASCII")

    rest = _take(s, "-")
    is_negative = rest is not None
    if rest is None:
        rest = s

    digits, rest = _split_digits(rest)
    seconds = _i64(digits)
    nanos, rest = _parse_nanos(rest)
    rest = _expect(rest, "s")
    if rest:
        raise ValueError(f"unexpected trailing input {rest!r}")
    if nanos >= NANOS_PER_SECOND:
        raise ValueError("nanos out of range")

    if is_negative:
        return Duration(-seconds, -nanos)
    return Duration(seconds, nanos)


def parse_duration(s: str) -> Duration:
    """Parse a duration such as ``"-1.5s"`` in the protobuf JSON format.

    Raises ValueError if the text is not a valid duration.
    """
    try:
        return _parse_duration(s)
    except ValueError as exc:
        raise ValueError(f"invalid duration: {s!r}") from exc