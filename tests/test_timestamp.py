import calendar

import pytest
from hypothesis import given
from hypothesis import strategies as st

from protospec.timestamp import (
    DateTime,
    Duration,
    Timestamp,
    datetime_to_seconds,
    days_in_month,
    year_to_seconds,
)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1


def test_min_max():
    assert DateTime.MIN == DateTime.from_timestamp(Timestamp(I64_MIN, 0))
    assert DateTime.MAX == DateTime.from_timestamp(Timestamp(I64_MAX, 999_999_999))


@pytest.mark.parametrize(
    "expected, secs, nanos",
    [
        ("1970-01-01T00:00:00Z", 0, 0),
        ("1970-01-01T00:00:00.000000001Z", 0, 1),
        ("1970-01-01T00:00:00.123450Z", 0, 123_450_000),
        ("1970-01-01T00:00:00.050Z", 0, 50_000_000),
        ("1970-01-01T00:00:01.000000001Z", 1, 1),
        ("1970-01-01T00:01:01.000000001Z", 60 + 1, 1),
        ("1970-01-01T01:01:01.000000001Z", 60 * 60 + 60 + 1, 1),
        ("1970-01-02T01:01:01.000000001Z", 24 * 60 * 60 + 60 * 60 + 60 + 1, 1),
        ("1969-12-31T23:59:59Z", -1, 0),
        ("1969-12-31T23:59:59.000001Z", -1, 1_000),
        ("1969-12-31T23:59:59.500Z", -1, 500_000_000),
        ("1969-12-31T23:58:59.000001Z", -60 - 1, 1_000),
        ("1969-12-31T22:58:59.000001Z", -60 * 60 - 60 - 1, 1_000),
        ("1969-12-30T22:58:59.000000001Z", -24 * 60 * 60 - 60 * 60 - 60 - 1, 1),
        ("2038-01-19T03:14:07Z", I32_MAX, 0),
        ("2038-01-19T03:14:08Z", I32_MAX + 1, 0),
        ("1901-12-13T20:45:52Z", I32_MIN, 0),
        ("1901-12-13T20:45:51Z", I32_MIN - 1, 0),
        ("+292277026596-12-04T15:30:07Z", I64_MAX, 0),
        ("+292277026596-12-04T15:30:06Z", I64_MAX - 1, 0),
        ("-292277022657-01-27T08:29:53Z", I64_MIN + 1, 0),
        ("1900-01-01T00:00:00Z", -2_208_988_800, 0),
        ("1899-12-31T23:59:59Z", -2_208_988_801, 0),
        ("0000-01-01T00:00:00Z", -62_167_219_200, 0),
        ("-0001-12-31T23:59:59Z", -62_167_219_201, 0),
        ("1234-05-06T07:08:09Z", -23_215_049_511, 0),
        ("-1234-05-06T07:08:09Z", -101_097_651_111, 0),
        ("2345-06-07T08:09:01Z", 11_847_456_541, 0),
        ("-2345-06-07T08:09:01Z", -136_154_620_259, 0),
    ],
)
def test_datetime_from_timestamp(expected, secs, nanos):
    timestamp = Timestamp(secs, nanos)
    assert str(DateTime.from_timestamp(timestamp)) == expected
    assert str(timestamp) == expected


@given(
    st.integers(min_value=I64_MIN, max_value=I64_MAX),
    st.integers(min_value=0, max_value=999_999_999),
)
def test_roundtrip_full_range(secs, nanos):
    timestamp = Timestamp(secs, nanos)
    date_time = DateTime.from_timestamp(timestamp)
    assert date_time.is_valid()
    assert date_time.to_timestamp() == timestamp
    assert datetime_to_seconds(date_time) == secs


@given(st.integers(min_value=-100_000, max_value=100_000))
def test_year_lengths_match_calendar(year):
    start, is_leap = year_to_seconds(year)
    next_start, _ = year_to_seconds(year + 1)
    assert is_leap == calendar.isleap(year)
    assert next_start - start == 86_400 * (366 if is_leap else 365)


def test_year_to_seconds_known_values():
    assert year_to_seconds(1970) == (0, False)
    assert year_to_seconds(2000) == (946_684_800, True)


@pytest.mark.parametrize("month", [0, 13])
def test_days_in_month_rejects_bad_month(month):
    with pytest.raises(ValueError):
        days_in_month(2000, month)


@pytest.mark.parametrize(
    "date_time, valid",
    [
        (DateTime(2020, 2, 29, 1, 2, 3, 0), True),
        (DateTime(2021, 2, 29), False),
        (DateTime(2021, 13, 1), False),
        (DateTime(2021, 0, 1), False),
        (DateTime(2021, 1, 0), False),
        (DateTime(2021, 1, 1, 24), False),
        (DateTime(2021, 1, 1, 0, 60), False),
        (DateTime(2021, 1, 1, 0, 0, 60), False),
        (DateTime(2021, 1, 1, 0, 0, 0, 1_000_000_000), False),
        (DateTime.MIN, True),
        (DateTime.MAX, True),
        (DateTime(-292_277_022_657, 1, 27, 8, 29, 51), False),
        (DateTime(292_277_026_596, 12, 4, 15, 30, 8), False),
    ],
)
def test_is_valid(date_time, valid):
    assert date_time.is_valid() is valid


def test_leap_day_to_timestamp():
    leap_day = DateTime(2020, 2, 29, 1, 2, 3, 0)
    assert DateTime.from_timestamp(leap_day.to_timestamp()) == leap_day


@pytest.mark.parametrize(
    "timestamp, expected",
    [
        (Timestamp(0, 1_500_000_000), Timestamp(1, 500_000_000)),
        (Timestamp(0, -1), Timestamp(-1, 999_999_999)),
        (Timestamp(5, -1_500_000_000), Timestamp(3, 500_000_000)),
        (Timestamp(7, 42), Timestamp(7, 42)),
        (Timestamp(I64_MAX, 2_000_000_000), Timestamp(I64_MAX, 999_999_999)),
        (Timestamp(I64_MIN, -2_000_000_000), Timestamp(I64_MIN, 0)),
        (Timestamp(I64_MIN, -1), Timestamp(I64_MIN, 0)),
    ],
)
def test_normalize(timestamp, expected):
    assert timestamp.normalize() == expected


def test_from_timestamp_normalizes_first():
    assert DateTime.from_timestamp(Timestamp(0, -1)) == DateTime.from_timestamp(
        Timestamp(-1, 999_999_999)
    )


@pytest.mark.parametrize(
    "seconds, nanos", [(I64_MAX + 1, 0), (I64_MIN - 1, 0), (0, I32_MAX + 1)]
)
def test_out_of_range_values_rejected(seconds, nanos):
    with pytest.raises(ValueError):
        Timestamp(seconds, nanos)
    with pytest.raises(ValueError):
        Duration(seconds, nanos)


def test_datetime_ordering_is_field_order():
    assert DateTime(2020, 1, 1) < DateTime(2020, 1, 2)
    assert DateTime(-1, 12, 31) < DateTime(0, 1, 1)
    assert sorted([DateTime.MAX, DateTime.MIN]) == [DateTime.MIN, DateTime.MAX]