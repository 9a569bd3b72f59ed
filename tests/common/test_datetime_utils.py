from datetime import date, datetime, timezone

import pytest

from attendance_reconciliation.common.datetime_utils import (
    calendar_date_for,
    iter_days,
    parse_iso_date,
    parse_punch_datetime,
    to_timezone,
    whole_minutes_between,
)
from attendance_reconciliation.core.exceptions import DateFormatError, ValidationError


def test_utc_punch_just_before_midnight_belongs_to_next_local_day(tz):
    utc = datetime(2024, 3, 4, 19, 0, tzinfo=timezone.utc)  # 00:30 IST on the 5th

    assert calendar_date_for(utc, tz) == date(2024, 3, 5)
    assert to_timezone(utc, tz).hour == 0


def test_naive_value_is_taken_as_local(tz):
    assert to_timezone(datetime(2024, 3, 4, 9, 0), tz) == datetime(2024, 3, 4, 9, 0, tzinfo=tz)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-04 09:15:00", datetime(2024, 3, 4, 9, 15)),
        ("04/03/2024 09:15:00", datetime(2024, 3, 4, 9, 15)),
        ("2024/03/04 09:15:00", datetime(2024, 3, 4, 9, 15)),
        ("13/03/2024 18:00", datetime(2024, 3, 13, 18, 0)),
        ("03/13/2024 18:00", datetime(2024, 3, 13, 18, 0)),
        ("2024-03-04", datetime(2024, 3, 4)),
    ],
)
def test_accepted_punch_formats(tz, raw, expected):
    assert parse_punch_datetime(raw, tz) == expected.replace(tzinfo=tz)


def test_unrecognised_punch_format_keeps_raw_value(tz):
    with pytest.raises(DateFormatError) as exc_info:
        parse_punch_datetime("yesterday 9am", tz)

    assert exc_info.value.raw_value == "yesterday 9am"


def test_iso_date_and_day_range():
    assert parse_iso_date("2024-02-28") == date(2024, 2, 28)
    assert list(iter_days(date(2024, 2, 28), date(2024, 3, 1))) == [
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]
    with pytest.raises(ValidationError):
        parse_iso_date("28-02-2024")
    with pytest.raises(ValidationError):
        list(iter_days(date(2024, 3, 2), date(2024, 3, 1)))


def test_whole_minutes_are_truncated_and_absolute(tz):
    a = datetime(2024, 3, 4, 9, 0, tzinfo=tz)

    assert whole_minutes_between(a, a.replace(minute=20, second=59)) == 20
    assert whole_minutes_between(a.replace(hour=10), a) == 60
