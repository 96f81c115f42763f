import time
from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from techmaintain.domain.dates import js_weekday, local_midnight, to_calendar_date


@pytest.fixture(autouse=True)
def central_european_tz(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset unavailable")
    monkeypatch.setenv("TZ", "Europe/Bratislava")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (date(2024, 5, 2), date(2024, 5, 2)),
        (datetime(2024, 5, 2, 23, 59), date(2024, 5, 2)),
        ("2024-05-02", date(2024, 5, 2)),
        ("2024-05-02T10:15:00", date(2024, 5, 2)),
        ("2024-05-02T00:00:00Z", date(2024, 5, 2)),
        ("2024-05-01T23:30:00Z", date(2024, 5, 2)),
        ("2024-05-01T23:30:00+00:00", date(2024, 5, 2)),
        ("2024-05-02T01:30:00+05:00", date(2024, 5, 1)),
        ("2024-05-02 garbage", date(2024, 5, 2)),
        ("", None),
        ("nope", None),
        (None, None),
        (42, None),
    ],
)
def test_to_calendar_date(value, expected):
    assert to_calendar_date(value) == expected


def test_aware_datetime_converted_to_local_date():
    assert to_calendar_date(datetime(2024, 5, 1, 23, 30, tzinfo=UTC)) == date(2024, 5, 2)
    west = timezone(timedelta(hours=-10))
    assert to_calendar_date(datetime(2024, 5, 1, 14, 0, tzinfo=west)) == date(2024, 5, 2)


def test_local_midnight():
    assert local_midnight(datetime(2024, 5, 2, 18, 30)) == date(2024, 5, 2)
    assert local_midnight(date(2024, 5, 2)) == date(2024, 5, 2)
    assert local_midnight(datetime(2024, 5, 2, 22, 30, tzinfo=UTC)) == date(2024, 5, 3)


def test_js_weekday_sunday_is_zero():
    assert js_weekday(date(2024, 6, 2)) == 0  # Sunday
    assert js_weekday(date(2024, 6, 3)) == 1  # Monday
    assert js_weekday(date(2024, 6, 1)) == 6  # Saturday
