from datetime import date

from meterboard.services.aggregation import (
    format_peak_time,
    get_hourly_data,
    get_weekly_peak_hours,
    pick_peak_hour,
)
from meterboard.services.summary_providers import HourStats

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
NEXT_MONDAY = date(2024, 1, 8)


def test_peak_hour_ties_keep_earliest_hour():
    hours = [HourStats(hour=1, total_energy=10), HourStats(hour=2, total_energy=10), HourStats(hour=3, total_energy=5)]
    assert pick_peak_hour(hours).hour == 1
    assert pick_peak_hour(list(reversed(hours))).hour == 1


def test_peak_hour_empty():
    assert pick_peak_hour([]) is None


def test_format_peak_time():
    assert format_peak_time(MONDAY, 14) == {
        "time": "2:00 PM",
        "datetime": "Monday, January 1, 2024 at 2:00 PM",
    }
    assert format_peak_time(MONDAY, 0)["time"] == "12:00 AM"
    assert format_peak_time(MONDAY, 12)["time"] == "12:00 PM"


def test_format_peak_time_renders_stored_hour_unchanged():
    # Late-evening hours must not roll over into the next day.
    out = format_peak_time(date(2024, 12, 31), 23)
    assert out == {"time": "11:00 PM", "datetime": "Tuesday, December 31, 2024 at 11:00 PM"}


def test_hourly_data_rows_and_peak(db, add_reading):
    add_reading(MONDAY, 9, 0, current=2, energy=50)
    add_reading(MONDAY, 9, 1, current=4, energy=70)
    add_reading(MONDAY, 14, 0, current=10, energy=100)

    out = get_hourly_data(db, MONDAY)

    assert out["hourly_data"] == [
        {"hour": 9, "avg_current": 3.0, "total_energy": 120.0, "max_current": 4.0, "max_energy": 70.0, "count": 2},
        {"hour": 14, "avg_current": 10.0, "total_energy": 100.0, "max_current": 10.0, "max_energy": 100.0, "count": 1},
    ]
    assert out["peak_hour"] == {
        "hour": 9,
        "avg_current": 3.0,
        "total_energy": 120.0,
        "time": "9:00 AM",
        "datetime": "Monday, January 1, 2024 at 9:00 AM",
    }


def test_hourly_data_without_readings(db):
    out = get_hourly_data(db)
    assert out["date"] is None
    assert out["hourly_data"] == []
    assert out["peak_hour"] is None


def test_hourly_data_week_granularity(db, add_reading):
    add_reading(MONDAY, 9, 0, current=2, energy=50)
    add_reading(TUESDAY, 18, 0, current=2, energy=10)

    out = get_hourly_data(db, time_granularity="week", weekday="tuesday")
    assert out["date"] == "2024-01-02"
    assert out["peak_hour"]["hour"] == 18


def test_weekly_peak_hours(db, add_reading):
    add_reading(MONDAY, 9, 0, current=1, energy=50)
    add_reading(MONDAY, 14, 0, current=3, energy=100)
    add_reading(NEXT_MONDAY, 9, 0, current=2, energy=80)
    add_reading(TUESDAY, 20, 0, current=1, energy=5, floor=2)

    out = get_weekly_peak_hours(db)
    entries = out["weekly_peak_hours"]

    assert out["floor"] == "all"
    assert len(entries) == 2
    monday, tuesday = entries
    assert monday["weekday"] == 1
    assert monday["day_name"] == "Monday"
    assert monday["hour"] == 9
    assert monday["total_energy"] == 130.0
    assert monday["sample_date"] == "2024-01-01"
    assert monday["time"] == "9:00 AM"
    assert tuesday["weekday"] == 2
    assert tuesday["hour"] == 20
    assert tuesday["datetime"] == "Tuesday, January 2, 2024 at 8:00 PM"


def test_weekly_peak_hours_by_floor_omits_empty_weekdays(db, add_reading):
    add_reading(MONDAY, 9, 0, current=1, energy=50, floor=1)
    add_reading(TUESDAY, 20, 0, current=1, energy=5, floor=2)

    entries = get_weekly_peak_hours(db, floor=2)["weekly_peak_hours"]
    assert [e["weekday"] for e in entries] == [2]
    assert get_weekly_peak_hours(db, floor=7)["weekly_peak_hours"] == []


def test_weekly_peak_hours_at_most_seven(db, add_reading):
    for offset in range(14):
        add_reading(date(2024, 2, 1 + offset), offset % 24, 0, current=1, energy=1)

    entries = get_weekly_peak_hours(db)["weekly_peak_hours"]
    assert len(entries) == 7
    assert [e["weekday"] for e in entries] == list(range(7))
