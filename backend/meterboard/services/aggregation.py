from collections import defaultdict
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from meterboard.models.reading import Reading
from meterboard.models.summary import HourlySummary
from meterboard.services.summary_providers import (
    DailyStats,
    FallbackSummaryProvider,
    HourStats,
    aggregate_hourly,
    default_provider,
    reading_conditions,
    summary_floor_condition,
)

# Sunday first, matching day-of-week numbering 0..6
WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


def parse_weekday(value: Optional[str]) -> Optional[int]:
    """Map a weekday name to 0 (Sunday)..6; "all" and unknown names give None."""
    if not value:
        return None
    try:
        return WEEKDAYS.index(value.strip().lower())
    except ValueError:
        return None


def weekday_restriction(time_granularity: Optional[str], weekday: Optional[str]) -> Optional[int]:
    if (time_granularity or "").lower() != "week":
        return None
    return parse_weekday(weekday)


def day_of_week(day: date) -> int:
    return day.isoweekday() % 7


def floor_label(floor: Optional[int]):
    return floor if floor is not None else "all"


def distinct_dates(db: Session, floor: Optional[int] = None) -> List[date]:
    q = db.query(Reading.date).distinct()
    if floor is not None:
        q = q.filter(Reading.floor == floor)
    return [row[0] for row in q.order_by(Reading.date).all()]


def dates_for_weekday(db: Session, dow: int, floor: Optional[int] = None) -> List[date]:
    return [d for d in distinct_dates(db, floor) if day_of_week(d) == dow]


def earliest_reading_date(db: Session) -> Optional[date]:
    return db.query(func.min(Reading.date)).scalar()


def resolve_date(db: Session, requested: Optional[date], floor: Optional[int],
                 dow: Optional[int]) -> Tuple[Optional[date], bool]:
    """Pick the date to report on.

    Returns ``(day, in_scope)``; ``in_scope`` is False when a requested date
    falls outside the weekday restriction.
    """
    if requested is not None:
        return requested, dow is None or day_of_week(requested) == dow
    if dow is not None:
        matching = dates_for_weekday(db, dow, floor)
        return (matching[0] if matching else None), True
    return earliest_reading_date(db), True


def pick_peak_hour(hours: Sequence[HourStats]) -> Optional[HourStats]:
    """Hour with the highest total energy; ties keep the earliest hour."""
    if not hours:
        return None
    ordered = sorted(hours, key=lambda h: h.hour)
    return sorted(ordered, key=lambda h: h.total_energy, reverse=True)[0]


def format_peak_time(day: date, hour: int) -> Dict[str, str]:
    # Stored date/hour are already local civil time; render them as-is.
    moment = datetime.combine(day, time(hour=hour))
    short = f"{moment.hour % 12 or 12}:{moment:%M} {moment:%p}"
    return {
        "time": short,
        "datetime": f"{moment:%A}, {moment:%B} {moment.day}, {moment.year} at {short}",
    }


def _summary_response(stats: Optional[DailyStats], day: Optional[date], floor: Optional[int],
                      time_granularity: str, weekday: Optional[str], source: Optional[str]) -> dict:
    stats = stats or DailyStats()
    total_energy = stats.total_energy
    per_second_energy = total_energy / stats.total_records if stats.total_records else 0
    per_minute_energy = total_energy / max(1, stats.minute_count)
    per_hour_energy = total_energy / max(1, stats.hour_count)
    return {
        "date": day.isoformat() if day else None,
        "floor": floor_label(floor),
        "time_granularity": time_granularity or "day",
        "weekday": weekday or "all",
        "source": source,
        "total_records": stats.total_records,
        "per_second": {
            "count": stats.total_records,
            "avg_current": round(stats.avg_current, 2),
            "avg_energy": round(per_second_energy, 5),
        },
        "per_minute": {
            "count": stats.minute_count,
            "avg_current": round(stats.minute_avg_current, 2),
            "avg_energy": round(per_minute_energy, 2),
        },
        "per_hour": {
            "count": stats.hour_count,
            "avg_current": round(stats.hour_avg_current, 2),
            "avg_energy": round(per_hour_energy, 2),
        },
        "per_day": {
            "count": 1 if stats.total_records else 0,
            "avg_current": round(stats.avg_current, 2),
            "total_energy": round(total_energy, 2),
            "avg_voltage": round(stats.avg_voltage, 2),
            "peak_power": round(stats.peak_power, 2),
        },
    }


def get_daily_summary(db: Session, day: Optional[date] = None, floor: Optional[int] = None,
                      time_granularity: str = "day", weekday: Optional[str] = None,
                      provider: Optional[FallbackSummaryProvider] = None) -> dict:
    """Statistics for one day at second/minute/hour/day resolution.

    Missing data never raises: an unresolvable date or an empty day yields
    the zero-valued response.
    """
    provider = provider or default_provider()
    dow = weekday_restriction(time_granularity, weekday)
    resolved, in_scope = resolve_date(db, day, floor, dow)
    if resolved is None or not in_scope:
        return _summary_response(None, resolved, floor, time_granularity, weekday, None)
    stats, source = provider.daily_stats(db, resolved, floor)
    return _summary_response(stats, resolved, floor, time_granularity, weekday, source)


def _hour_row(h: HourStats) -> dict:
    return {
        "hour": h.hour,
        "avg_current": round(h.avg_current, 2),
        "total_energy": round(h.total_energy, 2),
        "max_current": round(h.max_current, 2),
        "max_energy": round(h.max_energy, 2),
        "count": h.count,
    }


def _peak_descriptor(peak: HourStats, day: date) -> dict:
    descriptor = {
        "hour": peak.hour,
        "avg_current": round(peak.avg_current, 2),
        "total_energy": round(peak.total_energy, 2),
    }
    descriptor.update(format_peak_time(day, peak.hour))
    return descriptor


def _earliest_hourly_summary_date(db: Session, floor: Optional[int], dow: Optional[int]) -> Optional[date]:
    q = (
        db.query(HourlySummary.date)
        .filter(summary_floor_condition(HourlySummary.floor, floor))
        .distinct()
        .order_by(HourlySummary.date)
    )
    for (d,) in q:
        if dow is None or day_of_week(d) == dow:
            return d
    return None


def get_hourly_data(db: Session, day: Optional[date] = None, floor: Optional[int] = None,
                    time_granularity: str = "day", weekday: Optional[str] = None,
                    provider: Optional[FallbackSummaryProvider] = None) -> dict:
    provider = provider or default_provider()
    dow = weekday_restriction(time_granularity, weekday)
    resolved, in_scope = resolve_date(db, day, floor, dow)
    if resolved is None:
        resolved = _earliest_hourly_summary_date(db, floor, dow)

    hours, source = [], None
    if resolved is not None and in_scope:
        hours, source = provider.hourly_stats(db, resolved, floor)
        hours = hours or []

    peak = pick_peak_hour(hours)
    return {
        "date": resolved.isoformat() if resolved else None,
        "floor": floor_label(floor),
        "time_granularity": time_granularity or "day",
        "weekday": weekday or "all",
        "source": source,
        "hourly_data": [_hour_row(h) for h in hours],
        "peak_hour": _peak_descriptor(peak, resolved) if peak else None,
    }


def get_weekly_peak_hours(db: Session, floor: Optional[int] = None) -> dict:
    """Peak hour per weekday across all dates; weekdays with no data are left out."""
    by_weekday = defaultdict(list)
    for d in distinct_dates(db, floor):
        by_weekday[day_of_week(d)].append(d)

    entries = []
    for dow in range(7):
        matching = by_weekday.get(dow)
        if not matching:
            continue
        peak = pick_peak_hour(aggregate_hourly(db, reading_conditions(dates=matching, floor=floor)))
        if peak is None:
            continue
        sample_date = matching[0]
        entry = {
            "weekday": dow,
            "day_name": WEEKDAYS[dow].capitalize(),
            "hour": peak.hour,
            "avg_current": round(peak.avg_current, 2),
            "total_energy": round(peak.total_energy, 2),
            "sample_date": sample_date.isoformat(),
        }
        entry.update(format_peak_time(sample_date, peak.hour))
        entries.append(entry)
    return {"floor": floor_label(floor), "weekly_peak_hours": entries}


def get_minute_data(db: Session, day: date, hour: int, floor: Optional[int] = None) -> dict:
    rows = (
        db.query(
            Reading.minute,
            func.avg(Reading.current),
            func.sum(Reading.energy),
            func.count(Reading.id),
        )
        .filter(*reading_conditions(day=day, floor=floor), Reading.hour == hour)
        .group_by(Reading.minute)
        .order_by(Reading.minute)
        .all()
    )
    return {
        "date": day.isoformat(),
        "hour": hour,
        "floor": floor_label(floor),
        "minute_data": [
            {
                "minute": int(minute),
                "avg_current": round(float(avg_current or 0.0), 2),
                "total_energy": round(float(total_energy or 0.0), 2),
                "count": int(count),
            }
            for minute, avg_current, total_energy, count in rows
        ],
    }


def get_available_dates(db: Session) -> List[str]:
    return [d.isoformat() for d in distinct_dates(db)]


def get_daily_consumption(db: Session, floor: Optional[int] = None) -> dict:
    """Total energy per date, ascending; all floors combined unless ``floor`` is given."""
    rows = (
        db.query(Reading.date, func.sum(Reading.energy), func.count(Reading.id))
        .filter(*reading_conditions(floor=floor))
        .group_by(Reading.date)
        .order_by(Reading.date)
        .all()
    )
    return {
        "floor": floor_label(floor),
        "daily_consumption": [
            {"date": day.isoformat(), "total_energy": round(float(energy or 0.0), 2), "count": int(count)}
            for day, energy, count in rows
        ],
    }
