from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from meterboard.models.reading import Reading
from meterboard.services.aggregation import dates_for_weekday, pick_peak_hour, weekday_restriction
from meterboard.services.summary_providers import aggregate_hourly, reading_conditions

DEFAULT_UNIT_PRICE_PER_KWH = 10.0


def distinct_floors(db: Session) -> List[int]:
    rows = (
        db.query(Reading.floor)
        .filter(Reading.floor.isnot(None))
        .distinct()
        .order_by(Reading.floor)
        .all()
    )
    return [row[0] for row in rows]


def energy_cost(total_energy_wh: float, unit_price_per_kwh: float) -> float:
    return (total_energy_wh / 1000) * unit_price_per_kwh


def _floor_rollup(db: Session, floor: int, dates, unit_price_per_kwh: float) -> dict:
    conditions = reading_conditions(floor=floor, dates=dates)
    total_energy, record_count = (
        db.query(func.sum(Reading.energy), func.count(Reading.id)).filter(*conditions).one()
    )
    total_energy = float(total_energy or 0.0)
    record_count = int(record_count or 0)

    hours = aggregate_hourly(db, conditions)
    peak = pick_peak_hour(hours)

    trend = (
        db.query(Reading.date, func.sum(Reading.energy))
        .filter(*conditions)
        .group_by(Reading.date)
        .order_by(Reading.date)
        .all()
    )
    return {
        "floor": floor,
        "total_energy": round(total_energy, 2),
        "record_count": record_count,
        "avg_energy_per_record": round(total_energy / record_count, 2) if record_count else 0,
        "peak_hour": {"hour": peak.hour, "total_energy": round(peak.total_energy, 2)} if peak else None,
        "daily_trend": [
            {"date": day.isoformat(), "total_energy": round(float(energy or 0.0), 2)}
            for day, energy in trend
        ],
        "cost": round(energy_cost(total_energy, unit_price_per_kwh), 2),
    }


def get_floor_analytics(db: Session, floor: Optional[int] = None, time_granularity: str = "day",
                        weekday: Optional[str] = None,
                        unit_price_per_kwh: float = DEFAULT_UNIT_PRICE_PER_KWH,
                        currency: str = "PHP") -> dict:
    """Per-floor totals, peak hour, daily trend and cost.

    Covers the requested floor only, or every non-null floor found in the
    readings when ``floor`` is None.
    """
    floors = [floor] if floor is not None else distinct_floors(db)
    dow = weekday_restriction(time_granularity, weekday)
    out = []
    for f in floors:
        dates = dates_for_weekday(db, dow, f) if dow is not None else None
        out.append(_floor_rollup(db, f, dates, unit_price_per_kwh))
    return {
        "unit_price_per_kwh": unit_price_per_kwh,
        "currency": currency,
        "time_granularity": time_granularity or "day",
        "weekday": weekday or "all",
        "floors": out,
    }
