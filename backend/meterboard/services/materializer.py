"""Writes the daily/hourly summary tables from raw readings.

Runs out of band (see ``meterboard.tasks``); request handlers only read the
tables it produces.
"""
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from meterboard.models.reading import Reading
from meterboard.models.summary import DailySummary, HourlySummary
from meterboard.services.summary_providers import (
    aggregate_daily,
    aggregate_hourly,
    reading_conditions,
    summary_floor_condition,
)

logger = logging.getLogger(__name__)


def floors_on(db: Session, day: date) -> List[Optional[int]]:
    rows = (
        db.query(Reading.floor)
        .filter(Reading.date == day, Reading.floor.isnot(None))
        .distinct()
        .order_by(Reading.floor)
        .all()
    )
    return [None] + [row[0] for row in rows]


def _clear(db: Session, day: date, floor: Optional[int]):
    db.query(DailySummary).filter(
        DailySummary.date == day, summary_floor_condition(DailySummary.floor, floor)
    ).delete(synchronize_session=False)
    db.query(HourlySummary).filter(
        HourlySummary.date == day, summary_floor_condition(HourlySummary.floor, floor)
    ).delete(synchronize_session=False)


def materialize_date(db: Session, day: date) -> int:
    """Recompute every (day, floor) key, including the all-floors key.

    Returns the number of keys written. The caller owns the transaction.
    """
    written = 0
    now = datetime.utcnow()
    for floor in floors_on(db, day):
        conditions = reading_conditions(day=day, floor=floor)
        _clear(db, day, floor)
        stats = aggregate_daily(db, conditions)
        if stats is None:
            continue
        db.add(DailySummary(
            date=day,
            floor=floor,
            total_records=stats.total_records,
            avg_current=stats.avg_current,
            total_energy=stats.total_energy,
            minute_count=stats.minute_count,
            minute_avg_current=stats.minute_avg_current,
            hour_count=stats.hour_count,
            hour_avg_current=stats.hour_avg_current,
            avg_voltage=stats.avg_voltage,
            peak_power=stats.peak_power,
            computed_at=now,
        ))
        for h in aggregate_hourly(db, conditions):
            db.add(HourlySummary(
                date=day,
                hour=h.hour,
                floor=floor,
                avg_current=h.avg_current,
                total_energy=h.total_energy,
                max_energy=h.max_energy,
                max_current=h.max_current,
                record_count=h.count,
                computed_at=now,
            ))
        written += 1
    db.flush()
    logger.info("Materialized %d summary key(s) for %s", written, day)
    return written


def materialize_dates(db: Session, days: Optional[Iterable[date]] = None) -> int:
    if days is None:
        days = [row[0] for row in db.query(Reading.date).distinct().order_by(Reading.date).all()]
    return sum(materialize_date(db, day) for day in days)
