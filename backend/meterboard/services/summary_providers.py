"""Two-tier read path for daily and hourly statistics.

``PrecomputedSummaryProvider`` reads the materialized summary tables,
``RawAggregationProvider`` aggregates the ``readings`` table on the fly, and
``FallbackSummaryProvider`` asks each provider in turn until one answers.
Both providers must produce the same numbers for the same readings; the
materializer writes summaries with the raw aggregation helpers below.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from meterboard.models.reading import Reading
from meterboard.models.summary import DailySummary, HourlySummary

logger = logging.getLogger(__name__)


@dataclass
class DailyStats:
    total_records: int = 0
    avg_current: float = 0.0
    total_energy: float = 0.0
    minute_count: int = 0
    minute_avg_current: float = 0.0  # average of per-minute averages
    hour_count: int = 0
    hour_avg_current: float = 0.0  # average of per-hour averages
    avg_voltage: float = 0.0
    peak_power: float = 0.0


@dataclass
class HourStats:
    hour: int
    avg_current: float = 0.0
    total_energy: float = 0.0
    max_current: float = 0.0
    max_energy: float = 0.0
    count: int = 0


def reading_conditions(day: Optional[date] = None, floor: Optional[int] = None,
                       dates: Optional[Sequence[date]] = None) -> list:
    """Build WHERE clauses over ``readings``. ``floor`` None means all floors."""
    conditions = []
    if day is not None:
        conditions.append(Reading.date == day)
    if dates is not None:
        conditions.append(Reading.date.in_(list(dates)))
    if floor is not None:
        conditions.append(Reading.floor == floor)
    return conditions


def aggregate_daily(db: Session, conditions: list) -> Optional[DailyStats]:
    """Aggregate raw readings into day statistics, or None when nothing matches."""
    total_records, avg_current, total_energy, avg_voltage, peak_power = (
        db.query(
            func.count(Reading.id),
            func.avg(Reading.current),
            func.sum(Reading.energy),
            func.avg(Reading.voltage),
            func.max(Reading.power),
        )
        .filter(*conditions)
        .one()
    )
    if not total_records:
        return None

    per_minute = (
        db.query(func.avg(Reading.current).label("avg_current"))
        .filter(*conditions)
        .group_by(Reading.hour, Reading.minute)
        .subquery()
    )
    minute_count, minute_avg_current = (
        db.query(func.count(), func.avg(per_minute.c.avg_current)).select_from(per_minute).one()
    )

    per_hour = (
        db.query(func.avg(Reading.current).label("avg_current"))
        .filter(*conditions)
        .group_by(Reading.hour)
        .subquery()
    )
    hour_count, hour_avg_current = (
        db.query(func.count(), func.avg(per_hour.c.avg_current)).select_from(per_hour).one()
    )

    return DailyStats(
        total_records=int(total_records),
        avg_current=float(avg_current or 0.0),
        total_energy=float(total_energy or 0.0),
        minute_count=int(minute_count or 0),
        minute_avg_current=float(minute_avg_current or 0.0),
        hour_count=int(hour_count or 0),
        hour_avg_current=float(hour_avg_current or 0.0),
        avg_voltage=float(avg_voltage or 0.0),
        peak_power=float(peak_power or 0.0),
    )


def aggregate_hourly(db: Session, conditions: list) -> List[HourStats]:
    """Group raw readings by hour of day, ascending."""
    rows = (
        db.query(
            Reading.hour,
            func.avg(Reading.current),
            func.sum(Reading.energy),
            func.max(Reading.current),
            func.max(Reading.energy),
            func.count(Reading.id),
        )
        .filter(*conditions)
        .group_by(Reading.hour)
        .order_by(Reading.hour)
        .all()
    )
    return [
        HourStats(
            hour=int(hour),
            avg_current=float(avg_current or 0.0),
            total_energy=float(total_energy or 0.0),
            max_current=float(max_current or 0.0),
            max_energy=float(max_energy or 0.0),
            count=int(count),
        )
        for hour, avg_current, total_energy, max_current, max_energy, count in rows
    ]


def summary_floor_condition(column, floor: Optional[int]):
    # Summary rows keyed with a NULL floor hold the all-floors aggregate.
    return column.is_(None) if floor is None else column == floor


class SummaryProvider(ABC):
    name = "abstract"

    @abstractmethod
    def daily_stats(self, db: Session, day: date, floor: Optional[int]) -> Optional[DailyStats]:
        """Return day statistics for (day, floor), or None on a miss."""

    @abstractmethod
    def hourly_stats(self, db: Session, day: date, floor: Optional[int]) -> Optional[List[HourStats]]:
        """Return per-hour statistics for (day, floor), or None on a miss."""


class PrecomputedSummaryProvider(SummaryProvider):
    name = "precomputed"

    def daily_stats(self, db, day, floor):
        row = (
            db.query(DailySummary)
            .filter(DailySummary.date == day, summary_floor_condition(DailySummary.floor, floor))
            .order_by(DailySummary.id.desc())
            .first()
        )
        if row is None:
            return None
        return DailyStats(
            total_records=row.total_records,
            avg_current=row.avg_current,
            total_energy=row.total_energy,
            minute_count=row.minute_count,
            minute_avg_current=row.minute_avg_current,
            hour_count=row.hour_count,
            hour_avg_current=row.hour_avg_current,
            avg_voltage=row.avg_voltage,
            peak_power=row.peak_power,
        )

    def hourly_stats(self, db, day, floor):
        rows = (
            db.query(HourlySummary)
            .filter(HourlySummary.date == day, summary_floor_condition(HourlySummary.floor, floor))
            .order_by(HourlySummary.hour)
            .all()
        )
        if not rows:
            return None
        return [
            HourStats(
                hour=r.hour,
                avg_current=r.avg_current,
                total_energy=r.total_energy,
                max_current=r.max_current,
                max_energy=r.max_energy,
                count=r.record_count,
            )
            for r in rows
        ]


class RawAggregationProvider(SummaryProvider):
    name = "raw"

    def daily_stats(self, db, day, floor):
        return aggregate_daily(db, reading_conditions(day=day, floor=floor))

    def hourly_stats(self, db, day, floor):
        return aggregate_hourly(db, reading_conditions(day=day, floor=floor)) or None


class FallbackSummaryProvider:
    """Try each provider in order; the first non-None answer wins."""

    def __init__(self, providers: Sequence[SummaryProvider]):
        self.providers = list(providers)

    def daily_stats(self, db: Session, day: date, floor: Optional[int]) -> Tuple[Optional[DailyStats], Optional[str]]:
        for provider in self.providers:
            stats = provider.daily_stats(db, day, floor)
            if stats is not None:
                return stats, provider.name
            logger.debug("daily stats miss on %s provider for %s floor=%s", provider.name, day, floor)
        return None, None

    def hourly_stats(self, db: Session, day: date, floor: Optional[int]) -> Tuple[Optional[List[HourStats]], Optional[str]]:
        for provider in self.providers:
            stats = provider.hourly_stats(db, day, floor)
            if stats is not None:
                return stats, provider.name
            logger.debug("hourly stats miss on %s provider for %s floor=%s", provider.name, day, floor)
        return None, None


def default_provider() -> FallbackSummaryProvider:
    return FallbackSummaryProvider([PrecomputedSummaryProvider(), RawAggregationProvider()])
