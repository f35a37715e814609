from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer
from meterboard.database import Base


class DailySummary(Base):
    """Precomputed per-day aggregate. ``floor`` NULL stands for all floors."""
    __tablename__ = "daily_summaries"
    __table_args__ = (
        Index("ix_daily_summaries_date_floor", "date", "floor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    floor = Column(Integer, nullable=True)
    total_records = Column(Integer, nullable=False, default=0)
    avg_current = Column(Float, nullable=False, default=0.0)
    total_energy = Column(Float, nullable=False, default=0.0)
    minute_count = Column(Integer, nullable=False, default=0)
    minute_avg_current = Column(Float, nullable=False, default=0.0)
    hour_count = Column(Integer, nullable=False, default=0)
    hour_avg_current = Column(Float, nullable=False, default=0.0)
    avg_voltage = Column(Float, nullable=False, default=0.0)
    peak_power = Column(Float, nullable=False, default=0.0)
    computed_at = Column(DateTime, default=datetime.utcnow)


class HourlySummary(Base):
    __tablename__ = "hourly_summaries"
    __table_args__ = (
        Index("ix_hourly_summaries_date_floor_hour", "date", "floor", "hour"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    hour = Column(Integer, nullable=False)
    floor = Column(Integer, nullable=True)
    avg_current = Column(Float, nullable=False, default=0.0)
    total_energy = Column(Float, nullable=False, default=0.0)
    max_energy = Column(Float, nullable=False, default=0.0)
    max_current = Column(Float, nullable=False, default=0.0)
    record_count = Column(Integer, nullable=False, default=0)
    computed_at = Column(DateTime, default=datetime.utcnow)
