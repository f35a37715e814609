from sqlalchemy import Column, Date, DateTime, Float, Index, Integer
from meterboard.database import Base


class Reading(Base):
    """One raw meter sample. Rows are append-only."""
    __tablename__ = "readings"
    __table_args__ = (
        Index("ix_readings_date_floor", "date", "floor"),
        Index("ix_readings_date_hour", "date", "hour"),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)  # local calendar day
    hour = Column(Integer, nullable=False)
    minute = Column(Integer, nullable=False)
    second = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    floor = Column(Integer, nullable=True)  # NULL when the meter has no zone
    voltage = Column(Float, nullable=False)  # V
    current = Column(Float, nullable=False)  # A
    power = Column(Float, nullable=False)  # W
    energy = Column(Float, nullable=False)  # Wh

