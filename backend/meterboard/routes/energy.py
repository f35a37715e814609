from datetime import date as Date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from meterboard.config import Settings, get_settings
from meterboard.database import get_db
from meterboard.services.aggregation import (
    get_available_dates,
    get_daily_consumption,
    get_daily_summary,
    get_hourly_data,
    get_minute_data,
    get_weekly_peak_hours,
)
from meterboard.services.cache import AVAILABLE_DATES_KEY, get_cache, set_cache
from meterboard.services.floor_analytics import get_floor_analytics

router = APIRouter()


def parse_floor(floor: Optional[str] = Query(None)) -> Optional[int]:
    """``all`` or a missing floor means every floor combined."""
    if floor is None or floor.strip().lower() in ("", "all"):
        return None
    try:
        return int(floor)
    except ValueError:
        raise HTTPException(status_code=422, detail="floor must be an integer or 'all'")


@router.get("/energy/summary")
def energy_summary(
    date: Optional[Date] = Query(None),
    floor: Optional[int] = Depends(parse_floor),
    time_granularity: str = Query("day", alias="timeGranularity"),
    weekday: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return get_daily_summary(db, date, floor, time_granularity, weekday)


@router.get("/energy/hourly-data")
def energy_hourly_data(
    date: Optional[Date] = Query(None),
    floor: Optional[int] = Depends(parse_floor),
    time_granularity: str = Query("day", alias="timeGranularity"),
    weekday: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return get_hourly_data(db, date, floor, time_granularity, weekday)


@router.get("/energy/minute-data")
def energy_minute_data(
    date: Date = Query(...),
    hour: int = Query(..., ge=0, le=23),
    floor: Optional[int] = Depends(parse_floor),
    db: Session = Depends(get_db),
):
    return get_minute_data(db, date, hour, floor)


@router.get("/energy/available-dates")
def energy_available_dates(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    cache_key = AVAILABLE_DATES_KEY
    if settings.cache_ttl > 0:
        data = get_cache(cache_key)
        if data is not None:
            return data
    out = {"dates": get_available_dates(db)}
    set_cache(cache_key, out, ex=settings.cache_ttl)
    return out


@router.get("/energy/daily-consumption")
def energy_daily_consumption(
    floor: Optional[int] = Depends(parse_floor),
    db: Session = Depends(get_db),
):
    return get_daily_consumption(db, floor)


@router.get("/energy/weekly-peak-hours")
def energy_weekly_peak_hours(
    floor: Optional[int] = Depends(parse_floor),
    db: Session = Depends(get_db),
):
    return get_weekly_peak_hours(db, floor)


@router.get("/energy/floor-analytics")
def energy_floor_analytics(
    floor: Optional[int] = Depends(parse_floor),
    time_granularity: str = Query("day", alias="timeGranularity"),
    weekday: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return get_floor_analytics(
        db,
        floor,
        time_granularity,
        weekday,
        unit_price_per_kwh=settings.unit_price_per_kwh,
        currency=settings.currency,
    )
