from typing import Optional

from meterboard.services.floor_analytics import DEFAULT_UNIT_PRICE_PER_KWH, energy_cost


def resolve_unit_price(floor_analytics: Optional[dict], override: Optional[float] = None) -> float:
    """Explicit override, then the server's configured price, then the default."""
    if override is not None:
        return override
    price = (floor_analytics or {}).get("unit_price_per_kwh")
    return float(price) if price is not None else DEFAULT_UNIT_PRICE_PER_KWH


def statistics_cards(summary: Optional[dict], hourly: Optional[dict] = None,
                     floor_analytics: Optional[dict] = None,
                     unit_price_per_kwh: Optional[float] = None) -> dict:
    """Figures shown on the dashboard cards. Energies arrive in Wh."""
    summary = summary or {}
    per_day = summary.get("per_day") or {}
    per_hour = summary.get("per_hour") or {}
    per_minute = summary.get("per_minute") or {}
    per_second = summary.get("per_second") or {}

    price = resolve_unit_price(floor_analytics, unit_price_per_kwh)
    total_energy_wh = per_day.get("total_energy") or 0
    peak = (hourly or {}).get("peak_hour")
    return {
        "total_energy_kwh": round(total_energy_wh / 1000, 3),
        "unit_price_per_kwh": price,
        "currency": (floor_analytics or {}).get("currency"),
        "total_cost": round(energy_cost(total_energy_wh, price), 2),
        "avg_current": per_day.get("avg_current") or 0,
        "avg_voltage": per_day.get("avg_voltage") or 0,
        "peak_power": per_day.get("peak_power") or 0,
        "avg_energy_per_hour_kwh": round((per_hour.get("avg_energy") or 0) / 1000, 4),
        "avg_energy_per_minute_kwh": round((per_minute.get("avg_energy") or 0) / 1000, 5),
        "hours_recorded": per_hour.get("count") or 0,
        "minutes_recorded": per_minute.get("count") or 0,
        "seconds_recorded": per_second.get("count") or 0,
        "peak_hour": f"{peak['hour']}:00" if peak and peak.get("hour") is not None else None,
        "peak_hour_datetime": peak.get("datetime") if peak else None,
    }
