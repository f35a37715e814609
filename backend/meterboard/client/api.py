import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"


class MeterboardAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def filter_params(filters: dict) -> dict:
    """Translate dashboard filters into query parameters, dropping unset ones."""
    params = {
        "date": filters.get("date"),
        "floor": filters.get("floor"),
        "timeGranularity": filters.get("timeGranularity"),
        "weekday": filters.get("weekday"),
    }
    return {k: v for k, v in params.items() if v not in (None, "")}


class MeterboardAPI:
    """Thin client over the ``/api/v1/energy`` endpoints."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[dict] = None):
        url = f"{self.base_url}{path}"
        resp = self.session.get(url, params=params or {}, timeout=self.timeout)
        if not resp.ok:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise MeterboardAPIError(resp.status_code, str(detail))
        return resp.json()

    def get_available_dates(self) -> dict:
        return self._get("/energy/available-dates")

    def get_energy_summary(self, filters: dict) -> dict:
        return self._get("/energy/summary", filter_params(filters))

    def get_hourly_data(self, filters: dict) -> dict:
        return self._get("/energy/hourly-data", filter_params(filters))

    def get_minute_data(self, date: str, hour: int, floor=None) -> dict:
        params = {"date": date, "hour": hour}
        if floor not in (None, ""):
            params["floor"] = floor
        return self._get("/energy/minute-data", params)

    def get_weekly_peak_hours(self, filters: dict) -> dict:
        params = {"floor": filters["floor"]} if filters.get("floor") not in (None, "") else {}
        return self._get("/energy/weekly-peak-hours", params)

    def get_floor_analytics(self, filters: dict) -> dict:
        params = filter_params(filters)
        params.pop("date", None)
        return self._get("/energy/floor-analytics", params)
