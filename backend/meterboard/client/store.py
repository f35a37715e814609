"""Per-filter data store for the dashboard views.

Each filter change fetches the five data categories in parallel. Every
category keeps its own bounded cache, current value and error, so one failed
fetch never blocks or clears the others. A response that comes back after the
filters have changed again is cached but not shown.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional

import requests

from meterboard.client.api import MeterboardAPI, MeterboardAPIError
from meterboard.client.cache import BoundedCache

logger = logging.getLogger(__name__)

CATEGORIES = ("dates", "summary", "hourly", "weekly_peaks", "floor_analytics")

DEFAULT_CACHE_SIZES = {
    "summary": 50,
    "hourly": 50,
    "weekly_peaks": 20,
    "floor_analytics": 30,
}


def _part(value, default: str) -> str:
    return default if value in (None, "") else str(value)


def summary_cache_key(filters: dict) -> str:
    return "_".join([
        _part(filters.get("date"), "no-date"),
        _part(filters.get("floor"), "all"),
        _part(filters.get("timeGranularity"), "day"),
        _part(filters.get("weekday"), "all"),
    ])


def weekly_peaks_cache_key(filters: dict) -> str:
    return _part(filters.get("floor"), "all")


def floor_analytics_cache_key(filters: dict) -> str:
    return "_".join([
        _part(filters.get("floor"), "all"),
        _part(filters.get("timeGranularity"), "day"),
        _part(filters.get("weekday"), "all"),
    ])


class DashboardStore:
    def __init__(self, api: MeterboardAPI, cache_sizes: Optional[Dict[str, int]] = None,
                 max_workers: int = len(CATEGORIES)):
        sizes = dict(DEFAULT_CACHE_SIZES, **(cache_sizes or {}))
        self.api = api
        self.caches = {name: BoundedCache(size) for name, size in sizes.items()}
        self.state: Dict[str, Optional[dict]] = {name: None for name in CATEGORIES}
        self.errors: Dict[str, Optional[str]] = {name: None for name in CATEGORIES}
        self.filters: dict = {}
        self._generation = {name: 0 for name in CATEGORIES}
        self._pending: Dict[str, Optional[Future]] = {name: None for name in CATEGORIES}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    def _requests(self, filters: dict) -> Dict[str, tuple]:
        return {
            "dates": (None, self.api.get_available_dates),
            "summary": (summary_cache_key(filters), lambda: self.api.get_energy_summary(filters)),
            "hourly": (summary_cache_key(filters), lambda: self.api.get_hourly_data(filters)),
            "weekly_peaks": (weekly_peaks_cache_key(filters), lambda: self.api.get_weekly_peak_hours(filters)),
            "floor_analytics": (floor_analytics_cache_key(filters), lambda: self.api.get_floor_analytics(filters)),
        }

    def set_filters(self, filters: dict) -> Dict[str, Future]:
        """Apply new filters; returns the futures of the fetches actually issued."""
        filters = dict(filters)
        issued = {}
        with self._lock:
            self.filters = filters
            for category, (key, fetch) in self._requests(filters).items():
                self._generation[category] += 1
                generation = self._generation[category]
                previous = self._pending[category]
                if previous is not None:
                    previous.cancel()
                    self._pending[category] = None

                cached = self.caches[category].get(key) if key is not None else None
                if cached is not None:
                    self.state[category] = cached
                    self.errors[category] = None
                    continue

                future = self._executor.submit(self._fetch, category, generation, key, fetch)
                self._pending[category] = future
                issued[category] = future
        return issued

    def refresh(self, filters: dict, timeout: Optional[float] = None) -> dict:
        """Apply filters and block until the issued fetches settle."""
        futures = self.set_filters(filters)
        if futures:
            wait(list(futures.values()), timeout=timeout)
        return self.snapshot()

    def _fetch(self, category: str, generation: int, key: Optional[str], fetch: Callable[[], dict]):
        try:
            data = fetch()
        except (requests.RequestException, MeterboardAPIError) as e:
            logger.warning("Error fetching %s: %s", category, e)
            with self._lock:
                if generation == self._generation[category]:
                    self.errors[category] = str(e) or f"Failed to fetch {category}"
                    self._pending[category] = None
            return None

        if data is not None and key is not None:
            self.caches[category].set(key, data)
        with self._lock:
            if generation != self._generation[category]:
                logger.debug("Discarding stale %s response for generation %d", category, generation)
                return data
            if data is not None:
                self.state[category] = data
            self.errors[category] = None
            self._pending[category] = None
        return data

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "filters": dict(self.filters),
                "data": dict(self.state),
                "errors": dict(self.errors),
            }

    def clear_caches(self) -> None:
        for cache in self.caches.values():
            cache.clear()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
