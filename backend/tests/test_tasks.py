from datetime import date

import redis
from sqlalchemy.orm import sessionmaker

from meterboard import tasks
from meterboard.models import DailySummary
from meterboard.services import cache
from meterboard.services.cache import AVAILABLE_DATES_KEY


def test_materialize_summaries_task(engine, db, add_reading, monkeypatch):
    monkeypatch.setattr(tasks, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    add_reading(date(2024, 1, 1), 10, 0, current=5, energy=100, floor=1)
    add_reading(date(2024, 1, 2), 10, 0, current=5, energy=100)

    result = tasks.materialize_summaries.apply(args=[["2024-01-01"]]).get()

    assert result == 2
    rows = db.query(DailySummary).all()
    assert {(r.date, r.floor) for r in rows} == {(date(2024, 1, 1), None), (date(2024, 1, 1), 1)}


def test_beat_schedule_targets_task():
    entry = tasks.celery_app.conf.beat_schedule["materialize-summaries-hourly"]
    assert entry["task"] == tasks.materialize_summaries.name


def test_materialize_summaries_invalidates_available_dates(engine, add_reading, monkeypatch):
    monkeypatch.setattr(tasks, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    invalidated = []
    monkeypatch.setattr(tasks, "invalidate_cache", invalidated.append)
    add_reading(date(2024, 1, 1), 10, 0, current=5, energy=100, floor=1)

    tasks.materialize_summaries.apply(args=[["2024-01-01"]]).get()

    assert invalidated == [AVAILABLE_DATES_KEY]


def test_invalidate_cache_tolerates_redis_outage(monkeypatch):
    class DownRedis:
        def delete(self, key):
            raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(cache, "redis_client", DownRedis())
    cache.invalidate_cache(AVAILABLE_DATES_KEY)
