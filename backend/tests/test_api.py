from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from meterboard.config import get_settings
from meterboard.database import get_db
from meterboard.main import app

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)


@pytest.fixture()
def seeded(add_reading):
    add_reading(MONDAY, 10, 0, current=5, energy=100, floor=1)
    add_reading(MONDAY, 10, 1, current=7, energy=200, floor=1)
    add_reading(TUESDAY, 18, 30, current=3, energy=50, floor=2)


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_summary_endpoint(client, seeded):
    resp = client.get("/api/v1/energy/summary", params={"date": "2024-01-01", "floor": "1"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_records"] == 2
    assert data["per_day"] == {"count": 1, "avg_current": 6.0, "total_energy": 300.0}
    assert data["per_minute"]["count"] == 2
    assert data["per_hour"]["count"] == 1


def test_summary_floor_all(client, seeded):
    data = client.get("/api/v1/energy/summary", params={"date": "2024-01-01", "floor": "all"}).json()
    assert data["floor"] == "all"
    assert data["total_records"] == 2


def test_summary_week_granularity(client, seeded):
    data = client.get(
        "/api/v1/energy/summary",
        params={"timeGranularity": "week", "weekday": "tuesday"},
    ).json()
    assert data["date"] == "2024-01-02"
    assert data["per_day"]["total_energy"] == 50.0


def test_summary_empty_store(client):
    resp = client.get("/api/v1/energy/summary")
    assert resp.status_code == 200
    assert resp.json()["date"] is None
    assert resp.json()["total_records"] == 0


def test_invalid_floor_is_rejected(client):
    resp = client.get("/api/v1/energy/summary", params={"floor": "roof"})
    assert resp.status_code == 422


def test_invalid_date_is_rejected(client):
    resp = client.get("/api/v1/energy/summary", params={"date": "01/02/2024"})
    assert resp.status_code == 422


def test_hourly_data_endpoint(client, seeded):
    data = client.get("/api/v1/energy/hourly-data", params={"date": "2024-01-01"}).json()
    assert [h["hour"] for h in data["hourly_data"]] == [10]
    assert data["peak_hour"]["time"] == "10:00 AM"
    assert data["peak_hour"]["datetime"] == "Monday, January 1, 2024 at 10:00 AM"


def test_minute_data_endpoint(client, seeded):
    data = client.get("/api/v1/energy/minute-data", params={"date": "2024-01-01", "hour": 10}).json()
    assert [m["minute"] for m in data["minute_data"]] == [0, 1]

    assert client.get("/api/v1/energy/minute-data", params={"date": "2024-01-01", "hour": 24}).status_code == 422
    assert client.get("/api/v1/energy/minute-data", params={"hour": 3}).status_code == 422


def test_available_dates_endpoint(client, seeded):
    assert client.get("/api/v1/energy/available-dates").json() == {"dates": ["2024-01-01", "2024-01-02"]}


def test_weekly_peak_hours_endpoint(client, seeded):
    data = client.get("/api/v1/energy/weekly-peak-hours", params={"floor": "2"}).json()
    assert data["floor"] == 2
    assert [e["day_name"] for e in data["weekly_peak_hours"]] == ["Tuesday"]


def test_floor_analytics_endpoint_uses_configured_price(client, seeded, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"unit_price_per_kwh": 20.0})
    data = client.get("/api/v1/energy/floor-analytics").json()
    assert data["unit_price_per_kwh"] == 20.0
    assert [f["floor"] for f in data["floors"]] == [1, 2]
    assert data["floors"][0]["cost"] == 6.0


def test_database_error_is_generic_500(client):
    class BrokenSession:
        def query(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is down"))

    def broken_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = broken_db
    resp = client.get("/api/v1/energy/available-dates")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Database error"}


def test_health_reports_database(client, monkeypatch):
    from meterboard import main

    monkeypatch.setattr(main.redis_client, "ping", lambda: True)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"db": "ok", "redis": "ok"}


def test_daily_consumption_endpoint(client, seeded):
    data = client.get("/api/v1/energy/daily-consumption").json()
    assert data["floor"] == "all"
    assert [(d["date"], d["total_energy"]) for d in data["daily_consumption"]] == [
        ("2024-01-01", 300.0),
        ("2024-01-02", 50.0),
    ]
    assert client.get("/api/v1/energy/daily-consumption", params={"floor": "x"}).status_code == 422


def test_summary_reports_voltage_and_peak_power(client, seeded):
    per_day = client.get("/api/v1/energy/summary", params={"date": "2024-01-01", "floor": "1"}).json()["per_day"]
    assert per_day["avg_voltage"] == 230.0
    assert per_day["peak_power"] == 1610.0
