import os

# Keep the module-level engine and redis cache out of the way during tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["METERBOARD_CACHE_TTL"] = "0"

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import meterboard.models  # noqa: F401
from meterboard.config import Settings, get_settings
from meterboard.database import Base, get_db
from meterboard.main import app
from meterboard.models import Reading


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture()
def settings():
    return Settings(database_url="sqlite://", cache_ttl=0)


@pytest.fixture()
def client(db, settings):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def add_reading(db):
    def _add(day: date, hour: int, minute: int, current: float, energy: float,
             floor=None, second: int = 0, voltage: float = 230.0):
        reading = Reading(
            date=day,
            hour=hour,
            minute=minute,
            second=second,
            timestamp=datetime.combine(day, datetime.min.time()).replace(hour=hour, minute=minute, second=second),
            floor=floor,
            voltage=voltage,
            current=current,
            power=voltage * current,
            energy=energy,
        )
        db.add(reading)
        db.commit()
        return reading
    return _add
