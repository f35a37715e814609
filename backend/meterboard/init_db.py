import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from meterboard.database import SessionLocal, Base, engine
# Import all models to ensure they are registered with SQLAlchemy
from meterboard.models import Reading
from meterboard.services.materializer import materialize_dates
from data_simulator import MeterDataSimulator

logger = logging.getLogger(__name__)


def seed_readings(db: Session, start_date: date, days: int = 7, interval_seconds: int = 60,
                  seed: Optional[int] = None) -> int:
    """Insert simulated readings for every configured floor. Returns the row count."""
    simulator = MeterDataSimulator(seed=seed)
    rows = simulator.generate_date_range(start_date, days=days, interval_seconds=interval_seconds)
    db.bulk_insert_mappings(Reading, rows)
    return len(rows)


def init_db(days: int = 7):
    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing = db.query(Reading).first()
        if existing is None:
            start = date.today() - timedelta(days=days - 1)
            count = seed_readings(db, start, days=days)
            materialize_dates(db)
            db.commit()
            logger.info("Seeded %d readings from %s", count, start)
        else:
            logger.info("Database already contains readings. Skipping initialization.")
    except Exception:
        logger.exception("Error initializing database")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialization completed!")
