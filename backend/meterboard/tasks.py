import logging
from datetime import date
from typing import List, Optional

from celery import Celery
from celery.schedules import crontab
from sqlalchemy.exc import SQLAlchemyError

from meterboard.config import get_settings
from meterboard.database import SessionLocal
from meterboard.services.cache import AVAILABLE_DATES_KEY, invalidate_cache
from meterboard.services.materializer import materialize_dates

logger = logging.getLogger(__name__)

# Celery Configuration
celery_app = Celery('meterboard', broker=get_settings().redis_url)
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone=get_settings().timezone,
    enable_utc=True,
)

# Refresh summaries a few minutes after every hour
celery_app.conf.beat_schedule = {
    'materialize-summaries-hourly': {
        'task': 'meterboard.tasks.materialize_summaries',
        'schedule': crontab(minute=5),
    },
}


@celery_app.task(name='meterboard.tasks.materialize_summaries', bind=True, max_retries=3)
def materialize_summaries(self, dates: Optional[List[str]] = None):
    """Recompute daily and hourly summaries for the given ISO dates (all dates when empty)."""
    logger.info("Summary materialization started")
    days = [date.fromisoformat(d) for d in dates] if dates else None
    db = SessionLocal()
    try:
        written = materialize_dates(db, days)
        db.commit()
        # New summaries usually mean new dates
        invalidate_cache(AVAILABLE_DATES_KEY)
        logger.info("Summary materialization completed: %d key(s)", written)
        return written
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Summary materialization failed: %s", e)
        raise self.retry(exc=e, countdown=60)
    finally:
        db.close()
