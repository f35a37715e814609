import json
import logging

import redis

from meterboard.config import get_settings

logger = logging.getLogger(__name__)

redis_client = redis.Redis.from_url(get_settings().redis_url, decode_responses=True)

AVAILABLE_DATES_KEY = "energy:available-dates"


def set_cache(key: str, value, ex: int = 30):
    """Best-effort write; a redis outage only costs the cached copy."""
    if ex <= 0:
        return
    try:
        redis_client.set(key, json.dumps(value), ex=ex)
    except redis.RedisError as e:
        logger.warning("Redis cache write failed for %s: %s", key, e)


def get_cache(key: str):
    try:
        v = redis_client.get(key)
    except redis.RedisError as e:
        logger.warning("Redis cache read failed for %s: %s", key, e)
        return None
    if v is None:
        return None
    try:
        return json.loads(v)
    except ValueError:
        return v


def invalidate_cache(key: str):
    try:
        redis_client.delete(key)
    except redis.RedisError as e:
        logger.warning("Redis cache invalidation failed for %s: %s", key, e)
