# app/core/cache.py
import json
from typing import Any, Callable
from redis.exceptions import RedisError
from core.redis import get_redis
from core.logger import logger


def cached_json(key: str, ttl: int, loader: Callable[[], Any]) -> Any:
    """
    Read-through JSON cache. Redis outages fall back to the loader.
    """
    rds = get_redis()
    try:
        hit = rds.get(key)
        if hit is not None:
            return json.loads(hit)
    except RedisError:
        logger.warning("Cache read failed", extra={"meta": {"key": key}})
        return loader()

    res = loader()
    if ttl > 0:
        try:
            rds.setex(key, ttl, json.dumps(res, default=str))
        except RedisError:
            logger.warning("Cache write failed", extra={"meta": {"key": key}})
    return res


def invalidate(*keys: str) -> int:
    if not keys:
        return 0
    try:
        return get_redis().delete(*keys)
    except RedisError:
        logger.warning("Cache invalidation failed", extra={"meta": {"keys": list(keys)}})
        return 0
