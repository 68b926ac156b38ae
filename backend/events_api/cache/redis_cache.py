import json
import logging
from typing import Any

import redis
from fastapi.encoders import jsonable_encoder

from events_api.core.config import settings


logger = logging.getLogger("events_api.cache")

_client: redis.Redis | None = None


def get_redis() -> redis.Redis | None:
    global _client
    if _client is not None:
        return _client
    if not settings.redis_url:
        return None
    try:
        _client = redis.Redis.from_url(
            settings.redis_url,
            socket_timeout=1.0,
            socket_connect_timeout=1.0,
        )
        _client.ping()
        return _client
    except redis.RedisError as exc:
        logger.warning("Redis unavailable, cache disabled for this call: %s", exc)
        _client = None
        return None


def make_key(prefix: str, params: dict[str, Any]) -> str:
    parts = [prefix]
    for k in sorted(params.keys()):
        parts.append(f"{k}={params[k]}")
    return "|".join(parts)


def cache_get(key: str) -> Any | None:
    client = get_redis()
    if client is None:
        return None
    try:
        raw = client.get(key)
    except redis.RedisError:
        return None
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def cache_set(key: str, value: Any, ttl_seconds: int | None = None) -> None:
    client = get_redis()
    if client is None:
        return
    payload = json.dumps(jsonable_encoder(value, by_alias=True))
    try:
        client.setex(key, ttl_seconds or settings.cache_ttl_seconds, payload)
    except redis.RedisError as exc:
        logger.warning("Cache write failed for %s: %s", key, exc)


def cache_invalidate_prefix(prefix: str) -> None:
    client = get_redis()
    if client is None:
        return
    try:
        for key in client.scan_iter(match=f"{prefix}*", count=200):
            client.delete(key)
    except redis.RedisError as exc:
        logger.warning("Cache invalidation failed for %s: %s", prefix, exc)


def cache_status() -> str:
    if not settings.redis_url:
        return "disabled"
    return "ok" if get_redis() is not None else "error"
