# tawsila_admin/core/cache.py
"""
Redis access for the session cache.

When Redis cannot be reached the console degrades to a DummyRedis that stores
nothing, and tries the real server again once REDIS_RETRY_INTERVAL has passed.
"""
import hashlib
import logging
import time
from typing import Any, Optional, Union

import orjson
from redis import asyncio as aioredis
from redis.asyncio.client import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from tawsila_admin.core.config import settings

logger = logging.getLogger(__name__)

redis_pool: Optional[ConnectionPool] = None
redis_client: Optional[Union[Redis, "DummyRedis"]] = None


def _connect() -> Redis:
    global redis_pool

    redis_pool = aioredis.ConnectionPool.from_url(
        settings.REDIS_CONNECTION_STRING,
        max_connections=20,
        decode_responses=True,
        encoding="utf-8",
        socket_timeout=2.0,
        socket_connect_timeout=2.0,
        health_check_interval=30
    )
    return Redis(connection_pool=redis_pool)


async def _release(client: Redis) -> None:
    try:
        await client.aclose()
    except (RedisError, OSError) as e:
        logger.debug(f"Ignoring error while closing Redis client: {str(e)}")


async def init_redis_pool() -> Union[Redis, "DummyRedis"]:
    """Connect to Redis, or fall back to DummyRedis until the next retry"""
    global redis_client

    if redis_client is not None:
        return redis_client

    client = _connect()
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.error(
            f"Redis unavailable, retrying in {settings.REDIS_RETRY_INTERVAL}s: {str(e)}"
        )
        await _release(client)
        redis_client = DummyRedis(retry_at=time.monotonic() + settings.REDIS_RETRY_INTERVAL)
        return redis_client

    logger.info("Redis connection established")
    redis_client = client
    return redis_client


async def get_redis() -> Union[Redis, "DummyRedis"]:
    """Current client; reconnects a lost connection and retries a degraded one when due"""
    global redis_client

    if redis_client is None:
        return await init_redis_pool()

    if isinstance(redis_client, DummyRedis):
        if not redis_client.retry_due():
            return redis_client
        logger.info("Retrying Redis connection")
        redis_client = None
        return await init_redis_pool()

    try:
        await redis_client.ping()
    except (RedisError, OSError) as e:
        logger.warning(f"Redis connection lost, reconnecting: {str(e)}")
        await _release(redis_client)
        redis_client = None
        return await init_redis_pool()

    return redis_client


async def close_redis() -> None:
    """Release the Redis pool on shutdown"""
    global redis_pool, redis_client

    if redis_client is not None and not isinstance(redis_client, DummyRedis):
        await redis_client.aclose()
    redis_client = None
    redis_pool = None


def cache_key(key: str) -> str:
    """Prefix every key so the console can share a Redis database"""
    return f"{settings.REDIS_KEY_PREFIX}:{key}"


def digest(value: str) -> str:
    """Stable digest used to key cache entries by secrets such as tokens"""
    return hashlib.sha256(value.encode()).hexdigest()


async def set_cache(key: str, value: Any, expire: int = None) -> bool:
    """Set a cache value serialized with orjson"""
    redis = await get_redis()
    if isinstance(redis, DummyRedis):
        return False

    try:
        if expire is None:
            expire = settings.REDIS_TTL

        json_value = orjson.dumps(value).decode("utf-8")
        result = await redis.set(cache_key(key), json_value, ex=expire)

        if result:
            logger.debug(f"Cached key: {key} with TTL: {expire}s")
            return True
        return False
    except RedisError as e:
        logger.error(f"Error setting cache: {str(e)}")
        return False


async def get_cache(key: str) -> Optional[Any]:
    """Get a cached value by key"""
    redis = await get_redis()
    if isinstance(redis, DummyRedis):
        return None

    try:
        data = await redis.get(cache_key(key))

        if data:
            try:
                return orjson.loads(data)
            except orjson.JSONDecodeError as e:
                logger.error(f"Error decoding cached JSON for {key}: {str(e)}")
                return None
        return None
    except RedisError as e:
        logger.error(f"Error getting cache: {str(e)}")
        return None


async def delete_cache(*keys: str) -> int:
    """Delete cache keys and return the number removed"""
    redis = await get_redis()
    if isinstance(redis, DummyRedis) or not keys:
        return 0

    try:
        return await redis.delete(*(cache_key(key) for key in keys))
    except RedisError as e:
        logger.error(f"Error deleting cache keys: {str(e)}")
        return 0


class DummyRedis:
    """Stand-in that stores nothing while Redis is unavailable"""

    def __init__(self, retry_at: float = 0.0):
        self.retry_at = retry_at

    def retry_due(self) -> bool:
        return time.monotonic() >= self.retry_at

    async def ping(self):
        return False

    async def set(self, *args, **kwargs):
        return False

    async def get(self, *args, **kwargs):
        return None

    async def delete(self, *args, **kwargs):
        return 0
