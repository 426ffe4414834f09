"""Redis connection management.

Redis holds state that has to be shared by every API worker for a short
time, such as one-time handoff codes. Nothing here is a cache of database
rows: the tenant directory is always read from the database.
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from multistore.config import settings


_pool: ConnectionPool | None = None


def _get_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(
            str(settings.redis_url),
            max_connections=50,
            decode_responses=True,
        )
    return _pool


@asynccontextmanager
async def redis_client() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """Client on the shared pool.

    Usage:
        async with redis_client() as client:
            await client.ping()
    """
    client = redis.Redis(connection_pool=_get_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    """Disconnect the shared pool. Call during application shutdown."""
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None


class RedisCache:
    """JSON values under a key prefix.

    Args:
        prefix: Namespace prepended to every key (e.g. ``"handoff:"``)
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def set_json(
        self,
        key: str,
        value: dict[str, Any],
        ttl_seconds: int | None = None,
    ) -> None:
        """Store a JSON object, expiring after ``ttl_seconds`` when given."""
        async with redis_client() as client:
            await client.set(self._key(key), json.dumps(value), ex=ttl_seconds or None)

    async def get_json_and_delete(self, key: str) -> dict[str, Any] | None:
        """Read a JSON object and delete it in one step.

        ``GETDEL`` is atomic, so two concurrent readers never both get
        the value.

        Returns:
            The stored object, or None if absent or expired
        """
        async with redis_client() as client:
            data = await client.getdel(self._key(key))
        return json.loads(data) if data else None
