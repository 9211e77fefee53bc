"""
Redis Repository Base Class

Provides JSON document storage, sorted-set indexes and transactional
pipelines for Redis-backed repositories.
"""

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import redis
from redis.exceptions import RedisError

from dropzone.domain.errors import StorageUnavailableError


class RedisRepository:
    """
    Base Redis repository with JSON helpers and sorted-set indexes.

    Every Redis failure (connection refused, timeout, server error) is raised
    as StorageUnavailableError so callers never mistake an outage for an
    empty result.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            raise StorageUnavailableError(f"Redis {operation} failed: {e}", e) from e

    @staticmethod
    def _decode(value) -> str:
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def set_json(self, key: str, data: Dict[str, Any]) -> bool:
        """
        Store a dictionary as JSON.

        Args:
            key: Redis key
            data: Dictionary to store as JSON

        Returns:
            True if successful
        """
        with self._guard(f"SET {key}"):
            return bool(self.redis.set(self._make_key(key), json.dumps(data)))

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found, None if the key doesn't exist
        """
        with self._guard(f"GET {key}"):
            data = self.redis.get(self._make_key(key))

        if data is None:
            return None
        return json.loads(self._decode(data))

    def get_many(self, keys: List[str]) -> List[Optional[str]]:
        """
        Get several raw string values in one round trip.

        Returns:
            List aligned with ``keys``; missing keys yield None
        """
        if not keys:
            return []

        with self._guard("MGET"):
            values = self.redis.mget([self._make_key(key) for key in keys])

        return [self._decode(value) if value is not None else None for value in values]

    def delete(self, key: str) -> bool:
        """
        Delete a key from Redis.

        Returns:
            True if the key was deleted, False if it didn't exist
        """
        with self._guard(f"DEL {key}"):
            return self.redis.delete(self._make_key(key)) > 0

    def exists(self, key: str) -> bool:
        """Check if a key exists in Redis."""
        with self._guard(f"EXISTS {key}"):
            return self.redis.exists(self._make_key(key)) > 0

    def zrange_members(self, key: str, newest_first: bool = False) -> List[str]:
        """
        All members of a sorted set ordered by score.

        Args:
            key: Sorted set key
            newest_first: Order by descending score
        """
        with self._guard(f"ZRANGE {key}"):
            if newest_first:
                members = self.redis.zrevrange(self._make_key(key), 0, -1)
            else:
                members = self.redis.zrange(self._make_key(key), 0, -1)
        return [self._decode(member) for member in members]

    def zrange_by_max_score(self, key: str, max_score: float) -> List[str]:
        """Members of a sorted set with score <= max_score, lowest first."""
        with self._guard(f"ZRANGEBYSCORE {key}"):
            members = self.redis.zrangebyscore(
                self._make_key(key), "-inf", max_score
            )
        return [self._decode(member) for member in members]

    def zremove(self, key: str, *members: str) -> int:
        """Remove members from a sorted set."""
        if not members:
            return 0
        with self._guard(f"ZREM {key}"):
            return self.redis.zrem(self._make_key(key), *members)

    @contextmanager
    def transaction(self) -> Iterator[redis.client.Pipeline]:
        """
        MULTI/EXEC pipeline context manager.

        Commands queued on the yielded pipeline run atomically on
        ``execute()``. Redis errors raised inside the block surface as
        StorageUnavailableError.

        Example:
            with repo.transaction() as pipe:
                pipe.set(repo._make_key("a"), "1")
                pipe.zadd(repo._make_key("idx"), {"a": 1.0})
                results = pipe.execute()
        """
        pipeline = self.redis.pipeline(transaction=True)
        with self._guard("MULTI/EXEC"):
            try:
                yield pipeline
            finally:
                pipeline.reset()


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, password: Optional[str] = None,
                 socket_timeout: float = 5.0, decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
