"""Key/value storage interface and implementations.

Provides a unified interface for small client-scoped records with a
Redis-first approach and in-memory fallback.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel

from src.profile_sync.runtime.context import get_config

T = TypeVar("T", bound=BaseModel)


class KeyValueStorage(ABC):
    """Abstract interface for key/value storage backends."""

    @abstractmethod
    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store a record with TTL, replacing any previous value.

        Args:
            key: Record key
            value: Record data (Pydantic model)
            ttl_seconds: Time to live in seconds
        """

    @abstractmethod
    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve a record.

        Args:
            key: Record key
            model_class: Pydantic model class to deserialize to

        Returns:
            Record data or None if not found/expired
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a record; deleting a missing key is a no-op."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a non-expired record exists."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if storage backend is available."""


class InMemoryKeyValueStorage(KeyValueStorage):
    """In-memory storage with TTL support."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        self._data[key] = {
            "data": json.loads(value.model_dump_json()),
            "expires_at": time.time() + ttl_seconds,
        }

    async def get(self, key: str, model_class: type[T]) -> T | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        if time.time() > entry["expires_at"]:
            del self._data[key]
            return None

        return model_class.model_validate(entry["data"])

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False

        if time.time() > entry["expires_at"]:
            del self._data[key]
            return False

        return True

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True


class RedisKeyValueStorage(KeyValueStorage):
    """Redis-based storage with JSON serialization."""

    def __init__(self, redis_client):
        self._redis = redis_client
        self._available = True

    async def _call(self, command: str, *args: Any) -> Any:
        try:
            result = await getattr(self._redis, command)(*args)
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis {command} failed: {e}") from e
        self._available = True
        return result

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        await self._call("setex", key, ttl_seconds, value.model_dump_json())

    async def get(self, key: str, model_class: type[T]) -> T | None:
        data = await self._call("get", key)
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return model_class.model_validate_json(data)

    async def delete(self, key: str) -> None:
        await self._call("delete", key)

    async def exists(self, key: str) -> bool:
        return bool(await self._call("exists", key))

    def is_available(self) -> bool:
        return self._available

    async def ping(self) -> bool:
        """Test Redis connection health."""
        try:
            await self._redis.ping()
            self._available = True
            return True
        except Exception:
            self._available = False
            return False


_storage: KeyValueStorage | None = None


async def _detect_redis_availability() -> KeyValueStorage:
    """Attempt to create Redis storage, fall back to in-memory."""
    config = get_config()
    if not config.redis.enabled or not config.redis.url:
        logger.info("Key/value storage: Redis not configured, using in-memory storage")
        return InMemoryKeyValueStorage()

    try:
        import redis.asyncio as redis

        redis_client = redis.from_url(
            config.redis.connection_string,
            encoding="utf-8",
            decode_responses=config.redis.decode_responses,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        redis_storage = RedisKeyValueStorage(redis_client)
        if await redis_storage.ping():
            logger.info("Key/value storage: Redis connected")
            return redis_storage
        raise RuntimeError("Redis ping failed")

    except Exception as e:
        logger.warning(f"Redis unavailable ({e}), using in-memory key/value storage")
        return InMemoryKeyValueStorage()


async def get_kv_storage() -> KeyValueStorage:
    """Get the process-wide key/value storage instance."""
    global _storage

    if _storage is None:
        _storage = await _detect_redis_availability()

    return _storage


def _reset_storage() -> None:
    """Reset storage instance (for testing)."""
    global _storage
    _storage = None
