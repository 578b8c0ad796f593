"""Key/value config store behind the ``/hooks`` passthrough.

Values are scoped per account.  ``MemoryConfigStore`` keeps them in the
process; ``RedisConfigStore`` shares them between gateway replicas.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as redis
import structlog

from function_gateway.config import Settings
from function_gateway.errors import ConfigStoreError

logger = structlog.get_logger()


class ConfigStore(ABC):
    """Abstract get/set interface used by the gateway."""

    @abstractmethod
    async def get(self, key: str, account_id: str) -> Any:
        """Return the stored value, or None if unset."""
        ...

    @abstractmethod
    async def set(self, key: str, account_id: str, value: Any) -> None:
        ...

    async def close(self) -> None:
        return None


class MemoryConfigStore(ConfigStore):
    """In-process store. Values are lost on restart."""

    def __init__(self) -> None:
        self._values: dict[tuple[str, str], Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str, account_id: str) -> Any:
        return self._values.get((account_id, key))

    async def set(self, key: str, account_id: str, value: Any) -> None:
        async with self._lock:
            self._values[(account_id, key)] = value


def _store_key(prefix: str, account_id: str, key: str) -> str:
    """Build a store key."""
    return f"{prefix}:{account_id}:{key}"


class RedisConfigStore(ConfigStore):
    """Redis-backed store. Values are JSON-encoded.

    Values are kept until overwritten unless ``ttl`` is set.
    """

    def __init__(self, redis_client, prefix: str = "gateway_configs", ttl: int | None = None):
        self._redis = redis_client
        self._prefix = prefix
        self._ttl = ttl or None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisConfigStore":
        client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
        return cls(client, prefix=settings.config_key_prefix, ttl=settings.config_ttl_seconds)

    async def get(self, key: str, account_id: str) -> Any:
        store_key = _store_key(self._prefix, account_id, key)
        try:
            raw = await self._redis.get(store_key)
        except Exception as e:
            logger.warning("config_get_error", key=store_key, error=str(e))
            raise ConfigStoreError() from e
        if raw is None:
            return None
        logger.debug("config_hit", key=store_key)
        return json.loads(raw)

    async def set(self, key: str, account_id: str, value: Any) -> None:
        store_key = _store_key(self._prefix, account_id, key)
        try:
            await self._redis.set(store_key, json.dumps(value), ex=self._ttl)
            logger.debug("config_set", key=store_key, ttl=self._ttl)
        except Exception as e:
            logger.warning("config_set_error", key=store_key, error=str(e))
            raise ConfigStoreError() from e

    async def close(self) -> None:
        await self._redis.close()


def create_store(settings: Settings) -> ConfigStore:
    """Pick the store implementation from settings."""
    if settings.redis_url:
        logger.info("config_store_redis", prefix=settings.config_key_prefix)
        return RedisConfigStore.from_settings(settings)
    logger.info("config_store_memory")
    return MemoryConfigStore()
