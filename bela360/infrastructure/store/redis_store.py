from __future__ import annotations

import logging

import redis

from bela360.application.exceptions import KeyValueStoreError
from bela360.application.ports.key_value_store import KeyValueStorePort

logger = logging.getLogger(__name__)


def build_redis_client(redis_url: str) -> redis.Redis:
    """Create a client from a redis:// or rediss:// URL. Connection is lazy."""
    if "@" in redis_url:
        scheme = redis_url.split(":", 1)[0]
        masked_url = f"{scheme}://****@{redis_url.split('@', 1)[1]}"
    else:
        masked_url = redis_url
    logger.info("Using Redis at %s", masked_url)

    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
    )


class RedisKeyValueStore(KeyValueStorePort):
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise KeyValueStoreError(f"Redis GET failed for {key}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.setex(key, ttl_seconds, value)
        except redis.RedisError as e:
            raise KeyValueStoreError(f"Redis SETEX failed for {key}") from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            raise KeyValueStoreError(f"Redis DEL failed for {key}") from e
