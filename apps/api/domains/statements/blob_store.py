"""Redis-backed transient blob store.

Statement bytes are staged under ``blob:<file_hash>`` with a TTL so that a
missed delete can never leak memory for long. Callers must still delete
explicitly once a blob has been consumed.
"""

import redis
import structlog

from apps.api.core.config import Settings
from apps.api.domains.statements.errors import BlobNotFoundError, BlobUnavailableError

logger = structlog.get_logger()


class RedisBlobStore:
    def __init__(self, client: redis.Redis, prefix: str = "blob:", ttl_seconds: int = 3600):
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisBlobStore":
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            socket_timeout=settings.REDIS_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_TIMEOUT_SECONDS,
        )
        return cls(client, prefix=settings.BLOB_KEY_PREFIX, ttl_seconds=settings.BLOB_TTL_SECONDS)

    def key_for(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> bytes:
        """Fetch a blob. Raises BlobNotFoundError if absent."""
        redis_key = self.key_for(key)
        try:
            content = self.client.get(redis_key)
        except redis.RedisError as e:
            raise BlobUnavailableError(f"Could not fetch {redis_key}: {e}") from e

        if content is None:
            raise BlobNotFoundError(redis_key)

        logger.debug("blob_fetched", key=redis_key, size=len(content))
        return content

    def put(self, key: str, data: bytes) -> None:
        redis_key = self.key_for(key)
        try:
            self.client.set(redis_key, data, ex=self.ttl_seconds)
        except redis.RedisError as e:
            raise BlobUnavailableError(f"Could not store {redis_key}: {e}") from e

    def delete(self, key: str) -> bool:
        """Delete a blob. Returns whether it existed."""
        redis_key = self.key_for(key)
        try:
            return bool(self.client.delete(redis_key))
        except redis.RedisError as e:
            raise BlobUnavailableError(f"Could not delete {redis_key}: {e}") from e

    def ping(self) -> bool:
        return bool(self.client.ping())
