import json
import redis
from typing import Any, Optional

from safetrip.core.config import settings
from safetrip.core.logging import get_logger

logger = get_logger(__name__)


def create_redis_client() -> redis.Redis:
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


class KeyValueStore:
    """
    Namespaced JSON key-value storage on Redis.

    Used only as an offline cache: a Redis outage is logged and reported as
    a miss (`get`) or a failed write (`set`), never raised.
    """

    def __init__(self, client: Optional[redis.Redis] = None, namespace: str = None):
        self.client = client or create_redis_client()
        self.namespace = namespace or settings.STORAGE_NAMESPACE

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Any:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Storage read failed: {e}", extra={"key": key})
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable storage value", extra={"key": key})
            return None

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        payload = json.dumps(value, default=str)
        try:
            if expire:
                self.client.setex(self._key(key), expire, payload)
            else:
                self.client.set(self._key(key), payload)
        except redis.RedisError as e:
            logger.warning(f"Storage write failed: {e}", extra={"key": key})
            return False
        return True

    def ping(self) -> bool:
        return bool(self.client.ping())
