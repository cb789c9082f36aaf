import json
from typing import Any, List, Optional

import redis
import structlog
from fastapi import Request

logger = structlog.get_logger(__name__)

GROCERIES_LIST_KEY = "groceries_list"


class GroceryCache:
    """Caches the serialized grocery list in Redis.

    A cache outage only costs a database round trip, so Redis errors are
    logged and treated as a miss.
    """

    def __init__(self, client: Optional[redis.Redis], ttl: int = 600):
        self.client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, url: Optional[str], ttl: int = 600) -> "GroceryCache":
        if not url:
            return cls(None, ttl)
        return cls(redis.Redis.from_url(url, decode_responses=True), ttl)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get_list(self) -> Optional[List[Any]]:
        if not self.enabled:
            return None
        try:
            cached = self.client.get(GROCERIES_LIST_KEY)
        except redis.RedisError as exc:
            logger.warning("cache_read_failed", key=GROCERIES_LIST_KEY, error=str(exc))
            return None
        if not cached:
            return None
        try:
            return json.loads(cached)
        except ValueError as exc:
            logger.warning("cache_value_corrupt", key=GROCERIES_LIST_KEY, error=str(exc))
            return None

    def set_list(self, groceries: List[Any]) -> None:
        if not self.enabled:
            return
        try:
            self.client.set(GROCERIES_LIST_KEY, json.dumps(groceries), ex=self.ttl)
        except redis.RedisError as exc:
            logger.warning("cache_write_failed", key=GROCERIES_LIST_KEY, error=str(exc))

    def invalidate(self) -> None:
        if not self.enabled:
            return
        try:
            self.client.delete(GROCERIES_LIST_KEY)
        except redis.RedisError as exc:
            logger.warning("cache_invalidate_failed", key=GROCERIES_LIST_KEY, error=str(exc))


def get_cache(request: Request) -> GroceryCache:
    return request.app.state.cache
