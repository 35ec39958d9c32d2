from typing import Any, Dict, Optional
import hashlib
import json
import logging

logger = logging.getLogger(__name__)


def _h(params: Dict[str, Any]) -> str:
    """Short stable hash of the request parameters."""
    s = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(s.encode()).hexdigest()


class SearchCacheRepo:
    """
    Adapter for caching serialized search/suggestion responses in Redis.
    Cache failures never break a read path: they are logged and treated as misses.
    """
    def __init__(self, redis, key_prefix: str):
        """
        Args:
            redis: Redis client instance (None disables the cache)
            key_prefix: namespace, e.g. 'search' or 'suggest'
        """
        self.cache = redis
        self.prefix = key_prefix

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    def key(self, version: str, params: Dict[str, Any]) -> str:
        return f"{version}:{self.prefix}:{_h(params)}"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        if not self.enabled:
            return None
        try:
            raw = await self.cache.get(key)
        except Exception as e:
            logger.warning("%s redis.get error key=%s err=%s", self.prefix, key, e)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("%s cache decode error key=%s err=%s", self.prefix, key, e)
            return None

    async def set(self, key: str, payload: Dict[str, Any], ttl: int) -> None:
        if not self.enabled:
            return
        try:
            await self.cache.set(key, json.dumps(payload, default=str), ex=ttl)
            logger.debug("%s cache_set key=%s ttl=%ds", self.prefix, key, ttl)
        except Exception as e:
            logger.warning("%s redis.set error key=%s err=%s", self.prefix, key, e)
