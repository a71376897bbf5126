"""
Redis read-through cache for remote API responses

If redis is not reachable when the cache is created it is disabled:
reads miss and writes are skipped, so the explorer keeps working
without it.
"""

import hashlib
import json
import logging

import redis

import config

logger = logging.getLogger(__name__)

KEY_PREFIX = 'blockchain_explorer'


def get_cache_key(api_type, identifier):
    """Generate a cache key for the given API type and identifier"""
    return f"{KEY_PREFIX}:{api_type}:{hashlib.md5(str(identifier).encode()).hexdigest()}"


class ResponseCache:

    def __init__(self, client=None, host=None, port=None, db=None, ttl=None):
        self.ttl = ttl if ttl is not None else config.CACHE_TTL
        self.available = False
        self.client = None

        try:
            if client is None:
                client = redis.Redis(
                    host=host or config.REDIS_HOST,
                    port=port or config.REDIS_PORT,
                    db=db if db is not None else config.REDIS_DB,
                    decode_responses=True,
                )
            client.ping()  # Test connection
            self.client = client
            self.available = True
            logger.info("✅ Redis connection established")
        except redis.exceptions.RedisError as e:
            logger.warning(f"⚠️ Redis not available: {e}. Caching will be disabled")

    def get(self, cache_key):
        """Retrieve data from Redis cache"""
        if not self.available:
            return None

        try:
            cached_data = self.client.get(cache_key)
            if cached_data:
                return json.loads(cached_data)
        except (redis.exceptions.RedisError, ValueError) as e:
            logger.error(f"Cache read error: {e}")
        return None

    def set(self, cache_key, data, ttl=None):
        """Store data in Redis cache with TTL"""
        if not self.available:
            return False

        try:
            self.client.setex(cache_key, ttl or self.ttl, json.dumps(data))
            return True
        except (redis.exceptions.RedisError, TypeError) as e:
            logger.error(f"Cache write error: {e}")
            return False

    def stats(self):
        """Get cache statistics"""
        if not self.available:
            return {"status": "disabled", "reason": "Redis not available"}

        try:
            info = self.client.info()
            hits = info.get('keyspace_hits', 0)
            misses = info.get('keyspace_misses', 0)
            return {
                "status": "enabled",
                "keys": self.client.dbsize(),
                "memory_usage": info.get('used_memory_human', 'N/A'),
                "hit_rate": hits / max(hits + misses, 1)
            }
        except redis.exceptions.RedisError as e:
            return {"status": "error", "reason": str(e)}

    def clear(self):
        """Delete every key with our prefix, returns the number removed"""
        keys = self.client.keys(f"{KEY_PREFIX}:*")
        if keys:
            self.client.delete(*keys)
        return len(keys)
