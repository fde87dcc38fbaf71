"""
Caching system
In-process TTL cache for read-mostly lookups (category tree, filter options)
"""

import time
import threading
from flask import current_app


class CacheManager:
    """Centralized cache management"""

    def __init__(self):
        self.memory_cache = {}
        self.cache_locks = {}
        self.default_ttl = 300  # 5 minutes
        self._lock = threading.Lock()

    def _get_cache_key(self, key, prefix="app"):
        """Generate a consistent cache key"""
        return f"{prefix}:{key}"

    def get(self, key, default=None):
        """Get value from cache"""
        cache_key = self._get_cache_key(key)

        item = self.memory_cache.get(cache_key)
        if item is not None:
            if time.time() < item['expires_at']:
                return item['value']
            # Expired, remove it
            self.memory_cache.pop(cache_key, None)

        return default

    def set(self, key, value, ttl=None):
        """Set value in cache"""
        cache_key = self._get_cache_key(key)
        ttl = ttl or self.default_ttl

        self.memory_cache[cache_key] = {
            'value': value,
            'expires_at': time.time() + ttl,
            'created_at': time.time()
        }

        return True

    def clear(self, pattern=None):
        """Clear cache entries"""
        if pattern:
            # Clear entries matching pattern
            keys_to_delete = [k for k in list(self.memory_cache.keys()) if pattern in k]
            for key in keys_to_delete:
                self.memory_cache.pop(key, None)
        else:
            self.memory_cache.clear()
        return True

    def get_or_set(self, key, func, ttl=None, *args, **kwargs):
        """Get from cache or set using function"""
        value = self.get(key)
        if value is not None:
            return value

        # Use lock to prevent multiple threads from executing the same function
        cache_key = self._get_cache_key(key)
        with self._lock:
            lock = self.cache_locks.setdefault(cache_key, threading.Lock())

        with lock:
            # Check again after acquiring lock
            value = self.get(key)
            if value is not None:
                return value

            try:
                value = func(*args, **kwargs)
            except Exception as e:
                current_app.logger.error(f"Cache function execution failed: {str(e)}")
                raise
            self.set(key, value, ttl)
            return value

    def invalidate_pattern(self, pattern):
        """Invalidate all cache entries matching pattern"""
        return self.clear(pattern)


# Global cache manager instance
cache_manager = CacheManager()


def cache_ttl():
    return current_app.config.get('CATEGORY_CACHE_TTL', cache_manager.default_ttl)


def invalidate_category_cache():
    cache_manager.invalidate_pattern("categories:")


def invalidate_filter_cache():
    cache_manager.invalidate_pattern("filters:")
