# shipengine_rates/utils/async_cache.py
import asyncio
import time
from typing import Any, Dict, Optional, Tuple


class AsyncCache:
    """In-process async key-value store with optional expiration.

    Implements the same get/set/delete interface as the database backed
    store, so it can stand in for it in a single process or in tests.
    """

    def __init__(self):
        self._cache: Dict[str, Tuple[Any, Optional[float]]] = {}  # key -> (value, expires_at)
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[Any]:
        """Get cached value if valid"""
        async with self._lock:
            if key in self._cache:
                value, expires_at = self._cache[key]
                if expires_at is None or time.time() < expires_at:
                    return value
                del self._cache[key]
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Cache value, ``ttl`` in seconds or ``None`` to keep it until deleted"""
        async with self._lock:
            expires_at = time.time() + ttl if ttl else None
            self._cache[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count
