"""
An in-memory cache for the read-mostly listings, e.g. the pricing catalogues.

The cache has no capacity bounds: the entries are only replaced by the same key
or expire. The key space is expected to be small (a handful of catalogues).
"""
import asyncio
import copy
import urllib.parse
from typing import Any, Dict, Optional, Tuple

from aiolinode._cogs.structs import pages


def make_cache_key(url: str, options: Optional[pages.ListOptions]) -> str:
    """
    Build a cache key from the URL and the options that affect the result.

    The output fields of the options (``pages``, ``results``) are ignored.
    """
    if options is None:
        return url
    params: Dict[str, str] = dict(options.to_params())
    if options.page_defined:
        params['page'] = str(options.page)
    if options.filter:
        params['filter'] = str(options.filter)
    if not params:
        return url
    return f"{url}?{urllib.parse.urlencode(sorted(params.items()))}"


class ResponseCache:
    """
    A key-value storage with the expiration of values by time.

    The time source is the event loop's monotonic clock. Unlike `time.time`,
    it is not affected by the system clock adjustments, and can be faked in tests.

    The values are copied (deeply) when stored and when retrieved,
    so that the callers cannot modify the cached values by modifying the results.

    Besides the storage lock, there is a lock per key for the callers that fill
    the cache: the concurrent misses of the same key wait for the first one.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = asyncio.Lock()
        self._key_locks: Dict[str, asyncio.Lock] = {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {len(self._entries)} entries>'

    def __len__(self) -> int:
        return len(self._entries)

    def key_lock(self, key: str) -> asyncio.Lock:
        """ A lock to hold while checking and filling one key. """
        return self._key_locks.setdefault(key, asyncio.Lock())

    async def get(self, key: str) -> Optional[Any]:
        """ Get a non-expired value by the key, or ``None`` if absent or expired. """
        now = asyncio.get_running_loop().time()
        async with self._lock:
            try:
                value, expires_at = self._entries[key]
            except KeyError:
                return None
            if expires_at <= now:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    async def put(self, key: str, value: Any, *, expiry: float) -> None:
        """ Store the value for ``expiry`` seconds from now. """
        now = asyncio.get_running_loop().time()
        async with self._lock:
            self._entries[key] = (copy.deepcopy(value), now + expiry)

    async def invalidate(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
