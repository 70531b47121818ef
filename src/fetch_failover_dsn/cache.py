"""
In-memory hostname resolution cache
"""
import time
from typing import Optional

from .config import DEFAULT_CACHE_TTL_SECONDS, is_fresh
from .types import CacheEntry, Clock


class DnsCache:
    """
    Hostname -> addresses cache with a freshness window.

    Entries stay usable as a stale fallback after they stop being fresh and
    are only replaced by a newer resolution (last write wins) or removed
    explicitly.

    Example:
        cache = DnsCache(ttl_seconds=60.0)
        cache.set('pve.lan', ['10.0.0.1', '10.0.0.2'])
        entry = cache.get_fresh('pve.lan')
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, hostname: str) -> Optional[CacheEntry]:
        """Get an entry regardless of age"""
        return self._entries.get(hostname)

    def get_fresh(self, hostname: str) -> Optional[CacheEntry]:
        """Get an entry only while it is fresh"""
        entry = self._entries.get(hostname)
        if entry is None or not self.is_fresh(entry):
            return None
        entry.hit_count += 1
        return entry

    def get_stale(self, hostname: str) -> Optional[CacheEntry]:
        """Get an entry for degraded use, whatever its age"""
        entry = self._entries.get(hostname)
        if entry is not None and entry.addresses:
            entry.hit_count += 1
            return entry
        return None

    def is_fresh(self, entry: CacheEntry) -> bool:
        return is_fresh(entry.resolved_at, self._ttl_seconds, self._clock())

    def set(self, hostname: str, addresses: list[str]) -> CacheEntry:
        """Store a resolution with a fresh timestamp, replacing any older one"""
        if not addresses:
            raise ValueError(f"Refusing to cache an empty resolution for {hostname}")
        entry = CacheEntry(
            hostname=hostname,
            addresses=list(addresses),
            resolved_at=self._clock(),
        )
        self._entries[hostname] = entry
        return entry

    def delete(self, hostname: str) -> bool:
        return self._entries.pop(hostname, None) is not None

    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, hostname: str) -> bool:
        return hostname in self._entries
