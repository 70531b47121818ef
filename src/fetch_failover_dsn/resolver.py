"""
Resolver - orchestrates cached, dual-family and system resolution
"""
import logging
import time
from typing import Awaitable, Callable, Optional

from .cache import DnsCache
from .config import is_ip_address, merge_config, unique_addresses
from .errors import ResolutionFailed
from .events import EventEmitter
from .health import AddressHealthTracker
from .lookup import resolve_family, system_lookup as default_system_lookup
from .types import (
    Clock,
    FailoverDnsConfig,
    FailoverDnsStats,
    FamilyLookup,
    ResolutionResult,
    ResolutionSource,
    SystemLookup,
)

logger = logging.getLogger(__name__)

# A strategy returns addresses, or None/[] to defer to the next one.
# The errors list collects lookup failures for the final ResolutionFailed.
Strategy = Callable[[str, list[str]], Awaitable[Optional[list[str]]]]


class Resolver:
    """
    Hostname resolver with caching, stale fallback and quarantine filtering.

    Resolution runs an ordered list of strategies and stops at the first one
    that yields addresses:

        literal -> fresh-cache -> dual-family -> system -> stale-cache

    The cache and the health tracker are plain injected instances, so one
    resolver can be shared by every client of a process, or each endpoint
    can own its own.

    Example:
        resolver = Resolver()
        addresses = await resolver.resolve('pve.lan')
        resolver.health.mark_failed(addresses[0])
    """

    def __init__(
        self,
        cache: Optional[DnsCache] = None,
        health: Optional[AddressHealthTracker] = None,
        config: Optional[FailoverDnsConfig] = None,
        *,
        family_lookup: Optional[FamilyLookup] = None,
        system_lookup: Optional[SystemLookup] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = merge_config(config)
        self._clock = clock or time.monotonic
        self._cache = cache or DnsCache(self._config.cache_ttl_seconds, clock=self._clock)
        self._health = health or AddressHealthTracker(
            self._config.quarantine_seconds,
            self._config.max_quarantine_entries,
            clock=self._clock,
        )
        self._family_lookup = family_lookup or self._default_family_lookup
        self._system_lookup = system_lookup or default_system_lookup
        self._events = EventEmitter()

        self._strategies: list[tuple[ResolutionSource, Strategy]] = [
            ("literal", self._from_literal),
            ("fresh-cache", self._from_fresh_cache),
            ("dual-family", self._from_dual_family),
            ("system", self._from_system),
            ("stale-cache", self._from_stale_cache),
        ]

        # Statistics
        self._cache_hits = 0
        self._cache_misses = 0
        self._stale_hits = 0
        self._lookups = 0
        self._failures = 0

    @property
    def cache(self) -> DnsCache:
        return self._cache

    @property
    def health(self) -> AddressHealthTracker:
        return self._health

    @property
    def config(self) -> FailoverDnsConfig:
        return self._config

    @property
    def strategy_names(self) -> list[str]:
        """Strategy order, for diagnostics"""
        return [name for name, _ in self._strategies]

    async def lookup(self, hostname: str) -> ResolutionResult:
        """
        Resolve hostname without quarantine filtering.

        Raises:
            ResolutionFailed: no strategy produced an address
        """
        start = time.monotonic()
        errors: list[str] = []

        for source, strategy in self._strategies:
            addresses = await strategy(hostname, errors)
            if addresses:
                elapsed = time.monotonic() - start
                logger.debug(
                    f"Resolver.lookup: {hostname} resolved via {source} "
                    f"in {elapsed * 1000:.1f}ms"
                )
                return ResolutionResult(
                    hostname=hostname,
                    addresses=addresses,
                    source=source,
                    resolution_time_seconds=elapsed,
                )

        self._failures += 1
        error = ResolutionFailed(hostname, errors)
        logger.error(f"Resolver.lookup: failed to resolve {hostname}: {error}")
        self._events._emit("resolve:error", hostname=hostname, errors=list(errors))
        raise error

    async def resolve(self, hostname: str) -> list[str]:
        """
        Resolve hostname to candidate addresses, quarantined ones removed.

        Fails open: when every address is quarantined the full list is
        returned rather than nothing.

        Raises:
            ResolutionFailed: no addresses and no stale cache entry
        """
        result = await self.lookup(hostname)
        return self.filter_quarantined(hostname, result.addresses)

    def filter_quarantined(self, hostname: str, addresses: list[str]) -> list[str]:
        """Drop quarantined addresses unless that would leave none"""
        working = [address for address in addresses if not self._health.is_failed(address)]
        if working:
            return working

        if addresses:
            logger.warning(
                f"Resolver.filter_quarantined: all {len(addresses)} IPs for {hostname} "
                f"are marked as failed, using all anyway"
            )
            self._events._emit("resolve:fail-open", hostname=hostname, addresses=list(addresses))
        return list(addresses)

    async def can_resolve(self, hostname: str) -> bool:
        """Whether hostname currently resolves to at least one address"""
        try:
            addresses = await self.resolve(hostname)
        except ResolutionFailed:
            return False
        return len(addresses) > 0

    def invalidate(self, hostname: str) -> bool:
        """Forget the cached resolution for hostname"""
        return self._cache.delete(hostname)

    def clear(self) -> None:
        """Clear cached resolutions and failure records"""
        self._cache.clear()
        self._health.clear()

    def get_stats(self) -> FailoverDnsStats:
        return FailoverDnsStats(
            cached_hostnames=self._cache.size(),
            quarantined_addresses=self._health.size(),
            cache_hits=self._cache_hits,
            cache_misses=self._cache_misses,
            stale_hits=self._stale_hits,
            lookups=self._lookups,
            failures=self._failures,
        )

    def on(self, listener) -> Callable[[], None]:
        """Subscribe to resolution events"""
        return self._events.on(listener)

    def off(self, listener) -> None:
        """Unsubscribe from resolution events"""
        self._events.off(listener)

    # Strategies

    async def _from_literal(self, hostname: str, errors: list[str]) -> Optional[list[str]]:
        if is_ip_address(hostname):
            return [hostname.strip("[]")]
        return None

    async def _from_fresh_cache(self, hostname: str, errors: list[str]) -> Optional[list[str]]:
        entry = self._cache.get_fresh(hostname)
        if entry is None:
            self._cache_misses += 1
            self._events._emit("cache:miss", hostname=hostname)
            return None

        self._cache_hits += 1
        logger.debug(
            f"Resolver: using cached DNS resolution for {hostname}: "
            f"{len(entry.addresses)} addresses"
        )
        self._events._emit("cache:hit", hostname=hostname, addresses=list(entry.addresses))
        return list(entry.addresses)

    async def _from_dual_family(self, hostname: str, errors: list[str]) -> Optional[list[str]]:
        record_types = ["A", "AAAA"] if self._config.enable_ipv6 else ["A"]
        addresses: list[str] = []

        for record_type in record_types:
            self._lookups += 1
            try:
                addresses.extend(await self._family_lookup(hostname, record_type))
            except Exception as e:
                logger.debug(f"Resolver: {record_type} lookup failed for {hostname}: {e}")
                errors.append(f"{record_type}: {e}")

        addresses = unique_addresses(addresses)
        if addresses:
            self._store(hostname, addresses, "dual-family")
        return addresses

    async def _from_system(self, hostname: str, errors: list[str]) -> Optional[list[str]]:
        if not self._config.enable_system_fallback:
            return None

        logger.info(f"Resolver: DNS resolve failed for {hostname}, trying system lookup")
        self._lookups += 1
        try:
            addresses = unique_addresses(await self._system_lookup(hostname))
        except Exception as e:
            logger.debug(f"Resolver: system lookup failed for {hostname}: {e}")
            errors.append(f"system: {e}")
            return None

        if addresses:
            self._store(hostname, addresses, "system")
        return addresses

    async def _from_stale_cache(self, hostname: str, errors: list[str]) -> Optional[list[str]]:
        if not self._config.serve_stale_on_failure:
            return None

        entry = self._cache.get_stale(hostname)
        if entry is None:
            return None

        self._stale_hits += 1
        logger.warning(
            f"Resolver: using stale DNS cache for {hostname} due to resolution failure: "
            f"{', '.join(entry.addresses)}"
        )
        self._events._emit("cache:stale", hostname=hostname, addresses=list(entry.addresses))
        return list(entry.addresses)

    def _store(self, hostname: str, addresses: list[str], source: ResolutionSource) -> None:
        self._cache.set(hostname, addresses)
        logger.info(f"Resolver: resolved {hostname} to: {', '.join(addresses)} (via {source})")
        self._events._emit(
            "resolve:success",
            hostname=hostname,
            addresses=list(addresses),
            source=source,
        )

    async def _default_family_lookup(self, hostname: str, record_type: str) -> list[str]:
        return await resolve_family(
            hostname,
            record_type,
            lifetime=self._config.lookup_timeout_seconds,
        )
