"""
Type definitions for fetch_failover_dsn
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Optional, Union
from urllib.parse import urlparse

import httpx


@dataclass
class CacheEntry:
    """A cached hostname resolution"""

    hostname: str
    """The hostname that was resolved"""

    addresses: list[str]
    """Resolved addresses, in resolution order"""

    resolved_at: float
    """Clock reading taken when the addresses were resolved"""

    hit_count: int = 0
    """Number of times this entry has been served from cache"""


@dataclass
class QuarantineEntry:
    """A failure record for a single address"""

    address: str
    """The literal address that failed"""

    failed_at: float
    """Clock reading taken when the failure was observed"""


ResolutionSource = Literal[
    "literal",
    "fresh-cache",
    "dual-family",
    "system",
    "stale-cache",
]


@dataclass
class ResolutionResult:
    """Result of a resolution, before quarantine filtering"""

    hostname: str
    """The hostname that was resolved"""

    addresses: list[str]
    """The resolved addresses"""

    source: ResolutionSource
    """Which resolution strategy produced the addresses"""

    resolution_time_seconds: float = 0.0
    """Time spent resolving (seconds)"""

    @property
    def from_cache(self) -> bool:
        """Whether the addresses were served from the cache"""
        return self.source in ("fresh-cache", "stale-cache")

    @property
    def stale(self) -> bool:
        """Whether the addresses came from an expired cache entry"""
        return self.source == "stale-cache"


@dataclass
class FailoverDnsConfig:
    """Configuration for resolution, caching and quarantine"""

    cache_ttl_seconds: float = 60.0
    """How long a resolution stays fresh (seconds). Default: 60.0"""

    quarantine_seconds: float = 30.0
    """How long a failed address is skipped (seconds). Default: 30.0"""

    max_quarantine_entries: int = 1024
    """Maximum number of tracked failure records. Default: 1024"""

    lookup_timeout_seconds: float = 5.0
    """Lifetime of each A/AAAA lookup (seconds). Default: 5.0"""

    enable_ipv6: bool = True
    """Whether to query AAAA records after A records. Default: True"""

    enable_system_fallback: bool = True
    """Whether to fall back to the system resolver. Default: True"""

    serve_stale_on_failure: bool = True
    """Whether to serve an expired cache entry when resolution fails. Default: True"""


@dataclass
class FailoverClientConfig:
    """Base request configuration for a failover client"""

    hostname: str
    """Hostname of the target (used for resolution, Host header and TLS SNI)"""

    scheme: str = "https"
    """URL scheme. Default: 'https'"""

    port: Optional[int] = None
    """Port number. Default: scheme default"""

    base_path: str = ""
    """Path prefix prepended to every request path, e.g. '/api2/json'"""

    headers: dict[str, str] = field(default_factory=dict)
    """Default headers sent with every request"""

    trust_all_certificates: bool = False
    """Skip TLS certificate verification (self-signed targets). Default: False"""

    timeout_seconds: float = 30.0
    """Per-attempt timeout (seconds). Default: 30.0"""

    @classmethod
    def from_base_url(cls, base_url: str, **kwargs: Any) -> "FailoverClientConfig":
        """
        Build a config from a base URL such as 'https://pve.lan:8006/api2/json'.

        Keyword arguments override the remaining fields.
        """
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError(f"Invalid base URL: {base_url!r}")
        return cls(
            hostname=parsed.hostname,
            scheme=parsed.scheme,
            port=parsed.port,
            base_path=parsed.path.rstrip("/"),
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        """Base URL addressed by hostname"""
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        netloc = f"{host}:{self.port}" if self.port else host
        return f"{self.scheme}://{netloc}{self.base_path}"


@dataclass
class RetryConfig:
    """Retry policy for plain (non-failover) endpoint clients"""

    max_retries: int = 3
    """Maximum number of retries after the first attempt. Default: 3"""

    base_delay_seconds: float = 0.1
    """Delay before the first retry, doubled for each further retry. Default: 0.1"""

    max_delay_seconds: float = 30.0
    """Upper bound for a single backoff delay. Default: 30.0"""

    jitter_factor: float = 0.2
    """Random extra delay as a fraction of the computed delay (0-1). Default: 0.2"""

    retry_on_status: tuple[int, ...] = (429,) + tuple(range(500, 600))
    """Response statuses that are retried. Default: 429 and every 5xx (Proxmox 596 included)"""


@dataclass
class FailoverDnsStats:
    """Statistics from a resolver"""

    cached_hostnames: int
    """Number of hostnames in the cache"""

    quarantined_addresses: int
    """Number of failure records currently held (expired ones included)"""

    cache_hits: int
    """Resolutions served from a fresh cache entry"""

    cache_misses: int
    """Resolutions that needed a lookup"""

    stale_hits: int
    """Resolutions served from an expired entry after lookups failed"""

    lookups: int
    """Network lookups performed (A, AAAA and system lookups)"""

    failures: int
    """Resolutions that raised ResolutionFailed"""

    @property
    def hit_ratio(self) -> float:
        """Cache hit ratio (0-1)"""
        total = self.cache_hits + self.cache_misses
        return self.cache_hits / total if total > 0 else 0.0


EventType = Literal[
    "cache:hit",
    "cache:miss",
    "cache:stale",
    "resolve:success",
    "resolve:error",
    "resolve:fail-open",
    "attempt:skip",
    "attempt:start",
    "attempt:success",
    "attempt:failure",
    "address:quarantined",
    "request:failed",
]


@dataclass
class FailoverDnsEvent:
    """Event emitted by the resolver and the failover client"""

    type: EventType
    """Event type"""

    data: dict[str, Any] = field(default_factory=dict)
    """Event-specific data"""


FailoverDnsEventListener = Callable[[FailoverDnsEvent], None]

# Lookup of one record type ('A' or 'AAAA') for a hostname
FamilyLookup = Callable[[str, str], Awaitable[list[str]]]

# Combined system resolver lookup for a hostname
SystemLookup = Callable[[str], Awaitable[list[str]]]

# Per-attempt hook: may mutate the request in place, or return a replacement
AuthHook = Callable[
    [httpx.Request],
    Union[Optional[httpx.Request], Awaitable[Optional[httpx.Request]]],
]

Clock = Callable[[], float]
