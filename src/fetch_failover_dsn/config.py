"""
Configuration utilities for fetch_failover_dsn
"""
import ipaddress
import random
import ssl
from typing import Iterable, Optional
from urllib.parse import urlparse

import httpx

from .types import FailoverDnsConfig, RetryConfig


DEFAULT_CACHE_TTL_SECONDS = 60.0
DEFAULT_QUARANTINE_SECONDS = 30.0
DEFAULT_TIMEOUT_SECONDS = 30.0

DEFAULT_FAILOVER_DNS_CONFIG = FailoverDnsConfig(
    cache_ttl_seconds=DEFAULT_CACHE_TTL_SECONDS,
    quarantine_seconds=DEFAULT_QUARANTINE_SECONDS,
)


def merge_config(config: Optional[FailoverDnsConfig] = None, **overrides) -> FailoverDnsConfig:
    """Merge user config and keyword overrides with defaults"""
    base = config or DEFAULT_FAILOVER_DNS_CONFIG
    values = {
        "cache_ttl_seconds": base.cache_ttl_seconds,
        "quarantine_seconds": base.quarantine_seconds,
        "max_quarantine_entries": base.max_quarantine_entries,
        "lookup_timeout_seconds": base.lookup_timeout_seconds,
        "enable_ipv6": base.enable_ipv6,
        "enable_system_fallback": base.enable_system_fallback,
        "serve_stale_on_failure": base.serve_stale_on_failure,
    }
    for key, value in overrides.items():
        if key not in values:
            raise TypeError(f"Unknown FailoverDnsConfig option: {key}")
        if value is not None:
            values[key] = value

    merged = FailoverDnsConfig(**values)
    if merged.cache_ttl_seconds < 0 or merged.quarantine_seconds < 0:
        raise ValueError("cache_ttl_seconds and quarantine_seconds must not be negative")
    if merged.max_quarantine_entries < 1:
        raise ValueError("max_quarantine_entries must be at least 1")
    return merged


def is_fresh(resolved_at: float, ttl_seconds: float, now: float) -> bool:
    """Whether a resolution taken at resolved_at is still fresh"""
    return now - resolved_at < ttl_seconds


def is_quarantined(failed_at: float, quarantine_seconds: float, now: float) -> bool:
    """Whether a failure observed at failed_at still quarantines its address"""
    return now - failed_at < quarantine_seconds


def extract_hostname(value: str) -> str:
    """
    Extract the hostname from a URL or a host:port string.

    Never raises: input that cannot be parsed is returned unchanged.

    Example:
        extract_hostname('https://proxmox.lan:8006')  # 'proxmox.lan'
        extract_hostname('server.domain:8080')        # 'server.domain'
        extract_hostname('simple-hostname')           # 'simple-hostname'
    """
    try:
        if "://" in value:
            hostname = urlparse(value).hostname
            return hostname if hostname else value
        return value.split(":")[0]
    except Exception:
        return value


def is_ip_address(value: str) -> bool:
    """Whether value is an IPv4 or IPv6 literal"""
    try:
        ipaddress.ip_address(value.strip("[]"))
        return True
    except ValueError:
        return False


def is_ipv4_address(value: str) -> bool:
    """Whether value is an IPv4 literal"""
    try:
        ipaddress.IPv4Address(value)
        return True
    except ValueError:
        return False


def _caused_by_tls(error: BaseException) -> bool:
    """Walk the exception chain looking for an SSL error"""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def is_connection_class_error(error: BaseException) -> bool:
    """
    Whether an attempt error means the address itself is unreachable.

    Connection refused, host unreachable and connect timeouts qualify and
    quarantine the address. TLS handshake failures surface as ConnectError
    too but do not qualify, nor do read/write/protocol errors.
    """
    if isinstance(error, httpx.ConnectTimeout):
        return True
    if isinstance(error, httpx.ConnectError):
        return not _caused_by_tls(error)
    return False


def unique_addresses(addresses: Iterable[str]) -> list[str]:
    """Drop duplicate addresses, keeping first occurrences in order"""
    seen: set[str] = set()
    result: list[str] = []
    for address in addresses:
        if address not in seen:
            seen.add(address)
            result.append(address)
    return result


def prefer_address(addresses: list[str], preferred: Optional[str]) -> list[str]:
    """Move preferred to the front when present; never adds or drops addresses"""
    if not preferred or preferred not in addresses:
        return list(addresses)
    return [preferred] + [a for a in addresses if a != preferred]


def calculate_backoff_delay(retry: int, config: RetryConfig) -> float:
    """
    Exponential backoff delay before retry number `retry` (1-indexed).

    delay = base * 2^(retry - 1), plus up to jitter_factor of random extra,
    capped at max_delay_seconds.
    """
    delay = config.base_delay_seconds * (2 ** (retry - 1))
    delay += random.random() * config.jitter_factor * delay
    return min(delay, config.max_delay_seconds)


def is_retryable_error(error: BaseException) -> bool:
    """
    Whether a transport error is worth retrying on the same endpoint.

    Network failures (connect errors and timeouts, read/write and protocol
    errors) qualify. Read, write and pool timeouts do not.
    """
    if isinstance(error, httpx.ConnectTimeout):
        return True
    if isinstance(error, httpx.TimeoutException):
        return False
    return isinstance(error, (httpx.NetworkError, httpx.ProtocolError))


def is_retryable_status(status: int, config: RetryConfig) -> bool:
    """Whether a response status is retried"""
    return status in config.retry_on_status
