"""
Factory functions for failover clients and resolvers
"""
import logging
from typing import Any, Optional, Union

import httpx

from .client import FailoverClient
from .config import DEFAULT_TIMEOUT_SECONDS, extract_hostname, is_ipv4_address, merge_config
from .endpoint import EndpointClient
from .resolver import Resolver
from .types import AuthHook, FailoverClientConfig, FailoverDnsConfig, RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


def create_resolver(
    config: Optional[FailoverDnsConfig] = None,
    **overrides: Any,
) -> Resolver:
    """
    Create a resolver, typically shared by every client of a process.

    Example:
        resolver = create_resolver(cache_ttl_seconds=120.0)
        pve = create_failover_client('https://pve.lan:8006/api2/json', resolver=resolver)
        pbs = create_failover_client('https://pbs.lan:8007/api2/json', resolver=resolver)
    """
    return Resolver(config=merge_config(config, **overrides))


def create_failover_client(
    base_url: str,
    *,
    trust_all_certificates: bool = False,
    headers: Optional[dict[str, str]] = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    auth_hook: Optional[AuthHook] = None,
    resolver: Optional[Resolver] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FailoverClient:
    """Create a FailoverClient from a base URL"""
    config = FailoverClientConfig.from_base_url(
        base_url,
        headers={**DEFAULT_HEADERS, **(headers or {})},
        trust_all_certificates=trust_all_certificates,
        timeout_seconds=timeout_seconds,
    )
    return FailoverClient(config, resolver=resolver, auth_hook=auth_hook, transport=transport)


def should_use_failover(base_url: str, use_resilient_dns: bool = False) -> bool:
    """
    Whether an endpoint should get a failover client.

    Enabled explicitly, or implicitly for '.lan' hosts; never for IPv4 literals.
    """
    hostname = extract_hostname(base_url)
    if not hostname or is_ipv4_address(hostname):
        return False
    return use_resilient_dns or ".lan" in hostname


def create_endpoint_client(
    base_url: str,
    *,
    use_resilient_dns: bool = False,
    trust_all_certificates: bool = False,
    headers: Optional[dict[str, str]] = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    auth_hook: Optional[AuthHook] = None,
    retry_config: Optional[RetryConfig] = None,
    resolver: Optional[Resolver] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Union[FailoverClient, EndpointClient]:
    """
    Create the client for a monitoring endpoint.

    Returns a FailoverClient when should_use_failover() says so. Otherwise
    returns an EndpointClient with the same base URL, TLS policy, timeout,
    headers and auth hook, which retries network errors and retryable
    statuses per retry_config. Both expose request/get/post/put/delete/patch.
    """
    if should_use_failover(base_url, use_resilient_dns):
        logger.info(f"factory: creating resilient client for hostname: {extract_hostname(base_url)}")
        return create_failover_client(
            base_url,
            trust_all_certificates=trust_all_certificates,
            headers=headers,
            timeout_seconds=timeout_seconds,
            auth_hook=auth_hook,
            resolver=resolver,
            transport=transport,
        )

    client_kwargs: dict[str, Any] = {
        "base_url": base_url,
        "headers": {**DEFAULT_HEADERS, **(headers or {})},
        "timeout": httpx.Timeout(timeout_seconds),
        "verify": not trust_all_certificates,
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    logger.debug(f"factory: creating standard client for {base_url}")
    return EndpointClient(
        auth_hook=auth_hook,
        retry_config=retry_config,
        endpoint_name=extract_hostname(base_url),
        **client_kwargs,
    )
