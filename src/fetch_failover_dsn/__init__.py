"""
DNS-aware HTTP client with address failover, resolution caching and quarantine.
"""
from .types import (
    CacheEntry,
    QuarantineEntry,
    ResolutionResult,
    ResolutionSource,
    FailoverDnsConfig,
    FailoverClientConfig,
    RetryConfig,
    FailoverDnsStats,
    FailoverDnsEvent,
    FailoverDnsEventListener,
    FamilyLookup,
    SystemLookup,
    AuthHook,
)
from .errors import (
    FailoverDnsError,
    ResolutionFailed,
    NoAddressesAvailable,
    AllAddressesFailed,
)
from .config import (
    DEFAULT_FAILOVER_DNS_CONFIG,
    merge_config,
    extract_hostname,
    is_ip_address,
    is_ipv4_address,
    is_connection_class_error,
    prefer_address,
)
from .health import AddressHealthTracker
from .cache import DnsCache
from .lookup import resolve_family, system_lookup
from .resolver import Resolver
from .client import FailoverClient
from .endpoint import EndpointClient
from .auth import apply_auth_hook, create_pve_auth_hook, create_pbs_auth_hook
from .factory import (
    create_resolver,
    create_failover_client,
    create_endpoint_client,
    should_use_failover,
)


__all__ = [
    # Types
    "CacheEntry",
    "QuarantineEntry",
    "ResolutionResult",
    "ResolutionSource",
    "FailoverDnsConfig",
    "FailoverClientConfig",
    "RetryConfig",
    "FailoverDnsStats",
    "FailoverDnsEvent",
    "FailoverDnsEventListener",
    "FamilyLookup",
    "SystemLookup",
    "AuthHook",
    # Errors
    "FailoverDnsError",
    "ResolutionFailed",
    "NoAddressesAvailable",
    "AllAddressesFailed",
    # Config
    "DEFAULT_FAILOVER_DNS_CONFIG",
    "merge_config",
    "extract_hostname",
    "is_ip_address",
    "is_ipv4_address",
    "is_connection_class_error",
    "prefer_address",
    # Components
    "AddressHealthTracker",
    "DnsCache",
    "resolve_family",
    "system_lookup",
    "Resolver",
    "FailoverClient",
    "EndpointClient",
    # Auth
    "apply_auth_hook",
    "create_pve_auth_hook",
    "create_pbs_auth_hook",
    # Factory
    "create_resolver",
    "create_failover_client",
    "create_endpoint_client",
    "should_use_failover",
]


__version__ = "1.0.0"
