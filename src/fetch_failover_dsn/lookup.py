"""
Default address lookups: per-family DNS queries and the system resolver.
"""
import asyncio
import socket
from typing import Optional

import dns.asyncresolver

from .config import unique_addresses


async def resolve_family(
    hostname: str,
    record_type: str,
    lifetime: Optional[float] = 5.0,
) -> list[str]:
    """
    Query DNS for one record type ('A' or 'AAAA').

    Raises dns.exception.DNSException on NXDOMAIN, no answer or timeout.

    Example:
        await resolve_family('pve.lan', 'A')  # ['10.0.0.1', '10.0.0.2']
    """
    if record_type not in ("A", "AAAA"):
        raise ValueError(f"Unsupported record type: {record_type}")
    answer = await dns.asyncresolver.resolve(hostname, record_type, lifetime=lifetime)
    return unique_addresses(rdata.address for rdata in answer)


async def system_lookup(hostname: str) -> list[str]:
    """
    Resolve through the operating system resolver (hosts file, mDNS, ...).

    Raises socket.gaierror when the name cannot be resolved.
    """
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return unique_addresses(sockaddr[0] for _family, _type, _proto, _canon, sockaddr in infos)
