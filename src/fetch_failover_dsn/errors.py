"""
Exceptions raised by fetch_failover_dsn
"""
from typing import Optional


class FailoverDnsError(Exception):
    """Base class for failover client errors."""
    pass


class ResolutionFailed(FailoverDnsError):
    """Raised when no addresses could be obtained and no stale entry exists."""

    def __init__(self, hostname: str, errors: Optional[list[str]] = None):
        self.hostname = hostname
        self.errors = errors or []
        detail = f": {'; '.join(self.errors)}" if self.errors else ""
        super().__init__(f"No IP addresses found for {hostname}{detail}")


class NoAddressesAvailable(FailoverDnsError):
    """Raised when resolution produced an empty candidate list."""

    def __init__(self, hostname: str):
        self.hostname = hostname
        super().__init__(f"No IP addresses available for {hostname}")


class AllAddressesFailed(FailoverDnsError):
    """Raised when every candidate address failed; wraps the last error."""

    def __init__(
        self,
        hostname: str,
        attempted: list[str],
        last_error: Optional[BaseException] = None,
    ):
        self.hostname = hostname
        self.attempted = list(attempted)
        self.last_error = last_error
        message = f"All {len(self.attempted)} IPs failed for {hostname}"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(message)
