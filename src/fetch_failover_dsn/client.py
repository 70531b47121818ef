"""
Failover HTTP client: one httpx client per resolved address, tried in turn.
"""
import logging
from typing import Any, Callable, Optional

import httpx

from .auth import apply_auth_hook
from .config import is_connection_class_error, prefer_address
from .errors import AllAddressesFailed, NoAddressesAvailable, ResolutionFailed
from .events import EventEmitter
from .resolver import Resolver
from .types import AuthHook, FailoverClientConfig, FailoverDnsEventListener

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


class FailoverClient:
    """
    Async HTTP client that fails over between the addresses of one hostname.

    Every request resolves the hostname (through the resolver's cache), puts
    the last address that answered first, and tries the candidates one after
    another. Any HTTP response counts as success, whatever its status. A
    connection-level failure quarantines the address; other transport errors
    just move on to the next candidate.

    Requests are sent to the address directly while the original hostname is
    kept as Host header and TLS server name, so certificates issued for the
    hostname still validate.

    Example:
        config = FailoverClientConfig.from_base_url('https://pve.lan:8006/api2/json')
        async with FailoverClient(config, resolver=shared_resolver) as client:
            response = await client.get('/nodes')
    """

    def __init__(
        self,
        config: FailoverClientConfig,
        resolver: Optional[Resolver] = None,
        auth_hook: Optional[AuthHook] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._resolver = resolver or Resolver()
        self._auth_hook = auth_hook
        self._transport = transport
        self._base_url = httpx.URL(config.base_url)
        self._host_header = self._build_host_header(config)
        self._clients: dict[str, httpx.AsyncClient] = {}
        self._last_good_address: Optional[str] = None
        self._events = EventEmitter()
        self._closed = False

    @staticmethod
    def _build_host_header(config: FailoverClientConfig) -> str:
        host = f"[{config.hostname}]" if ":" in config.hostname else config.hostname
        if config.port and config.port != _DEFAULT_PORTS.get(config.scheme):
            return f"{host}:{config.port}"
        return host

    @property
    def hostname(self) -> str:
        return self._config.hostname

    @property
    def config(self) -> FailoverClientConfig:
        return self._config

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    @property
    def last_good_address(self) -> Optional[str]:
        """The address that most recently returned a response"""
        return self._last_good_address

    @property
    def clients(self) -> dict[str, httpx.AsyncClient]:
        """Per-address clients created so far, keyed by address"""
        return dict(self._clients)

    def on(self, listener: FailoverDnsEventListener) -> Callable[[], None]:
        """Subscribe to attempt events"""
        return self._events.on(listener)

    def off(self, listener: FailoverDnsEventListener) -> None:
        """Unsubscribe from attempt events"""
        self._events.off(listener)

    def _create_client_for_address(self, address: str) -> httpx.AsyncClient:
        """Create an httpx client that targets address but speaks as hostname"""
        url_host = f"[{address}]" if ":" in address else address
        client_kwargs: dict[str, Any] = {
            "base_url": self._base_url.copy_with(host=url_host),
            "headers": {**self._config.headers, "Host": self._host_header},
            "timeout": httpx.Timeout(self._config.timeout_seconds),
            "verify": not self._config.trust_all_certificates,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        logger.debug(f"FailoverClient: creating client for {self.hostname} via IP {address}")
        return httpx.AsyncClient(**client_kwargs)

    def _get_client_for_address(self, address: str) -> httpx.AsyncClient:
        client = self._clients.get(address)
        if client is None:
            client = self._create_client_for_address(address)
            self._clients[address] = client
        return client

    async def _attempt(
        self,
        address: str,
        method: str,
        path: str,
        request_kwargs: dict[str, Any],
    ) -> httpx.Response:
        client = self._get_client_for_address(address)
        request = client.build_request(
            method,
            path,
            extensions={"sni_hostname": self.hostname},
            **request_kwargs,
        )
        request = await apply_auth_hook(self._auth_hook, request)

        logger.debug(f"FailoverClient: attempting {method} {path} to {self.hostname} via IP {address}")
        self._events._emit("attempt:start", hostname=self.hostname, address=address, method=method)
        return await client.send(request)

    async def request(self, method: str, path: str = "", **kwargs: Any) -> httpx.Response:
        """
        Send a request, failing over between resolved addresses.

        Args:
            method: HTTP method
            path: Path relative to the configured base path
            **kwargs: Passed to httpx.AsyncClient.build_request
                (params, headers, json, content, data, cookies, timeout)

        Returns:
            The first HTTP response received, unmodified

        Raises:
            ResolutionFailed: the hostname could not be resolved
            NoAddressesAvailable: resolution returned no addresses
            AllAddressesFailed: every candidate failed; chained from the last error
        """
        if self._closed:
            raise RuntimeError("Client has been closed")

        hostname = self.hostname
        try:
            addresses = await self._resolver.resolve(hostname)
        except ResolutionFailed as e:
            logger.error(f"FailoverClient.request: DNS resolution failed for {hostname}: {e}")
            raise

        if not addresses:
            raise NoAddressesAvailable(hostname)

        candidates = prefer_address(addresses, self._last_good_address)
        health = self._resolver.health
        # Quarantine never blocks every candidate
        skip_quarantined = any(not health.is_failed(address) for address in candidates)

        attempted: list[str] = []
        last_error: Optional[httpx.HTTPError] = None

        for address in candidates:
            if skip_quarantined and health.is_failed(address):
                logger.info(f"FailoverClient.request: skipping failed IP {address} for {hostname}")
                self._events._emit("attempt:skip", hostname=hostname, address=address)
                continue

            attempted.append(address)
            try:
                response = await self._attempt(address, method, path, kwargs)
            except httpx.HTTPError as e:
                last_error = e
                quarantine = is_connection_class_error(e)
                logger.warning(
                    f"FailoverClient.request: request failed for {hostname} via IP {address}: "
                    f"{type(e).__name__}: {e}"
                )
                self._events._emit(
                    "attempt:failure",
                    hostname=hostname,
                    address=address,
                    error=f"{type(e).__name__}: {e}",
                    connection_error=quarantine,
                )
                if quarantine:
                    health.mark_failed(address)
                    self._events._emit("address:quarantined", hostname=hostname, address=address)
                continue

            self._last_good_address = address
            logger.debug(
                f"FailoverClient.request: {hostname} via IP {address} answered {response.status_code}"
            )
            self._events._emit(
                "attempt:success",
                hostname=hostname,
                address=address,
                status_code=response.status_code,
            )
            return response

        logger.error(f"FailoverClient.request: all {len(attempted)} IPs failed for {hostname}")
        self._events._emit(
            "request:failed",
            hostname=hostname,
            attempted=list(attempted),
            error=str(last_error) if last_error else None,
        )
        raise AllAddressesFailed(hostname, attempted, last_error) from last_error

    async def get(self, path: str = "", **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str = "", **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str = "", **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str = "", **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def patch(self, path: str = "", **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def aclose(self) -> None:
        """Close every per-address client"""
        if self._closed:
            return
        self._closed = True
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    async def __aenter__(self) -> "FailoverClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
