"""
Tests for factory functions
"""
import httpx
import pytest

from fetch_failover_dsn.auth import create_pve_auth_hook
from fetch_failover_dsn.client import FailoverClient
from fetch_failover_dsn.endpoint import EndpointClient
from fetch_failover_dsn.factory import (
    create_endpoint_client,
    create_failover_client,
    create_resolver,
    should_use_failover,
)
from fetch_failover_dsn.types import FailoverDnsConfig, RetryConfig


class TestShouldUseFailover:
    """Tests for should_use_failover"""

    def test_lan_hosts_enabled_implicitly(self):
        assert should_use_failover("https://pve.lan:8006") is True

    def test_explicit_flag(self):
        assert should_use_failover("https://pve.example.com:8006") is False
        assert should_use_failover("https://pve.example.com:8006", use_resilient_dns=True) is True

    def test_never_for_ipv4_literals(self):
        assert should_use_failover("https://192.168.1.10:8006", use_resilient_dns=True) is False


class TestCreateResolver:
    """Tests for create_resolver"""

    def test_overrides(self):
        resolver = create_resolver(cache_ttl_seconds=120.0)
        assert resolver.config.cache_ttl_seconds == 120.0
        assert resolver.config.quarantine_seconds == 30.0

    def test_base_config(self):
        resolver = create_resolver(FailoverDnsConfig(enable_ipv6=False), quarantine_seconds=10.0)
        assert resolver.config.enable_ipv6 is False
        assert resolver.health.quarantine_seconds == 10.0


class TestCreateFailoverClient:
    """Tests for create_failover_client"""

    def test_config_from_url(self, resolver):
        client = create_failover_client(
            "https://pve.lan:8006/api2/json/",
            trust_all_certificates=True,
            headers={"X-Probe": "1"},
            resolver=resolver,
        )
        assert client.hostname == "pve.lan"
        assert client.config.port == 8006
        assert client.config.base_path == "/api2/json"
        assert client.config.trust_all_certificates is True
        assert client.config.headers == {"Content-Type": "application/json", "X-Probe": "1"}
        assert client.resolver is resolver

    def test_invalid_url(self):
        with pytest.raises(ValueError):
            create_failover_client("pve.lan")


class TestCreateEndpointClient:
    """Tests for create_endpoint_client"""

    @pytest.mark.asyncio
    async def test_failover_for_lan(self, resolver, transport, lookups):
        lookups.set_a("pve.lan", ["10.0.0.1"])
        client = create_endpoint_client(
            "https://pve.lan:8006/api2/json",
            auth_hook=create_pve_auth_hook("root@pam!monitor", "secret"),
            resolver=resolver,
            transport=transport,
        )
        assert isinstance(client, FailoverClient)

        await client.get("/version")
        request = transport.requests[0]
        assert request.headers["authorization"] == "PVEAPIToken=root@pam!monitor=secret"
        assert request.headers["content-type"] == "application/json"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_plain_client_for_ip(self, transport):
        client = create_endpoint_client(
            "https://192.168.1.10:8006/api2/json",
            auth_hook=create_pve_auth_hook("root@pam!monitor", "secret"),
            transport=transport,
        )
        assert isinstance(client, EndpointClient)

        async with client:
            response = await client.get("/version")

        assert response.status_code == 200
        request = transport.requests[0]
        assert request.url.host == "192.168.1.10"
        assert request.url.path == "/api2/json/version"
        assert request.headers["authorization"] == "PVEAPIToken=root@pam!monitor=secret"

    @pytest.mark.asyncio
    async def test_plain_client_async_hook(self, transport):
        async def hook(request):
            request.headers["X-Signed"] = "yes"

        async with create_endpoint_client("http://monitor.example.com", auth_hook=hook, transport=transport) as client:
            await client.get("/")
        assert transport.requests[0].headers["x-signed"] == "yes"

    @pytest.mark.asyncio
    async def test_plain_client_hook_may_replace_request(self, transport):
        """Should send the request returned by the hook on the plain path too"""

        async def hook(request):
            return httpx.Request(
                request.method,
                request.url,
                headers={**request.headers, "X-Token": "fresh"},
            )

        client = create_endpoint_client("https://10.0.0.5:8006/api2/json", auth_hook=hook, transport=transport)
        async with client:
            await client.get("/version")

        assert [r.headers.get("x-token") for r in transport.requests] == ["fresh"]

    @pytest.mark.asyncio
    async def test_plain_client_retries(self):
        statuses = [596, 200]
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(statuses.pop(0))

        client = create_endpoint_client(
            "https://192.168.1.10:8006/api2/json",
            retry_config=RetryConfig(base_delay_seconds=0.0),
            transport=httpx.MockTransport(handler),
        )
        async with client:
            response = await client.get("/nodes")

        assert response.status_code == 200
        assert seen == ["/api2/json/nodes", "/api2/json/nodes"]
