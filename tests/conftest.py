"""
Shared fixtures for fetch_failover_dsn tests.
"""
from typing import Optional, Union

import httpx
import pytest

from fetch_failover_dsn.resolver import Resolver
from fetch_failover_dsn.types import FailoverDnsConfig


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


LookupValue = Union[list[str], Exception, None]


class FakeLookups:
    """Scriptable A/AAAA/system lookups that record every call"""

    def __init__(self):
        self.records: dict[str, dict[str, LookupValue]] = {"A": {}, "AAAA": {}}
        self.system: dict[str, LookupValue] = {}
        self.family_calls: list[tuple[str, str]] = []
        self.system_calls: list[str] = []

    def set_a(self, hostname: str, value: LookupValue) -> None:
        self.records["A"][hostname] = value

    def set_aaaa(self, hostname: str, value: LookupValue) -> None:
        self.records["AAAA"][hostname] = value

    def set_system(self, hostname: str, value: LookupValue) -> None:
        self.system[hostname] = value

    def fail_everything(self, hostname: str) -> None:
        self.set_a(hostname, LookupError("NXDOMAIN"))
        self.set_aaaa(hostname, LookupError("NXDOMAIN"))
        self.set_system(hostname, OSError("Name or service not known"))

    @staticmethod
    def _answer(value: LookupValue, hostname: str) -> list[str]:
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise LookupError(f"no records for {hostname}")
        return list(value)

    async def family(self, hostname: str, record_type: str) -> list[str]:
        self.family_calls.append((hostname, record_type))
        return self._answer(self.records[record_type].get(hostname), hostname)

    async def system_lookup(self, hostname: str) -> list[str]:
        self.system_calls.append(hostname)
        return self._answer(self.system.get(hostname), hostname)

    @property
    def total_calls(self) -> int:
        return len(self.family_calls) + len(self.system_calls)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lookups() -> FakeLookups:
    return FakeLookups()


@pytest.fixture
def make_resolver(clock, lookups):
    """Build resolvers wired to the fake clock and lookups"""

    def factory(config: Optional[FailoverDnsConfig] = None) -> Resolver:
        return Resolver(
            config=config,
            family_lookup=lookups.family,
            system_lookup=lookups.system_lookup,
            clock=clock,
        )

    return factory


@pytest.fixture
def resolver(make_resolver) -> Resolver:
    return make_resolver()


class AddressTransport(httpx.AsyncBaseTransport):
    """Mock transport answering per target address"""

    def __init__(self, outcomes: Optional[dict[str, object]] = None):
        self.outcomes: dict[str, object] = outcomes or {}
        self.requests: list[httpx.Request] = []

    @property
    def hosts(self) -> list[str]:
        return [request.url.host for request in self.requests]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.get(request.url.host, 200)
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome(f"{outcome.__name__} for {request.url.host}")
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"address": request.url.host})


@pytest.fixture
def transport() -> AddressTransport:
    return AddressTransport()
