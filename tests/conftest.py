"""Shared fixtures: a local HTTP endpoint, fake resolver/portal, rule builders."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from autoproxy.engine import ProbeCache, RuleEvaluator
from autoproxy.model import ProbeResult, Rule
from autoproxy.probes import DnsAnswer, HttpSessionProvider, ProbeExecutor, ProbeTimeouts
from autoproxy.rules import parse_rule
from autoproxy.types import CaptivePortalState

# 2024-01-03 is a Wednesday, 2024-01-06 a Saturday.
WEDNESDAY_10AM = datetime(2024, 1, 3, 10, 0)
SATURDAY_10AM = datetime(2024, 1, 6, 10, 0)
WEDNESDAY_6PM = datetime(2024, 1, 3, 18, 0)

HITS = web.AppKey("hits", dict[str, int])

IP_INFO_PAYLOAD: dict[str, Any] = {
    "ip": "203.0.113.7",
    "org": "AS64500 Example Corp",
    "country": "DE",
}


class FakeResolver:
    """Resolves from a fixed table; unknown names raise like the OS resolver."""

    def __init__(self, answers: dict[str, DnsAnswer] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[str] = []

    async def resolve(self, hostname: str) -> DnsAnswer:
        self.calls.append(hostname)
        if hostname not in self.answers:
            raise OSError(f"[Errno -2] Name or service not known: {hostname}")
        return self.answers[hostname]


class FakePortalDetector:
    """Captive-portal detector returning scripted states."""

    def __init__(self, *states: CaptivePortalState) -> None:
        self.states = list(states) or ["unlocked"]
        self.calls = 0

    async def get_state(self) -> CaptivePortalState:
        self.calls += 1
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class CountingProbe:
    """Probe function returning canned results and counting invocations."""

    def __init__(self, result: ProbeResult | None = None, *, delay: float = 0.0) -> None:
        self.result = result or ProbeResult.passed({"ok": True})
        self.delay = delay
        self.calls = 0

    async def __call__(self, trigger: Any) -> ProbeResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


def make_rule(
    rule_id: str,
    when: dict[str, Any],
    *,
    profile: str = "direct",
    priority: int = 100,
    enabled: bool = True,
) -> Rule:
    """Build a rule from document-shaped trigger parameters."""
    return parse_rule(
        {
            "id": rule_id,
            "name": rule_id.replace("-", " ").title(),
            "enabled": enabled,
            "priority": priority,
            "when": when,
            "then": {"setActiveProfile": profile},
        }
    )


async def _ok(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def _redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound("/ok")


async def _missing(request: web.Request) -> web.Response:
    return web.Response(status=404, text="missing")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(2)
    return web.Response(text="late")


async def _ip_info(request: web.Request) -> web.Response:
    return web.json_response(IP_INFO_PAYLOAD)


async def _ip_info_text(request: web.Request) -> web.Response:
    return web.Response(text='["not", "an", "object"]', content_type="text/plain")


async def _unavailable(request: web.Request) -> web.Response:
    return web.Response(status=503, reason="Service Unavailable")


async def _generate_204(request: web.Request) -> web.Response:
    return web.Response(status=204)


async def _counted(request: web.Request) -> web.Response:
    request.app[HITS]["/counted"] += 1
    return web.Response(text="counted")


@pytest_asyncio.fixture
async def probe_server() -> AsyncIterator[TestServer]:
    """Local HTTP server standing in for probed endpoints."""
    app = web.Application()
    app[HITS] = {"/counted": 0}
    app.router.add_route("*", "/ok", _ok)
    app.router.add_route("*", "/redirect", _redirect)
    app.router.add_route("*", "/missing", _missing)
    app.router.add_route("*", "/slow", _slow)
    app.router.add_get("/ipinfo", _ip_info)
    app.router.add_get("/ipinfo-text", _ip_info_text)
    app.router.add_get("/unavailable", _unavailable)
    app.router.add_get("/generate_204", _generate_204)
    app.router.add_route("*", "/counted", _counted)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def url_for(probe_server: TestServer) -> Callable[[str], str]:
    def _url(path: str) -> str:
        return str(probe_server.make_url(path))

    return _url


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver(
        {
            "intranet.corp": DnsAnswer(addresses=("10.0.0.5",), canonical_name="intranet.corp"),
            "dual.corp": DnsAnswer(addresses=("192.168.1.20", "2001:db8::1")),
            "empty.corp": DnsAnswer(addresses=()),
        }
    )


@pytest.fixture
def portal() -> FakePortalDetector:
    return FakePortalDetector("unlocked")


@pytest_asyncio.fixture
async def executor(resolver: FakeResolver, portal: FakePortalDetector) -> AsyncIterator[ProbeExecutor]:
    """Executor with short timeouts, a fake resolver and a fixed Wednesday 10:00 clock."""
    probe_executor = ProbeExecutor(
        timeouts=ProbeTimeouts(reachability=2.0, dns=1.0, ip_info=2.0),
        sessions=HttpSessionProvider(),
        resolver=resolver,
        portal_detector=portal,
        now=lambda: WEDNESDAY_10AM,
    )
    try:
        yield probe_executor
    finally:
        await probe_executor.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def evaluator(executor: ProbeExecutor, clock: FakeClock) -> RuleEvaluator:
    return RuleEvaluator(executor, ProbeCache(60, clock=clock))
