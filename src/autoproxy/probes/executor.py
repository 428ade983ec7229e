"""Live execution of the six trigger probes.

Every probe resolves to a ``ProbeResult``; none raise to the caller. Network
probes run as tracked tasks so ``abort_all`` can cancel them, and each is
bounded by its own timeout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import assert_never

import aiohttp

from autoproxy.constants.probes import (
    DEFAULT_DNS_TIMEOUT,
    DEFAULT_IP_INFO_TIMEOUT,
    DEFAULT_IP_INFO_URL,
    DEFAULT_REACHABILITY_TIMEOUT,
    DNS_MATCH_EXACT,
    NO_ADDRESSES_ERROR,
    NO_CACHE_HEADERS,
    PROBE_ABORTED_ERROR,
)
from autoproxy.model import ProbeResult
from autoproxy.net import any_address_in_ranges
from autoproxy.probes.captive_portal import CaptivePortalDetector, HttpCaptivePortalDetector
from autoproxy.probes.http import HttpSessionProvider
from autoproxy.probes.resolver import Resolver, SystemResolver
from autoproxy.triggers import (
    CaptivePortalTrigger,
    DnsResolveTrigger,
    IpInfoTrigger,
    ManualFlagTrigger,
    ReachabilityTrigger,
    TimeWindowTrigger,
    Trigger,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeTimeouts:
    """Per-probe timeouts in seconds."""

    reachability: float = DEFAULT_REACHABILITY_TIMEOUT
    dns: float = DEFAULT_DNS_TIMEOUT
    ip_info: float = DEFAULT_IP_INFO_TIMEOUT


def _local_now() -> datetime:
    return datetime.now().astimezone()


class ProbeExecutor:
    """Runs one trigger's measurement against live network and system facilities."""

    def __init__(
        self,
        *,
        timeouts: ProbeTimeouts | None = None,
        sessions: HttpSessionProvider | None = None,
        resolver: Resolver | None = None,
        portal_detector: CaptivePortalDetector | None = None,
        ip_info_url: str = DEFAULT_IP_INFO_URL,
        now: Callable[[], datetime] = _local_now,
    ) -> None:
        self._timeouts = timeouts or ProbeTimeouts()
        self._sessions = sessions or HttpSessionProvider()
        self._resolver = resolver or SystemResolver()
        self._portal_detector = portal_detector or HttpCaptivePortalDetector(self._sessions)
        self._ip_info_url = ip_info_url
        self._now = now
        self._in_flight: dict[asyncio.Task[ProbeResult], str] = {}

    @property
    def timeouts(self) -> ProbeTimeouts:
        return self._timeouts

    @property
    def in_flight(self) -> int:
        """Number of network probes currently running."""
        return len(self._in_flight)

    async def run(self, trigger: Trigger) -> ProbeResult:
        """Dispatch ``trigger`` to the probe for its kind."""
        match trigger:
            case ReachabilityTrigger():
                return await self.test_reachability(trigger)
            case DnsResolveTrigger():
                return await self.test_dns_resolve(trigger)
            case CaptivePortalTrigger():
                return await self.test_captive_portal(trigger)
            case IpInfoTrigger():
                return await self.test_ip_info(trigger)
            case TimeWindowTrigger():
                return self.test_time_window(trigger)
            case ManualFlagTrigger():
                return self.test_manual_flag(trigger)
            case _:
                assert_never(trigger)

    async def test_reachability(self, trigger: ReachabilityTrigger) -> ProbeResult:
        """Request ``trigger.url`` without following redirects and compare the status."""
        return await self._abortable(
            f"reachability {trigger.url}",
            partial(self._reachability, trigger),
            self._timeouts.reachability,
        )

    async def test_dns_resolve(self, trigger: DnsResolveTrigger) -> ProbeResult:
        """Resolve ``trigger.hostname`` and check the addresses against the expected list."""
        return await self._abortable(
            f"dnsResolve {trigger.hostname}",
            partial(self._dns_resolve, trigger),
            self._timeouts.dns,
        )

    async def test_captive_portal(self, trigger: CaptivePortalTrigger) -> ProbeResult:
        """Compare the platform captive-portal state with the expected one."""
        return await self._abortable(
            "captivePortal",
            partial(self._captive_portal, trigger),
            self._timeouts.reachability,
        )

    async def test_ip_info(self, trigger: IpInfoTrigger) -> ProbeResult:
        """Fetch public IP details and match organisation and country."""
        return await self._abortable(
            f"ipInfo {trigger.provider_url or self._ip_info_url}",
            partial(self._ip_info, trigger),
            self._timeouts.ip_info,
        )

    def test_time_window(self, trigger: TimeWindowTrigger) -> ProbeResult:
        """Check the local weekday (1=Monday..7=Sunday) and ``HH:MM`` range."""
        now = self._now()
        current_day = now.isoweekday()
        current_time = now.strftime("%H:%M")

        success = True
        if trigger.days:
            success = current_day in trigger.days
        if trigger.from_ is not None and trigger.to is not None:
            success = success and trigger.from_ <= current_time <= trigger.to

        logger.debug(
            "Time window check: day=%d time=%s days=%s range=%s-%s success=%s",
            current_day,
            current_time,
            list(trigger.days),
            trigger.from_,
            trigger.to,
            success,
        )
        data = {"currentDay": current_day, "currentTime": current_time, "timezone": trigger.tz}
        if success:
            return ProbeResult.passed(data)
        return ProbeResult.failed("Outside the configured time window", data)

    def test_manual_flag(self, trigger: ManualFlagTrigger) -> ProbeResult:
        data = {"value": trigger.value}
        return ProbeResult.passed(data) if trigger.value else ProbeResult.failed("Manual flag is off", data)

    def abort_all(self) -> int:
        """Cancel every in-flight network probe; each resolves as an aborted failure."""
        tasks = [task for task in self._in_flight if not task.done()]
        if tasks:
            logger.info("Aborting %d in-flight probes", len(tasks))
        for task in tasks:
            logger.debug("Aborting probe: %s", self._in_flight.get(task))
            task.cancel()
        return len(tasks)

    async def close(self) -> None:
        """Abort outstanding probes and release the HTTP session."""
        self.abort_all()
        await self._sessions.close()

    async def _abortable(
        self,
        label: str,
        probe: Callable[[], Awaitable[ProbeResult]],
        timeout: float,
    ) -> ProbeResult:
        task = asyncio.ensure_future(_bounded(probe, timeout))
        self._in_flight[task] = label
        try:
            return await task
        except TimeoutError:
            logger.warning("Probe timed out: %s after %gs", label, timeout)
            return ProbeResult.failed(f"Timed out after {timeout:g}s")
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and (current is None or current.cancelling() == 0):
                logger.info("Probe aborted: %s", label)
                return ProbeResult.failed(PROBE_ABORTED_ERROR)
            raise
        finally:
            self._in_flight.pop(task, None)

    async def _reachability(self, trigger: ReachabilityTrigger) -> ProbeResult:
        try:
            session = await self._sessions.get()
            async with session.request(
                trigger.method,
                trigger.url,
                allow_redirects=False,
                headers=NO_CACHE_HEADERS,
            ) as response:
                status = response.status
                reason = response.reason or ""
        except Exception as exc:
            logger.warning("Reachability test failed for %s: %s", trigger.url, _describe(exc))
            return ProbeResult.failed(_describe(exc))

        success = status == trigger.expect_status
        logger.debug(
            "Reachability %s: status=%d expected=%d success=%s",
            trigger.url,
            status,
            trigger.expect_status,
            success,
        )
        data = {"status": status, "statusText": reason, "headers": {}}
        if success:
            return ProbeResult.passed(data)
        return ProbeResult.failed(f"Expected status {trigger.expect_status}, got {status}", data)

    async def _dns_resolve(self, trigger: DnsResolveTrigger) -> ProbeResult:
        try:
            answer = await self._resolver.resolve(trigger.hostname)
        except Exception as exc:
            logger.warning("DNS resolution failed for %s: %s", trigger.hostname, _describe(exc))
            return ProbeResult.failed(_describe(exc))

        addresses = list(answer.addresses)
        if not addresses:
            return ProbeResult.failed(NO_ADDRESSES_ERROR)

        success = True
        if trigger.expect_ip_cidr:
            if trigger.matches == DNS_MATCH_EXACT:
                success = any(address in trigger.expect_ip_cidr for address in addresses)
            else:
                success = any_address_in_ranges(addresses, trigger.expect_ip_cidr)

        logger.debug("DNS %s resolved to %s success=%s", trigger.hostname, addresses, success)
        data = {"addresses": addresses, "canonicalName": answer.canonical_name}
        if success:
            return ProbeResult.passed(data)
        return ProbeResult.failed("No resolved address matched the expected list", data)

    async def _captive_portal(self, trigger: CaptivePortalTrigger) -> ProbeResult:
        try:
            state = await self._portal_detector.get_state()
        except Exception as exc:
            logger.warning("Captive portal check failed: %s", _describe(exc))
            return ProbeResult.failed(_describe(exc))

        logger.debug("Captive portal state=%s expected=%s", state, trigger.state)
        data = {"state": state}
        if state == trigger.state:
            return ProbeResult.passed(data)
        return ProbeResult.failed(f"Captive portal is {state}, expected {trigger.state}", data)

    async def _ip_info(self, trigger: IpInfoTrigger) -> ProbeResult:
        url = trigger.provider_url or self._ip_info_url
        try:
            session = await self._sessions.get()
            async with session.get(url, headers=NO_CACHE_HEADERS) as response:
                if not response.ok:
                    error = f"HTTP {response.status}: {response.reason}" if response.reason else f"HTTP {response.status}"
                    logger.warning("IP info request to %s failed: %s", url, error)
                    return ProbeResult.failed(error)
                payload = await response.json(content_type=None)
        except Exception as exc:
            logger.warning("IP info request to %s failed: %s", url, _describe(exc))
            return ProbeResult.failed(_describe(exc))

        if not isinstance(payload, dict):
            return ProbeResult.failed("IP info response is not a JSON object")

        org = payload.get("org")
        country = payload.get("country")
        success = True
        if trigger.expect_org is not None:
            success = isinstance(org, str) and trigger.expect_org.lower() in org.lower()
        if trigger.expect_country is not None:
            success = success and isinstance(country, str) and country.lower() == trigger.expect_country.lower()

        logger.debug("IP info org=%r country=%r success=%s", org, country, success)
        if success:
            return ProbeResult.passed(payload)
        return ProbeResult.failed(f"IP info did not match (org={org!r}, country={country!r})", payload)


async def _bounded(probe: Callable[[], Awaitable[ProbeResult]], timeout: float) -> ProbeResult:
    return await asyncio.wait_for(probe(), timeout)

def _describe(exc: BaseException) -> str:
    message = str(exc)
    if isinstance(exc, aiohttp.ClientResponseError):
        return f"HTTP {exc.status}: {exc.message}"
    return message or type(exc).__name__
