"""Tests for TTL-bounded probe result caching."""

from __future__ import annotations

import asyncio

from autoproxy.engine import ProbeCache
from autoproxy.model import ProbeResult
from autoproxy.triggers import ManualFlagTrigger, ReachabilityTrigger, parse_trigger

from .conftest import CountingProbe, FakeClock


async def test_second_lookup_within_ttl_is_served_from_cache(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()
    trigger = ReachabilityTrigger(url="http://intranet.corp/health")

    first = await cache.get_or_probe(trigger, probe)
    clock.advance(30)
    second = await cache.get_or_probe(trigger, probe)

    assert probe.calls == 1
    assert second is first
    assert cache.stats().hits == 1
    assert cache.stats().misses == 1


async def test_entry_expires_after_ttl(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()
    trigger = ReachabilityTrigger(url="http://intranet.corp/health")

    await cache.get_or_probe(trigger, probe)
    clock.advance(60)
    await cache.get_or_probe(trigger, probe)

    assert probe.calls == 2


async def test_different_parameters_are_cached_separately(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()

    await cache.get_or_probe(ReachabilityTrigger(url="http://a"), probe)
    await cache.get_or_probe(ReachabilityTrigger(url="http://b"), probe)
    await cache.get_or_probe(ManualFlagTrigger(value=True), probe)

    assert probe.calls == 3
    assert len(cache) == 3


async def test_parameter_order_and_defaults_share_an_entry(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()

    await cache.get_or_probe(parse_trigger("reachability", {"url": "http://a"}), probe)
    await cache.get_or_probe(parse_trigger("reachability", {"expectStatus": 200, "url": "http://a"}), probe)

    assert probe.calls == 1


async def test_failed_results_are_cached_too(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe(ProbeResult.failed("Expected status 200, got 503"))
    trigger = ReachabilityTrigger(url="http://a")

    await cache.get_or_probe(trigger, probe)
    result = await cache.get_or_probe(trigger, probe)

    assert probe.calls == 1
    assert result.success is False


async def test_use_cache_false_bypasses_reads_and_writes(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()
    trigger = ReachabilityTrigger(url="http://a")

    await cache.get_or_probe(trigger, probe, use_cache=False)
    await cache.get_or_probe(trigger, probe, use_cache=False)

    assert probe.calls == 2
    assert len(cache) == 0


async def test_concurrent_lookups_share_one_probe(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe(delay=0.05)
    trigger = ReachabilityTrigger(url="http://a")

    results = await asyncio.gather(*(cache.get_or_probe(trigger, probe) for _ in range(5)))

    assert probe.calls == 1
    assert all(result is results[0] for result in results)
    assert len(cache) == 1


async def test_aborted_results_are_not_cached(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    aborted = CountingProbe(ProbeResult.failed("Probe aborted"))
    trigger = ReachabilityTrigger(url="http://a")

    await cache.get_or_probe(trigger, aborted)

    assert len(cache) == 0


async def test_clear_drops_every_entry(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()
    trigger = ReachabilityTrigger(url="http://a")
    await cache.get_or_probe(trigger, probe)

    cache.clear()
    await cache.get_or_probe(trigger, probe)

    assert probe.calls == 2


async def test_sweep_removes_only_expired_entries(clock: FakeClock) -> None:
    cache = ProbeCache(60, clock=clock)
    probe = CountingProbe()
    await cache.get_or_probe(ReachabilityTrigger(url="http://old"), probe)
    clock.advance(45)
    await cache.get_or_probe(ReachabilityTrigger(url="http://new"), probe)
    clock.advance(20)

    removed = cache.sweep()

    assert removed == 1
    assert len(cache) == 1
    assert cache.stats().keys[0].startswith("reachability:")
    assert "http://new" in cache.stats().keys[0]


async def test_background_sweeper_starts_and_stops(clock: FakeClock) -> None:
    cache = ProbeCache(1, clock=clock)
    await cache.get_or_probe(ManualFlagTrigger(value=True), CountingProbe())
    clock.advance(5)

    cache.start_sweeper(0.01)
    for _ in range(100):
        if not len(cache):
            break
        await asyncio.sleep(0.01)
    await cache.stop_sweeper()

    assert len(cache) == 0
