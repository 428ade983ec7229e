"""Strict parsing of raw trigger parameters into trigger variants.

Raises TriggerConfigError on any violation, naming the offending
``<source>.<trigger>.<key>`` location.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from autoproxy.constants.probes import (
    DEFAULT_EXPECT_STATUS,
    DEFAULT_REACHABILITY_METHOD,
    TIME_WINDOW_TZ_SYSTEM,
    VALID_CAPTIVE_PORTAL_STATES,
    VALID_DNS_MATCH_MODES,
    VALID_REACHABILITY_METHODS,
    VALID_TIME_WINDOW_TZ,
)
from autoproxy.constants.rule_schema import ALLOWED_TRIGGER_KEYS, REQUIRED_TRIGGER_KEYS
from autoproxy.exceptions import TriggerConfigError
from autoproxy.triggers.kinds import (
    CaptivePortalTrigger,
    DnsResolveTrigger,
    IpInfoTrigger,
    ManualFlagTrigger,
    ReachabilityTrigger,
    TimeWindowTrigger,
    Trigger,
    TriggerType,
)

HHMM_PATTERN = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")


def parse_trigger(kind: str, params: Any, source: str = "rule") -> Trigger:
    """Build a typed trigger from its document key and raw parameters."""
    try:
        trigger_type = TriggerType(kind)
    except ValueError:
        valid = sorted(t.value for t in TriggerType)
        raise TriggerConfigError(f"{source}: unknown trigger type {kind!r}, must be one of {valid}") from None

    location = f"{source}.{trigger_type.value}"
    if not isinstance(params, Mapping):
        raise TriggerConfigError(f"{location}: trigger parameters must be a mapping")

    unknown = set(params) - ALLOWED_TRIGGER_KEYS[trigger_type.value]
    if unknown:
        raise TriggerConfigError(f"{location}: unknown keys: {sorted(map(str, unknown))}")
    for key in sorted(REQUIRED_TRIGGER_KEYS[trigger_type.value]):
        if key not in params:
            raise TriggerConfigError(f"{location}: missing required key '{key}'")

    match trigger_type:
        case TriggerType.REACHABILITY:
            return _parse_reachability(params, location)
        case TriggerType.DNS_RESOLVE:
            return _parse_dns_resolve(params, location)
        case TriggerType.CAPTIVE_PORTAL:
            return _parse_captive_portal(params, location)
        case TriggerType.IP_INFO:
            return _parse_ip_info(params, location)
        case TriggerType.TIME_WINDOW:
            return _parse_time_window(params, location)
        case TriggerType.MANUAL_FLAG:
            return _parse_manual_flag(params, location)


def parse_trigger_set(when: Any, source: str = "rule") -> tuple[Trigger, ...]:
    """Parse a rule's ``when`` mapping, preserving document order."""
    if when is None:
        return ()
    if not isinstance(when, Mapping):
        raise TriggerConfigError(f"{source}.when: must be a mapping of trigger type to parameters")
    return tuple(parse_trigger(str(kind), params, f"{source}.when") for kind, params in when.items())


def canonical_key(trigger: Trigger) -> str | None:
    """Return a deterministic cache key, or None when parameters cannot be serialized."""
    try:
        blob = json.dumps(trigger.params(), sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return None
    return f"{trigger.kind.value}:{blob}"


def _parse_reachability(params: Mapping[str, Any], location: str) -> ReachabilityTrigger:
    url = _require_string(params["url"], f"{location}.url")
    method = params.get("method", DEFAULT_REACHABILITY_METHOD)
    if not isinstance(method, str) or method.upper() not in VALID_REACHABILITY_METHODS:
        raise TriggerConfigError(
            f"{location}.method: must be one of {sorted(VALID_REACHABILITY_METHODS)}, got {method!r}"
        )
    expect_status = params.get("expectStatus", DEFAULT_EXPECT_STATUS)
    if isinstance(expect_status, bool) or not isinstance(expect_status, int) or not 100 <= expect_status <= 599:
        raise TriggerConfigError(f"{location}.expectStatus: must be an HTTP status code, got {expect_status!r}")
    return ReachabilityTrigger(url=url, method=method.upper(), expect_status=expect_status)


def _parse_dns_resolve(params: Mapping[str, Any], location: str) -> DnsResolveTrigger:
    hostname = _require_string(params["hostname"], f"{location}.hostname")
    matches = params.get("matches")
    if matches is not None and matches not in VALID_DNS_MATCH_MODES:
        raise TriggerConfigError(
            f"{location}.matches: must be one of {sorted(VALID_DNS_MATCH_MODES)}, got {matches!r}"
        )
    expect = params.get("expectIPCIDR")
    if expect is None:
        expect = []
    if not isinstance(expect, list | tuple) or not all(isinstance(item, str) for item in expect):
        raise TriggerConfigError(f"{location}.expectIPCIDR: must be a list of strings")
    return DnsResolveTrigger(
        hostname=hostname,
        matches=matches,
        expect_ip_cidr=tuple(item.strip() for item in expect if item.strip()),
    )


def _parse_captive_portal(params: Mapping[str, Any], location: str) -> CaptivePortalTrigger:
    state = params["state"]
    if state not in VALID_CAPTIVE_PORTAL_STATES:
        raise TriggerConfigError(
            f"{location}.state: must be one of {sorted(VALID_CAPTIVE_PORTAL_STATES)}, got {state!r}"
        )
    return CaptivePortalTrigger(state=state)


def _parse_ip_info(params: Mapping[str, Any], location: str) -> IpInfoTrigger:
    return IpInfoTrigger(
        provider_url=_optional_string(params.get("providerUrl"), f"{location}.providerUrl"),
        expect_org=_optional_string(params.get("expectOrg"), f"{location}.expectOrg"),
        expect_country=_optional_string(params.get("expectCountry"), f"{location}.expectCountry"),
    )


def _parse_time_window(params: Mapping[str, Any], location: str) -> TimeWindowTrigger:
    tz = params.get("tz", TIME_WINDOW_TZ_SYSTEM)
    if tz not in VALID_TIME_WINDOW_TZ:
        raise TriggerConfigError(f"{location}.tz: must be one of {sorted(VALID_TIME_WINDOW_TZ)}, got {tz!r}")

    days = params.get("days")
    if days is None:
        days = []
    if not isinstance(days, list | tuple) or not all(
        isinstance(day, int) and not isinstance(day, bool) and 1 <= day <= 7 for day in days
    ):
        raise TriggerConfigError(f"{location}.days: must be a list of integers 1-7 (1=Monday, 7=Sunday)")

    bounds: dict[str, str | None] = {}
    for key in ("from", "to"):
        value = params.get(key)
        if value is not None and (not isinstance(value, str) or not HHMM_PATTERN.match(value)):
            raise TriggerConfigError(f"{location}.{key}: must be an 'HH:MM' string, got {value!r}")
        bounds[key] = value

    return TimeWindowTrigger(days=tuple(days), from_=bounds["from"], to=bounds["to"], tz=tz)


def _parse_manual_flag(params: Mapping[str, Any], location: str) -> ManualFlagTrigger:
    value = params["value"]
    if not isinstance(value, bool):
        raise TriggerConfigError(f"{location}.value: must be a boolean")
    return ManualFlagTrigger(value=value)


def _require_string(value: Any, location: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TriggerConfigError(f"{location}: must be a non-empty string")
    return value.strip()


def _optional_string(value: Any, location: str) -> str | None:
    if value is None or value == "":
        return None
    return _require_string(value, location)
