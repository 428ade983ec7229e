"""The closed set of trigger variants a rule can combine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, TypeAlias

from autoproxy.constants.probes import (
    DEFAULT_EXPECT_STATUS,
    DEFAULT_REACHABILITY_METHOD,
    TIME_WINDOW_TZ_SYSTEM,
)
from autoproxy.types import CaptivePortalState, DnsMatchMode, JsonObject


class TriggerType(StrEnum):
    """Trigger kinds, valued by the key used in rule documents."""

    REACHABILITY = "reachability"
    DNS_RESOLVE = "dnsResolve"
    CAPTIVE_PORTAL = "captivePortal"
    IP_INFO = "ipInfo"
    TIME_WINDOW = "timeWindow"
    MANUAL_FLAG = "manualFlag"


@dataclass(frozen=True)
class ReachabilityTrigger:
    """Succeeds when a request to ``url`` answers with ``expect_status``."""

    kind: ClassVar[TriggerType] = TriggerType.REACHABILITY

    url: str
    method: str = DEFAULT_REACHABILITY_METHOD
    expect_status: int = DEFAULT_EXPECT_STATUS

    def params(self) -> JsonObject:
        return {"url": self.url, "method": self.method, "expectStatus": self.expect_status}


@dataclass(frozen=True)
class DnsResolveTrigger:
    """Succeeds when ``hostname`` resolves, optionally into expected ranges."""

    kind: ClassVar[TriggerType] = TriggerType.DNS_RESOLVE

    hostname: str
    matches: DnsMatchMode | None = None
    expect_ip_cidr: tuple[str, ...] = ()

    def params(self) -> JsonObject:
        params: JsonObject = {"hostname": self.hostname}
        if self.matches is not None:
            params["matches"] = self.matches
        if self.expect_ip_cidr:
            params["expectIPCIDR"] = list(self.expect_ip_cidr)
        return params


@dataclass(frozen=True)
class CaptivePortalTrigger:
    """Succeeds when the platform captive-portal state equals ``state``."""

    kind: ClassVar[TriggerType] = TriggerType.CAPTIVE_PORTAL

    state: CaptivePortalState

    def params(self) -> JsonObject:
        return {"state": self.state}


@dataclass(frozen=True)
class IpInfoTrigger:
    """Succeeds when the public IP lookup reports the expected org/country."""

    kind: ClassVar[TriggerType] = TriggerType.IP_INFO

    provider_url: str | None = None
    expect_org: str | None = None
    expect_country: str | None = None

    def params(self) -> JsonObject:
        params: JsonObject = {}
        if self.provider_url is not None:
            params["providerUrl"] = self.provider_url
        if self.expect_org is not None:
            params["expectOrg"] = self.expect_org
        if self.expect_country is not None:
            params["expectCountry"] = self.expect_country
        return params


@dataclass(frozen=True)
class TimeWindowTrigger:
    """Succeeds inside the configured weekdays and ``HH:MM`` range."""

    kind: ClassVar[TriggerType] = TriggerType.TIME_WINDOW

    days: tuple[int, ...] = ()
    from_: str | None = None
    to: str | None = None
    tz: str = TIME_WINDOW_TZ_SYSTEM

    def params(self) -> JsonObject:
        params: JsonObject = {"tz": self.tz}
        if self.days:
            params["days"] = list(self.days)
        if self.from_ is not None:
            params["from"] = self.from_
        if self.to is not None:
            params["to"] = self.to
        return params


@dataclass(frozen=True)
class ManualFlagTrigger:
    """Succeeds when ``value`` is true."""

    kind: ClassVar[TriggerType] = TriggerType.MANUAL_FLAG

    value: bool

    def params(self) -> JsonObject:
        return {"value": self.value}


Trigger: TypeAlias = (
    ReachabilityTrigger
    | DnsResolveTrigger
    | CaptivePortalTrigger
    | IpInfoTrigger
    | TimeWindowTrigger
    | ManualFlagTrigger
)
