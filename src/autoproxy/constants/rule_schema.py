"""Schema constants for rule and profile documents."""

from __future__ import annotations

REQUIRED_RULE_KEYS: frozenset[str] = frozenset({"when", "then"})
ALLOWED_RULE_KEYS: frozenset[str] = REQUIRED_RULE_KEYS | {
    "id",
    "name",
    "enabled",
    "priority",
    "stopOnMatch",
}

REQUIRED_ACTION_KEYS: frozenset[str] = frozenset({"setActiveProfile"})

DEFAULT_RULE_PRIORITY: int = 100

REQUIRED_TRIGGER_KEYS: dict[str, frozenset[str]] = {
    "reachability": frozenset({"url"}),
    "dnsResolve": frozenset({"hostname"}),
    "captivePortal": frozenset({"state"}),
    "ipInfo": frozenset(),
    "timeWindow": frozenset(),
    "manualFlag": frozenset({"value"}),
}

ALLOWED_TRIGGER_KEYS: dict[str, frozenset[str]] = {
    "reachability": frozenset({"url", "method", "expectStatus"}),
    "dnsResolve": frozenset({"hostname", "matches", "expectIPCIDR"}),
    "captivePortal": frozenset({"state"}),
    "ipInfo": frozenset({"providerUrl", "expectOrg", "expectCountry"}),
    "timeWindow": frozenset({"tz", "days", "from", "to"}),
    "manualFlag": frozenset({"value"}),
}

VALID_PROFILE_MODES: frozenset[str] = frozenset({"direct", "system", "manual", "pac", "perRequest"})
ALLOWED_PROFILE_KEYS: frozenset[str] = frozenset({"id", "name", "mode", "manual", "pac", "perRequest", "auth"})
