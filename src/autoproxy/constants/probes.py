"""Probe defaults: timeouts, endpoints and trigger vocabulary."""

from __future__ import annotations

DEFAULT_REACHABILITY_TIMEOUT: float = 10.0
DEFAULT_DNS_TIMEOUT: float = 5.0
DEFAULT_IP_INFO_TIMEOUT: float = 15.0

DEFAULT_REACHABILITY_METHOD: str = "HEAD"
DEFAULT_EXPECT_STATUS: int = 200
VALID_REACHABILITY_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})

DEFAULT_IP_INFO_URL: str = "https://ipinfo.io/json"

DEFAULT_CAPTIVE_PORTAL_CHECK_URL: str = "http://connectivitycheck.gstatic.com/generate_204"
DEFAULT_CAPTIVE_PORTAL_EXPECT_STATUS: int = 204

CAPTIVE_PORTAL_LOCKED: str = "locked"
CAPTIVE_PORTAL_UNLOCKED: str = "unlocked"
CAPTIVE_PORTAL_UNKNOWN: str = "unknown"
VALID_CAPTIVE_PORTAL_STATES: frozenset[str] = frozenset(
    {CAPTIVE_PORTAL_LOCKED, CAPTIVE_PORTAL_UNLOCKED, CAPTIVE_PORTAL_UNKNOWN}
)

DNS_MATCH_EXACT: str = "exact"
DNS_MATCH_REGEX: str = "regex"
VALID_DNS_MATCH_MODES: frozenset[str] = frozenset({DNS_MATCH_EXACT, DNS_MATCH_REGEX})

TIME_WINDOW_TZ_SYSTEM: str = "system"
VALID_TIME_WINDOW_TZ: frozenset[str] = frozenset({TIME_WINDOW_TZ_SYSTEM})

NO_CACHE_HEADERS: dict[str, str] = {"Cache-Control": "no-cache", "Pragma": "no-cache"}

PROBE_ABORTED_ERROR: str = "Probe aborted"
NO_ADDRESSES_ERROR: str = "No addresses resolved"
