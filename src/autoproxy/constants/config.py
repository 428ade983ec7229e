"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAME: str = "autoproxy.yaml"

CONFIG_ALLOWED_TOP_KEYS: frozenset[str] = frozenset(
    {"timeouts", "cache", "evaluation", "ip_info", "captive_portal", "log_buffer"}
)

STATE_TEMP_PREFIX: str = ".state-"
STATE_TEMP_SUFFIX: str = ".tmp"

DEFAULT_LOG_BUFFER_ENTRIES: int = 50
DEFAULT_LOG_BUFFER_MAX_AGE_SECONDS: float = 3600.0
DEFAULT_LOG_QUERY_LIMIT: int = 20

CONFIG_SECTION_KEYS: dict[str, frozenset[str]] = {
    "timeouts": frozenset({"reachability", "dns", "ip_info"}),
    "cache": frozenset({"ttl_seconds", "sweep_interval_seconds"}),
    "evaluation": frozenset({"interval_seconds", "portal_poll_seconds"}),
    "ip_info": frozenset({"provider_url"}),
    "captive_portal": frozenset({"check_url", "expect_status"}),
    "log_buffer": frozenset({"entries", "max_age_seconds"}),
}
