"""Config data model for the autoproxy engine."""

from __future__ import annotations

from dataclasses import dataclass

from autoproxy.constants.config import DEFAULT_LOG_BUFFER_ENTRIES, DEFAULT_LOG_BUFFER_MAX_AGE_SECONDS
from autoproxy.constants.engine import (
    DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_EVALUATION_INTERVAL_SECONDS,
    DEFAULT_PORTAL_POLL_SECONDS,
)
from autoproxy.constants.probes import (
    DEFAULT_CAPTIVE_PORTAL_CHECK_URL,
    DEFAULT_CAPTIVE_PORTAL_EXPECT_STATUS,
    DEFAULT_DNS_TIMEOUT,
    DEFAULT_IP_INFO_TIMEOUT,
    DEFAULT_IP_INFO_URL,
    DEFAULT_REACHABILITY_TIMEOUT,
)
from autoproxy.probes import ProbeTimeouts


@dataclass(frozen=True)
class AutoproxyConfig:
    """Resolved engine config. Durations are in seconds."""

    reachability_timeout: float = DEFAULT_REACHABILITY_TIMEOUT
    dns_timeout: float = DEFAULT_DNS_TIMEOUT
    ip_info_timeout: float = DEFAULT_IP_INFO_TIMEOUT
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    cache_sweep_interval_seconds: float = DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS
    evaluation_interval_seconds: float = DEFAULT_EVALUATION_INTERVAL_SECONDS
    portal_poll_seconds: float = DEFAULT_PORTAL_POLL_SECONDS
    ip_info_url: str = DEFAULT_IP_INFO_URL
    captive_portal_check_url: str = DEFAULT_CAPTIVE_PORTAL_CHECK_URL
    captive_portal_expect_status: int = DEFAULT_CAPTIVE_PORTAL_EXPECT_STATUS
    log_buffer_entries: int = DEFAULT_LOG_BUFFER_ENTRIES
    log_buffer_max_age_seconds: float = DEFAULT_LOG_BUFFER_MAX_AGE_SECONDS

    @property
    def probe_timeouts(self) -> ProbeTimeouts:
        return ProbeTimeouts(
            reachability=self.reachability_timeout,
            dns=self.dns_timeout,
            ip_info=self.ip_info_timeout,
        )

    @property
    def portal_polling_enabled(self) -> bool:
        return self.portal_poll_seconds > 0
