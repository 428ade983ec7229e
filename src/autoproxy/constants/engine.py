"""Evaluation engine defaults."""

from __future__ import annotations

DEFAULT_CACHE_TTL_SECONDS: float = 60.0
DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS: float = 300.0
DEFAULT_EVALUATION_INTERVAL_SECONDS: float = 300.0
DEFAULT_PORTAL_POLL_SECONDS: float = 30.0

# Suffix of the synthetic result recorded when a rule faults mid-evaluation.
RULE_ERROR_SUFFIX: str = "error"

STATUS_ERROR: str = "Error"
STATUS_NO_MATCH: str = "No Match"
STATUS_AUTO: str = "Auto"
STATUS_MANUAL: str = "Manual"

NOTIFICATION_PROFILE_CHANGED: str = "Proxy Profile Changed"

REASON_MANUAL: str = "manual"
REASON_TIMER: str = "timer"
REASON_CAPTIVE_PORTAL: str = "captive-portal"
REASON_AUTO_MODE: str = "auto-mode"
REASON_FORCED: str = "forced"
REASON_STARTUP: str = "startup"
