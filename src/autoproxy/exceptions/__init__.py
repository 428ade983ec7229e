"""Shared exception hierarchy for autoproxy."""

from __future__ import annotations

from .base import AutoproxyError
from .config import ConfigError
from .rules import RuleSchemaError, TriggerConfigError
from .store import ProfileActivationError, StoreError

__all__ = [
    "AutoproxyError",
    "ConfigError",
    "ProfileActivationError",
    "RuleSchemaError",
    "StoreError",
    "TriggerConfigError",
]
