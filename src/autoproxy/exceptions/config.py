"""Configuration-related exceptions."""

from __future__ import annotations

from autoproxy.exceptions.base import AutoproxyError


class ConfigError(AutoproxyError, ValueError):
    """Raised when engine configuration is invalid."""
