"""Rule and trigger definition exceptions."""

from __future__ import annotations

from autoproxy.exceptions.base import AutoproxyError


class RuleSchemaError(AutoproxyError, ValueError):
    """Raised when a rule document is malformed."""


class TriggerConfigError(RuleSchemaError):
    """Raised when trigger parameters are malformed or the trigger type is unknown."""
