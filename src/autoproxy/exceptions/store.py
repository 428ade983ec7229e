"""External collaborator exceptions."""

from __future__ import annotations

from autoproxy.exceptions.base import AutoproxyError


class StoreError(AutoproxyError):
    """Raised when the rule, profile or state store cannot be read or written."""


class ProfileActivationError(AutoproxyError):
    """Raised when the selected profile cannot be activated."""
