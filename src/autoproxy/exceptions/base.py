"""Root exception for autoproxy."""

from __future__ import annotations


class AutoproxyError(Exception):
    """Base class for all autoproxy errors."""
