"""Network and system probes backing rule triggers."""

from .captive_portal import CaptivePortalDetector, HttpCaptivePortalDetector
from .executor import ProbeExecutor, ProbeTimeouts
from .http import HttpSessionProvider
from .resolver import DnsAnswer, Resolver, SystemResolver

__all__ = [
    "CaptivePortalDetector",
    "DnsAnswer",
    "HttpCaptivePortalDetector",
    "HttpSessionProvider",
    "ProbeExecutor",
    "ProbeTimeouts",
    "Resolver",
    "SystemResolver",
]
