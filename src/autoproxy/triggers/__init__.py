"""Trigger variants and their parameter parsing."""

from .kinds import (
    CaptivePortalTrigger,
    DnsResolveTrigger,
    IpInfoTrigger,
    ManualFlagTrigger,
    ReachabilityTrigger,
    TimeWindowTrigger,
    Trigger,
    TriggerType,
)
from .parser import canonical_key, parse_trigger, parse_trigger_set

__all__ = [
    "CaptivePortalTrigger",
    "DnsResolveTrigger",
    "IpInfoTrigger",
    "ManualFlagTrigger",
    "ReachabilityTrigger",
    "TimeWindowTrigger",
    "Trigger",
    "TriggerType",
    "canonical_key",
    "parse_trigger",
    "parse_trigger_set",
]
