"""Shared type aliases for autoproxy."""

from .common import (
    CaptivePortalState,
    DnsMatchMode,
    JsonObject,
    JsonScalar,
    JsonValue,
    LogLevelName,
    OutcomeStatus,
    ProfileMode,
)
from .payloads import EvaluationResultPayload, ProbeResultPayload, StatePayload

__all__ = [
    "CaptivePortalState",
    "DnsMatchMode",
    "EvaluationResultPayload",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "LogLevelName",
    "OutcomeStatus",
    "ProbeResultPayload",
    "ProfileMode",
    "StatePayload",
]
