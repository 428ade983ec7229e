"""Typed serialized payloads emitted by the engine."""

from __future__ import annotations

from typing import NotRequired, TypedDict

from autoproxy.types.common import JsonObject, JsonValue


class ProbeResultPayload(TypedDict):
    """Serialized probe result."""

    success: bool
    timestamp: int
    data: NotRequired[JsonValue]
    error: NotRequired[str]


class EvaluationResultPayload(TypedDict):
    """Serialized evaluation pass."""

    matched: bool
    results: dict[str, ProbeResultPayload]
    evaluationTime: float
    rule: NotRequired[JsonObject]
    profileId: NotRequired[str]


class StatePayload(TypedDict, total=False):
    """Persisted engine state."""

    autoMode: bool
    lastCheckTime: int
    lastRuleMatched: str
    activeProfileId: str
