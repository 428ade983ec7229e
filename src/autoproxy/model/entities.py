"""Core data records for rule evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from autoproxy.triggers import Trigger
from autoproxy.types import (
    EvaluationResultPayload,
    JsonObject,
    JsonValue,
    OutcomeStatus,
    ProbeResultPayload,
    ProfileMode,
    StatePayload,
)
from autoproxy.utils import now_ms


@dataclass(frozen=True)
class ProbeResult:
    """Snapshot of one trigger measurement taken at ``timestamp`` (epoch ms)."""

    success: bool
    timestamp: int
    data: JsonValue = None
    error: str | None = None

    @classmethod
    def passed(cls, data: JsonValue = None) -> ProbeResult:
        return cls(success=True, timestamp=now_ms(), data=data)

    @classmethod
    def failed(cls, error: str | None = None, data: JsonValue = None) -> ProbeResult:
        return cls(success=False, timestamp=now_ms(), data=data, error=error)

    def to_dict(self) -> ProbeResultPayload:
        payload: ProbeResultPayload = {"success": self.success, "timestamp": self.timestamp}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class CacheEntry:
    """Cached probe result and its absolute expiry (epoch ms)."""

    result: ProbeResult
    expiry: int


@dataclass(frozen=True)
class RuleAction:
    """What a matching rule does."""

    set_active_profile: str


@dataclass(frozen=True)
class Rule:
    """A prioritized AND-combination of triggers selecting a profile.

    A rule whose document failed validation is kept with ``fault`` set so it
    still occupies its priority slot; it never matches.
    """

    id: str
    name: str
    when: tuple[Trigger, ...]
    then: RuleAction
    enabled: bool = True
    priority: int = 100
    stop_on_match: bool = True
    fault: str | None = None

    def to_dict(self) -> JsonObject:
        return {
            "id": self.id,
            "name": self.name,
            "enabled": self.enabled,
            "priority": self.priority,
            "stopOnMatch": self.stop_on_match,
            "when": {trigger.kind.value: trigger.params() for trigger in self.when},
            "then": {"setActiveProfile": self.then.set_active_profile},
        }


@dataclass(frozen=True)
class Profile:
    """A named proxy configuration handed to the proxy-activation layer."""

    id: str
    name: str
    mode: ProfileMode
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation pass over the enabled rules."""

    matched: bool
    results: dict[str, ProbeResult]
    evaluation_time: float
    rule: Rule | None = None
    profile_id: str | None = None

    def to_dict(self) -> EvaluationResultPayload:
        payload: EvaluationResultPayload = {
            "matched": self.matched,
            "results": {key: result.to_dict() for key, result in self.results.items()},
            "evaluationTime": self.evaluation_time,
        }
        if self.rule is not None:
            payload["rule"] = self.rule.to_dict()
        if self.profile_id is not None:
            payload["profileId"] = self.profile_id
        return payload


@dataclass(frozen=True)
class RuleOutcome:
    """Per-rule verdict with every trigger's result."""

    matched: bool
    results: dict[str, ProbeResult]
    error: str | None = None


@dataclass(frozen=True)
class RuleTestResult:
    """Answer to an interactive single-rule test."""

    success: bool
    results: dict[str, ProbeResult]
    error: str | None = None

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {
            "success": self.success,
            "results": {key: dict(result.to_dict()) for key, result in self.results.items()},
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class EngineState:
    """Externally persisted engine state."""

    auto_mode: bool = True
    last_check_time: int | None = None
    last_rule_matched: str | None = None
    active_profile_id: str | None = None

    def to_dict(self) -> StatePayload:
        payload: StatePayload = {"autoMode": self.auto_mode}
        if self.last_check_time is not None:
            payload["lastCheckTime"] = self.last_check_time
        if self.last_rule_matched is not None:
            payload["lastRuleMatched"] = self.last_rule_matched
        if self.active_profile_id is not None:
            payload["activeProfileId"] = self.active_profile_id
        return payload


@dataclass(frozen=True)
class EvaluationOutcome:
    """What the orchestrator did with one evaluation request."""

    status: OutcomeStatus
    reason: str
    result: EvaluationResult | None = None
    error: str | None = None

    @property
    def profile_id(self) -> str | None:
        return self.result.profile_id if self.result is not None else None
