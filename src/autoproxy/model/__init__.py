"""Core data models for autoproxy."""

from .entities import (
    CacheEntry,
    EngineState,
    EvaluationOutcome,
    EvaluationResult,
    ProbeResult,
    Profile,
    Rule,
    RuleAction,
    RuleOutcome,
    RuleTestResult,
)

__all__ = [
    "CacheEntry",
    "EngineState",
    "EvaluationOutcome",
    "EvaluationResult",
    "ProbeResult",
    "Profile",
    "Rule",
    "RuleAction",
    "RuleOutcome",
    "RuleTestResult",
]
