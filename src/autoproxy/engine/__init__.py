"""Probe caching, rule evaluation and orchestration."""

from .cache import CacheStats, ProbeCache
from .evaluator import RuleEvaluator, order_rules, result_key
from .orchestrator import EvaluationOrchestrator
from .scheduler import Scheduler

__all__ = [
    "CacheStats",
    "EvaluationOrchestrator",
    "ProbeCache",
    "RuleEvaluator",
    "Scheduler",
    "order_rules",
    "result_key",
]
