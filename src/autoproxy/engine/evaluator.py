"""Priority-ordered rule evaluation against cached live probes.

Rules are scanned in ascending priority and the first rule whose triggers all
succeed wins. Within a rule every trigger is probed, concurrently, so the
diagnostic results are complete; across rules the scan stops at the first
match.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping

from autoproxy.constants.engine import RULE_ERROR_SUFFIX
from autoproxy.engine.cache import CacheStats, ProbeCache
from autoproxy.model import EvaluationResult, ProbeResult, Rule, RuleOutcome, RuleTestResult
from autoproxy.probes import ProbeExecutor
from autoproxy.triggers import Trigger

logger = logging.getLogger(__name__)


def result_key(rule_id: str, suffix: str) -> str:
    """Key under which a rule's trigger (or fault) result is reported."""
    return f"{rule_id}_{suffix}"


def order_rules(rules: Mapping[str, Rule] | Iterable[Rule]) -> list[Rule]:
    """Enabled rules sorted by ascending priority; ties keep encounter order."""
    candidates = rules.values() if isinstance(rules, Mapping) else rules
    return sorted((rule for rule in candidates if rule.enabled), key=lambda rule: rule.priority)


class RuleEvaluator:
    """Decides which rule, if any, fires under current network conditions."""

    def __init__(self, executor: ProbeExecutor, cache: ProbeCache) -> None:
        self._executor = executor
        self._cache = cache

    @property
    def cache(self) -> ProbeCache:
        return self._cache

    @property
    def executor(self) -> ProbeExecutor:
        return self._executor

    async def evaluate_rules(
        self,
        rules: Mapping[str, Rule] | Iterable[Rule],
        *,
        enable_cache: bool = True,
    ) -> EvaluationResult:
        """Run one evaluation pass and return the first matching rule, if any."""
        started_at = time.perf_counter()
        ordered = order_rules(rules)
        logger.info("Starting rule evaluation", extra={"data": {"enabledRules": len(ordered)}})

        if not ordered:
            logger.warning("No enabled rules found")
            return EvaluationResult(matched=False, results={}, evaluation_time=_elapsed_ms(started_at))

        results: dict[str, ProbeResult] = {}
        for rule in ordered:
            logger.debug("Evaluating rule %s (%s)", rule.id, rule.name)
            try:
                outcome = await self.evaluate_rule(rule, enable_cache=enable_cache)
            except Exception as exc:
                logger.error("Error evaluating rule %s: %s", rule.id, exc, extra={"data": {"ruleId": rule.id}})
                results[result_key(rule.id, RULE_ERROR_SUFFIX)] = ProbeResult.failed(str(exc) or type(exc).__name__)
                continue

            results.update(outcome.results)
            if outcome.error is not None:
                results[result_key(rule.id, RULE_ERROR_SUFFIX)] = ProbeResult.failed(outcome.error)
                continue

            if outcome.matched:
                logger.info(
                    "Rule matched: %s -> %s",
                    rule.id,
                    rule.then.set_active_profile,
                    extra={"data": {"ruleId": rule.id, "profileId": rule.then.set_active_profile}},
                )
                return EvaluationResult(
                    matched=True,
                    rule=rule,
                    profile_id=rule.then.set_active_profile,
                    results=results,
                    evaluation_time=_elapsed_ms(started_at),
                )

        logger.info("No rules matched", extra={"data": {"evaluatedRules": len(ordered)}})
        return EvaluationResult(matched=False, results=results, evaluation_time=_elapsed_ms(started_at))

    async def evaluate_rule(self, rule: Rule, *, enable_cache: bool = True) -> RuleOutcome:
        """Probe every trigger of ``rule``; it matches only if all succeed.

        A rule that failed validation, or a trigger that raises instead of
        producing a result, marks the rule as faulted: the outcome carries
        ``error`` and never matches.
        """
        if rule.fault is not None:
            logger.warning("Skipping invalid rule %s: %s", rule.id, rule.fault)
            return RuleOutcome(matched=False, results={}, error=rule.fault)

        if not rule.when:
            logger.warning("Rule has no triggers: %s", rule.id)
            return RuleOutcome(matched=False, results={})

        gathered = await asyncio.gather(
            *(self._probe(trigger, enable_cache) for trigger in rule.when),
            return_exceptions=True,
        )

        results: dict[str, ProbeResult] = {}
        errors: list[str] = []
        for trigger, outcome in zip(rule.when, gathered, strict=True):
            if isinstance(outcome, ProbeResult):
                results[result_key(rule.id, trigger.kind.value)] = outcome
                logger.debug(
                    "Trigger %s for rule %s: %s",
                    trigger.kind.value,
                    rule.id,
                    "succeeded" if outcome.success else f"failed ({outcome.error})",
                )
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error("Error testing trigger %s for rule %s: %s", trigger.kind.value, rule.id, outcome)
            errors.append(f"{trigger.kind.value}: {outcome}")

        if errors:
            return RuleOutcome(matched=False, results=results, error="; ".join(errors))

        matched = all(result.success for result in results.values())
        logger.debug("Rule %s evaluated: matched=%s triggers=%d", rule.id, matched, len(rule.when))
        return RuleOutcome(matched=matched, results=results)

    async def test_rule(self, rule: Rule) -> RuleTestResult:
        """Evaluate one ad-hoc rule with fresh probes, bypassing the cache."""
        logger.info("Testing rule manually: %s (%s)", rule.id, rule.name)
        try:
            outcome = await self.evaluate_rule(rule, enable_cache=False)
        except Exception as exc:
            logger.error("Error testing rule %s: %s", rule.id, exc)
            return RuleTestResult(success=False, results={}, error=str(exc) or type(exc).__name__)
        return RuleTestResult(success=outcome.matched, results=outcome.results, error=outcome.error)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def abort_all_probes(self) -> int:
        """Abort in-flight probes. Cached results stay valid until their TTL."""
        return self._executor.abort_all()

    async def _probe(self, trigger: Trigger, enable_cache: bool) -> ProbeResult:
        return await self._cache.get_or_probe(trigger, self._executor.run, use_cache=enable_cache)


def _elapsed_ms(started_at: float) -> float:
    return (time.perf_counter() - started_at) * 1000.0
