"""Evaluation passes wired to the rule store, state store and proxy activator.

A pass reads the rules, evaluates them, records the check in engine state,
activates the matched profile and publishes a status. Every failure inside a
pass is reported as a ``failed`` outcome rather than raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from autoproxy.constants.engine import (
    NOTIFICATION_PROFILE_CHANGED,
    REASON_AUTO_MODE,
    REASON_CAPTIVE_PORTAL,
    REASON_FORCED,
    REASON_MANUAL,
    STATUS_AUTO,
    STATUS_ERROR,
    STATUS_MANUAL,
    STATUS_NO_MATCH,
)
from autoproxy.engine.evaluator import RuleEvaluator
from autoproxy.model import EvaluationOutcome, EvaluationResult, Profile, Rule, RuleTestResult
from autoproxy.store import LoggingStatusReporter, ProxyActivator, RuleStore, StateStore, StatusReporter
from autoproxy.types import CaptivePortalState
from autoproxy.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)


class EvaluationOrchestrator:
    """Runs evaluation passes and applies their outcome.

    Only one pass runs at a time: a request made while a pass is in flight
    waits for that pass and receives its outcome.
    """

    def __init__(
        self,
        *,
        rule_store: RuleStore,
        state_store: StateStore,
        activator: ProxyActivator,
        evaluator: RuleEvaluator,
        reporter: StatusReporter | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._rule_store = rule_store
        self._state_store = state_store
        self._activator = activator
        self._evaluator = evaluator
        self._reporter = reporter or LoggingStatusReporter()
        self._clock = clock
        self._in_flight: asyncio.Task[EvaluationOutcome] | None = None

    @property
    def evaluator(self) -> RuleEvaluator:
        return self._evaluator

    @property
    def evaluating(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    async def evaluate(self, reason: str = REASON_MANUAL, *, use_cache: bool = True) -> EvaluationOutcome:
        """Run one evaluation pass, or join the pass already running.

        ``use_cache=False`` probes every trigger afresh; it has no effect when
        joining a pass that is already running.
        """
        if self._in_flight is not None and not self._in_flight.done():
            logger.debug("Evaluation already running; joining it (reason=%s)", reason)
            return await asyncio.shield(self._in_flight)

        self._in_flight = asyncio.create_task(self._run_pass(reason, use_cache), name=f"evaluation-{reason}")
        return await asyncio.shield(self._in_flight)

    async def force_evaluation(self) -> EvaluationOutcome:
        """Discard cached probe results and evaluate immediately."""
        self._evaluator.clear_cache()
        return await self.evaluate(REASON_FORCED)

    async def set_auto_mode(self, enabled: bool) -> EvaluationOutcome | None:
        """Toggle automatic selection.

        Enabling evaluates right away and returns that outcome; disabling
        aborts in-flight probes and returns ``None``.
        """
        await self._state_store.update_state(auto_mode=enabled)
        if enabled:
            logger.info("Auto mode enabled")
            return await self.evaluate(REASON_AUTO_MODE)
        aborted = self._evaluator.abort_all_probes()
        logger.info("Auto mode disabled", extra={"data": {"abortedProbes": aborted}})
        return None

    async def select_profile(self, profile_id: str) -> Profile:
        """Activate ``profile_id`` by hand. Raises ``ProfileActivationError`` if unknown."""
        profile = await self._activator.set_active_profile(profile_id)
        await self._publish_status(profile.name or STATUS_MANUAL)
        return profile

    async def handle_captive_portal_change(self, state: CaptivePortalState) -> EvaluationOutcome:
        logger.info("Captive portal state changed: %s", state, extra={"data": {"state": state}})
        return await self.evaluate(REASON_CAPTIVE_PORTAL)

    async def test_rule(self, rule: Rule) -> RuleTestResult:
        return await self._evaluator.test_rule(rule)

    async def close(self) -> None:
        """Cancel any running pass, abort probes and release network resources."""
        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
            try:
                await self._in_flight
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
        self._in_flight = None
        await self._evaluator.cache.stop_sweeper()
        await self._evaluator.executor.close()

    async def _run_pass(self, reason: str, use_cache: bool) -> EvaluationOutcome:
        logger.info("Starting evaluation pass (reason=%s)", reason)
        result: EvaluationResult | None = None
        try:
            state = await self._state_store.get_state()
            if not state.auto_mode:
                logger.info("Auto mode disabled, skipping rule evaluation")
                return EvaluationOutcome(status="skipped", reason=reason)

            rules = await self._rule_store.get_rules()
            result = await self._evaluator.evaluate_rules(rules, enable_cache=use_cache)

            if not (await self._state_store.get_state()).auto_mode:
                logger.info("Auto mode disabled during evaluation, discarding result")
                return EvaluationOutcome(status="skipped", reason=reason, result=result)

            changes: dict[str, Any] = {"last_check_time": self._clock()}
            if result.rule is not None:
                changes["last_rule_matched"] = result.rule.id
            await self._state_store.update_state(**changes)

            if result.matched and result.rule is not None and result.profile_id is not None:
                profile = await self._activator.set_active_profile(result.profile_id)
                await self._publish_status(result.rule.name or STATUS_AUTO)
                await self._notify(
                    NOTIFICATION_PROFILE_CHANGED,
                    f"Switched to {profile.name} (Rule: {result.rule.name})",
                )
                logger.info(
                    "Profile activated by rule %s: %s",
                    result.rule.id,
                    profile.id,
                    extra={"data": {"ruleId": result.rule.id, "profileId": profile.id, "reason": reason}},
                )
                return EvaluationOutcome(status="matched", reason=reason, result=result)

            await self._publish_status(STATUS_NO_MATCH)
            return EvaluationOutcome(status="no_match", reason=reason, result=result)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.error("Error in rule evaluation: %s", error, extra={"data": {"reason": reason}})
            await self._publish_status(STATUS_ERROR)
            return EvaluationOutcome(status="failed", reason=reason, result=result, error=error)

    async def _publish_status(self, text: str) -> None:
        try:
            await self._reporter.update_status(text)
        except Exception as exc:
            logger.warning("Failed to update status to %r: %s", text, exc)

    async def _notify(self, title: str, message: str) -> None:
        try:
            await self._reporter.notify(title, message)
        except Exception as exc:
            logger.warning("Failed to send notification %r: %s", title, exc)
