"""Background trigger sources: the periodic timer and captive-portal polling."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from autoproxy.constants.engine import (
    DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS,
    DEFAULT_EVALUATION_INTERVAL_SECONDS,
    DEFAULT_PORTAL_POLL_SECONDS,
    REASON_STARTUP,
    REASON_TIMER,
)
from autoproxy.engine.orchestrator import EvaluationOrchestrator
from autoproxy.probes import CaptivePortalDetector
from autoproxy.types import CaptivePortalState

logger = logging.getLogger(__name__)


class Scheduler:
    """Keeps an orchestrator evaluating until stopped.

    Evaluates once on start, then every ``interval`` seconds. With a portal
    detector and a positive ``portal_poll_interval`` it also polls the portal
    state and evaluates on every transition.
    """

    def __init__(
        self,
        orchestrator: EvaluationOrchestrator,
        *,
        interval: float = DEFAULT_EVALUATION_INTERVAL_SECONDS,
        portal_detector: CaptivePortalDetector | None = None,
        portal_poll_interval: float = DEFAULT_PORTAL_POLL_SECONDS,
        sweep_interval: float = DEFAULT_CACHE_SWEEP_INTERVAL_SECONDS,
        initial_evaluation: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._orchestrator = orchestrator
        self._interval = interval
        self._portal_detector = portal_detector
        self._portal_poll_interval = portal_poll_interval
        self._sweep_interval = sweep_interval
        self._initial_evaluation = initial_evaluation
        self._stop_requested = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Drive evaluations until ``stop`` is called."""
        self._stop_requested.clear()
        cache = self._orchestrator.evaluator.cache
        cache.start_sweeper(self._sweep_interval)

        workers = [asyncio.create_task(self._evaluate_periodically(), name="evaluation-timer")]
        if self._portal_detector is not None and self._portal_poll_interval > 0:
            workers.append(asyncio.create_task(self._poll_portal(self._portal_detector), name="portal-poller"))
        logger.info(
            "Scheduler started",
            extra={"data": {"intervalSeconds": self._interval, "portalPollSeconds": self._portal_poll_interval}},
        )

        try:
            await self._stop_requested.wait()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            await cache.stop_sweeper()
            logger.info("Scheduler stopped")

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="scheduler")
        return self._task

    def request_stop(self) -> None:
        self._stop_requested.set()

    async def stop(self) -> None:
        self.request_stop()
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _evaluate_periodically(self) -> None:
        if self._initial_evaluation:
            await self._orchestrator.evaluate(REASON_STARTUP)
        while True:
            await asyncio.sleep(self._interval)
            logger.debug("Rule evaluation timer fired")
            await self._orchestrator.evaluate(REASON_TIMER)

    async def _poll_portal(self, detector: CaptivePortalDetector) -> None:
        last: CaptivePortalState | None = None
        while True:
            try:
                state = await detector.get_state()
            except Exception as exc:
                logger.warning("Captive portal poll failed: %s", exc)
            else:
                if last is not None and state != last:
                    await self._orchestrator.handle_captive_portal_change(state)
                last = state
            await asyncio.sleep(self._portal_poll_interval)
