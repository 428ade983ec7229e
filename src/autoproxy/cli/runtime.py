"""Assemble the engine from config and a store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autoproxy.config import AutoproxyConfig
from autoproxy.diagnostics import LogBuffer
from autoproxy.engine import EvaluationOrchestrator, ProbeCache, RuleEvaluator, Scheduler
from autoproxy.probes import HttpCaptivePortalDetector, HttpSessionProvider, ProbeExecutor
from autoproxy.store import FileStore, StatusReporter, StoreProfileActivator


@dataclass
class Runtime:
    """Wired engine components for one CLI invocation."""

    orchestrator: EvaluationOrchestrator
    portal_detector: HttpCaptivePortalDetector
    logs: LogBuffer

    def scheduler(self, config: AutoproxyConfig) -> Scheduler:
        return Scheduler(
            self.orchestrator,
            interval=config.evaluation_interval_seconds,
            portal_detector=self.portal_detector if config.portal_polling_enabled else None,
            portal_poll_interval=config.portal_poll_seconds,
            sweep_interval=config.cache_sweep_interval_seconds,
        )

    async def close(self) -> None:
        await self.orchestrator.close()
        logging.getLogger("autoproxy").removeHandler(self.logs)


def build_runtime(
    config: AutoproxyConfig,
    store: FileStore,
    *,
    reporter: StatusReporter | None = None,
) -> Runtime:
    sessions = HttpSessionProvider()
    detector = HttpCaptivePortalDetector(
        sessions,
        check_url=config.captive_portal_check_url,
        expect_status=config.captive_portal_expect_status,
    )
    executor = ProbeExecutor(
        timeouts=config.probe_timeouts,
        sessions=sessions,
        portal_detector=detector,
        ip_info_url=config.ip_info_url,
    )
    evaluator = RuleEvaluator(executor, ProbeCache(config.cache_ttl_seconds))
    orchestrator = EvaluationOrchestrator(
        rule_store=store,
        state_store=store,
        activator=StoreProfileActivator(store, store),
        evaluator=evaluator,
        reporter=reporter,
    )

    logs = LogBuffer(config.log_buffer_entries, max_age_seconds=config.log_buffer_max_age_seconds)
    logging.getLogger("autoproxy").addHandler(logs)
    return Runtime(orchestrator=orchestrator, portal_detector=detector, logs=logs)
