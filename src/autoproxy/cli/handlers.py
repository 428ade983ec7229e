"""CLI subcommand handlers."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys

from autoproxy.cli.runtime import build_runtime
from autoproxy.config import load_config
from autoproxy.constants.engine import REASON_MANUAL
from autoproxy.engine import order_rules
from autoproxy.reporting import outcome_to_dict, render_outcome, render_rule_test, to_json
from autoproxy.store import FileStore


async def handle_evaluate(args: argparse.Namespace) -> int:
    """Run one evaluation pass. Exit 1 only when the pass failed."""
    config = load_config(args.config)
    runtime = build_runtime(config, FileStore(args.store, args.state))
    try:
        outcome = await runtime.orchestrator.evaluate(REASON_MANUAL, use_cache=not args.no_cache)
        if args.json:
            payload = outcome_to_dict(outcome)
            payload["logs"] = [entry.to_dict() for entry in runtime.logs.entries(level="warning", limit=None)]
            print(to_json(payload))
        else:
            print(render_outcome(outcome, color=_use_color(args)))
    finally:
        await runtime.close()
    return 1 if outcome.status == "failed" else 0


async def handle_test_rule(args: argparse.Namespace) -> int:
    """Test one stored rule with fresh probes. Exit 0 only when it matches."""
    config = load_config(args.config)
    store = FileStore(args.store, args.state)
    rules = await store.get_rules()
    rule = rules.get(args.rule_id)
    if rule is None:
        print(f"Unknown rule: {args.rule_id}", file=sys.stderr)
        return 2

    runtime = build_runtime(config, store)
    try:
        test = await runtime.orchestrator.test_rule(rule)
    finally:
        await runtime.close()

    if args.json:
        print(to_json(test.to_dict()))
    else:
        print(render_rule_test(rule.id, test, color=_use_color(args)))
    return 0 if test.success else 1


async def handle_watch(args: argparse.Namespace) -> int:
    """Evaluate on a timer and on captive-portal changes until interrupted."""
    config = load_config(args.config)
    runtime = build_runtime(config, FileStore(args.store, args.state))
    scheduler = runtime.scheduler(config)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, scheduler.request_stop)
    try:
        await scheduler.run()
    finally:
        await runtime.close()
    return 0


async def handle_validate(args: argparse.Namespace) -> int:
    """Check config and store; report invalid rules and rules targeting unknown profiles."""
    load_config(args.config)
    store = FileStore(args.store)
    profiles = await store.get_profiles()
    rules = await store.get_rules()

    problems = [f"rule {rule.id!r} is invalid: {rule.fault}" for rule in rules.values() if rule.fault is not None]
    valid = [rule for rule in rules.values() if rule.fault is None]
    problems.extend(
        f"rule {rule.id!r} targets unknown profile {rule.then.set_active_profile!r}"
        for rule in valid
        if rule.then.set_active_profile not in profiles
    )
    problems.extend(f"rule {rule.id!r} has no triggers and can never match" for rule in valid if not rule.when)
    for problem in problems:
        print(f"error: {problem}", file=sys.stderr)
    if problems:
        return 1

    enabled = order_rules(rules)
    print(f"Store OK: {len(profiles)} profiles, {len(rules)} rules ({len(enabled)} enabled)")
    for rule in enabled:
        print(f"  {rule.priority:>5} {rule.id} -> {rule.then.set_active_profile}")
    return 0


def handle_init(args: argparse.Namespace) -> int:
    store = FileStore.create(args.store)
    print(f"Created {store.path} with default profiles and example rules (all disabled)")
    return 0


def _use_color(args: argparse.Namespace) -> bool:
    return not args.no_color and sys.stdout.isatty()
