"""CLI entrypoint for autoproxy."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from autoproxy import __version__
from autoproxy.cli.handlers import (
    handle_evaluate,
    handle_init,
    handle_test_rule,
    handle_validate,
    handle_watch,
)
from autoproxy.constants.branding import CLI_DESCRIPTION
from autoproxy.exceptions import AutoproxyError, ConfigError, RuleSchemaError, StoreError


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="autoproxy",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Create a store file with default profiles and example rules")
    init.add_argument("-s", "--store", type=Path, required=True, help="Store file to create (YAML)")
    init.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    evaluate = subparsers.add_parser("evaluate", help="Run one evaluation pass and activate the matched profile")
    _add_store_arguments(evaluate)
    evaluate.add_argument("-n", "--no-cache", action="store_true", help="Probe every trigger afresh")
    evaluate.add_argument("--json", action="store_true", help="Print the outcome as JSON")
    evaluate.add_argument("--no-color", action="store_true", help="Disable colored output")

    test_rule = subparsers.add_parser("test-rule", help="Test a single rule with fresh probes")
    _add_store_arguments(test_rule)
    test_rule.add_argument("rule_id", help="Id of the rule to test")
    test_rule.add_argument("--json", action="store_true", help="Print the test result as JSON")
    test_rule.add_argument("--no-color", action="store_true", help="Disable colored output")

    watch = subparsers.add_parser("watch", help="Evaluate periodically and on captive-portal changes")
    _add_store_arguments(watch)

    validate = subparsers.add_parser("validate", help="Validate config and store without probing")
    validate.add_argument("-s", "--store", type=Path, required=True, help="Rule and profile store (YAML)")
    validate.add_argument("-c", "--config", type=Path, help="Explicit config file")
    validate.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def _add_store_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-s", "--store", type=Path, required=True, help="Rule and profile store (YAML)")
    parser.add_argument("-S", "--state", type=Path, default=None, help="Engine state file (JSON); in memory if omitted")
    parser.add_argument("-c", "--config", type=Path, help="Explicit config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s %(message)s",
    )

    try:
        match args.command:
            case "init":
                return handle_init(args)
            case "evaluate":
                return asyncio.run(handle_evaluate(args))
            case "test-rule":
                return asyncio.run(handle_test_rule(args))
            case "watch":
                return asyncio.run(handle_watch(args))
            case "validate":
                return asyncio.run(handle_validate(args))
            case _:
                parser.error(f"Unsupported command: {args.command}")
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except (StoreError, RuleSchemaError) as exc:
        print(f"Store error: {exc}", file=sys.stderr)
        return 2
    except AutoproxyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
