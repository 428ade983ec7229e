"""Human-readable and JSON rendering of evaluation results."""

from __future__ import annotations

import json

from autoproxy.constants.reporting import ANSI_GREEN, ANSI_RED, ANSI_RESET, FAIL_MARK, OUTCOME_COLORS, PASS_MARK
from autoproxy.model import EvaluationOutcome, ProbeResult, RuleTestResult
from autoproxy.types import JsonObject


def _colorize(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{ANSI_RESET}" if enabled and color else text


def render_probe_results(results: dict[str, ProbeResult], *, color: bool = False) -> list[str]:
    """One line per probe result: mark, key, then error or data summary."""
    lines: list[str] = []
    for key, result in results.items():
        mark = (
            _colorize(PASS_MARK, ANSI_GREEN, color) if result.success else _colorize(FAIL_MARK, ANSI_RED, color)
        )
        detail = result.error if result.error else _summarize(result.data)
        lines.append(f"  {mark} {key}" + (f": {detail}" if detail else ""))
    return lines


def render_outcome(outcome: EvaluationOutcome, *, color: bool = False) -> str:
    status = _colorize(outcome.status, OUTCOME_COLORS.get(outcome.status, ""), color)
    lines = [f"Evaluation ({outcome.reason}): {status}"]
    result = outcome.result
    if result is not None:
        if result.rule is not None:
            lines.append(f"Rule: {result.rule.name} ({result.rule.id}) -> profile {result.profile_id}")
        lines.append(f"Evaluated in {result.evaluation_time:.1f} ms")
        lines.extend(render_probe_results(result.results, color=color))
    if outcome.error:
        lines.append(f"Error: {outcome.error}")
    return "\n".join(lines)


def render_rule_test(rule_id: str, test: RuleTestResult, *, color: bool = False) -> str:
    verdict = _colorize("matched", ANSI_GREEN, color) if test.success else _colorize("not matched", ANSI_RED, color)
    lines = [f"Rule {rule_id}: {verdict}"]
    lines.extend(render_probe_results(test.results, color=color))
    if test.error:
        lines.append(f"Error: {test.error}")
    return "\n".join(lines)


def outcome_to_dict(outcome: EvaluationOutcome) -> JsonObject:
    payload: JsonObject = {"status": outcome.status, "reason": outcome.reason}
    if outcome.result is not None:
        payload["result"] = dict(outcome.result.to_dict())
    if outcome.error is not None:
        payload["error"] = outcome.error
    return payload


def to_json(payload: object) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def _summarize(data: object) -> str:
    if data is None:
        return ""
    if isinstance(data, dict):
        return ", ".join(f"{key}={value}" for key, value in data.items() if not isinstance(value, dict))
    return str(data)
