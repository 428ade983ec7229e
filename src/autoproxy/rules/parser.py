"""Turn raw rule and profile documents into immutable records."""

from __future__ import annotations

import logging
from typing import Any

from autoproxy.constants.rule_schema import DEFAULT_RULE_PRIORITY
from autoproxy.exceptions import RuleSchemaError
from autoproxy.model import Profile, Rule, RuleAction
from autoproxy.rules.schema import validate_profile, validate_rule
from autoproxy.triggers import parse_trigger_set

logger = logging.getLogger(__name__)


def parse_rule(data: Any, source: str = "rule", rule_id: str | None = None) -> Rule:
    """Validate and build a Rule.

    ``rule_id`` is the key the rule was stored under; it is used when the
    document carries no ``id`` and must agree with it otherwise.
    """
    validate_rule(data, source)

    resolved_id = data.get("id", rule_id)
    if resolved_id is None:
        raise RuleSchemaError(f"{source}: missing required key 'id'")
    if rule_id is not None and resolved_id != rule_id:
        raise RuleSchemaError(f"{source}: id {resolved_id!r} does not match its key {rule_id!r}")

    return Rule(
        id=resolved_id,
        name=data.get("name") or resolved_id,
        when=parse_trigger_set(data["when"], source),
        then=RuleAction(set_active_profile=data["then"]["setActiveProfile"].strip()),
        enabled=data.get("enabled", True),
        priority=data.get("priority", DEFAULT_RULE_PRIORITY),
        stop_on_match=data.get("stopOnMatch", True),
    )


def parse_rules(data: Any, source: str = "rules", *, isolate_faults: bool = False) -> dict[str, Rule]:
    """Parse a mapping keyed by rule id, or a list of rules carrying ``id``.

    With ``isolate_faults`` an invalid entry does not fail the whole section:
    it is kept as a faulted rule (see :func:`faulted_rule`) and logged.
    Duplicate ids and a malformed section still raise.
    """
    rules: dict[str, Rule] = {}
    for index, (key, raw) in enumerate(_iter_entries(data, source)):
        location = f"{source}.{key}" if key is not None else f"{source}[{index}]"
        try:
            rule = parse_rule(raw, location, key)
        except RuleSchemaError as exc:
            if not isolate_faults:
                raise
            rule = faulted_rule(raw, str(exc), key, fallback_id=f"rules[{index}]")
            logger.error("Invalid rule %s: %s", rule.id, exc, extra={"data": {"ruleId": rule.id}})
        if rule.id in rules:
            raise RuleSchemaError(f"{location}: duplicate rule id {rule.id!r}")
        rules[rule.id] = rule
    logger.debug("Parsed %d rules from %s", len(rules), source)
    return rules


def faulted_rule(data: Any, fault: str, rule_id: str | None = None, *, fallback_id: str = "rule") -> Rule:
    """Best-effort Rule for a document that failed validation.

    Keeps whatever id, name, priority, enabled flag and target profile are
    readable so the rule still sorts into place and can be reported.
    """
    raw = data if isinstance(data, dict) else {}
    if rule_id is None:
        rule_id = raw.get("id") if isinstance(raw.get("id"), str) and raw.get("id") else fallback_id
    name = raw.get("name") if isinstance(raw.get("name"), str) and raw.get("name") else rule_id
    priority = raw.get("priority")
    if type(priority) is not int:
        priority = DEFAULT_RULE_PRIORITY
    enabled = raw.get("enabled")
    if type(enabled) is not bool:
        enabled = True
    then = raw.get("then")
    profile_id = then.get("setActiveProfile") if isinstance(then, dict) else None
    return Rule(
        id=rule_id,
        name=name,
        when=(),
        then=RuleAction(set_active_profile=profile_id.strip() if isinstance(profile_id, str) else ""),
        enabled=enabled,
        priority=priority,
        fault=fault,
    )


def parse_profile(data: Any, source: str = "profile", profile_id: str | None = None) -> Profile:
    """Validate and build a Profile."""
    validate_profile(data, source)

    resolved_id = data.get("id", profile_id)
    if resolved_id is None:
        raise RuleSchemaError(f"{source}: missing required key 'id'")
    if profile_id is not None and resolved_id != profile_id:
        raise RuleSchemaError(f"{source}: id {resolved_id!r} does not match its key {profile_id!r}")

    settings = {key: value for key, value in data.items() if key not in {"id", "name", "mode"}}
    return Profile(id=resolved_id, name=data.get("name") or resolved_id, mode=data["mode"], settings=settings)


def parse_profiles(data: Any, source: str = "profiles") -> dict[str, Profile]:
    """Parse a mapping keyed by profile id, or a list of profiles carrying ``id``."""
    profiles: dict[str, Profile] = {}
    for key, raw in _iter_entries(data, source):
        location = f"{source}.{key}" if key is not None else f"{source}[{len(profiles)}]"
        profile = parse_profile(raw, location, key)
        if profile.id in profiles:
            raise RuleSchemaError(f"{location}: duplicate profile id {profile.id!r}")
        profiles[profile.id] = profile
    return profiles


def _iter_entries(data: Any, source: str) -> list[tuple[str | None, Any]]:
    if data is None:
        return []
    if isinstance(data, dict):
        return [(str(key), value) for key, value in data.items()]
    if isinstance(data, list):
        return [(None, value) for value in data]
    raise RuleSchemaError(f"{source}: must be a mapping keyed by id or a list")
