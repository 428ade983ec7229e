"""Strict schema validation for rule and profile documents.

Validates parsed YAML/JSON mappings at load time. Raises RuleSchemaError on
any violation.
"""

from __future__ import annotations

from typing import Any

from autoproxy.constants.rule_schema import (
    ALLOWED_PROFILE_KEYS,
    ALLOWED_RULE_KEYS,
    REQUIRED_ACTION_KEYS,
    REQUIRED_RULE_KEYS,
    VALID_PROFILE_MODES,
)
from autoproxy.exceptions import RuleSchemaError


def validate_rule(data: Any, source: str) -> None:
    """Validate a raw rule mapping. Trigger parameters are checked by the trigger parser."""
    if not isinstance(data, dict):
        raise RuleSchemaError(f"{source}: rule must be a mapping, got {type(data).__name__}")

    unknown = set(data.keys()) - ALLOWED_RULE_KEYS
    if unknown:
        raise RuleSchemaError(f"{source}: unknown rule keys: {sorted(map(str, unknown))}")

    for key in sorted(REQUIRED_RULE_KEYS):
        if key not in data:
            raise RuleSchemaError(f"{source}: missing required key '{key}'")

    if "id" in data:
        _validate_identifier(data["id"], f"{source}.id")
    if "name" in data and not isinstance(data["name"], str):
        raise RuleSchemaError(f"{source}.name: must be a string")
    for flag in ("enabled", "stopOnMatch"):
        if flag in data and not isinstance(data[flag], bool):
            raise RuleSchemaError(f"{source}.{flag}: must be a boolean")
    if "priority" in data:
        priority = data["priority"]
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise RuleSchemaError(f"{source}.priority: must be an integer, got {priority!r}")

    _validate_action(data["then"], f"{source}.then")


def validate_profile(data: Any, source: str) -> None:
    """Validate a raw profile mapping."""
    if not isinstance(data, dict):
        raise RuleSchemaError(f"{source}: profile must be a mapping, got {type(data).__name__}")

    unknown = set(data.keys()) - ALLOWED_PROFILE_KEYS
    if unknown:
        raise RuleSchemaError(f"{source}: unknown profile keys: {sorted(map(str, unknown))}")

    if "id" in data:
        _validate_identifier(data["id"], f"{source}.id")
    if "name" in data and not isinstance(data["name"], str):
        raise RuleSchemaError(f"{source}.name: must be a string")
    mode = data.get("mode")
    if mode not in VALID_PROFILE_MODES:
        raise RuleSchemaError(f"{source}.mode: must be one of {sorted(VALID_PROFILE_MODES)}, got {mode!r}")
    if mode in data and not isinstance(data[mode], dict):
        raise RuleSchemaError(f"{source}.{mode}: must be a mapping")


def _validate_action(action: Any, source: str) -> None:
    if not isinstance(action, dict):
        raise RuleSchemaError(f"{source}: must be a mapping")
    unknown = set(action.keys()) - REQUIRED_ACTION_KEYS
    if unknown:
        raise RuleSchemaError(f"{source}: unknown keys: {sorted(map(str, unknown))}")
    if "setActiveProfile" not in action:
        raise RuleSchemaError(f"{source}: missing required key 'setActiveProfile'")
    _validate_identifier(action["setActiveProfile"], f"{source}.setActiveProfile")


def _validate_identifier(value: Any, source: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise RuleSchemaError(f"{source}: must be a non-empty string")
