"""YAML rule/profile documents with JSON-persisted engine state.

The store document looks like::

    profiles:
      direct: {name: Direct Connection, mode: direct}
    rules:
      office:
        priority: 10
        when: {dnsResolve: {hostname: intranet.corp, expectIPCIDR: [10.0.0.0/8]}}
        then: {setActiveProfile: direct}

Both sections may also be lists whose entries carry an ``id``. The document is
re-read on every call so edits take effect on the next evaluation pass.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from autoproxy.constants.config import STATE_TEMP_PREFIX, STATE_TEMP_SUFFIX
from autoproxy.constants.defaults import DEFAULT_PROFILES, DEFAULT_RULES
from autoproxy.exceptions import RuleSchemaError, StoreError
from autoproxy.io import load_json_file, load_yaml_file, write_json_atomic, write_yaml
from autoproxy.model import EngineState, Profile, Rule
from autoproxy.rules import parse_profiles, parse_rules

logger = logging.getLogger(__name__)

STORE_ALLOWED_KEYS: frozenset[str] = frozenset({"profiles", "rules"})

_STATE_FIELDS: dict[str, tuple[str, type]] = {
    "autoMode": ("auto_mode", bool),
    "lastCheckTime": ("last_check_time", int),
    "lastRuleMatched": ("last_rule_matched", str),
    "activeProfileId": ("active_profile_id", str),
}


class FileStore:
    """Rule store backed by a YAML file; state store backed by an optional JSON file.

    Without ``state_path`` the engine state lives in memory only. The state
    file is re-read on every ``get_state`` so writes from another process are
    picked up.
    """

    def __init__(self, path: Path, state_path: Path | None = None) -> None:
        self._path = path
        self._state_path = state_path
        self._state: EngineState | None = None

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def create(cls, path: Path, state_path: Path | None = None) -> FileStore:
        """Write a store document seeded with the default profiles and rules."""
        if path.exists():
            raise StoreError(f"Store file already exists: {path}")
        write_yaml(path, {"profiles": DEFAULT_PROFILES, "rules": DEFAULT_RULES})
        logger.info("Created store with default profiles and rules: %s", path)
        return cls(path, state_path)

    async def get_rules(self) -> dict[str, Rule]:
        document = self._load_document()
        try:
            return parse_rules(document.get("rules"), f"{self._path}:rules", isolate_faults=True)
        except RuleSchemaError as exc:
            raise StoreError(str(exc)) from exc

    async def get_profiles(self) -> dict[str, Profile]:
        document = self._load_document()
        try:
            return parse_profiles(document.get("profiles"), f"{self._path}:profiles")
        except RuleSchemaError as exc:
            raise StoreError(str(exc)) from exc

    async def get_profile(self, profile_id: str) -> Profile | None:
        return (await self.get_profiles()).get(profile_id)

    async def get_state(self) -> EngineState:
        if self._state_path is not None and self._state_path.exists():
            self._state = self._load_state()
        elif self._state is None:
            self._state = EngineState()
        return self._state

    async def update_state(self, **changes: Any) -> EngineState:
        state = replace(await self.get_state(), **changes)
        if self._state_path is not None:
            try:
                write_json_atomic(
                    path=self._state_path,
                    payload=state.to_dict(),
                    temp_prefix=STATE_TEMP_PREFIX,
                    temp_suffix=STATE_TEMP_SUFFIX,
                )
            except OSError as exc:
                raise StoreError(f"Cannot write state file {self._state_path}: {exc}") from exc
        self._state = state
        return state

    def _load_document(self) -> dict[str, Any]:
        try:
            raw = load_yaml_file(self._path)
        except FileNotFoundError as exc:
            raise StoreError(f"Store file not found: {self._path}") from exc
        except OSError as exc:
            raise StoreError(f"Cannot read store file {self._path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise StoreError(f"Invalid YAML in store file {self._path}: {exc}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise StoreError(f"Store file {self._path} must be a YAML mapping")
        unknown = sorted(str(key) for key in set(raw) - STORE_ALLOWED_KEYS)
        if unknown:
            raise StoreError(f"Store file {self._path}: unknown keys {unknown}")
        return raw

    def _load_state(self) -> EngineState:
        if self._state_path is None or not self._state_path.exists():
            return EngineState()
        try:
            raw = load_json_file(self._state_path)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read state file {self._state_path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StoreError(f"State file {self._state_path} must contain a JSON object")

        values: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in _STATE_FIELDS:
                logger.warning("Ignoring unknown state key %r in %s", key, self._state_path)
                continue
            field_name, expected = _STATE_FIELDS[key]
            if value is None:
                continue
            if type(value) is not expected:
                raise StoreError(f"State file {self._state_path}: {key} must be {expected.__name__}")
            values[field_name] = value
        return EngineState(**values)
