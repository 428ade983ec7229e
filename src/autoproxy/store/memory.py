"""Dictionary-backed rule, profile and state store."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from autoproxy.constants.defaults import DEFAULT_PROFILES, DEFAULT_RULES
from autoproxy.model import EngineState, Profile, Rule
from autoproxy.rules import parse_profiles, parse_rules

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Holds rules, profiles and engine state for the lifetime of the process."""

    def __init__(
        self,
        *,
        rules: Mapping[str, Rule] | None = None,
        profiles: Mapping[str, Profile] | None = None,
        state: EngineState | None = None,
    ) -> None:
        self._rules: dict[str, Rule] = dict(rules or {})
        self._profiles: dict[str, Profile] = dict(profiles or {})
        self._state = state or EngineState()

    @classmethod
    def with_defaults(cls) -> InMemoryStore:
        """Store seeded with the stock profiles and disabled example rules."""
        return cls(
            rules=parse_rules(DEFAULT_RULES, "defaults.rules"),
            profiles=parse_profiles(DEFAULT_PROFILES, "defaults.profiles"),
        )

    async def get_rules(self) -> dict[str, Rule]:
        return dict(self._rules)

    async def get_profiles(self) -> dict[str, Profile]:
        return dict(self._profiles)

    async def get_profile(self, profile_id: str) -> Profile | None:
        return self._profiles.get(profile_id)

    async def get_state(self) -> EngineState:
        return self._state

    async def update_state(self, **changes: Any) -> EngineState:
        self._state = replace(self._state, **changes)
        logger.debug("State updated: %s", sorted(changes))
        return self._state

    def put_rule(self, rule: Rule) -> None:
        self._rules[rule.id] = rule

    def remove_rule(self, rule_id: str) -> None:
        self._rules.pop(rule_id, None)

    def put_profile(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile
