"""Collaborator interfaces the engine depends on."""

from __future__ import annotations

from typing import Any, Protocol

from autoproxy.model import EngineState, Profile, Rule


class RuleStore(Protocol):
    """Source of rule and profile definitions."""

    async def get_rules(self) -> dict[str, Rule]: ...

    async def get_profiles(self) -> dict[str, Profile]: ...

    async def get_profile(self, profile_id: str) -> Profile | None: ...


class StateStore(Protocol):
    """Persisted engine state. ``update_state`` merges the given fields."""

    async def get_state(self) -> EngineState: ...

    async def update_state(self, **changes: Any) -> EngineState: ...


class ProxyActivator(Protocol):
    """Applies a profile to the system; raises ``ProfileActivationError`` on failure."""

    async def set_active_profile(self, profile_id: str) -> Profile: ...


class StatusReporter(Protocol):
    """User-visible status text and notifications."""

    async def update_status(self, text: str) -> None: ...

    async def notify(self, title: str, message: str) -> None: ...
