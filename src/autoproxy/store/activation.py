"""Profile activation that records the active profile in engine state."""

from __future__ import annotations

import logging

from autoproxy.exceptions import ProfileActivationError
from autoproxy.model import Profile
from autoproxy.store.protocols import RuleStore, StateStore

logger = logging.getLogger(__name__)


class StoreProfileActivator:
    """Resolves the profile from the rule store and marks it active.

    Applying proxy settings to a browser or operating system is left to
    whatever reads ``activeProfileId`` from the state store.
    """

    def __init__(self, rule_store: RuleStore, state_store: StateStore) -> None:
        self._rule_store = rule_store
        self._state_store = state_store

    async def set_active_profile(self, profile_id: str) -> Profile:
        profile = await self._rule_store.get_profile(profile_id)
        if profile is None:
            raise ProfileActivationError(f"Profile not found: {profile_id}")
        await self._state_store.update_state(active_profile_id=profile.id)
        logger.info(
            "Proxy profile activated: %s (%s)",
            profile.name,
            profile.mode,
            extra={"data": {"profileId": profile.id, "mode": profile.mode}},
        )
        return profile
