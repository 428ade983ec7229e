"""Captive-portal state detection via a connectivity-check endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from autoproxy.constants.probes import (
    CAPTIVE_PORTAL_LOCKED,
    CAPTIVE_PORTAL_UNKNOWN,
    CAPTIVE_PORTAL_UNLOCKED,
    DEFAULT_CAPTIVE_PORTAL_CHECK_URL,
    DEFAULT_CAPTIVE_PORTAL_EXPECT_STATUS,
    NO_CACHE_HEADERS,
)
from autoproxy.probes.http import HttpSessionProvider
from autoproxy.types import CaptivePortalState

logger = logging.getLogger(__name__)


class CaptivePortalDetector(Protocol):
    """Reports whether the current network holds traffic behind a portal."""

    async def get_state(self) -> CaptivePortalState: ...


class HttpCaptivePortalDetector:
    """Classify the network from a connectivity-check request.

    The expected status (``204`` for the default endpoint) means ``unlocked``;
    any other answer, including a redirect, means ``locked``; no answer at all
    means ``unknown``.
    """

    def __init__(
        self,
        sessions: HttpSessionProvider,
        *,
        check_url: str = DEFAULT_CAPTIVE_PORTAL_CHECK_URL,
        expect_status: int = DEFAULT_CAPTIVE_PORTAL_EXPECT_STATUS,
    ) -> None:
        self._sessions = sessions
        self._check_url = check_url
        self._expect_status = expect_status

    async def get_state(self) -> CaptivePortalState:
        session = await self._sessions.get()
        try:
            async with session.get(self._check_url, allow_redirects=False, headers=NO_CACHE_HEADERS) as response:
                status = response.status
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
            logger.debug("Connectivity check failed: %s", exc)
            return CAPTIVE_PORTAL_UNKNOWN

        if status == self._expect_status:
            return CAPTIVE_PORTAL_UNLOCKED
        logger.debug("Connectivity check answered %d, expected %d", status, self._expect_status)
        return CAPTIVE_PORTAL_LOCKED
