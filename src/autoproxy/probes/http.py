"""Shared aiohttp session management for network probes."""

from __future__ import annotations

import logging

import aiohttp

from autoproxy import __version__

logger = logging.getLogger(__name__)

USER_AGENT: str = f"autoproxy/{__version__}"


class HttpSessionProvider:
    """Lazily creates one ``aiohttp.ClientSession`` and owns its lifetime.

    A session passed in by the caller is used as-is and never closed here.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owned = session is None

    async def get(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owned = True
            logger.debug("Opened probe HTTP session")
        return self._session

    async def close(self) -> None:
        """Close the session if this provider created it."""
        if self._owned and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed probe HTTP session")
        self._session = None
