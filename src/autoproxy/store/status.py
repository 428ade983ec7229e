"""Status reporting through the logging system."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingStatusReporter:
    """Logs status changes and notifications, remembering the latest of each."""

    def __init__(self) -> None:
        self.status: str | None = None
        self.last_notification: tuple[str, str] | None = None

    async def update_status(self, text: str) -> None:
        self.status = text
        logger.info("Status: %s", text)

    async def notify(self, title: str, message: str) -> None:
        self.last_notification = (title, message)
        logger.info("%s: %s", title, message)
