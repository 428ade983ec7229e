"""In-memory ring buffer of recent structured log records."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from autoproxy.constants.config import (
    DEFAULT_LOG_BUFFER_ENTRIES,
    DEFAULT_LOG_BUFFER_MAX_AGE_SECONDS,
    DEFAULT_LOG_QUERY_LIMIT,
)
from autoproxy.types import JsonValue, LogLevelName


@dataclass(frozen=True)
class LogEntry:
    """One captured record. ``timestamp`` is epoch seconds."""

    timestamp: float
    level: str
    component: str
    message: str
    data: JsonValue = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "timestamp": self.timestamp,
            "level": self.level,
            "component": self.component,
            "message": self.message,
        }
        if self.data is not None:
            payload["data"] = self.data
        return payload


class LogBuffer(logging.Handler):
    """Logging handler keeping the most recent records for inspection.

    ``component`` is the logger name relative to the package, so records from
    ``autoproxy.engine.evaluator`` are stored as ``engine.evaluator``. Structured
    payloads passed as ``extra={"data": ...}`` are kept alongside the message.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_LOG_BUFFER_ENTRIES,
        *,
        max_age_seconds: float = DEFAULT_LOG_BUFFER_MAX_AGE_SECONDS,
        level: int = logging.DEBUG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(level)
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._max_age_seconds = max_age_seconds
        self._clock = clock
        self._guard = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=record.created,
                level=record.levelname,
                component=_component(record.name),
                message=record.getMessage(),
                data=getattr(record, "data", None),
            )
        except Exception:
            self.handleError(record)
            return
        with self._guard:
            self._entries.append(entry)

    def entries(
        self,
        level: LogLevelName | int | None = None,
        component: str | None = None,
        limit: int | None = DEFAULT_LOG_QUERY_LIMIT,
    ) -> list[LogEntry]:
        """Newest-first entries at or above ``level`` from ``component``."""
        threshold = _level_number(level) if level is not None else logging.NOTSET
        self._drop_expired()
        with self._guard:
            snapshot = list(self._entries)

        selected = [
            entry
            for entry in reversed(snapshot)
            if logging.getLevelNamesMapping().get(entry.level, logging.NOTSET) >= threshold
            and (component is None or entry.component == component or entry.component.startswith(f"{component}."))
        ]
        return selected if limit is None else selected[:limit]

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _drop_expired(self) -> None:
        cutoff = self._clock() - self._max_age_seconds
        with self._guard:
            while self._entries and self._entries[0].timestamp < cutoff:
                self._entries.popleft()


def _component(logger_name: str) -> str:
    prefix = f"{__package__}."
    return logger_name.removeprefix(prefix) if logger_name.startswith(prefix) else logger_name


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    try:
        return logging.getLevelNamesMapping()[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None
