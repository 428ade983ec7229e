"""Wall-clock helpers."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeAlias

Clock: TypeAlias = Callable[[], int]


def now_ms() -> int:
    """Return the current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000
