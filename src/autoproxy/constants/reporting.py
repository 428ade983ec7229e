"""Terminal rendering constants."""

from __future__ import annotations

ANSI_RESET: str = "\033[0m"
ANSI_RED: str = "\033[31;1m"
ANSI_YELLOW: str = "\033[33;1m"
ANSI_GREEN: str = "\033[32;1m"
ANSI_DIM: str = "\033[2m"

OUTCOME_COLORS: dict[str, str] = {
    "matched": ANSI_GREEN,
    "no_match": ANSI_YELLOW,
    "skipped": ANSI_DIM,
    "failed": ANSI_RED,
}

PASS_MARK: str = "PASS"
FAIL_MARK: str = "FAIL"
