# File: daogen/utils.py
"""
DaoGen - Utility Functions & Helpers
=====================================
Identifier conversions used by the stock property-name mappers, plus the
small file-system and timing helpers shared by the pipeline.

The conversion functions are pure and cached with ``lru_cache``: the same
column names come back for every class generated from a table.
"""

from __future__ import annotations

import functools
import logging
import re
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("daogen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]+")


# ---------------------------------------------------------------------------
# Identifier conversions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert an identifier to snake_case.

    Examples:
        >>> to_snake_case("UserProfile")
        'user_profile'
        >>> to_snake_case("USER_ID")
        'user_id'
        >>> to_snake_case("order-line")
        'order_line'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    return s.strip("_").lower()


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert an identifier to lowerCamelCase.

    Examples:
        >>> to_camel_case("user_id")
        'userId'
        >>> to_camel_case("CREATED_AT")
        'createdAt'
    """
    words: List[str] = [w for w in to_snake_case(name).split("_") if w]
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


def lower_first(text: str) -> str:
    """Lower-case only the first character: ``"UserDao"`` → ``"userDao"``."""
    if not text:
        return text
    return text[0].lower() + text[1:]


def mask_secret(value: Optional[str]) -> str:
    """Render a password for log output without revealing it."""
    if not value:
        return "<none>"
    return "*" * 8


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create *path* (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for logging the duration of pipeline steps.

    Usage:
        with Timer("read schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        if exc_type is None:
            logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)
        else:
            logger.debug(
                "Timer [%s]: aborted by %s after %.4f seconds",
                self.label,
                exc_type.__name__,
                self.elapsed,
            )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_snake_case",
    "to_camel_case",
    "lower_first",
    "mask_secret",
    "ensure_directory",
    "count_lines",
    "Timer",
]
