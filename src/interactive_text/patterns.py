"""Pattern registry — default regexes per element kind and a compiled-regex cache.

The default patterns use Unicode property classes (``\\p{L}``), so they are
compiled with the ``regex`` module rather than ``re``.  Every pattern is
compiled case-insensitively, once, and kept for the life of the process:
patterns are few and caller-controlled, so the cache is never evicted.
"""

from __future__ import annotations
import logging
import threading

import regex

from .types import ElementKind

logger = logging.getLogger(__name__)

MENTION_PATTERN = r"(?:^|\s|$|[.])@[\p{L}0-9_]*"
HASHTAG_PATTERN = r"(?:^|\s|$)#[\p{L}0-9_]*"
URL_PATTERN = (
    r"(^|[\s.:;?\-\]<\(])"
    r"((https?://|www\.)[-\w;/?:@&=+$\|\_.!~*'()\[\]%#,☺]+[\w/#](\(\))?)"
    r"(?=$|[\s',\|\(\).:;?\[\]>\)])"
)
EMAIL_PATTERN = r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}"


class PatternError(ValueError):
    """A pattern is not valid regex syntax."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


def pattern_for(kind: ElementKind, config) -> str:
    """Regex text for ``kind``: the configured pattern, or the custom literal."""
    if kind.is_custom:
        return kind.pattern or ""
    if kind == ElementKind.MENTION:
        return config.mention_pattern
    if kind == ElementKind.HASHTAG:
        return config.hashtag_pattern
    if kind == ElementKind.URL:
        return config.url_pattern
    if kind == ElementKind.EMAIL:
        return config.email_pattern
    raise ValueError(f"unknown element kind: {kind!r}")


class PatternCache:
    """Compile-once store keyed by exact pattern string."""

    __slots__ = ("_compiled", "_lock")

    def __init__(self) -> None:
        self._compiled: dict[str, regex.Pattern] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str) -> regex.Pattern:
        """Return the compiled pattern, compiling it on first use.

        Raises PatternError when ``pattern`` does not compile.  Failures are
        not cached, so a later call retries (and fails again) cheaply.
        """
        compiled = self._compiled.get(pattern)
        if compiled is not None:
            return compiled
        with self._lock:
            compiled = self._compiled.get(pattern)
            if compiled is None:
                try:
                    compiled = regex.compile(pattern, regex.IGNORECASE)
                except regex.error as exc:
                    raise PatternError(pattern, str(exc)) from exc
                self._compiled[pattern] = compiled
                logger.debug("compiled pattern %r", pattern)
        return compiled

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._compiled

    def __len__(self) -> int:
        return len(self._compiled)

    def clear(self) -> None:
        with self._lock:
            self._compiled.clear()


# Process-wide cache shared by every parser call
_CACHE = PatternCache()


def compiled_regex(pattern: str) -> regex.Pattern:
    """Return the cached case-insensitive regex for ``pattern``."""
    return _CACHE.get(pattern)


def find_matches(pattern: str, text: str) -> list[regex.Match]:
    """All matches of ``pattern`` in ``text``; an invalid pattern matches nothing."""
    try:
        compiled = compiled_regex(pattern)
    except PatternError as exc:
        logger.warning("skipping pattern that failed to compile: %s", exc)
        return []
    return list(compiled.finditer(text))
