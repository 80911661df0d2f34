"""Glob-style matching of resource identifiers against permission patterns."""

import re
from fnmatch import fnmatchcase

_SEPARATORS = re.compile(r"[/:]")

WILDCARD_PATTERNS = frozenset({"*", "**"})


def split_segments(value: str) -> list[str]:
    return _SEPARATORS.split(value)


def match_resource_pattern(pattern: str, identifier: str) -> bool:
    """Match ``identifier`` against ``pattern`` segment by segment.

    Segments are separated by ``/`` or ``:``. ``*`` and other fnmatch
    wildcards match within one segment; a ``**`` segment matches any
    number of segments (including none).

    >>> match_resource_pattern("reports/*", "reports/q1")
    True
    >>> match_resource_pattern("reports/*", "reports/2024/q1")
    False
    >>> match_resource_pattern("reports/**", "reports/2024/q1")
    True
    """
    if pattern in WILDCARD_PATTERNS:
        return True
    return _match(split_segments(pattern), split_segments(identifier))


def _match(pattern: list[str], parts: list[str]) -> bool:
    # Iterative two-pointer matcher with backtracking on the last "**".
    p = i = 0
    star_p = star_i = -1
    while i < len(parts):
        if p < len(pattern) and pattern[p] == "**":
            star_p, star_i = p, i
            p += 1
        elif p < len(pattern) and fnmatchcase(parts[i], pattern[p]):
            p += 1
            i += 1
        elif star_p != -1:
            star_i += 1
            p, i = star_p + 1, star_i
        else:
            return False
    while p < len(pattern) and pattern[p] == "**":
        p += 1
    return p == len(pattern)
