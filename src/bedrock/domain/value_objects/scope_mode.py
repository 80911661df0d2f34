"""Scope type permission mode."""

from enum import StrEnum


class ScopeMode(StrEnum):
    """DEFINE scopes hold an independent permission set; MERGE scopes union with the parent."""

    DEFINE = "define"
    MERGE = "merge"
