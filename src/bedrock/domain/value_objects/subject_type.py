"""Kinds of acting subjects."""

from enum import StrEnum


class SubjectType(StrEnum):
    """Supported subject types."""

    USER = "user"
    SERVICE = "service"
    AGENT = "agent"
    SYSTEM = "system"
