"""Resource policy effect."""

from enum import StrEnum


class PolicyEffect(StrEnum):
    """Effect a resource policy has when it applies."""

    ALLOW = "allow"
    DENY = "deny"
