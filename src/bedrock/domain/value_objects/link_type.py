"""Resource-to-scope association kinds."""

from enum import StrEnum


class LinkType(StrEnum):
    """How a resource is associated with a non-owning scope."""

    SHARE = "share"
    ALIAS = "alias"
    MIRROR = "mirror"
