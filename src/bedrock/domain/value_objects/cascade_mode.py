"""Cascade mode of a resource hierarchy edge."""

from enum import StrEnum


class CascadeMode(StrEnum):
    """Whether a parent -> child edge propagates permission to the child."""

    INHERIT = "inherit"
    NONE = "none"
    UNSET = "unset"

    @property
    def propagates(self) -> bool:
        """Unset behaves as inherit."""
        return self is not CascadeMode.NONE
