"""Toggle state of a scope override."""

from enum import StrEnum


class OverrideState(StrEnum):
    """Override toggle: explicit on, explicit off, or no opinion."""

    ON = "on"
    OFF = "off"
    UNSET = "unset"
