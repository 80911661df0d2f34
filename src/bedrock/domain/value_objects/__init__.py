"""Domain value objects."""

from bedrock.domain.value_objects.cascade_mode import CascadeMode
from bedrock.domain.value_objects.link_type import LinkType
from bedrock.domain.value_objects.override_state import OverrideState
from bedrock.domain.value_objects.policy_effect import PolicyEffect
from bedrock.domain.value_objects.scope_mode import ScopeMode
from bedrock.domain.value_objects.subject_type import SubjectType

__all__ = [
    "CascadeMode",
    "LinkType",
    "OverrideState",
    "PolicyEffect",
    "ScopeMode",
    "SubjectType",
]
