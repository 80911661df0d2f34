"""Pure domain services used by the evaluation pipeline."""

from bedrock.domain.services.collection_matcher import CollectionMatcher
from bedrock.domain.services.resource_pattern import match_resource_pattern

__all__ = [
    "CollectionMatcher",
    "match_resource_pattern",
]
