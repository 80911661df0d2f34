"""Evaluation pipeline components backed by the store."""

from bedrock.infrastructure.evaluation.hierarchy_walker import ResourceHierarchyWalker
from bedrock.infrastructure.evaluation.policy_evaluator import ResourcePolicyEvaluator
from bedrock.infrastructure.evaluation.role_resolver import ScopeRoleResolver
from bedrock.infrastructure.evaluation.scope_chain import load_scope_chain, visible_scopes

__all__ = [
    "ResourceHierarchyWalker",
    "ResourcePolicyEvaluator",
    "ScopeRoleResolver",
    "load_scope_chain",
    "visible_scopes",
]
