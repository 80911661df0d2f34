"""Application ports - interfaces for external adapters."""

from bedrock.application.ports.hierarchy_walker import HierarchyWalker
from bedrock.application.ports.policy_evaluator import PolicyEvaluator
from bedrock.application.ports.role_resolver import RoleResolver
from bedrock.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "HierarchyWalker",
    "PolicyEvaluator",
    "RoleResolver",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
