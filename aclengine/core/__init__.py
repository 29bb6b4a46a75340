"""
Core engine: hierarchy registries, rule table and the authorizer.
"""

from .hierarchy import HierarchyRegistry
from .rules import Rule, RuleTable
from .authorizer import Authorizer, Decision

__all__ = [
    "HierarchyRegistry",
    "Rule",
    "RuleTable",
    "Authorizer",
    "Decision",
]
