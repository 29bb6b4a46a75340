"""
Built-in assertions.

All of them read the query context, which must be a mapping. A missing
context (or a missing key) makes the assertion fail, so the search falls
through to the next applicable rule.

Usage:
    permissions:
        "articles:edit":
            assertion: owner
        "orders:approve":
            assertion: {type: max_amount, limit: 10000}
"""

from collections.abc import Mapping
from typing import Any

from ..registry import AssertionRegistry


@AssertionRegistry.assertion("owner")
class OwnerAssertion:
    """
    Actor must own the resource instance.

    Checks: context[actor_field] == context[owner_field]

    Configuration:
        actor_field: Context key with the acting user id (default: "user_id")
        owner_field: Context key with the owner id (default: "owner_id")
    """

    def __init__(self, actor_field: str = "user_id", owner_field: str = "owner_id"):
        self.actor_field = actor_field
        self.owner_field = owner_field

    def __call__(self, role: Any, resource: Any, privilege: Any, context: Any) -> bool:
        if not isinstance(context, Mapping):
            return False

        actor_id = context.get(self.actor_field)
        owner_id = context.get(self.owner_field)
        return actor_id is not None and actor_id == owner_id


@AssertionRegistry.assertion("status")
class StatusAssertion:
    """
    Resource instance must be in one of the allowed states.

    Configuration:
        allowed: A status or a list of statuses
        status_field: Context key with the current status (default: "status")
    """

    def __init__(self, allowed: Any, status_field: str = "status"):
        if isinstance(allowed, (list, tuple, set, frozenset)):
            self.allowed = frozenset(allowed)
        else:
            self.allowed = frozenset([allowed])
        self.status_field = status_field

    def __call__(self, role: Any, resource: Any, privilege: Any, context: Any) -> bool:
        if not isinstance(context, Mapping):
            return False
        return context.get(self.status_field) in self.allowed


@AssertionRegistry.assertion("max_amount")
class MaxAmountAssertion:
    """
    Amount must not exceed a limit.

    Checks: context[amount_field] <= limit

    Configuration:
        limit: Maximum allowed amount
        amount_field: Context key with the amount (default: "amount")
    """

    def __init__(self, limit: float, amount_field: str = "amount"):
        self.limit = limit
        self.amount_field = amount_field

    def __call__(self, role: Any, resource: Any, privilege: Any, context: Any) -> bool:
        if not isinstance(context, Mapping):
            return False

        amount = context.get(self.amount_field)
        if amount is None:
            return False
        return amount <= self.limit
