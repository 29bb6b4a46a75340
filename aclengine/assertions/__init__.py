"""
Named assertions usable from permission configuration.

Built-in assertions:
- owner: Actor owns the resource instance
- status: Resource instance is in an allowed state
- max_amount: Amount within a limit

Add custom assertions with @AssertionRegistry.assertion decorator.
"""

from .builtin import (
    OwnerAssertion,
    StatusAssertion,
    MaxAmountAssertion,
)

__all__ = [
    "OwnerAssertion",
    "StatusAssertion",
    "MaxAmountAssertion",
]
