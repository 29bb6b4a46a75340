"""
Assertion plugin registry.

Lets configuration refer to assertions by name instead of by callable.
Implementations register themselves using a decorator.

Usage:
    @AssertionRegistry.assertion("business_hours")
    class BusinessHoursAssertion:
        def __init__(self, start: int = 9, end: int = 17):
            ...

        def __call__(self, role, resource, privilege, context) -> bool:
            ...

    # Later, get by name:
    check = AssertionRegistry.create("business_hours", start=8)
"""

from typing import Any, Callable, Type

from .entities import Assertion
from .exceptions import UnknownAssertionError


class AssertionRegistry:
    """
    Central registry for named assertions.

    Registered classes are instantiated with keyword options; the instance
    must be callable as (role, resource, privilege, context) -> bool.
    """

    _assertions: dict[str, Type[Any]] = {}

    @classmethod
    def assertion(cls, name: str) -> Callable[[Type[Any]], Type[Any]]:
        """
        Decorator to register an assertion class.

        Usage:
            @AssertionRegistry.assertion("owner")
            class OwnerAssertion:
                ...
        """
        def decorator(assertion_class: Type[Any]) -> Type[Any]:
            cls._assertions[name] = assertion_class
            return assertion_class
        return decorator

    @classmethod
    def create(cls, name: str, **options: Any) -> Assertion:
        """
        Instantiate a registered assertion.

        Raises:
            UnknownAssertionError: If name is not registered
        """
        assertion_class = cls._assertions.get(name)
        if not assertion_class:
            raise UnknownAssertionError(name, cls.list_assertions())
        return assertion_class(**options)

    @classmethod
    def list_assertions(cls) -> list[str]:
        """List all registered assertion names."""
        return list(cls._assertions.keys())

    @classmethod
    def has_assertion(cls, name: str) -> bool:
        """Check if an assertion name is registered."""
        return name in cls._assertions
