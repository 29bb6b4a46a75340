"""
Error taxonomy for the authorization engine.

Configuration errors abort the build phase. Query errors are raised to the
caller of a single query. Nothing here is retried or swallowed.
"""

from typing import Any


class PermissionsError(Exception):
    """Base class for every error raised by aclengine."""
    pass


# ============================================================
# BUILD / CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(PermissionsError):
    """Raised while building registries, rules or parsing permissions."""
    pass


class UnknownParentError(ConfigurationError):
    """A node references a parent that was never registered."""

    def __init__(self, node_id: str, parent_id: str):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Cannot register '{node_id}': parent '{parent_id}' is not registered"
        )


class DuplicateNodeError(ConfigurationError):
    """A node with the same id already exists."""

    def __init__(self, node_id: str, parent_id: str | None = None):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(f"Node '{node_id}' is already registered")


class CyclicHierarchyError(ConfigurationError):
    """Parent links in a source snapshot form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Parent cycle detected: {' -> '.join(cycle)}")


class MissingFieldError(ConfigurationError):
    """A structured permission entry lacks a required field."""

    def __init__(self, entry: Any, field_name: str):
        self.entry = entry
        self.field_name = field_name
        super().__init__(
            f"Permission entry {entry!r} must include '{field_name}' "
            "(resource and privilege are required)"
        )


class InvalidPermissionFormatError(ConfigurationError, TypeError):
    """A permission entry has a shape the parser does not understand."""

    def __init__(self, entry: Any):
        self.entry = entry
        super().__init__(
            "Permission must be a delimited string, a mapping with resource & "
            f"privilege or a Permission instance, {type(entry).__name__} given"
        )


class UnknownAssertionError(ConfigurationError):
    """A permission names an assertion that is not registered."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown assertion: '{name}'. Available: {available}")


# ============================================================
# QUERY ERRORS
# ============================================================

class UnknownRoleError(PermissionsError, LookupError):
    """Query for a role that was never registered."""

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role '{role_id}' does not exist")


class UnknownResourceError(PermissionsError, LookupError):
    """Query for a resource that was never registered."""

    def __init__(self, resource_id: str):
        self.resource_id = resource_id
        super().__init__(f"Resource '{resource_id}' does not exist")


class FrozenError(PermissionsError):
    """Write attempted on a structure that has been frozen."""
    pass
