"""
aclengine - hierarchical role/resource access control.

Roles and resources each form trees. Permissions granted to roles become
allow/deny rules keyed by (role, resource, privilege), any of which may be
ALL. Queries walk role ancestors, then resource ancestors, then the
privilege wildcard, and the most specific applicable rule wins.

Quick start:
============

    from aclengine import Authorizer, Permission, Resource, Role

    authorizer = Authorizer.from_snapshot(
        roles=[
            Role("guest", permissions=[Permission("articles", "read")]),
            Role("editor", parent="guest", permissions=[Permission("articles", "edit")]),
            Role("root", is_administrator=True),
        ],
        resources=[
            Resource("articles"),
            Resource("comments", parent="articles"),
        ],
    )

    authorizer.is_allowed("editor", "comments", "read")   # True (inherited twice)
    authorizer.is_allowed("guest", "comments", "edit")    # False (default deny)

From configuration:
===================

    resources = MemoryResourcesProvider()
    permissions = MemoryPermissionsProvider()
    register_permissions(
        {"articles:edit": None, "moderate": {"resource": "comments", "privilege": "delete"}},
        resources,
        permissions,
    )

Extensibility:
==============

Add named assertions usable from configuration:
    @AssertionRegistry.assertion("business_hours")
    class BusinessHoursAssertion:
        def __call__(self, role, resource, privilege, context) -> bool:
            ...
"""

# Value types
from .entities import ALL, Assertion, Effect, Permission, Resource, Role

# Errors
from .exceptions import (
    PermissionsError,
    ConfigurationError,
    UnknownParentError,
    DuplicateNodeError,
    CyclicHierarchyError,
    MissingFieldError,
    InvalidPermissionFormatError,
    UnknownAssertionError,
    UnknownRoleError,
    UnknownResourceError,
    FrozenError,
)

# Engine
from .core import Authorizer, Decision, HierarchyRegistry, Rule, RuleTable

# Sources
from .providers import (
    RolesProvider,
    ResourcesProvider,
    PermissionsProvider,
    MemoryRolesProvider,
    MemoryResourcesProvider,
    MemoryPermissionsProvider,
)

# Configuration
from .config import Settings, get_settings
from .registry import AssertionRegistry
from .parsing import parse_permission, parse_permissions, register_permissions

__all__ = [
    # Value types
    "ALL",
    "Assertion",
    "Effect",
    "Permission",
    "Resource",
    "Role",
    # Errors
    "PermissionsError",
    "ConfigurationError",
    "UnknownParentError",
    "DuplicateNodeError",
    "CyclicHierarchyError",
    "MissingFieldError",
    "InvalidPermissionFormatError",
    "UnknownAssertionError",
    "UnknownRoleError",
    "UnknownResourceError",
    "FrozenError",
    # Engine
    "Authorizer",
    "Decision",
    "HierarchyRegistry",
    "Rule",
    "RuleTable",
    # Sources
    "RolesProvider",
    "ResourcesProvider",
    "PermissionsProvider",
    "MemoryRolesProvider",
    "MemoryResourcesProvider",
    "MemoryPermissionsProvider",
    # Configuration
    "Settings",
    "get_settings",
    "AssertionRegistry",
    "parse_permission",
    "parse_permissions",
    "register_permissions",
]

__version__ = "0.1.0"
