"""
Value types shared by the sources, the parser and the authorizer.

Roles and resources reference their parent by id. Permissions reference
their resource by id, or ALL for every resource.

Examples:
    Resource("articles")
    Resource("comments", parent="articles")
    Role("editor", parent="guest", permissions=(Permission("articles", "edit"),))
    Role("root", is_administrator=True)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


# Wildcard matching any role, resource or privilege.
ALL = None

# (role, resource, privilege, context) -> bool
Assertion = Callable[[str | None, str | None, str | None, Any], bool]


class Effect(str, Enum):
    """Outcome of a matching rule."""
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Resource:
    """An object node in the resource tree."""
    id: str
    parent: str | None = None


@dataclass(frozen=True)
class Permission:
    """
    A privilege on a resource, optionally guarded by an assertion.

    Attributes:
        resource: Resource id, or ALL for every resource
        privilege: Privilege name, or ALL for every privilege
        assertion: Predicate evaluated at query time
        effect: ALLOW (default) or DENY
        title: Human readable label (informational)
        description: Longer explanation (informational)
    """
    resource: str | None = ALL
    privilege: str | None = ALL
    assertion: Assertion | None = field(default=None, compare=False)
    effect: Effect = Effect.ALLOW
    title: str | None = field(default=None, compare=False)
    description: str | None = field(default=None, compare=False)

    def key(self, delimiter: str = ":") -> str:
        """Render as 'resource:privilege' (empty parts for ALL)."""
        return f"{self.resource or ''}{delimiter}{self.privilege or ''}"

    def __repr__(self) -> str:
        return f"<Permission {self.key()} {self.effect.value}>"


@dataclass(frozen=True)
class Role:
    """A subject node in the role tree and the permissions granted to it."""
    id: str
    parent: str | None = None
    is_administrator: bool = False
    permissions: tuple[Permission, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable, store an immutable tuple
        object.__setattr__(self, "permissions", tuple(self.permissions))
