"""
Role, resource and permission sources.

The authorizer depends ONLY on the abstract providers below; where the
snapshot comes from (database, config file, another service) is up to the
application.

Implementations:
- MemoryResourcesProvider / MemoryPermissionsProvider / MemoryRolesProvider:
  in-process storage, filled by hand or by register_permissions()
"""

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from .entities import ALL, Assertion, Effect, Permission, Resource, Role


# ============================================================
# INTERFACES
# ============================================================

class ResourcesProvider(ABC):
    """Yields every resource with its parent link."""

    @abstractmethod
    def find_all(self) -> Sequence[Resource]:
        pass


class RolesProvider(ABC):
    """Yields every role with its parent link and granted permissions."""

    @abstractmethod
    def find_all(self) -> Sequence[Role]:
        pass


class PermissionsProvider(ABC):
    """Yields every declared permission."""

    @abstractmethod
    def find_all(self) -> Sequence[Permission]:
        pass


# ============================================================
# IN-MEMORY IMPLEMENTATIONS
# ============================================================

class MemoryResourcesProvider(ResourcesProvider):
    """
    In-memory resource storage.

    Snapshot entries are kept as given, duplicates included, so the
    authorizer can reject conflicting ones. add_resource() ignores ids that
    are already stored.
    """

    def __init__(self, resources: Iterable[Resource] = ()):
        self._resources: list[Resource] = list(resources)

    def add_resource(self, resource_id: str, parent: str | None = None) -> Resource:
        """Add a resource unless the id exists, returning the stored instance."""
        existing = self.get_resource(resource_id)
        if existing is not None:
            return existing

        resource = Resource(resource_id, parent)
        self._resources.append(resource)
        return resource

    def get_resource(self, resource_id: str) -> Resource | None:
        """First stored resource with this id."""
        return next((r for r in self._resources if r.id == resource_id), None)

    def find_all(self) -> list[Resource]:
        return list(self._resources)


class MemoryPermissionsProvider(PermissionsProvider):
    """In-memory permission storage keyed by 'resource:privilege'."""

    def __init__(self, delimiter: str = ":"):
        self.delimiter = delimiter
        self._permissions: dict[str, Permission] = {}

    def add_permission(
        self,
        resource: str | None = ALL,
        privilege: str | None = ALL,
        assertion: Assertion | None = None,
        *,
        effect: Effect = Effect.ALLOW,
        title: str | None = None,
        description: str | None = None,
    ) -> Permission:
        """Declare a permission. A later declaration of the same key replaces it."""
        permission = Permission(
            resource=resource,
            privilege=privilege,
            assertion=assertion,
            effect=effect,
            title=title,
            description=description,
        )
        return self.put(permission)

    def put(self, permission: Permission) -> Permission:
        self._permissions[permission.key(self.delimiter)] = permission
        return permission

    def get_permission(self, key: str) -> Permission | None:
        """Look up by 'resource:privilege' key."""
        return self._permissions.get(key)

    def find_all(self) -> list[Permission]:
        return list(self._permissions.values())


class MemoryRolesProvider(RolesProvider):
    """In-memory role storage, kept in insertion order, duplicates included."""

    def __init__(self, roles: Iterable[Role] = ()):
        self._roles: list[Role] = list(roles)

    def add_role(
        self,
        role_id: str,
        parent: str | None = None,
        permissions: Iterable[Permission] = (),
        is_administrator: bool = False,
    ) -> Role:
        role = Role(
            id=role_id,
            parent=parent,
            is_administrator=is_administrator,
            permissions=tuple(permissions),
        )
        self._roles.append(role)
        return role

    def get_role(self, role_id: str) -> Role | None:
        """Last stored role with this id."""
        return next((r for r in reversed(self._roles) if r.id == role_id), None)

    def find_all(self) -> list[Role]:
        return list(self._roles)
