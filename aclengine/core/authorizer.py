"""
Authorizer - builds the role/resource trees and the rule table once, then
answers "is ROLE allowed PRIVILEGE on RESOURCE?".

Build:
    1. Register every resource, parents first (forward references allowed)
    2. Register every role, parents first
    3. Administrators get a single ALLOW rule on (role, ALL, ALL); other
       roles get one rule per granted permission
    4. Freeze both trees and the rule table

Query precedence (first applicable rule wins):
    role:      queried role, its ancestors nearest-first, then ALL
    resource:  queried resource, its ancestors nearest-first, then ALL
    privilege: queried privilege, then ALL

A rule whose assertion returns False is skipped and the search goes on.
When nothing applies the answer is deny.

Usage:
    authorizer = Authorizer(roles_provider, resources_provider)

    authorizer.is_allowed("editor", "comments", "edit")
    authorizer.evaluate("editor", "comments", "edit", context={"user_id": 1})
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import structlog

from ..config import Settings, get_settings
from ..entities import ALL, Effect, Resource, Role
from ..exceptions import (
    ConfigurationError,
    CyclicHierarchyError,
    UnknownParentError,
    UnknownResourceError,
    UnknownRoleError,
)
from ..providers import MemoryResourcesProvider, MemoryRolesProvider, ResourcesProvider, RolesProvider
from .hierarchy import HierarchyRegistry
from .rules import Rule, RuleTable

logger = structlog.get_logger(__name__)


# ============================================================
# DECISION
# ============================================================

@dataclass(frozen=True)
class Decision:
    """
    Result of a query.

    Attributes:
        allowed: Whether the privilege is granted
        reason: Human-readable explanation (for errors/logging)
        rule: The rule that decided, None for the default deny
    """
    allowed: bool
    reason: str
    rule: Rule | None = None

    @classmethod
    def from_rule(cls, rule: Rule) -> "Decision":
        return cls(
            allowed=rule.effect is Effect.ALLOW,
            reason=f"Matched {rule!r}",
            rule=rule,
        )

    @classmethod
    def default_deny(cls) -> "Decision":
        return cls(allowed=False, reason="No matching rule")

    def __bool__(self) -> bool:
        return self.allowed


# ============================================================
# TREE REGISTRATION
# ============================================================

def _register_snapshot(registry: HierarchyRegistry, nodes: Sequence[Resource | Role]) -> None:
    """Register every node with its missing ancestors first."""
    index: dict[str, Resource | Role] = {}
    for node in nodes:
        index.setdefault(node.id, node)

    for node in nodes:
        # Already registered as an ancestor of an earlier node
        if registry.has_node(node.id) and index[node.id] is node:
            continue

        chain = [node]
        seen = [node.id]
        parent = node.parent
        while parent and not registry.has_node(parent):
            parent_node = index.get(parent)
            if parent_node is None:
                raise UnknownParentError(chain[-1].id, parent)
            if parent in seen:
                raise CyclicHierarchyError(seen[seen.index(parent):] + [parent])
            chain.append(parent_node)
            seen.append(parent)
            parent = parent_node.parent

        for item in reversed(chain):
            registry.add_node(item.id, item.parent)


# ============================================================
# AUTHORIZER
# ============================================================

class Authorizer:
    """
    Read-only access control list built from role and resource sources.

    Once constructed nothing can be added; a single instance may be shared
    by any number of threads.
    """

    def __init__(
        self,
        roles_provider: RolesProvider,
        resources_provider: ResourcesProvider,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()

        self._resources = HierarchyRegistry("resource", strict=self.settings.strict_nodes)
        self._roles = HierarchyRegistry("role", strict=self.settings.strict_nodes)
        self._rules = RuleTable()

        logger.info("acl.build.started")

        _register_snapshot(self._resources, list(resources_provider.find_all()))

        roles = list(roles_provider.find_all())
        _register_snapshot(self._roles, roles)

        for role in roles:
            self._add_role_rules(role)

        self._resources.freeze()
        self._roles.freeze()
        self._rules.freeze()

        logger.info(
            "acl.build.completed",
            resources=len(self._resources),
            roles=len(self._roles),
            rules=len(self._rules),
        )

    @classmethod
    def from_snapshot(
        cls,
        roles: Iterable[Role],
        resources: Iterable[Resource],
        settings: Settings | None = None,
    ) -> "Authorizer":
        """Build from plain role and resource lists."""
        return cls(MemoryRolesProvider(roles), MemoryResourcesProvider(resources), settings)

    def _add_role_rules(self, role: Role) -> None:
        if role.is_administrator:
            self._rules.put_rule(role.id, ALL, ALL, Effect.ALLOW)
            return

        for permission in role.permissions:
            if permission.resource is not ALL and not self._resources.has_node(permission.resource):
                raise ConfigurationError(
                    f"Role '{role.id}' is granted '{permission.key(self.settings.delimiter)}' "
                    f"on unknown resource '{permission.resource}'"
                )
            self._rules.put_rule(
                role.id,
                permission.resource,
                permission.privilege,
                permission.effect,
                permission.assertion,
            )

    # ============================================================
    # QUERIES
    # ============================================================

    def evaluate(
        self,
        role: str,
        resource: str | None,
        privilege: str | None = ALL,
        context: Any = None,
    ) -> Decision:
        """
        Find the first applicable rule for the query.

        Args:
            role: Registered role id
            resource: Registered resource id, or ALL
            privilege: Privilege name, or ALL
            context: Passed through to assertions

        Raises:
            UnknownRoleError: role is not registered
            UnknownResourceError: resource is not registered
        """
        if role is ALL or not self._roles.has_node(role):
            raise UnknownRoleError(role)
        if resource is not ALL and not self._resources.has_node(resource):
            raise UnknownResourceError(resource)

        resource_candidates: list[str | None] = [ALL]
        if resource is not ALL:
            resource_candidates = [*self._resources.lineage(resource), ALL]
        privilege_candidates = (ALL,) if privilege is ALL else (privilege, ALL)

        for candidate_role in [*self._roles.lineage(role), ALL]:
            for candidate_resource in resource_candidates:
                for candidate_privilege in privilege_candidates:
                    rule = self._rules.find_most_specific(
                        candidate_role, candidate_resource, candidate_privilege
                    )
                    if rule is None:
                        continue
                    if not rule.applies(role, resource, privilege, context):
                        continue
                    return self._decided(Decision.from_rule(rule), role, resource, privilege)

        return self._decided(Decision.default_deny(), role, resource, privilege)

    def is_allowed(
        self,
        role: str,
        resource: str | None,
        privilege: str | None = ALL,
        context: Any = None,
    ) -> bool:
        """Check if role may perform privilege on resource."""
        return self.evaluate(role, resource, privilege, context).allowed

    def _decided(self, decision: Decision, role: str, resource: str | None, privilege: str | None) -> Decision:
        if self.settings.trace_decisions:
            logger.debug(
                "acl.decision",
                role=role,
                resource=resource,
                privilege=privilege,
                allowed=decision.allowed,
                reason=decision.reason,
            )
        return decision

    # ============================================================
    # INTROSPECTION
    # ============================================================

    def has_role(self, role_id: str) -> bool:
        return self._roles.has_node(role_id)

    def has_resource(self, resource_id: str) -> bool:
        return self._resources.has_node(resource_id)

    @property
    def roles(self) -> HierarchyRegistry:
        """Frozen role tree."""
        return self._roles

    @property
    def resources(self) -> HierarchyRegistry:
        """Frozen resource tree."""
        return self._resources

    @property
    def rules(self) -> RuleTable:
        """Frozen rule table."""
        return self._rules
