"""
Hierarchy registry - parent-indexed tree used for roles and resources.

Every node has at most one parent; several roots may coexist. A parent must
be registered before its children, and nodes are never re-parented, so the
structure cannot contain a cycle and every ancestor walk terminates.

Usage:
    resources = HierarchyRegistry("resource")
    resources.add_node("articles")
    resources.add_node("comments", parent_id="articles")

    list(resources.ancestors("comments"))  # ["articles"]
    resources.freeze()
"""

from collections import defaultdict
from typing import Iterator

import structlog

from ..exceptions import DuplicateNodeError, FrozenError, UnknownParentError

logger = structlog.get_logger(__name__)


class HierarchyRegistry:
    """
    Tree of string ids indexed by id.

    Args:
        kind: Label used in log events ("role", "resource")
        strict: Re-adding an identical node raises instead of being a no-op
    """

    def __init__(self, kind: str = "node", strict: bool = False):
        self.kind = kind
        self.strict = strict
        self._parents: dict[str, str | None] = {}
        self._children: dict[str, list[str]] = defaultdict(list)
        self._frozen = False

    # ============================================================
    # BUILD
    # ============================================================

    def add_node(self, node_id: str, parent_id: str | None = None) -> None:
        """
        Register a node under an optional parent.

        Raises:
            UnknownParentError: parent_id is set but not registered
            DuplicateNodeError: node_id exists (with another parent, or strict)
            FrozenError: registry was frozen
        """
        if self._frozen:
            raise FrozenError(f"Cannot add {self.kind} '{node_id}': registry is frozen")

        parent_id = parent_id or None

        if node_id in self._parents:
            if self.strict or self._parents[node_id] != parent_id:
                raise DuplicateNodeError(node_id, parent_id)
            return

        if parent_id is not None and parent_id not in self._parents:
            raise UnknownParentError(node_id, parent_id)

        self._parents[node_id] = parent_id
        if parent_id is not None:
            self._children[parent_id].append(node_id)

        logger.debug("acl.node.added", kind=self.kind, node=node_id, parent=parent_id)

    def freeze(self) -> None:
        """Reject all further writes."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ============================================================
    # QUERIES
    # ============================================================

    def has_node(self, node_id: str) -> bool:
        return node_id in self._parents

    def parent_of(self, node_id: str) -> str | None:
        """Immediate parent, or None for a root."""
        self._require(node_id)
        return self._parents[node_id]

    def children_of(self, node_id: str) -> list[str]:
        """Direct children in registration order."""
        self._require(node_id)
        return list(self._children.get(node_id, ()))

    def ancestors(self, node_id: str) -> Iterator[str]:
        """Ancestors nearest-first, ending at the root. Unknown ids raise immediately."""
        self._require(node_id)
        return self._walk(self._parents[node_id])

    def lineage(self, node_id: str) -> Iterator[str]:
        """The node itself followed by its ancestors."""
        self._require(node_id)
        return self._walk(node_id)

    def _walk(self, node_id: str | None) -> Iterator[str]:
        while node_id is not None:
            yield node_id
            node_id = self._parents[node_id]

    def inherits_from(self, node_id: str, ancestor_id: str, only_direct: bool = False) -> bool:
        """Check whether ancestor_id is a parent (or any ancestor) of node_id."""
        self._require(ancestor_id)
        if only_direct:
            return self.parent_of(node_id) == ancestor_id
        return ancestor_id in self.ancestors(node_id)

    def _require(self, node_id: str) -> None:
        if node_id not in self._parents:
            raise KeyError(f"{self.kind} '{node_id}' is not registered")

    # ============================================================
    # CONTAINER PROTOCOL
    # ============================================================

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._parents

    def __iter__(self) -> Iterator[str]:
        return iter(self._parents)

    def __len__(self) -> int:
        return len(self._parents)

    def __repr__(self) -> str:
        return f"<HierarchyRegistry {self.kind} nodes={len(self)}>"
