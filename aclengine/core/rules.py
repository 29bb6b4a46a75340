"""
Rule table - (role, resource, privilege) -> rule mapping.

Each key component is either a concrete id or ALL. Lookup is exact-key
only; walking role/resource ancestors and falling back to wildcards is
the authorizer's job.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

import structlog

from ..entities import ALL, Assertion, Effect
from ..exceptions import FrozenError

logger = structlog.get_logger(__name__)

RuleKey = tuple[str | None, str | None, str | None]


@dataclass(frozen=True)
class Rule:
    """A materialized allow/deny entry with an optional assertion."""
    role: str | None
    resource: str | None
    privilege: str | None
    effect: Effect
    assertion: Assertion | None = field(default=None, compare=False)

    @property
    def key(self) -> RuleKey:
        return (self.role, self.resource, self.privilege)

    def applies(self, role: str | None, resource: str | None, privilege: str | None, context: Any) -> bool:
        """Run the assertion, if any. Assertion errors propagate."""
        if self.assertion is None:
            return True
        return bool(self.assertion(role, resource, privilege, context))

    def __repr__(self) -> str:
        parts = ["*" if p is ALL else p for p in self.key]
        guarded = " assert" if self.assertion is not None else ""
        return f"<Rule {self.effect.value} {'/'.join(parts)}{guarded}>"


class RuleTable:
    """Insertion-ordered rule storage; last write for a key wins."""

    def __init__(self):
        self._rules: dict[RuleKey, Rule] = {}
        self._frozen = False

    def put_rule(
        self,
        role: str | None,
        resource: str | None,
        privilege: str | None,
        effect: Effect,
        assertion: Assertion | None = None,
    ) -> Rule:
        """Store a rule, replacing any rule with the same key."""
        if self._frozen:
            raise FrozenError("Cannot add rule: rule table is frozen")

        rule = Rule(role, resource, privilege, Effect(effect), assertion)
        if rule.key in self._rules:
            logger.debug("acl.rule.replaced", rule=repr(self._rules[rule.key]))
        self._rules[rule.key] = rule
        logger.debug("acl.rule.added", rule=repr(rule))
        return rule

    def find_most_specific(
        self,
        role: str | None,
        resource: str | None,
        privilege: str | None,
    ) -> Rule | None:
        """Return the rule stored under exactly this key, if any."""
        return self._rules.get((role, resource, privilege))

    def rules(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"<RuleTable rules={len(self)}>"
