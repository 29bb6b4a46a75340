"""
Tests for the authorizer: build phase and query precedence.
"""

import pytest
from structlog.testing import capture_logs

from aclengine import (
    ALL,
    Authorizer,
    ConfigurationError,
    CyclicHierarchyError,
    DuplicateNodeError,
    Effect,
    FrozenError,
    Permission,
    Resource,
    Role,
    UnknownParentError,
    UnknownResourceError,
    UnknownRoleError,
)


PRIVILEGES = ["read", "create", "edit", "delete", "publish"]


# ============ Administrator / default deny ============


def test_administrator_allowed_everything(site_authorizer, site_resources):
    """Administrators pass every query unconditionally."""
    for resource in site_resources:
        for privilege in PRIVILEGES:
            assert site_authorizer.is_allowed("root", resource.id, privilege)


def test_administrator_gets_single_wildcard_rule(authorizer_factory):
    root = Role("root", is_administrator=True, permissions=[Permission("articles", "read")])
    authorizer = authorizer_factory.create([root], [Resource("articles")])

    rules = list(authorizer.rules.rules())
    assert len(rules) == 1
    assert rules[0].key == ("root", ALL, ALL)


def test_default_deny(authorizer_factory, site_resources):
    """A role without permissions is denied everything."""
    authorizer = authorizer_factory.create([Role("nobody")], site_resources)

    for resource in site_resources:
        for privilege in PRIVILEGES:
            assert not authorizer.is_allowed("nobody", resource.id, privilege)


# ============ Inheritance ============


def test_resource_hierarchy_inheritance(site_authorizer):
    """A privilege on a parent resource applies to its descendants."""
    assert site_authorizer.is_allowed("guest", "comments", "read")
    assert site_authorizer.is_allowed("guest", "replies", "read")
    assert not site_authorizer.is_allowed("guest", "billing", "read")


def test_role_hierarchy_inheritance(site_authorizer):
    """A role inherits what its ancestors are allowed."""
    assert site_authorizer.is_allowed("member", "articles", "read")
    assert site_authorizer.is_allowed("editor", "replies", "create")
    assert not site_authorizer.is_allowed("guest", "comments", "create")


def test_privilege_wildcard(site_authorizer):
    """ALL privilege covers every privilege on the resource subtree."""
    assert site_authorizer.is_allowed("editor", "replies", "delete")
    assert not site_authorizer.is_allowed("editor", "billing", "delete")


# ============ Precedence ============


def test_most_specific_resource_wins(authorizer_factory, site_resources):
    """DENY on a specific resource beats ALLOW on every resource."""
    role = Role(
        "auditor",
        permissions=[
            Permission(ALL, "edit"),
            Permission("billing", "edit", effect=Effect.DENY),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert not authorizer.is_allowed("auditor", "billing", "edit")
    assert authorizer.is_allowed("auditor", "articles", "edit")


def test_descendant_deny_overrides_ancestor_allow(authorizer_factory, site_resources):
    role = Role(
        "member",
        permissions=[
            Permission("articles", "edit"),
            Permission("comments", "edit", effect=Effect.DENY),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert authorizer.is_allowed("member", "articles", "edit")
    assert not authorizer.is_allowed("member", "comments", "edit")
    assert not authorizer.is_allowed("member", "replies", "edit")


def test_role_specificity_outranks_resource_specificity(authorizer_factory, site_resources):
    """The child role's broad rule is found before the parent's narrow one."""
    roles = [
        Role("parent", permissions=[Permission("replies", "edit", effect=Effect.DENY)]),
        Role("child", parent="parent", permissions=[Permission("articles", "edit")]),
    ]
    authorizer = authorizer_factory.create(roles, site_resources)

    assert authorizer.is_allowed("child", "replies", "edit")
    assert not authorizer.is_allowed("parent", "replies", "edit")


def test_resource_specificity_outranks_privilege_specificity(authorizer_factory, site_resources):
    role = Role(
        "member",
        permissions=[
            Permission("comments", ALL),
            Permission("articles", "edit", effect=Effect.DENY),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert authorizer.is_allowed("member", "comments", "edit")
    assert not authorizer.is_allowed("member", "articles", "edit")


def test_specific_privilege_beats_privilege_wildcard(authorizer_factory, site_resources):
    role = Role(
        "member",
        permissions=[
            Permission("articles", ALL),
            Permission("articles", "delete", effect=Effect.DENY),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert authorizer.is_allowed("member", "articles", "edit")
    assert not authorizer.is_allowed("member", "articles", "delete")


def test_later_permission_overwrites_earlier(authorizer_factory, site_resources):
    role = Role(
        "member",
        permissions=[
            Permission("articles", "edit"),
            Permission("articles", "edit", effect=Effect.DENY),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert not authorizer.is_allowed("member", "articles", "edit")


# ============ Assertions ============


def test_failed_assertion_does_not_short_circuit(authorizer_factory, site_resources):
    """A vetoed rule is skipped and a less specific rule still applies."""
    role = Role(
        "member",
        permissions=[
            Permission("comments", "edit", assertion=lambda *args: False, effect=Effect.DENY),
            Permission("articles", "edit"),
        ],
    )
    authorizer = authorizer_factory.create([role], site_resources)

    assert authorizer.is_allowed("member", "comments", "edit")


def test_assertion_sees_queried_ids_and_context(authorizer_factory, site_resources):
    seen = []

    def is_owner(role, resource, privilege, context):
        seen.append((role, resource, privilege))
        return context["user_id"] == context["owner_id"]

    roles = [
        Role("member", permissions=[Permission("articles", "edit", assertion=is_owner)]),
        Role("editor", parent="member"),
    ]
    authorizer = authorizer_factory.create(roles, site_resources)

    assert authorizer.is_allowed("editor", "replies", "edit", {"user_id": 1, "owner_id": 1})
    assert not authorizer.is_allowed("editor", "replies", "edit", {"user_id": 1, "owner_id": 2})
    assert seen[0] == ("editor", "replies", "edit")


def test_assertion_errors_propagate(authorizer_factory, site_resources):
    def broken(role, resource, privilege, context):
        raise RuntimeError("assertion failed to evaluate")

    role = Role("member", permissions=[Permission("articles", "edit", assertion=broken)])
    authorizer = authorizer_factory.create([role], site_resources)

    with pytest.raises(RuntimeError, match="failed to evaluate"):
        authorizer.is_allowed("member", "articles", "edit")


# ============ Unknown identifiers ============


def test_unknown_role_raises(site_authorizer):
    with pytest.raises(UnknownRoleError) as exc_info:
        site_authorizer.is_allowed("ghost-role", "articles", "edit")

    assert exc_info.value.role_id == "ghost-role"


def test_unknown_resource_raises(site_authorizer):
    with pytest.raises(UnknownResourceError):
        site_authorizer.is_allowed("guest", "ghost-resource", "read")


def test_unknown_errors_are_lookup_errors(site_authorizer):
    with pytest.raises(LookupError):
        site_authorizer.is_allowed("ghost-role", "articles", "edit")


# ============ Build phase ============


def test_resource_cycle_rejected(authorizer_factory):
    """A parent cycle fails the build instead of looping."""
    resources = [Resource("a", parent="b"), Resource("b", parent="a")]

    with pytest.raises(CyclicHierarchyError) as exc_info:
        authorizer_factory.create([], resources)

    assert exc_info.value.cycle == ["a", "b", "a"]


def test_self_parent_rejected(authorizer_factory):
    with pytest.raises(ConfigurationError):
        authorizer_factory.create([Role("loop", parent="loop")])


def test_role_cycle_rejected(authorizer_factory):
    roles = [Role("a", parent="c"), Role("b", parent="a"), Role("c", parent="b")]

    with pytest.raises(CyclicHierarchyError):
        authorizer_factory.create(roles)


def test_resources_in_any_order(authorizer_factory):
    """Children may be listed before their parents."""
    resources = [
        Resource("replies", parent="comments"),
        Resource("comments", parent="articles"),
        Resource("articles"),
    ]
    role = Role("guest", permissions=[Permission("articles", "read")])
    authorizer = authorizer_factory.create([role], resources)

    assert list(authorizer.resources.ancestors("replies")) == ["comments", "articles"]
    assert authorizer.is_allowed("guest", "replies", "read")


def test_roles_in_any_order(authorizer_factory, site_resources):
    roles = [
        Role("editor", parent="member"),
        Role("member", parent="guest"),
        Role("guest", permissions=[Permission("articles", "read")]),
    ]
    authorizer = authorizer_factory.create(roles, site_resources)

    assert authorizer.is_allowed("editor", "comments", "read")
    assert list(authorizer.roles) == ["guest", "member", "editor"]


def test_missing_parent_rejected(authorizer_factory):
    with pytest.raises(UnknownParentError) as exc_info:
        authorizer_factory.create([Role("editor", parent="ghost")])

    assert exc_info.value.node_id == "editor"
    assert exc_info.value.parent_id == "ghost"


def test_permission_on_unknown_resource_rejected(authorizer_factory):
    role = Role("guest", permissions=[Permission("ghost", "read")])

    with pytest.raises(ConfigurationError, match="unknown resource 'ghost'"):
        authorizer_factory.create([role], [Resource("articles")])


def test_authorizer_is_frozen(site_authorizer):
    with pytest.raises(FrozenError):
        site_authorizer.rules.put_rule("guest", ALL, ALL, Effect.ALLOW)

    with pytest.raises(FrozenError):
        site_authorizer.roles.add_node("intruder")


def test_from_snapshot(settings):
    authorizer = Authorizer.from_snapshot(
        roles=[Role("guest", permissions=[Permission("articles", "read")])],
        resources=[Resource("articles")],
        settings=settings,
    )

    assert authorizer.has_role("guest")
    assert authorizer.has_resource("articles")
    assert authorizer.is_allowed("guest", "articles", "read")


# ============ Wildcard queries and decisions ============


def test_query_all_privileges(site_authorizer):
    """With privilege ALL only privilege-wildcard rules count."""
    assert site_authorizer.is_allowed("editor", "articles")
    assert not site_authorizer.is_allowed("guest", "articles")


def test_query_all_resources(authorizer_factory, site_resources):
    role = Role("reader", permissions=[Permission(ALL, "read")])
    authorizer = authorizer_factory.create([role], site_resources)

    assert authorizer.is_allowed("reader", ALL, "read")
    assert not authorizer.is_allowed("reader", ALL, "edit")


def test_evaluate_reports_deciding_rule(site_authorizer):
    decision = site_authorizer.evaluate("member", "replies", "read")

    assert decision.allowed
    assert decision.rule.key == ("guest", "articles", "read")

    denied = site_authorizer.evaluate("guest", "billing", "read")
    assert not denied
    assert denied.rule is None
    assert denied.reason == "No matching rule"


def test_trace_decisions_logs(authorizer_factory, site_roles, site_resources):
    authorizer = authorizer_factory.create(site_roles, site_resources, trace_decisions=True)

    with capture_logs() as logs:
        authorizer.is_allowed("guest", "comments", "read")

    events = [entry for entry in logs if entry["event"] == "acl.decision"]
    assert len(events) == 1
    assert events[0]["allowed"] is True
    assert events[0]["role"] == "guest"


def test_build_logs_summary(authorizer_factory, site_roles, site_resources):
    with capture_logs() as logs:
        authorizer_factory.create(site_roles, site_resources)

    completed = [entry for entry in logs if entry["event"] == "acl.build.completed"]
    assert completed == [
        {
            "event": "acl.build.completed",
            "log_level": "info",
            "resources": 4,
            "roles": 4,
            "rules": 5,
        }
    ]


def test_conflicting_resource_entries_rejected(authorizer_factory):
    """A later entry re-parenting an existing resource fails the build."""
    resources = [Resource("a"), Resource("b"), Resource("a", parent="b")]

    with pytest.raises(DuplicateNodeError):
        authorizer_factory.create([], resources)


def test_conflicting_role_entries_rejected(authorizer_factory):
    roles = [Role("x", parent="g"), Role("g"), Role("x")]

    with pytest.raises(DuplicateNodeError):
        Authorizer.from_snapshot(roles, [], authorizer_factory.settings)


def test_identical_role_entries_rejected_when_strict(authorizer_factory):
    roles = [Role("x", parent="g"), Role("g"), Role("x", parent="g")]

    assert authorizer_factory.create(roles).roles.parent_of("x") == "g"
    with pytest.raises(DuplicateNodeError):
        authorizer_factory.create(roles, strict_nodes=True)
