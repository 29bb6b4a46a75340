"""
Pytest fixtures for testing.

Provides:
- Settings isolated from the environment
- In-memory providers
- A small editorial ACL shared by the authorizer tests
"""

import pytest

from aclengine import (
    ALL,
    Authorizer,
    MemoryPermissionsProvider,
    MemoryResourcesProvider,
    MemoryRolesProvider,
    Permission,
    Resource,
    Role,
    Settings,
)


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def resources_provider() -> MemoryResourcesProvider:
    return MemoryResourcesProvider()


@pytest.fixture
def permissions_provider() -> MemoryPermissionsProvider:
    return MemoryPermissionsProvider()


# ============ Factory Fixtures ============


class AuthorizerFactory:
    """Builds authorizers from plain role/resource lists."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def create(
        self,
        roles: list[Role],
        resources: list[Resource] | None = None,
        **overrides,
    ) -> Authorizer:
        settings = self.settings.model_copy(update=overrides) if overrides else self.settings
        return Authorizer(
            MemoryRolesProvider(roles),
            MemoryResourcesProvider(resources or []),
            settings,
        )


@pytest.fixture
def authorizer_factory(settings: Settings) -> AuthorizerFactory:
    return AuthorizerFactory(settings)


@pytest.fixture
def site_resources() -> list[Resource]:
    """articles > comments > replies, plus an unrelated billing root."""
    return [
        Resource("articles"),
        Resource("comments", parent="articles"),
        Resource("replies", parent="comments"),
        Resource("billing"),
    ]


@pytest.fixture
def site_roles() -> list[Role]:
    """guest > member > editor, plus an administrator."""
    return [
        Role("guest", permissions=[Permission("articles", "read")]),
        Role(
            "member",
            parent="guest",
            permissions=[Permission("comments", "create")],
        ),
        Role(
            "editor",
            parent="member",
            permissions=[
                Permission("articles", ALL),
                Permission("billing", "read"),
            ],
        ),
        Role("root", is_administrator=True),
    ]


@pytest.fixture
def site_authorizer(authorizer_factory, site_roles, site_resources) -> Authorizer:
    return authorizer_factory.create(site_roles, site_resources)
