"""
Permission descriptor parsing.

A permission configuration maps keys to details. Three entry shapes are
understood:

    permissions = {
        # delimited key, details optional
        "articles:edit": None,
        "articles:": {"title": "Everything on articles"},
        "articles:publish": lambda role, resource, privilege, ctx: ...,

        # structured entry, key is only a label
        "moderate": {"resource": "comments", "privilege": "delete"},

        # pre-built descriptor, used as-is
        "review": Permission("articles", "review"),
    }

A plain list of delimited strings is accepted as well.

An empty privilege (or resource) means ALL.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Iterator

import structlog
from pydantic import ValidationError

from .config import get_settings
from .entities import ALL, Assertion, Permission
from .exceptions import ConfigurationError, InvalidPermissionFormatError, MissingFieldError
from .providers import MemoryPermissionsProvider, MemoryResourcesProvider
from .registry import AssertionRegistry
from .schemas import PermissionDetails, PermissionEntry

# Register built-in assertions
from . import assertions  # noqa: F401

logger = structlog.get_logger(__name__)


def split_permission(value: str, delimiter: str) -> tuple[str | None, str | None]:
    """
    Split 'resource:privilege' on the first delimiter and trim both parts.

    Empty parts become ALL.
    """
    resource, _, privilege = value.partition(delimiter)
    return resource.strip() or ALL, privilege.strip() or ALL


def resolve_assertion(value: Any) -> Assertion | None:
    """
    Turn a configured assertion into a callable.

    Accepts None, a callable, a registered name, or a mapping with a
    "type" name plus options.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return AssertionRegistry.create(value)
    if isinstance(value, Mapping):
        options = dict(value)
        name = options.pop("type", None)
        if name is None:
            raise MissingFieldError(value, "type")
        return AssertionRegistry.create(name, **options)
    if callable(value):
        return value
    raise InvalidPermissionFormatError(value)


def _validate(schema: type[PermissionDetails], details: Mapping) -> PermissionDetails:
    try:
        return schema.model_validate(dict(details))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid permission entry {dict(details)!r}: {e}") from e


def parse_permission(key: Any, details: Any = None, delimiter: str | None = None) -> Permission:
    """
    Parse one configuration entry into a Permission.

    Raises:
        MissingFieldError: structured entry without resource or privilege
        InvalidPermissionFormatError: entry of any other shape
        ConfigurationError: delimiter is not a single character
    """
    delimiter = delimiter or get_settings().delimiter
    if len(delimiter) != 1:
        raise ConfigurationError(f"Delimiter must be exactly one character, got {delimiter!r}")

    if isinstance(key, str) and delimiter in key:
        resource, privilege = split_permission(key, delimiter)

        if isinstance(details, Permission):
            return details
        if details is None or callable(details):
            return Permission(resource, privilege, assertion=details)
        if isinstance(details, str):
            return Permission(resource, privilege, assertion=resolve_assertion(details))
        if not isinstance(details, Mapping):
            raise InvalidPermissionFormatError(details)

        extra = _validate(PermissionDetails, details)
        return Permission(
            resource,
            privilege,
            assertion=resolve_assertion(extra.assertion),
            effect=extra.effect,
            title=extra.title,
            description=extra.description,
        )

    if isinstance(details, Mapping):
        for field_name in ("resource", "privilege"):
            if details.get(field_name) is None:
                raise MissingFieldError(details, field_name)

        entry = _validate(PermissionEntry, details)
        return Permission(
            entry.resource or ALL,
            entry.privilege or ALL,
            assertion=resolve_assertion(entry.assertion),
            effect=entry.effect,
            title=entry.title,
            description=entry.description,
        )

    if isinstance(details, Permission):
        return details

    if isinstance(details, str) and delimiter in details:
        return parse_permission(details, None, delimiter)

    raise InvalidPermissionFormatError(key if details is None else details)


def _entries(config: Mapping | Iterable) -> Iterator[tuple[Any, Any]]:
    if isinstance(config, Mapping):
        yield from config.items()
        return

    for entry in config:
        if isinstance(entry, str):
            yield entry, None
        else:
            yield None, entry


def parse_permissions(config: Mapping | Iterable, delimiter: str | None = None) -> list[Permission]:
    """Parse every entry of a permission configuration, in order."""
    return [parse_permission(key, details, delimiter) for key, details in _entries(config)]


def register_permissions(
    config: Mapping | Iterable,
    resources: MemoryResourcesProvider,
    permissions: MemoryPermissionsProvider,
    delimiter: str | None = None,
) -> list[Permission]:
    """
    Parse a permission configuration and declare its permissions and resources.

    Every resource named by a permission is added to the resources provider
    (as a root, unless it already exists).
    """
    parsed = parse_permissions(config, delimiter)

    for permission in parsed:
        permissions.put(permission)
        if permission.resource is not ALL:
            resources.add_resource(permission.resource)

    logger.info("acl.permissions.registered", count=len(parsed))
    return parsed
