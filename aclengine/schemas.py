"""
Permission configuration schemas.
"""

from typing import Any
from pydantic import BaseModel, ConfigDict, Field

from .entities import Effect


class PermissionDetails(BaseModel):
    """Optional details attached to a delimited permission key."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=1000)
    assertion: Any = None
    effect: Effect = Effect.ALLOW


class PermissionEntry(PermissionDetails):
    """Structured permission entry with explicit resource and privilege."""
    resource: str
    privilege: str
