"""
Engine configuration using Pydantic Settings.

Environment variables (or a .env file):
- ACL_DELIMITER: separator in "resource:privilege" strings (default ":")
- ACL_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default INFO)
- ACL_LOG_FORMAT: "json" (default) or "text"
- ACL_TRACE_DECISIONS: log the deciding rule of every query (default false)
- ACL_STRICT_NODES: reject identical re-registration of a node (default false)
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Authorization engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    delimiter: str = Field(
        default=":",
        description="Delimiter between resource and privilege",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")
    trace_decisions: bool = Field(
        default=False,
        description="Log the rule deciding each query at DEBUG level",
    )

    # Hierarchy
    strict_nodes: bool = Field(
        default=False,
        description="Raise on identical re-registration instead of ignoring it",
    )

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("delimiter must be exactly one character")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "text"}
        if v not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
