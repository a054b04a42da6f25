"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.checkers.share_api import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class CheckerConfig(BaseModel):
    """Limits and link policy for one provider.

    All values configurable via YAML (``checkers.<platform>``) or ENV vars
    (``PANCHECK_<PLATFORM>_<FIELD>``).
    """

    enabled: bool = Field(default=True, description="Register this provider.")
    concurrency_limit: int = Field(
        default=5,
        description="Max checks running at the same time for this provider.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        description="Per-check deadline covering all provider API calls.",
    )
    min_interval_seconds: float = Field(
        default=0.2,
        description="Minimum spacing between two admitted checks. 0 = none.",
    )
    admission_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Max wait for admission. If unset, timeout_seconds.",
    )
    redirect_timeout_seconds: float = Field(
        default=10.0,
        description="Deadline for resolving alias-domain redirects.",
    )
    max_redirects: int = Field(
        default=10,
        description="Max redirect hops followed for alias links.",
    )
    password_min_length: int = Field(
        default=2, description="Shortest accepted share password."
    )
    password_max_length: int = Field(
        default=50, description="Longest accepted share password."
    )

    @field_validator("concurrency_limit")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("concurrency_limit must be > 0")
        return v

    @field_validator(
        "timeout_seconds", "redirect_timeout_seconds", "admission_timeout_seconds"
    )
    @classmethod
    def _validate_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("min_interval_seconds")
    @classmethod
    def _validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("min_interval_seconds must be >= 0")
        return v

    @field_validator("max_redirects", "password_min_length")
    @classmethod
    def _validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def _validate_password_bounds(self) -> "CheckerConfig":
        if self.password_min_length > self.password_max_length:
            raise ValueError("password_min_length must be <= password_max_length")
        return self


class CheckersConfig(BaseModel):
    """Per-provider checker settings (YAML section: checkers.*)."""

    quark: CheckerConfig = Field(default_factory=CheckerConfig)
    uc: CheckerConfig = Field(default_factory=CheckerConfig)

    def for_platform(self, platform: Platform) -> CheckerConfig:
        return getattr(self, platform.value)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/checkers).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="pancheck", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser User-Agent sent to provider APIs.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Providers (YAML section: checkers.*)
    checkers: CheckersConfig = Field(default_factory=CheckersConfig)

    @field_validator("http_user_agent")
    @classmethod
    def _validate_user_agent(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("http_user_agent must not be empty")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {"user_agent": self.http_user_agent},
            "logging": {"level": self.log_level, "format": self.log_format},
            "checkers": self.checkers.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read PANCHECK_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - PANCHECK_LOG_LEVEL
    - PANCHECK_HTTP_USER_AGENT
    - PANCHECK_QUARK_CONCURRENCY_LIMIT
    - PANCHECK_UC_TIMEOUT_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="PANCHECK_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    quark_enabled: Optional[bool] = None
    quark_concurrency_limit: Optional[int] = None
    quark_timeout_seconds: Optional[float] = None
    quark_min_interval_seconds: Optional[float] = None

    uc_enabled: Optional[bool] = None
    uc_concurrency_limit: Optional[int] = None
    uc_timeout_seconds: Optional[float] = None
    uc_min_interval_seconds: Optional[float] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
