"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
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

from .defaults import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path | None:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class DecoderConfig(BaseModel):
    """Configuration for the out-of-process embed decoder."""

    command: str = Field(
        default="node",
        description="Interpreter used to run the decoder script.",
    )
    script_name: str = Field(
        default="rabbit.js",
        description="Decoder script file name searched at the candidate locations.",
    )
    script_path: Optional[Path] = Field(
        default=None,
        description="Explicit decoder script path, tried before the candidates.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Per-decode deadline; the child process is killed on expiry.",
    )
    max_concurrent: int = Field(
        default=4,
        description="Max decoder processes running at once.",
    )
    mixdrop_referrer: str = Field(
        default="https://myflixerz.to",
        description="Default referrer presented for MixDrop embeds.",
    )

    @field_validator("script_path", mode="before")
    @classmethod
    def _validate_script_path(cls, v: Any) -> Path | None:
        return _normalize_path(v)

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("decoder.timeout_seconds must be > 0")
        return v

    @field_validator("max_concurrent")
    @classmethod
    def _validate_max_concurrent(cls, v: int) -> int:
        if v < 1:
            raise ValueError("decoder.max_concurrent must be >= 1")
        return v


class ResolutionConfig(BaseModel):
    """Per-server resolution settings."""

    timeout_seconds: float = Field(
        default=45.0,
        description=(
            "Deadline for one server's full resolution "
            "(redirect lookup + decode)."
        ),
    )

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("resolution.timeout_seconds must be > 0")
        return v


class ApiConfig(BaseModel):
    """HTTP API surface settings."""

    rate_limit_requests: int = Field(
        default=100,
        description="Max requests per client within the window. 0 = unlimited.",
    )
    rate_limit_window_seconds: float = Field(
        default=900.0,
        description="Sliding window length for rate limiting (seconds).",
    )

    @field_validator("rate_limit_requests")
    @classmethod
    def _validate_requests(cls, v: int) -> int:
        if v < 0:
            raise ValueError("api.rate_limit_requests must be >= 0")
        return v

    @field_validator("rate_limit_window_seconds")
    @classmethod
    def _validate_window(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("api.rate_limit_window_seconds must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (upstream/decoder/resolution/api/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="flixarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Upstream catalog site (YAML section: upstream.*)
    upstream_base_url: str = Field(
        default="https://myflixerz.to",
        validation_alias=AliasChoices(
            "upstream_base_url",
            AliasPath("upstream", "base_url"),
        ),
        description="Base URL of the catalog site.",
    )
    upstream_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "upstream_timeout_seconds",
            AliasPath("upstream", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for catalog requests.",
    )
    upstream_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "upstream_follow_redirects",
            AliasPath("upstream", "follow_redirects"),
        ),
        description="Whether the HTTP client follows redirects.",
    )
    upstream_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "upstream_user_agent",
            AliasPath("upstream", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

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

    @field_validator("upstream_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("upstream.base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("upstream_timeout_seconds")
    @classmethod
    def _validate_upstream_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("upstream.timeout_seconds must be > 0")
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
        decoder = self.decoder.model_dump()
        if decoder["script_path"] is not None:
            decoder["script_path"] = str(decoder["script_path"])
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "upstream": {
                "base_url": self.upstream_base_url,
                "timeout_seconds": self.upstream_timeout_seconds,
                "follow_redirects": self.upstream_follow_redirects,
                "user_agent": self.upstream_user_agent,
            },
            "decoder": decoder,
            "resolution": self.resolution.model_dump(),
            "api": self.api.model_dump(),
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read FLIXARR_* variables, converts
    them to a dict of set values and merges that over YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - FLIXARR_UPSTREAM_BASE_URL
    - FLIXARR_DECODER_COMMAND
    - FLIXARR_DECODER_TIMEOUT_SECONDS
    - FLIXARR_RESOLUTION_TIMEOUT_SECONDS
    - FLIXARR_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="FLIXARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    upstream_base_url: Optional[str] = None
    upstream_timeout_seconds: Optional[float] = None
    upstream_follow_redirects: Optional[bool] = None
    upstream_user_agent: Optional[str] = None

    decoder_command: Optional[str] = None
    decoder_script_name: Optional[str] = None
    decoder_script_path: Optional[Path] = None
    decoder_timeout_seconds: Optional[float] = None
    decoder_max_concurrent: Optional[int] = None
    decoder_mixdrop_referrer: Optional[str] = None

    resolution_timeout_seconds: Optional[float] = None

    api_rate_limit_requests: Optional[int] = None
    api_rate_limit_window_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    @field_validator("decoder_script_path", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
