"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from section_testing.errors import ConfigValidationError, ErrorContext

ENV_PREFIX = "SECTION_TESTING_"

_active_config: SectionTestingConfig | None = None


class SectionTestingConfig(BaseSettings):
    """Configuration for section-style test exploration."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
    )

    report_failures: bool = Field(
        default=True, description="Write the active sections of a failing pass"
    )
    report_stream: str = Field(
        default="stderr", description="Stream the failure trace is written to"
    )
    relative_paths: bool = Field(
        default=True, description="Show section locations relative to the working directory"
    )
    annotate_exceptions: bool = Field(
        default=True, description="Attach the failure trace to the exception as a note"
    )
    max_passes: int | None = Field(
        default=None, description="Stop exploring a function after this many passes"
    )

    @field_validator("report_stream", mode="before")
    @classmethod
    def validate_report_stream(cls, v: str) -> str:
        valid = {"stderr", "stdout"}
        if v not in valid:
            raise ConfigValidationError(
                message=f"Invalid report stream: {v!r}. Valid: {sorted(valid)}",
                field="report_stream",
                value=v,
                context=ErrorContext(extra={"valid_streams": sorted(valid)}),
            )
        return v

    @field_validator("max_passes")
    @classmethod
    def validate_max_passes(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ConfigValidationError(
                message="max_passes must be a positive integer",
                field="max_passes",
                value=v,
            )
        return v


def load_config(config_path: str | Path | None = None) -> SectionTestingConfig:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                try:
                    config_data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigValidationError(
                        message=f"Config file {config_path} is not valid YAML",
                        value=str(config_path),
                        cause=exc,
                    ) from exc
            if not isinstance(config_data, dict):
                raise ConfigValidationError(
                    message=f"Config file {config_path} must contain a mapping",
                    value=str(config_path),
                )

    config_data.update(_get_env_overrides())

    return SectionTestingConfig(**config_data)


def get_config() -> SectionTestingConfig:
    """Return the active configuration, loading it from the environment on first use."""
    global _active_config
    if _active_config is None:
        _active_config = load_config()
    return _active_config


def set_config(config: SectionTestingConfig) -> None:
    """Replace the active configuration."""
    global _active_config
    _active_config = config


def reset_config() -> None:
    """Forget the active configuration so the next get_config() reloads it."""
    global _active_config
    _active_config = None


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    for name in SectionTestingConfig.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value

    return overrides
