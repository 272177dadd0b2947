"""
Centralized configuration for bmml.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments (the CLI passes its options here)
2. Environment variables (BMML_*)
3. .env file
4. Default values

Example:
    from bmml.config import get_config

    config = get_config()
    print(config.output_format)  # From BMML_OUTPUT_FORMAT or default

    # Override at runtime
    config = get_config(fail_on_warnings=True)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BmmlConfig(BaseSettings):
    """
    Central configuration for bmml.

    All settings can be overridden via environment variables
    prefixed with BMML_.

    Example:
        export BMML_LOG_LEVEL=debug
        export BMML_FAIL_ON_WARNINGS=true
    """

    model_config = SettingsConfigDict(
        env_prefix="BMML_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for bmml",
    )

    # Output
    output_format: Literal["text", "json"] = Field(
        default="text",
        description="Default CLI output format",
    )
    fail_on_warnings: bool = Field(
        default=False,
        description="Treat lint warnings as failures (same as lint --strict)",
    )

    # Schemas
    schema_dir: Optional[str] = Field(
        default=None,
        description="Directory holding bmml-v1/v2 JSON schemas (packaged schemas if unset)",
    )

    @field_validator("schema_dir")
    @classmethod
    def expand_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ and environment variables in paths."""
        if v is None:
            return v
        return os.path.expanduser(os.path.expandvars(v))

    def get_schema_dir(self) -> Optional[Path]:
        return Path(self.schema_dir) if self.schema_dir else None


# Global singleton
_config: Optional[BmmlConfig] = None


def get_config(**overrides) -> BmmlConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = BmmlConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def get_log_level() -> str:
    """Get the configured log level."""
    return get_config().log_level
