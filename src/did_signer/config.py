"""Signer configuration."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.errors import ConfigurationError
from .core.models import Provider

DEFAULT_NAME = "did-signer"
DEFAULT_VERSION = "1.0.0"


class SignerConfig(BaseModel):
    """Process-wide signer settings, built once at startup."""

    name: str = Field(default=DEFAULT_NAME, description="Server name")
    version: str = Field(
        default=DEFAULT_VERSION,
        pattern=r"^(\d+)\.(\d+)\.(\d+)$",
        description="Server version (semver)",
    )
    log_level: str = Field(default="INFO", description="Logging level name")
    default_provider: Optional[Provider] = Field(
        default=None, description="Provider hint used when a tool call has none"
    )

    model_config = {"frozen": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept level names in any case."""
        v = str(v).upper()
        if v not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @field_validator("default_provider", mode="before")
    @classmethod
    def empty_provider_is_none(cls, v):
        if v == "":
            return None
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SignerConfig":
        """Build configuration from environment variables.

        Reads ``NAME``, ``VERSION``, ``DID_SIGNER_LOG_LEVEL`` and
        ``DID_SIGNER_PROVIDER``.

        Raises:
            ConfigurationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        data = {
            "name": environ.get("NAME", DEFAULT_NAME),
            "version": environ.get("VERSION", DEFAULT_VERSION),
            "log_level": environ.get("DID_SIGNER_LOG_LEVEL", "INFO"),
            "default_provider": environ.get("DID_SIGNER_PROVIDER"),
        }
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid signer configuration: {e}") from e

    @classmethod
    def from_config(cls, config_path: str | Path) -> "SignerConfig":
        """Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            SignerConfig instance

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid signer configuration: {e}") from e

    def save(self, config_path: str | Path) -> None:
        """Save configuration to a YAML file."""
        data = self.model_dump(mode="json", exclude_none=True)
        with open(Path(config_path), "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_config(
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SignerConfig:
    """Load configuration from ``config_path`` if given, else the environment."""
    if config_path is not None:
        return SignerConfig.from_config(config_path)
    return SignerConfig.from_env(environ)
