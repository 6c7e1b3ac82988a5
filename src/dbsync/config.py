"""Configuration management using YAML and Pydantic."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from dbsync.exceptions import ConfigurationError

DEFAULT_MAX_KEYS = 25


def _substitute_env_vars(value: str) -> str:
    """Substitute environment variables in string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with environment variables substituted
    """
    pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        env_value = os.getenv(var_name)
        if env_value is not None:
            return env_value
        if default is not None:
            return default
        raise ValueError(f"Environment variable {var_name} not set and no default provided")

    return re.sub(pattern, replacer, value)


def _substitute_env_in_dict(data: Any) -> Any:
    """Recursively substitute environment variables in nested structures."""
    if isinstance(data, dict):
        return {key: _substitute_env_in_dict(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_in_dict(item) for item in data]
    elif isinstance(data, str):
        return _substitute_env_vars(data)
    return data


class S3Config(BaseModel):
    """Connection settings for the object store."""

    bucket: Optional[str] = Field(default=None, description="S3 bucket holding the backups")
    region: Optional[str] = Field(
        default=None,
        description="AWS region (falls back to the profile or environment default)",
    )
    profile: Optional[str] = Field(
        default=None,
        description="Named profile from the shared AWS credentials file",
    )
    endpoint: Optional[str] = Field(
        default=None,
        description="Custom endpoint URL for S3-compatible storage (null for AWS S3)",
    )

    @field_validator("bucket", "region", "profile", "endpoint")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank strings (e.g. from unset env defaults) as unset."""
        if v is not None and not v.strip():
            return None
        return v

    def session_kwargs(self) -> dict[str, str]:
        """Build keyword arguments for boto3.Session."""
        kwargs: dict[str, str] = {}
        if self.profile:
            kwargs["profile_name"] = self.profile
        if self.region:
            kwargs["region_name"] = self.region
        return kwargs


class DefaultsConfig(BaseModel):
    """Defaults for command options."""

    max_keys: int = Field(
        default=DEFAULT_MAX_KEYS,
        description="Maximum number of objects to list",
        ge=0,
    )
    download_dir: Optional[Path] = Field(
        default=None,
        description="Directory downloads are written to (default: current directory)",
    )
    gunzip: bool = Field(default=False, description="Decompress archives after download")


class DbSyncConfig(BaseModel):
    """Root configuration model."""

    s3: S3Config = Field(default_factory=S3Config, description="Object store configuration")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig, description="Option defaults")

    def merged_s3(
        self,
        *,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> S3Config:
        """Return S3 settings with command-line values taking precedence."""
        return S3Config(
            bucket=bucket or self.s3.bucket,
            region=region or self.s3.region,
            profile=profile or self.s3.profile,
            endpoint=endpoint or self.s3.endpoint,
        )


def load_config(config_path: Optional[Path]) -> DbSyncConfig:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file, or None for built-in defaults

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    if config_path is None:
        return DbSyncConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            context={"path": str(config_path)},
        ) from None
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}",
            context={"path": str(config_path)},
        ) from e

    if not raw_config:
        return DbSyncConfig()

    try:
        return DbSyncConfig.model_validate(_substitute_env_in_dict(raw_config))
    except Exception as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            context={"path": str(config_path)},
        ) from e
