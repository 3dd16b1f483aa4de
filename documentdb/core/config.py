"""
Configuration management for the DocumentDB client.

Handles loading, validation, and access to client settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator, ValidationError, ConfigDict

from documentdb.options import ConsistencyLevel
from documentdb.retry import RetryConfig, RetryPolicy

logger = logging.getLogger(__name__)


class RetryOptions(BaseModel):
    """Retry policy configuration."""
    max_attempts: int = Field(default=RetryConfig.MAX_ATTEMPTS, ge=1)
    initial_backoff: float = Field(default=RetryConfig.INITIAL_BACKOFF, ge=0.0)
    max_backoff: float = Field(default=RetryConfig.MAX_BACKOFF, ge=0.0)
    backoff_multiplier: float = Field(default=RetryConfig.BACKOFF_MULTIPLIER, ge=1.0)

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_backoff=self.initial_backoff,
            max_backoff=self.max_backoff,
            backoff_multiplier=self.backoff_multiplier,
        )


class ConnectionPolicy(BaseModel):
    """Transport-level settings."""
    request_timeout: float = Field(default=60.0, gt=0.0, description="Per-attempt timeout in seconds")
    connection_limit: int = Field(default=100, ge=1)
    verify_ssl: bool = True
    retry: RetryOptions = Field(default_factory=RetryOptions)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "text"
    file: Optional[str] = None
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'documentdb.executor': 'DEBUG'}"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return v


class ClientConfig(BaseModel):
    """Main client configuration schema."""

    endpoint: str = Field(description="Service endpoint, e.g. https://account.documents.azure.com:443/")
    master_key: Optional[str] = None
    resource_tokens: Dict[str, str] = Field(default_factory=dict)
    permission_feed: List[Dict[str, Any]] = Field(default_factory=list)
    consistency_level: Optional[ConsistencyLevel] = None
    connection_policy: ConnectionPolicy = Field(default_factory=ConnectionPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an absolute http(s) URL; strip the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint must start with http:// or https://")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_credentials(self) -> "ClientConfig":
        if not self.master_key and not self.resource_tokens and not self.permission_feed:
            raise ValueError("one of master_key, resource_tokens or permission_feed is required")
        return self

    def redacted(self) -> Dict[str, Any]:
        """Configuration as a dict with secrets masked."""
        config_dict = self.model_dump(mode="json")
        if config_dict.get("master_key"):
            config_dict["master_key"] = "***REDACTED***"
        config_dict["resource_tokens"] = {k: "***REDACTED***" for k in config_dict["resource_tokens"]}
        for permission in config_dict["permission_feed"]:
            if "_token" in permission:
                permission["_token"] = "***REDACTED***"
        return config_dict


class ConfigManager:
    """
    Manages client configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. Explicit overrides (CLI arguments, constructor kwargs)
    2. Environment variables (DOCUMENTDB_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[ClientConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> ClientConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            overrides: Dictionary of explicit overrides

        Returns:
            Validated ClientConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.debug("Loading client configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.debug(f"Applied {len(env_config)} environment variable overrides")

        if overrides:
            config_dict = self._merge_configs(config_dict, _drop_none(overrides))

        try:
            self._config = ClientConfig(**config_dict)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.debug(f"Active configuration: {json.dumps(self._config.redacted(), indent=2)}")
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if endpoint := os.getenv("DOCUMENTDB_ENDPOINT"):
            config["endpoint"] = endpoint
        if master_key := os.getenv("DOCUMENTDB_MASTER_KEY"):
            config["master_key"] = master_key
        if consistency := os.getenv("DOCUMENTDB_CONSISTENCY_LEVEL"):
            config["consistency_level"] = consistency

        if timeout := os.getenv("DOCUMENTDB_REQUEST_TIMEOUT"):
            config.setdefault("connection_policy", {})["request_timeout"] = float(timeout)
        if attempts := os.getenv("DOCUMENTDB_RETRY_MAX_ATTEMPTS"):
            config.setdefault("connection_policy", {}).setdefault("retry", {})["max_attempts"] = int(attempts)

        if log_level := os.getenv("DOCUMENTDB_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_file := os.getenv("DOCUMENTDB_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> ClientConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> ClientConfig:
        """Reload configuration from the same sources."""
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file)


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
