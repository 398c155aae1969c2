"""Application configuration management.

Settings are read from the process environment, optionally seeded from a
``.env`` file, and exposed as typed sections:

- EnvironmentLoader: environment variable loading with type conversion
- EventBusConfig: pub/sub adapter selection and Redis connection options
- GitHubConfig: GitHub REST API client options
- Settings: main configuration class
"""

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from githunt_api.core.enums import Environment, EventBusMode, LogFormat, LogLevel
from githunt_api.core.errors import ConfigurationError
from githunt_api.core.logging import LogConfig

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class EnvironmentLoader:
    """
    Environment variable loader with type conversion and validation.

    Values already present in the process environment take precedence over
    those in the env file.
    """

    def __init__(self, env_file: str = ".env"):
        self.env_file = env_file
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()

                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    if key not in os.environ:
                        os.environ[key] = value

        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def get_string(
        self, key: str, default: str | None = None, required: bool = False
    ) -> str | None:
        """Get string value from environment."""
        value = os.environ.get(key, default)
        if required and not value:
            raise ConfigurationError(f"{key} is required", config_key=key)
        return value

    def get_integer(
        self,
        key: str,
        default: int | None = None,
        min_value: int | None = None,
        max_value: int | None = None,
    ) -> int | None:
        """Get integer value from environment, optionally bounded."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be an integer, got {raw!r}", config_key=key
            ) from e

        if min_value is not None and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
        if max_value is not None and value > max_value:
            raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
        return value

    def get_float(
        self, key: str, default: float | None = None, min_value: float | None = None
    ) -> float | None:
        """Get float value from environment."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        try:
            value = float(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be a number, got {raw!r}", config_key=key
            ) from e

        if min_value is not None and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
        return value

    def get_boolean(self, key: str, default: bool = False) -> bool:
        """Get boolean value from environment."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        normalized = raw.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"{key} must be a boolean, got {raw!r}", config_key=key
        )

    def get_enum(self, key: str, enum_class: type[Enum], default: Enum | None) -> Any:
        """Get enum value (matched on the member value) from environment."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        try:
            return enum_class(raw.strip().lower())
        except ValueError as e:
            valid = ", ".join(str(member.value) for member in enum_class)
            raise ConfigurationError(
                f"{key} must be one of: {valid}; got {raw!r}", config_key=key
            ) from e


@dataclass
class EventBusConfig:
    """Pub/sub adapter configuration."""

    mode: EventBusMode = EventBusMode.MEMORY
    redis_url: str = "redis://localhost:6379/0"
    channel_prefix: str = "githunt"
    connect_timeout: float = 15.0
    retry_on_timeout: bool = True
    max_queue_size: int = 1000

    def __post_init__(self):
        if not self.redis_url.startswith(("redis://", "rediss://")):
            raise ConfigurationError(
                "redis_url must start with 'redis://' or 'rediss://'",
                config_key="REDIS_URL",
            )

        if self.max_queue_size < 1:
            raise ConfigurationError(
                "max_queue_size must be at least 1",
                config_key="SUBSCRIPTION_QUEUE_SIZE",
            )


@dataclass
class GitHubConfig:
    """GitHub REST API client configuration."""

    api_url: str = "https://api.github.com"
    token: str | None = None
    timeout: float = 10.0

    def __post_init__(self):
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "GitHub API URL must be an http(s) URL", config_key="GITHUB_API_URL"
            )


class Settings:
    """
    Main application settings.

    Usage Example:
        settings = Settings()

        settings.event_bus.mode          # EventBusMode.MEMORY
        settings.github.api_url          # "https://api.github.com"
        configure_logging(settings.log_config())
    """

    def __init__(self, env_file: str = ".env"):
        self.env_loader = EnvironmentLoader(env_file)

        self._load_application_config()
        self._load_event_bus_config()
        self._load_github_config()

    def _load_application_config(self) -> None:
        """Load core application configuration."""
        self.app_name = self.env_loader.get_string("APP_NAME", "GitHunt API")
        self.environment = self.env_loader.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.debug = self.env_loader.get_boolean("DEBUG", False)

        # None means "use the environment default" in log_config()
        self.log_level = None
        level = self.env_loader.get_string("LOG_LEVEL")
        if level:
            try:
                self.log_level = LogLevel.from_string(level)
            except ValueError as e:
                raise ConfigurationError(str(e), config_key="LOG_LEVEL") from e

        self.log_format = self.env_loader.get_enum("LOG_FORMAT", LogFormat, None)
        self.strict_resolver_merge = self.env_loader.get_boolean(
            "STRICT_RESOLVER_MERGE", False
        )

    def _load_event_bus_config(self) -> None:
        """Load pub/sub adapter configuration."""
        self.event_bus = EventBusConfig(
            mode=self.env_loader.get_enum("EVENT_BUS_MODE", EventBusMode, EventBusMode.MEMORY),
            redis_url=self.env_loader.get_string("REDIS_URL", "redis://localhost:6379/0"),
            channel_prefix=self.env_loader.get_string("REDIS_CHANNEL_PREFIX", "githunt"),
            connect_timeout=self.env_loader.get_float(
                "REDIS_CONNECT_TIMEOUT", 15.0, min_value=0.1
            ),
            retry_on_timeout=self.env_loader.get_boolean("REDIS_RETRY_ON_TIMEOUT", True),
            max_queue_size=self.env_loader.get_integer(
                "SUBSCRIPTION_QUEUE_SIZE", 1000, min_value=1, max_value=100_000
            ),
        )

    def _load_github_config(self) -> None:
        """Load GitHub client configuration."""
        self.github = GitHubConfig(
            api_url=self.env_loader.get_string("GITHUB_API_URL", "https://api.github.com"),
            token=self.env_loader.get_string("GITHUB_TOKEN"),
            timeout=self.env_loader.get_float("GITHUB_TIMEOUT", 10.0, min_value=0.1),
        )

    def log_config(self) -> LogConfig:
        """Build the logging configuration for this environment."""
        config = LogConfig(environment=self.environment)

        # Explicit settings win over environment defaults
        if self.log_level is not None:
            config.level = self.log_level
        if self.log_format is not None:
            config.format = self.log_format
        if self.debug:
            config.level = LogLevel.DEBUG
        return config


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load
    """
    return Settings(env_file)


__all__ = [
    "EnvironmentLoader",
    "EventBusConfig",
    "GitHubConfig",
    "Settings",
    "get_settings",
]
