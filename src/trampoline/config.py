"""Configuration management for trampoline."""

import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``TRAMPOLINE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRAMPOLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Managed tool
    tool_name: str = Field(default="Bundler", description="Display name used in messages")
    package_name: str = Field(default="bundler", description="Package name on the feed")

    # Remote version feed
    feed_url: str = Field(default="https://rubygems.org", description="Remote index base URL")
    feed_timeout: float = Field(default=30.0, description="Feed request timeout (seconds)")

    # Environment handling
    pin_env_var: str = Field(
        default="BUNDLER_VERSION", description="Variable pinning the version for a process tree"
    )
    home_env_vars: Annotated[
        list[str],
        Field(
            default_factory=lambda: ["GEM_HOME", "GEM_PATH"],
            description="Package-manager home/path variables re-asserted on relaunch",
        ),
    ]
    original_env_prefix: str = Field(
        default="BUNDLER_ORIG_", description="Prefix of saved original environment values"
    )
    original_env_nil_value: str = Field(
        default="BUNDLER_ENV_NIL_VALUE", description="Saved value meaning 'was unset'"
    )
    preserved_env_keys: Annotated[
        list[str],
        Field(
            default_factory=lambda: [
                "PATH",
                "MANPATH",
                "RUBYOPT",
                "RUBYLIB",
                "GEM_HOME",
                "GEM_PATH",
                "BUNDLE_BIN_PATH",
                "BUNDLE_GEMFILE",
            ],
            description="Variables backed up before startup mutations",
        ),
    ]
    gemfile_env_var: str = Field(
        default="BUNDLE_GEMFILE", description="Variable naming the project manifest"
    )

    # Installation
    install_command: Annotated[
        list[str],
        Field(default_factory=lambda: ["gem", "install"], description="Install command prefix"),
    ]
    install_timeout: float = Field(default=600.0, description="Install timeout (seconds)")

    # Platform
    trampolining_enabled: bool = Field(
        default=True, description="Allow re-launching under another version"
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"unknown log level: {value}")
        return value.upper()

    @field_validator("feed_timeout", "install_timeout")
    @classmethod
    def _check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
