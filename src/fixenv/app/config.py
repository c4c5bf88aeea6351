from __future__ import annotations

from pathlib import Path
from typing import Literal

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "fixenv"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_DIRECTORIES__")

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all fixenv data",
    )

    @computed_field
    @property
    def data_dir(self) -> Path:
        """Directory holding the default SQLite database."""
        path = self.home / "data"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for the JSONL service log."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class LLMConfig(BaseSettings):
    """LLM configuration."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_LLM__")

    api_key: str | None = Field(
        default=None,
        description="LLM API key (OpenAI-compatible gateway or Anthropic)",
    )

    provider_name: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider (openai, anthropic)",
    )

    model_name: str = Field(
        default="google/gemini-2.5-flash",
        description="LLM model name",
    )

    base_url: str | None = Field(
        default=None,
        description="Base URL of an OpenAI-compatible gateway; provider default when unset",
    )

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class GitHubConfig(BaseSettings):
    """GitHub configuration."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_GITHUB__")

    token: str | None = Field(
        default=None,
        description="Optional GitHub token; requests are anonymous without it",
    )

    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    timeout: float = Field(default=10.0, gt=0)


class CacheConfig(BaseSettings):
    """Analysis result cache settings."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_CACHE__")

    enabled: bool = True
    ttl_hours: int = Field(default=24, ge=1)


class DatabaseConfig(BaseSettings):

    model_config = SettingsConfigDict(env_prefix="FIXENV_DATABASE__")
    url: str | None = Field(
        default=None,
        description="SQLAlchemy URL; defaults to a SQLite file under the data directory",
    )


class RateLimitConfig(BaseSettings):
    """Per-client request limits, enforced only when a Redis URL is set."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_RATE_LIMIT__")

    redis_url: str | None = None
    window_seconds: int = Field(default=60, ge=1)
    create_share: int = Field(default=20, ge=1)
    get_share: int = Field(default=30, ge=1)
    generate_snapshot: int = Field(default=5, ge=1)


class ShareConfig(BaseSettings):

    model_config = SettingsConfigDict(env_prefix="FIXENV_SHARE__")
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Origin used in share URLs when the request carries none",
    )
    token_length: int = Field(default=12, ge=6)
    max_attempts: int = Field(default=5, ge=1)


class ApiConfig(BaseSettings):
    """Where the CLI sends its requests."""

    model_config = SettingsConfigDict(env_prefix="FIXENV_API__")

    base_url: str = "http://localhost:8000"
    timeout: float = Field(default=120.0, gt=0)


class LoggingConfig(BaseSettings):

    model_config = SettingsConfigDict(env_prefix="FIXENV_LOGGING__")
    level: str = "INFO"
    logger_name: str = APP_NAME
    console_output: bool = False
    file_output: bool = True


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with FIXENV_ prefix.
    Use double underscore for nested config: FIXENV_LLM__API_KEY

    Example env vars:
        # Required by the service
        export FIXENV_LLM__API_KEY=sk-xxxxxxxxxxxxx

        # Optional (with defaults)
        export FIXENV_LLM__PROVIDER_NAME=openai
        export FIXENV_LLM__BASE_URL=https://gateway.example.com/v1
        export FIXENV_DATABASE__URL=postgresql+psycopg://user:pass@db/fixenv
        export FIXENV_RATE_LIMIT__REDIS_URL=redis://localhost:6379/0
        export FIXENV_API__BASE_URL=https://fixenv.example.com
        export FIXENV_DIRECTORIES__HOME=/custom/path
    """

    model_config = SettingsConfigDict(
        env_prefix="FIXENV_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    share: ShareConfig = Field(default_factory=ShareConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @computed_field
    @property
    def database_url(self) -> str:
        if self.database.url:
            return self.database.url
        return f"sqlite:///{self.directories.data_dir / 'fixenv.db'}"
