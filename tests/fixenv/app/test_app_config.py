import pytest
from pydantic import ValidationError

from fixenv.app.config import AppConfig, DatabaseConfig, DirectoryConfig


def test_defaults(tmp_path):
    config = AppConfig()

    assert config.directories.home == tmp_path / "fixenv-home"
    assert config.llm.provider_name == "openai"
    assert config.llm.model_name == "google/gemini-2.5-flash"
    assert config.llm.api_key is None
    assert config.cache.ttl_hours == 24
    assert config.rate_limit.redis_url is None
    assert config.rate_limit.create_share == 20
    assert config.rate_limit.get_share == 30
    assert config.rate_limit.generate_snapshot == 5
    assert config.share.token_length == 12
    assert config.api.base_url == "http://localhost:8000"


def test_directories_are_created(tmp_path):
    config = AppConfig(directories=DirectoryConfig(home=tmp_path / "custom"))

    assert config.directories.logs_dir == tmp_path / "custom" / "logs"
    assert config.directories.logs_dir.is_dir()
    assert config.directories.data_dir.is_dir()


def test_nested_env_vars(monkeypatch):
    monkeypatch.setenv("FIXENV_LLM__API_KEY", "sk-test")
    monkeypatch.setenv("FIXENV_LLM__PROVIDER_NAME", "anthropic")
    monkeypatch.setenv("FIXENV_RATE_LIMIT__REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("FIXENV_RATE_LIMIT__GET_SHARE", "7")
    monkeypatch.setenv("FIXENV_CACHE__ENABLED", "false")

    config = AppConfig()

    assert config.llm.api_key == "sk-test"
    assert config.llm.provider_name == "anthropic"
    assert config.rate_limit.redis_url == "redis://localhost:6379/0"
    assert config.rate_limit.get_share == 7
    assert config.cache.enabled is False


def test_unknown_provider_is_rejected(monkeypatch):
    monkeypatch.setenv("FIXENV_LLM__PROVIDER_NAME", "cohere")

    with pytest.raises(ValidationError):
        AppConfig()


def test_database_url_defaults_to_sqlite_under_data_dir():
    config = AppConfig()

    assert config.database_url == f"sqlite:///{config.directories.data_dir / 'fixenv.db'}"


def test_database_url_override():
    config = AppConfig(database=DatabaseConfig(url="postgresql+psycopg://fixenv@db/fixenv"))

    assert config.database_url == "postgresql+psycopg://fixenv@db/fixenv"


def test_config_is_frozen_and_strict():
    config = AppConfig()

    with pytest.raises(ValidationError):
        config.llm = None
    with pytest.raises(ValidationError):
        AppConfig(unknown_section={})
