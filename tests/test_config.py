import pytest
from pydantic import ValidationError

from episode_recognizer.core.config import CONFIG_FILE_ENV, Settings


@pytest.fixture
def config_file(monkeypatch, tmp_path):
    path = tmp_path / "config.yml"
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    return path


def test_defaults_without_yaml(config_file):
    settings = Settings()
    assert settings.cache.max_size == 10000
    assert settings.cache.ttl_seconds == 86400
    assert settings.ai.enabled is False
    assert settings.ai.max_retries == 3
    assert settings.rate_limit.enabled is True
    assert settings.log.level == "INFO"


def test_yaml_values(config_file):
    config_file.write_text(
        "cache:\n"
        "  max_size: 50\n"
        "ai:\n"
        "  enabled: true\n"
        "  model: yaml-model\n",
        encoding="utf-8",
    )
    settings = Settings()
    assert settings.cache.max_size == 50
    assert settings.ai.enabled is True
    assert settings.ai.model == "yaml-model"


def test_environment_overrides_yaml(config_file, monkeypatch):
    config_file.write_text("ai:\n  enabled: true\n  model: yaml-model\n", encoding="utf-8")
    monkeypatch.setenv("EPISODE_RECOGNIZER_AI__MODEL", "env-model")
    settings = Settings()
    assert settings.ai.model == "env-model"
    assert settings.ai.enabled is True


def test_empty_yaml_file(config_file):
    config_file.write_text("", encoding="utf-8")
    assert Settings().cache.max_size == 10000


def test_invalid_yaml_type(config_file):
    config_file.write_text("cache:\n  max_size: lots\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        Settings()
