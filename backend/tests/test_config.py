"""Tests for configuration loading."""
import pytest
from pydantic import ValidationError

from orienta.config import OrientaConfig, UploadSettings, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "PORT",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "ORIENTA_SETTINGS_FILE",
        "ORIENTA_SECRETS_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = OrientaConfig()
    assert config.server.port == 3001
    assert config.completion.provider == "openai"
    assert config.completion.max_tokens == 600
    assert config.completion.max_tokens_with_files == 800
    assert config.uploads.max_files == 5
    assert config.uploads.max_file_size_bytes == 10 * 1024 * 1024
    assert config.history.max_length == 12
    assert config.history.keep_recent == 10


def test_missing_files_give_defaults(tmp_path):
    config = load_config(tmp_path / "nope.yaml", tmp_path / "nope-secrets.yaml")
    assert config == OrientaConfig()


def test_yaml_files_loaded(tmp_path):
    settings = tmp_path / "settings.yaml"
    settings.write_text(
        "server:\n"
        "  port: 8080\n"
        "completion:\n"
        "  provider: anthropic\n"
        "  model: claude-x\n"
        "uploads:\n"
        "  max_files: 3\n"
    )
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("anthropic:\n  api_key: ant-key\n")

    config = load_config(settings, secrets)

    assert config.server.port == 8080
    assert config.completion.provider == "anthropic"
    assert config.completion.model == "claude-x"
    assert config.uploads.max_files == 3
    assert config.secrets.anthropic.api_key == "ant-key"
    assert config.secrets.openai.api_key is None


def test_env_overrides(tmp_path, monkeypatch):
    settings = tmp_path / "settings.yaml"
    settings.write_text("server:\n  port: 8080\n")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    config = load_config(settings, tmp_path / "missing.yaml")

    assert config.server.port == 9000
    assert config.secrets.openai.api_key == "sk-env"


def test_file_paths_from_env(tmp_path, monkeypatch):
    settings = tmp_path / "custom.yaml"
    settings.write_text("history:\n  max_length: 20\n  keep_recent: 16\n")
    monkeypatch.setenv("ORIENTA_SETTINGS_FILE", str(settings))
    monkeypatch.setenv("ORIENTA_SECRETS_FILE", str(tmp_path / "none.yaml"))

    config = load_config()

    assert config.history.max_length == 20
    assert config.history.keep_recent == 16


def test_upload_limits_must_be_positive():
    with pytest.raises(ValidationError):
        UploadSettings(max_files=0)


def test_unknown_provider_rejected():
    with pytest.raises(ValidationError):
        OrientaConfig(completion={"provider": "bedrock"})
