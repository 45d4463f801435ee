"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import AppConfig, ConfigurationError, load_config, require_api_key

ENV_NAMES = ("API_KEY", "GEMINI_API_KEY", "GENERATE_MODEL", "EDIT_MODEL", "STORAGE_PATH", "LOG_DIR", "PREVIEW_DIR")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # load_config writes into os.environ; register every name so it is restored
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\n"
        "API_KEY=secret-key\n"
        "EDIT_MODEL='gemini-edit-test'\n"
        f"STORAGE_PATH={tmp_path / 'store.json'}\n",
        encoding="utf-8",
    )
    config = load_config(str(env_file))

    assert config.api_key == "secret-key"
    assert config.edit_model == "gemini-edit-test"
    assert config.generate_model == "imagen-4.0-generate-001"
    assert config.storage_path == tmp_path / "store.json"
    assert config.log_dir == Path("logs")
    assert config.history_limit == 12


def test_load_config_falls_back_to_gemini_key(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    config = load_config(str(tmp_path / "missing.env"))

    assert config.api_key == "gemini-key"


def test_require_api_key_fails_loudly():
    with pytest.raises(ConfigurationError, match="API_KEY environment variable not set"):
        require_api_key(AppConfig())

    assert require_api_key(AppConfig(api_key="abc")) == "abc"
