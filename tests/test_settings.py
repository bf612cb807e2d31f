"""
Unit tests for settings loading.
"""

from pathlib import Path

import pytest

from prompt_config.common.exceptions import ConfigError
from prompt_config.common.settings import (
    DEFAULT_CONFIG_URL,
    DEFAULT_FRESHNESS_MS,
    Settings,
    load_settings,
)


def write_yaml(tmp_path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file():
    settings = load_settings()

    assert settings.url == DEFAULT_CONFIG_URL
    assert settings.freshness_ms == DEFAULT_FRESHNESS_MS == 120_000
    assert settings.timeout_s is None


def test_missing_explicit_file_falls_back_to_defaults(tmp_path):
    assert load_settings(tmp_path / "nope.yaml") == Settings()


def test_yaml_values(tmp_path):
    path = write_yaml(tmp_path, """
source:
  url: https://config.example.test/c.json
  timeout_s: 2.5
cache:
  state_file: {state}
  freshness_ms: 30000
""".format(state=tmp_path / "state.json"))

    settings = load_settings(path)

    assert settings.url == "https://config.example.test/c.json"
    assert settings.timeout_s == 2.5
    assert settings.state_file == tmp_path / "state.json"
    assert settings.freshness_ms == 30_000


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = write_yaml(tmp_path, "cache:\n  freshness_ms: 30000\n")
    monkeypatch.setenv("PROMPT_CONFIG_FRESHNESS_MS", "5000")
    monkeypatch.setenv("PROMPT_CONFIG_URL", "https://env.example.test/c.json")
    monkeypatch.setenv("PROMPT_CONFIG_STATE_FILE", str(tmp_path / "env.json"))

    settings = load_settings(path)

    assert settings.freshness_ms == 5_000
    assert settings.url == "https://env.example.test/c.json"
    assert settings.state_file == tmp_path / "env.json"


def test_config_file_env_var(tmp_path, monkeypatch):
    path = write_yaml(tmp_path, "source:\n  url: https://file.example.test/c.json\n")
    monkeypatch.setenv("PROMPT_CONFIG_FILE", str(path))

    assert load_settings().url == "https://file.example.test/c.json"


def test_invalid_yaml_raises(tmp_path):
    path = write_yaml(tmp_path, "source: [unclosed\n")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_non_mapping_yaml_raises(tmp_path):
    path = write_yaml(tmp_path, "- just\n- a list\n")

    with pytest.raises(ConfigError):
        load_settings(path)


@pytest.mark.parametrize("value", ["abc", "0", "-10"])
def test_invalid_freshness_env_raises(monkeypatch, value):
    monkeypatch.setenv("PROMPT_CONFIG_FRESHNESS_MS", value)

    with pytest.raises(ConfigError):
        load_settings()


@pytest.mark.parametrize("text", [
    "source: https://config.example.test/c.json\n",
    "cache:\n  - state_file\n",
    "cache: 42\n",
])
def test_non_mapping_section_raises(tmp_path, text):
    path = write_yaml(tmp_path, text)

    with pytest.raises(ConfigError) as exc_info:
        load_settings(path)
    assert "must be a mapping" in exc_info.value.message


def test_default_state_file_follows_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "first"))
    first = Settings().state_file
    monkeypatch.setenv("HOME", str(tmp_path / "second"))

    assert first == tmp_path / "first" / ".cache" / "prompt-config" / "state.json"
    assert load_settings().state_file == tmp_path / "second" / ".cache" / "prompt-config" / "state.json"
