"""
Settings

Runtime settings for the config fetcher.
Loaded from a YAML file, then overridden by PROMPT_CONFIG_* environment variables.

Example config.yaml:

    source:
      url: https://example.com/config.json
      timeout_s: 10
    cache:
      state_file: ~/.cache/prompt-config/state.json
      freshness_ms: 120000
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from prompt_config.common.exceptions import ConfigError
from prompt_config.common.logging_setup import get_service_logger

logger = get_service_logger("settings")

DEFAULT_CONFIG_URL = "https://raw.githubusercontent.com/glidea/banana-prompt-quicker/main/config.json"
DEFAULT_FRESHNESS_MS = 2 * 60 * 1000  # 2 min
DEFAULT_STATE_FILE = "~/.cache/prompt-config/state.json"

CONFIG_SEARCH_PATHS = [
    "/etc/prompt-config/config.yaml",
    "~/.config/prompt-config/config.yaml",
]


@dataclass(frozen=True)
class Settings:
    """Fetcher settings"""
    url: str = DEFAULT_CONFIG_URL
    state_file: Path = field(default_factory=lambda: Path(DEFAULT_STATE_FILE).expanduser())
    freshness_ms: int = DEFAULT_FRESHNESS_MS
    timeout_s: float | None = None  # None = httpx default


def find_config_path() -> Path | None:
    """Find the settings file, honouring PROMPT_CONFIG_FILE first"""
    explicit = os.environ.get("PROMPT_CONFIG_FILE")
    if explicit:
        return Path(explicit).expanduser()

    for candidate in CONFIG_SEARCH_PATHS:
        path = Path(candidate).expanduser()
        if path.exists():
            return path

    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load settings YAML; a missing file is not an error"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Settings file not found: {path}")
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return data


def _as_int(value: Any, name: str) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e
    if result <= 0:
        raise ConfigError(f"{name} must be positive, got {result}")
    return result


def _as_float(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if result <= 0:
        raise ConfigError(f"{name} must be positive, got {result}")
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build Settings from a parsed YAML mapping"""
    source = _section(data, "source")
    cache = _section(data, "cache")
    settings = Settings()

    if source.get("url"):
        settings = replace(settings, url=str(source["url"]))
    if source.get("timeout_s") is not None:
        settings = replace(settings, timeout_s=_as_float(source["timeout_s"], "source.timeout_s"))
    if cache.get("state_file"):
        settings = replace(settings, state_file=Path(cache["state_file"]).expanduser())
    if cache.get("freshness_ms") is not None:
        settings = replace(settings, freshness_ms=_as_int(cache["freshness_ms"], "cache.freshness_ms"))

    return settings


def apply_env_overrides(settings: Settings) -> Settings:
    """Apply PROMPT_CONFIG_* environment overrides"""
    env = os.environ

    if env.get("PROMPT_CONFIG_URL"):
        settings = replace(settings, url=env["PROMPT_CONFIG_URL"])
    if env.get("PROMPT_CONFIG_STATE_FILE"):
        settings = replace(settings, state_file=Path(env["PROMPT_CONFIG_STATE_FILE"]).expanduser())
    if env.get("PROMPT_CONFIG_FRESHNESS_MS"):
        settings = replace(
            settings,
            freshness_ms=_as_int(env["PROMPT_CONFIG_FRESHNESS_MS"], "PROMPT_CONFIG_FRESHNESS_MS"),
        )
    if env.get("PROMPT_CONFIG_TIMEOUT_S"):
        settings = replace(
            settings,
            timeout_s=_as_float(env["PROMPT_CONFIG_TIMEOUT_S"], "PROMPT_CONFIG_TIMEOUT_S"),
        )

    return settings


def load_settings(path: Path | str | None = None) -> Settings:
    """
    Load settings from YAML and environment.

    Args:
        path: Explicit settings file; searched for when omitted

    Returns:
        Resolved Settings

    Raises:
        ConfigError: On unparseable YAML or invalid values
    """
    config_path = Path(path).expanduser() if path else find_config_path()
    data = _load_yaml(config_path) if config_path else {}
    settings = apply_env_overrides(settings_from_dict(data))

    logger.debug(
        f"Settings loaded (url: {settings.url})",
        extra={"config_path": str(config_path) if config_path else None},
    )
    return settings
