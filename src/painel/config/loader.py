"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
- Environment overrides for secrets-bearing settings
"""

import os
from pathlib import Path
from typing import Any

import yaml

from . import (
    AudioConfig,
    ContentConfig,
    DialogueConfig,
    LLMConfig,
    LoggingConfig,
    PainelConfig,
    RecognitionConfig,
    ReminderConfig,
    TestingConfig,
    TTSConfig,
    WakeWordConfig,
)
from .profiles import CONFIG_DIR


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if "extends" in config:
        base_name = config.pop("extends")
        base_path = path.parent / base_name
        base_config = load_yaml_with_inheritance(base_path)
        config = deep_merge(base_config, config)

    return config


def dict_to_config(data: dict[str, Any]) -> PainelConfig:
    """Convert raw dict to typed PainelConfig dataclass."""
    painel_data = data.get("painel", {}) or {}

    # YAML sections left empty load as None
    def safe_get(key: str) -> dict[str, Any]:
        value = painel_data.get(key, {})
        return value if value is not None else {}

    config = PainelConfig(
        wake_word=WakeWordConfig(**safe_get("wake_word")),
        recognition=RecognitionConfig(**safe_get("recognition")),
        tts=TTSConfig(**safe_get("tts")),
        audio=AudioConfig(**safe_get("audio")),
        llm=LLMConfig(**safe_get("llm")),
        content=ContentConfig(**safe_get("content")),
        reminders=ReminderConfig(**safe_get("reminders")),
        dialogue=DialogueConfig(**safe_get("dialogue")),
        logging=LoggingConfig(**safe_get("logging")),
        testing=TestingConfig(**safe_get("testing")),
    )
    return apply_env_overrides(config)


def apply_env_overrides(config: PainelConfig) -> PainelConfig:
    """Apply environment variable overrides.

    PAINEL_MONGODB_URI replaces the reminder store URI so credentials never
    have to live in YAML.
    """
    mongo_uri = os.environ.get("PAINEL_MONGODB_URI", "").strip()
    if mongo_uri:
        config.reminders.uri = mongo_uri
    return config


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        self._config_dir = config_dir or CONFIG_DIR

    def load(self, path: Path) -> PainelConfig:
        """Load configuration from file path.

        Args:
            path: Path to YAML config file

        Returns:
            Parsed PainelConfig
        """
        raw_config = load_yaml_with_inheritance(path)
        return dict_to_config(raw_config)

    def load_profile(self, profile: str) -> PainelConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed PainelConfig for the profile
        """
        config_path = self._config_dir / f"{profile}.yaml"
        return self.load(config_path)

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(path: str | Path | None = None, profile: str | None = None) -> PainelConfig:
    """Load Painel configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given

    Returns:
        Parsed PainelConfig

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader()

    if path is not None:
        return loader.load(Path(path))
    elif profile is not None:
        return loader.load_profile(profile)
    else:
        return loader.load_profile("dev")


__all__ = [
    "YAMLConfigLoader",
    "apply_env_overrides",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
