"""Unit tests for configuration loading and profile management."""

import os
import tempfile
from pathlib import Path
from unittest import mock

import pytest
import yaml

from painel.config import PainelConfig
from painel.config.loader import (
    YAMLConfigLoader,
    deep_merge,
    dict_to_config,
    load_config,
    load_yaml_with_inheritance,
)
from painel.config.profiles import (
    available_profiles,
    detect_profile,
    is_macos,
    is_raspberry_pi,
)

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_simple_merge(self) -> None:
        """Test merging flat dictionaries."""
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Test merging nested dictionaries."""
        base = {"outer": {"a": 1, "b": 2}}
        override = {"outer": {"b": 3, "c": 4}}
        assert deep_merge(base, override) == {"outer": {"a": 1, "b": 3, "c": 4}}

    def test_override_replaces_non_dict(self) -> None:
        """Test that non-dict values are replaced."""
        assert deep_merge({"a": {"nested": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_base_not_mutated(self) -> None:
        """Test that the base dictionary is left untouched."""
        base = {"outer": {"a": 1}}
        deep_merge(base, {"outer": {"a": 2}})
        assert base == {"outer": {"a": 1}}


class TestYAMLLoading:
    """Tests for YAML config loading."""

    def test_load_with_inheritance(self) -> None:
        """Test loading YAML with extends keyword."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base_path = Path(tmpdir) / "base.yaml"
            with open(base_path, "w", encoding="utf-8") as f:
                yaml.dump(
                    {
                        "painel": {
                            "wake_word": {"window_chars": 40},
                            "recognition": {"model": "small"},
                        }
                    },
                    f,
                )

            child_path = Path(tmpdir) / "child.yaml"
            with open(child_path, "w", encoding="utf-8") as f:
                yaml.dump({"extends": "base.yaml", "painel": {"recognition": {"model": "base"}}}, f)

            result = load_yaml_with_inheritance(child_path)
            assert result["painel"]["recognition"]["model"] == "base"
            assert result["painel"]["wake_word"]["window_chars"] == 40
            assert "extends" not in result

    def test_file_not_found(self) -> None:
        """Test FileNotFoundError for missing config."""
        with pytest.raises(FileNotFoundError):
            load_yaml_with_inheritance(Path("/nonexistent/config.yaml"))


class TestDictToConfig:
    """Tests for converting dict to PainelConfig."""

    def test_empty_dict(self) -> None:
        """Test conversion of empty dict uses defaults."""
        with mock.patch.dict(os.environ, {}, clear=True):
            config = dict_to_config({})
        assert config.wake_word.phrases == ["olá smart home", "ola smart home"]
        assert config.recognition.language == "pt-BR"
        assert config.dialogue.start_retry_attempts == 3
        assert config.reminders.backend == "mongodb"

    def test_partial_override(self) -> None:
        """Test partial config override keeps other defaults."""
        config = dict_to_config({"painel": {"tts": {"narration_rate": 1.5}}})
        assert config.tts.narration_rate == 1.5
        assert config.tts.rate == 1.0

    def test_empty_section_uses_defaults(self) -> None:
        """Test that a section left empty in YAML loads as defaults."""
        config = dict_to_config({"painel": {"dialogue": None}})
        assert config.dialogue.acknowledgement == "Sim? Estou ouvindo."

    def test_mongodb_uri_from_environment(self) -> None:
        """Test PAINEL_MONGODB_URI overrides the configured URI."""
        with mock.patch.dict(os.environ, {"PAINEL_MONGODB_URI": "mongodb://db:27017"}):
            config = dict_to_config({})
        assert config.reminders.uri == "mongodb://db:27017"


class TestYAMLConfigLoader:
    """Tests for YAMLConfigLoader against the shipped profiles."""

    def test_load_dev_profile(self) -> None:
        """Test loading dev profile."""
        config = YAMLConfigLoader(CONFIG_DIR).load_profile("dev")
        assert isinstance(config, PainelConfig)
        assert config.logging.level == "DEBUG"
        assert config.recognition.model == "base"
        assert config.content.region == "Maricá-RJ"

    def test_load_prod_profile(self) -> None:
        """Test loading prod profile."""
        config = YAMLConfigLoader(CONFIG_DIR).load_profile("prod")
        assert config.logging.level == "INFO"
        assert config.tts.engine == "piper"
        assert config.tts.voice == "pt_BR-faber-medium"

    def test_load_test_profile(self) -> None:
        """Test the test profile mocks every voice component."""
        config = YAMLConfigLoader(CONFIG_DIR).load_profile("test")
        assert config.recognition.engine == "mock"
        assert config.tts.engine == "mock"
        assert config.reminders.backend == "memory"
        assert config.testing.mock_voice_enabled is True

    def test_get_config_dir(self) -> None:
        """Test get_config_dir returns correct path."""
        custom_dir = Path("/custom/config")
        assert YAMLConfigLoader(custom_dir).get_config_dir() == custom_dir

    def test_load_config_by_profile(self) -> None:
        """Test the load_config convenience function."""
        assert isinstance(load_config(profile="test"), PainelConfig)


class TestAvailableProfiles:
    """Tests for listing shipped profiles."""

    def test_shipped_profiles(self) -> None:
        """Test every shipped profile except base is listed."""
        assert available_profiles(CONFIG_DIR) == ["dev", "prod", "test"]

    def test_custom_directory(self, tmp_path: Path) -> None:
        """Test profiles come from the YAML files present."""
        for name in ("base", "kiosk", "sala"):
            (tmp_path / f"{name}.yaml").write_text("{}\n")
        (tmp_path / "notes.txt").write_text("")
        assert available_profiles(tmp_path) == ["kiosk", "sala"]


class TestProfileDetection:
    """Tests for profile detection."""

    def test_detect_profile_from_env(self) -> None:
        """Test profile detection from environment variable."""
        with mock.patch.dict(os.environ, {"PAINEL_PROFILE": "prod"}):
            assert detect_profile(CONFIG_DIR) == "prod"

        with mock.patch.dict(os.environ, {"PAINEL_PROFILE": " TEST "}):
            assert detect_profile(CONFIG_DIR) == "test"

    def test_unknown_env_profile_is_ignored(self) -> None:
        """Test a profile without a YAML file falls back to detection."""
        with mock.patch.dict(os.environ, {"PAINEL_PROFILE": "staging"}), mock.patch(
            "painel.config.profiles.is_raspberry_pi", return_value=False
        ):
            assert detect_profile(CONFIG_DIR) == "dev"

    def test_detect_profile_default_dev(self) -> None:
        """Test default profile is dev off the kiosk."""
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch(
            "painel.config.profiles.is_raspberry_pi", return_value=False
        ):
            assert detect_profile(CONFIG_DIR) == "dev"

    def test_detect_profile_pi_is_prod(self) -> None:
        """Test the Raspberry Pi kiosk defaults to prod."""
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch(
            "painel.config.profiles.is_raspberry_pi", return_value=True
        ):
            assert detect_profile(CONFIG_DIR) == "prod"


class TestPlatformChecks:
    """Tests for the platform checks."""

    def test_is_macos(self) -> None:
        """Test macOS detection."""
        with mock.patch("platform.system", return_value="Darwin"):
            assert is_macos() is True
        with mock.patch("platform.system", return_value="Linux"):
            assert is_macos() is False

    def test_raspberry_pi_from_cpuinfo(self, tmp_path: Path) -> None:
        """Test Raspberry Pi detection from cpuinfo."""
        cpuinfo = tmp_path / "cpuinfo"
        cpuinfo.write_text("Model\t: Raspberry Pi 4 Model B Rev 1.4\n")
        with mock.patch("platform.system", return_value="Linux"):
            assert is_raspberry_pi(cpuinfo) is True

    def test_plain_linux(self, tmp_path: Path) -> None:
        """Test a Linux box without the Pi model line."""
        cpuinfo = tmp_path / "cpuinfo"
        cpuinfo.write_text("processor\t: 0\n")
        with mock.patch("platform.system", return_value="Linux"):
            assert is_raspberry_pi(cpuinfo) is False

    def test_missing_cpuinfo(self, tmp_path: Path) -> None:
        """Test an unreadable cpuinfo is not a Pi."""
        with mock.patch("platform.system", return_value="Linux"):
            assert is_raspberry_pi(tmp_path / "absent") is False

    def test_not_linux(self) -> None:
        """Test non-Linux systems are never a Pi."""
        with mock.patch("platform.system", return_value="Darwin"):
            assert is_raspberry_pi() is False
