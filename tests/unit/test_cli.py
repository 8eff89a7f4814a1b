"""Unit tests for the command line entry point."""

from pathlib import Path

import pytest

from painel import __version__
from painel.__main__ import main, parse_args


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config is None
        assert args.profile is None
        assert args.dry_run is False
        assert args.mock_voice is False
        assert args.console is False

    def test_options(self) -> None:
        args = parse_args(["--profile", "prod", "--config", "x.yaml", "--mock-voice", "--console"])
        assert args.profile == "prod"
        assert args.config == Path("x.yaml")
        assert args.mock_voice is True
        assert args.console is True

    def test_rejects_unknown_profile(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--profile", "staging"])

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Tests for main()."""

    def test_dry_run(self) -> None:
        assert main(["--profile", "test", "--dry-run"]) == 0

    def test_dry_run_console(self) -> None:
        assert main(["--profile", "test", "--console", "--dry-run"]) == 0

    def test_missing_config_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--config", str(tmp_path / "missing.yaml"), "--dry-run"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_custom_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "painel.yaml"
        config_file.write_text("painel:\n  recognition:\n    engine: mock\n", encoding="utf-8")
        assert main(["--config", str(config_file), "--dry-run"]) == 0
