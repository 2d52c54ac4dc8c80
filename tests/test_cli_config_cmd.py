"""Tests for coursemedia CLI config commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from coursemedia.cli.main import cli
from coursemedia.core.config import Config, Profile


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the config file to a temp path and clear overrides."""
    for name in ("COURSEMEDIA_URL", "COURSEMEDIA_APP_URL", "COURSEMEDIA_PROFILE"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "coursemedia" / "config.yaml"
    monkeypatch.setattr("coursemedia.cli.config_cmd.CONFIG_FILE", path)
    monkeypatch.setattr("coursemedia.core.config.CONFIG_FILE", path)
    return path


def _write_config(path: Path) -> None:
    Config(
        default_profile="default",
        profiles={
            "default": Profile(url="https://project.example.org"),
            "dev": Profile(url="https://dev.example.org", verify_ssl=False),
        },
    ).save(path)


class TestConfigInit:
    """Tests for config init command."""

    def test_config_init_new(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "config",
                "init",
                "--url",
                "https://project.example.org/",
                "--app-url",
                "https://lms.example.org",
            ],
        )

        assert result.exit_code == 0
        cfg = Config.load(config_file)
        assert cfg.default_profile == "default"
        assert cfg.profiles["default"].url == "https://project.example.org"
        assert cfg.profiles["default"].app_url == "https://lms.example.org"
        assert cfg.profiles["default"].bucket == "videos"

    def test_config_init_invalid_url(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["config", "init", "--url", "project.example.org"])

        assert result.exit_code == 1
        assert not config_file.exists()

    def test_config_init_existing_profile_no_force(
        self, runner: CliRunner, config_file: Path
    ) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "init", "--url", "https://other.example.org"])

        assert result.exit_code == 1
        assert Config.load(config_file).profiles["default"].url == "https://project.example.org"

    def test_config_init_with_force(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(
            cli, ["config", "init", "--url", "https://other.example.org", "--force"]
        )

        assert result.exit_code == 0
        assert Config.load(config_file).profiles["default"].url == "https://other.example.org"


class TestConfigShow:
    """Tests for config show command."""

    def test_show_without_config(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1

    def test_show_json(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["default_profile"] == "default"
        assert data["profiles"] == ["default", "dev"]
        assert data["upload"]["concurrency"] == 3
        assert data["playback"]["completion_threshold"] == 90

    def test_show_table(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Profile: default (default)" in result.output
        assert "Profile: dev" in result.output


class TestConfigContexts:
    """Tests for use-context and current-context."""

    def test_use_context(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "use-context", "dev"])

        assert result.exit_code == 0
        assert Config.load(config_file).default_profile == "dev"

    def test_use_context_missing(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "use-context", "staging"])

        assert result.exit_code == 1
        assert "default, dev" in result.output

    def test_current_context(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "current-context"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "default"


class TestConfigProfiles:
    """Tests for add-profile and remove-profile."""

    def test_add_profile(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(
            cli,
            [
                "config",
                "add-profile",
                "staging",
                "--url",
                "https://staging.example.org",
                "--bucket",
                "staging-videos",
                "--timeout",
                "45",
                "--no-verify-ssl",
            ],
        )

        assert result.exit_code == 0
        profile = Config.load(config_file).profiles["staging"]
        assert profile.bucket == "staging-videos"
        assert profile.timeout == 45
        assert profile.verify_ssl is False

    def test_add_profile_invalid_timeout(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(
            cli,
            ["config", "add-profile", "staging", "--url", "https://staging.example.org", "--timeout", "0"],
        )

        assert result.exit_code == 1
        assert not Config.load(config_file).has_profile("staging")

    def test_add_existing_profile(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(
            cli, ["config", "add-profile", "dev", "--url", "https://dev2.example.org"]
        )

        assert result.exit_code == 1

    def test_remove_profile(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "remove-profile", "dev", "--yes"])

        assert result.exit_code == 0
        assert not Config.load(config_file).has_profile("dev")

    def test_remove_default_profile_refused(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "remove-profile", "default", "--yes"])

        assert result.exit_code == 1
        assert Config.load(config_file).has_profile("default")

    def test_remove_profile_aborted(self, runner: CliRunner, config_file: Path) -> None:
        _write_config(config_file)

        result = runner.invoke(cli, ["config", "remove-profile", "dev"], input="n\n")

        assert result.exit_code != 0
        assert Config.load(config_file).has_profile("dev")
