"""Tests for the irrigation-app command line."""

import pytest
from typer.testing import CliRunner

from irrigation_manager import __version__
from irrigation_manager.app.config import AUTH_TOKEN_ENV, AppConfig, get_app_config_path
from irrigation_manager.app.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    monkeypatch.delenv(AUTH_TOKEN_ENV, raising=False)
    return tmp_path


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCommand:
    """Tests for `irrigation-app config`."""

    def test_show_without_file(self):
        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "No config file" in result.output

    def test_show_existing_file(self, monkeypatch):
        AppConfig(user_id="garden-user", database_url="https://garden.firebaseio.com").save(
            get_app_config_path()
        )
        monkeypatch.setenv(AUTH_TOKEN_ENV, "secret")

        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "garden-user" in result.output
        assert "firebase" in result.output
        assert "secret" not in result.output
        assert "not set" not in result.output

    def test_show_reports_missing_token(self):
        AppConfig().save(get_app_config_path())

        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "not set" in result.output


class TestRunCommand:
    """Tests for `irrigation-app run` failures that happen before the TUI starts."""

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["run", "--config", str(tmp_path / "missing.toml")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_firebase_without_database_url(self, tmp_path):
        path = tmp_path / "config.toml"
        AppConfig(user_id="garden-user").save(path)

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "No database configured" in result.output

    def test_invalid_backend(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[store]\nbackend = "sqlite"\n', encoding="utf-8")

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "Error loading config" in result.output
