"""Unit tests for environment and .env configuration loading."""

import os

import pytest

from lukkari_backend.core.config_manager import (
    DEFAULT_REALIZATION_BASE_URL,
    DEFAULT_SERVER_PORT,
    ConfigManager,
    get_config_value,
    parse_env_file,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def manager(tmp_path):
    return ConfigManager(env_file_path=tmp_path / ".env")


class TestParseEnvFile:
    def test_missing_file_returns_empty(self, tmp_path):
        assert parse_env_file(tmp_path / "nope.env") == {}

    def test_parses_quotes_comments_and_blank_lines(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "\n"
            "LUKKARI_WEB_PORT = 8080\n"
            'LUKKARI_CORS_ORIGIN="https://app.example.org"\n'
            "LUKKARI_LOG_LEVEL='debug'\n"
            "not a pair\n"
            "=orphan\n",
            encoding="utf-8",
        )

        assert parse_env_file(env_file) == {
            "LUKKARI_WEB_PORT": "8080",
            "LUKKARI_CORS_ORIGIN": "https://app.example.org",
            "LUKKARI_LOG_LEVEL": "debug",
        }

    def test_export_prefix_and_unbalanced_quotes(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("export LUKKARI_WEB_HOST=127.0.0.1\nLUKKARI_CORS_ORIGIN=\"half\n", encoding="utf-8")

        assert parse_env_file(env_file) == {
            "LUKKARI_WEB_HOST": "127.0.0.1",
            "LUKKARI_CORS_ORIGIN": "\"half",
        }


class TestBuildConfig:
    def test_defaults(self, manager):
        cfg = manager.build_config_from_env()

        assert cfg["server_bind"] == "0.0.0.0"
        assert cfg["server_port"] == DEFAULT_SERVER_PORT == 3001
        assert cfg["realization_base_url"] == DEFAULT_REALIZATION_BASE_URL
        assert cfg["precache_enabled"] is True
        assert cfg["debug_logging"] is False
        assert cfg["cors_origin"] == "*"
        assert "log_level" not in cfg

    def test_environment_overrides(self, manager, monkeypatch):
        monkeypatch.setenv("LUKKARI_WEB_HOST", "127.0.0.1")
        monkeypatch.setenv("LUKKARI_WEB_PORT", "4000")
        monkeypatch.setenv("LUKKARI_LOG_LEVEL", "warning")
        monkeypatch.setenv("LUKKARI_DEBUG", "yes")
        monkeypatch.setenv("LUKKARI_REALIZATION_BASE_URL", "https://mirror.test/rest/realization/")
        monkeypatch.setenv("LUKKARI_PRECACHE", "off")
        monkeypatch.setenv("LUKKARI_CORS_ORIGIN", "https://app.example.org")

        cfg = manager.build_config_from_env()

        assert cfg["server_bind"] == "127.0.0.1"
        assert cfg["server_port"] == 4000
        assert cfg["log_level"] == "WARNING"
        assert cfg["debug_logging"] is True
        assert cfg["realization_base_url"] == "https://mirror.test/rest/realization"
        assert cfg["precache_enabled"] is False
        assert cfg["cors_origin"] == "https://app.example.org"

    def test_port_falls_back_to_plain_port_variable(self, manager, monkeypatch):
        monkeypatch.setenv("PORT", "5055")

        assert manager.build_config_from_env()["server_port"] == 5055

    def test_lukkari_port_wins_over_plain_port(self, manager, monkeypatch):
        monkeypatch.setenv("PORT", "5055")
        monkeypatch.setenv("LUKKARI_WEB_PORT", "6066")

        assert manager.build_config_from_env()["server_port"] == 6066

    def test_invalid_port_is_ignored(self, manager, monkeypatch, caplog):
        monkeypatch.setenv("LUKKARI_WEB_PORT", "eighty")

        cfg = manager.build_config_from_env()

        assert cfg["server_port"] == DEFAULT_SERVER_PORT
        assert "Invalid LUKKARI_WEB_PORT" in caplog.text

    def test_out_of_range_port_is_ignored(self, manager, monkeypatch):
        monkeypatch.setenv("PORT", "70000")

        assert manager.build_config_from_env()["server_port"] == DEFAULT_SERVER_PORT

    def test_unrecognized_precache_value_keeps_default(self, manager, monkeypatch):
        monkeypatch.setenv("LUKKARI_PRECACHE", "sometimes")

        assert manager.build_config_from_env()["precache_enabled"] is True


class TestLoadFullConfig:
    def test_env_file_supplies_defaults(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("LUKKARI_WEB_PORT=7070\nLUKKARI_PRECACHE=false\n", encoding="utf-8")

        cfg = ConfigManager(env_file_path=env_file).load_full_config()

        assert cfg["server_port"] == 7070
        assert cfg["precache_enabled"] is False

    def test_env_file_never_overrides_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("LUKKARI_WEB_PORT=7070\n", encoding="utf-8")
        monkeypatch.setenv("LUKKARI_WEB_PORT", "9090")

        manager = ConfigManager(env_file_path=env_file)
        loaded = manager.load_env_file()

        assert loaded == []
        assert os.environ["LUKKARI_WEB_PORT"] == "9090"
        assert manager.build_config_from_env()["server_port"] == 9090


def test_get_config_value_supports_dicts_and_objects():
    class Settings:
        cors_origin = "https://app.example.org"

    assert get_config_value({"cors_origin": "*"}, "cors_origin") == "*"
    assert get_config_value({}, "cors_origin", "fallback") == "fallback"
    assert get_config_value(Settings(), "cors_origin") == "https://app.example.org"
    assert get_config_value(Settings(), "missing", 3) == 3
