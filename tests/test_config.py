"""Tests for ClientConfig layering: defaults < TOML < env < overrides."""

import logging

import pytest

from presenton.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    ClientConfig,
)


class TestDefaults:
    def test_default_values(self):
        config = ClientConfig.from_env()
        assert config.api_key == ""
        assert config.base_url == DEFAULT_BASE_URL == "https://api.presenton.ai"
        assert config.max_retries == DEFAULT_MAX_RETRIES == 3
        assert config.retry_delay == DEFAULT_RETRY_DELAY == 1.0
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.poll_interval == DEFAULT_POLL_INTERVAL == 2.0

    def test_trailing_slash_stripped(self):
        assert ClientConfig(base_url="https://example.com/").base_url == "https://example.com"

    def test_repr_hides_api_key(self):
        config = ClientConfig(api_key="sk-presenton-secret")
        assert "sk-presenton-secret" not in repr(config)

    def test_immutable(self):
        config = ClientConfig()
        with pytest.raises(AttributeError):
            config.max_retries = 9


class TestTomlLayer:
    def test_cwd_file(self, tmp_path):
        (tmp_path / "presenton.toml").write_text(
            '[presenton]\nbase_url = "https://self-hosted.local"\nmax_retries = 5\n'
        )
        config = ClientConfig.from_env()
        assert config.base_url == "https://self-hosted.local"
        assert config.max_retries == 5

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[presenton]\nretry_delay = 0.25\n")
        assert ClientConfig.from_env(str(path)).retry_delay == 0.25

    def test_file_from_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "other.toml"
        path.write_text("[presenton]\ntimeout = 60\n")
        monkeypatch.setenv("PRESENTON_CONFIG_FILE", str(path))
        assert ClientConfig.from_env().timeout == 60.0

    def test_xdg_file(self, tmp_path):
        xdg = tmp_path / "xdg" / "presenton"
        xdg.mkdir(parents=True)
        (xdg / "config.toml").write_text("[presenton]\npoll_interval = 5\n")
        assert ClientConfig.from_env().poll_interval == 5.0

    def test_cwd_file_beats_xdg(self, tmp_path):
        xdg = tmp_path / "xdg" / "presenton"
        xdg.mkdir(parents=True)
        (xdg / "config.toml").write_text("[presenton]\nmax_retries = 1\n")
        (tmp_path / "presenton.toml").write_text("[presenton]\nmax_retries = 2\n")
        assert ClientConfig.from_env().max_retries == 2

    def test_broken_file_logged_and_ignored(self, tmp_path, caplog):
        path = tmp_path / "bad.toml"
        path.write_text("[presenton\nnot toml")
        with caplog.at_level(logging.ERROR, logger="presenton.config"):
            config = ClientConfig.from_env(str(path))
        assert config.max_retries == DEFAULT_MAX_RETRIES
        assert "Error loading config file" in caplog.text

    def test_missing_explicit_file_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="presenton.config"):
            ClientConfig.from_env(str(tmp_path / "nope.toml"))
        assert "Config file not found" in caplog.text

    def test_unknown_key_ignored(self, tmp_path, caplog):
        (tmp_path / "presenton.toml").write_text("[presenton]\ncolour = 'blue'\n")
        with caplog.at_level(logging.WARNING, logger="presenton.config"):
            ClientConfig.from_env()
        assert "Ignoring unknown setting 'colour'" in caplog.text


class TestEnvAndOverrides:
    def test_env_beats_toml(self, tmp_path, monkeypatch):
        (tmp_path / "presenton.toml").write_text("[presenton]\nmax_retries = 5\n")
        monkeypatch.setenv("PRESENTON_MAX_RETRIES", "7")
        monkeypatch.setenv("PRESENTON_API_KEY", "sk-presenton-from-env")
        config = ClientConfig.from_env()
        assert config.max_retries == 7
        assert config.api_key == "sk-presenton-from-env"

    def test_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("PRESENTON_BASE_URL", "https://env.example")
        config = ClientConfig.from_env(base_url="https://override.example", api_key=None)
        assert config.base_url == "https://override.example"
        assert config.api_key == ""

    def test_invalid_env_value_keeps_lower_layer(self, monkeypatch, caplog):
        monkeypatch.setenv("PRESENTON_RETRY_DELAY", "soon")
        with caplog.at_level(logging.WARNING, logger="presenton.config"):
            config = ClientConfig.from_env()
        assert config.retry_delay == DEFAULT_RETRY_DELAY
        assert "Invalid value for retry_delay" in caplog.text

    def test_unknown_override(self):
        with pytest.raises(TypeError):
            ClientConfig.from_env(colour="blue")
