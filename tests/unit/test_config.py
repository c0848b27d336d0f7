"""
Unit tests for ServerConfig.
"""

import pytest

from hellocounter.config import DEFAULT_HOST, DEFAULT_PORT, ServerConfig


class TestDefaults:
    """Tests for ServerConfig defaults."""

    def test_listens_on_all_interfaces_port_8337(self):
        """Test the default host and port."""
        config = ServerConfig()

        assert config.host == DEFAULT_HOST == "0.0.0.0"
        assert config.port == DEFAULT_PORT == 8337

    def test_defaults_are_valid(self):
        """Test that the defaults pass validation."""
        ServerConfig().validate()

    def test_port_zero_is_valid(self):
        """Test that port 0 (OS-assigned) is accepted."""
        ServerConfig(port=0).validate()


class TestValidate:
    """Tests for ServerConfig.validate()."""

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"min_workers": 0},
        {"min_workers": 8, "max_workers": 4},
        {"buffer_size": 512},
        {"timeout": 0},
        {"keep_alive_timeout": 0},
    ])
    def test_rejects_bad_values(self, overrides):
        """Test that out-of-range values raise ValueError."""
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_no_timeout_is_allowed(self):
        """Test that timeout=None is accepted."""
        ServerConfig(timeout=None).validate()


class TestFromEnv:
    """Tests for ServerConfig.from_env()."""

    def test_reads_environment(self, monkeypatch):
        """Test reading every HELLO_* variable."""
        monkeypatch.setenv("HELLO_HOST", "127.0.0.1")
        monkeypatch.setenv("HELLO_PORT", "9000")
        monkeypatch.setenv("HELLO_WORKERS", "8")
        monkeypatch.setenv("HELLO_TIMEOUT", "2.5")
        monkeypatch.setenv("HELLO_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.max_workers == 8
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    def test_falls_back_to_defaults(self, monkeypatch):
        """Test defaults when no variable is set."""
        for name in ("HELLO_HOST", "HELLO_PORT", "HELLO_WORKERS", "HELLO_TIMEOUT", "HELLO_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8337
        assert config.log_level == "INFO"

    def test_few_workers_stay_valid(self, monkeypatch):
        """Test that a small worker count lowers min_workers too."""
        monkeypatch.setenv("HELLO_WORKERS", "2")

        config = ServerConfig.from_env()

        assert config.min_workers == 2
        config.validate()
