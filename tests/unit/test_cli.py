"""
Unit tests for the command line entry point.
"""

import pytest

from hellocounter import __version__
from hellocounter.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HELLO_HOST", "HELLO_PORT", "HELLO_WORKERS", "HELLO_TIMEOUT", "HELLO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_no_flags_uses_defaults():
    """Test that no flags gives the default bind address."""
    config = config_from_args(build_parser().parse_args([]))

    assert config.host == "0.0.0.0"
    assert config.port == 8337


def test_flags_override_config():
    """Test that every flag lands in the config."""
    args = build_parser().parse_args(["-H", "127.0.0.1", "-p", "3000", "-w", "3", "-l", "DEBUG"])
    config = config_from_args(args)

    assert config.host == "127.0.0.1"
    assert config.port == 3000
    assert config.min_workers == 3
    assert config.max_workers == 6
    assert config.log_level == "DEBUG"


def test_flags_win_over_environment(monkeypatch):
    """Test that a flag beats the matching environment variable."""
    monkeypatch.setenv("HELLO_PORT", "9000")

    config = config_from_args(build_parser().parse_args(["--port", "9100"]))

    assert config.port == 9100


def test_environment_used_when_flag_missing(monkeypatch):
    """Test that the environment fills in missing flags."""
    monkeypatch.setenv("HELLO_PORT", "9000")

    config = config_from_args(build_parser().parse_args([]))

    assert config.port == 9000


def test_version_flag(capsys):
    """Test that --version prints the version and exits cleanly."""
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_invalid_config_exits_with_error(capsys):
    """Test that a bad port exits with status 1."""
    assert main(["--port", "70000"]) == 1
    assert "Invalid port" in capsys.readouterr().err
