"""Tests for settings loading."""

import os
from pathlib import Path

import pytest

from membank.config import ConfigError, Settings, load_settings


def test_defaults_expand_home():
    settings = load_settings(env={"MEMBANK_CONFIG": "/nonexistent/config.yaml"})
    assert settings.central_root == Path("~/code/ai-memory-banks").expanduser()
    assert settings.local_dir_name == "memory-bank"
    assert settings.checkout_window == 10
    assert settings.rebase_window == 5


def test_log_file_defaults_under_central_root(temp_dir):
    settings = Settings(central_root=temp_dir)
    assert settings.resolved_log_file == temp_dir / "membank.log"


def test_file_values(temp_dir):
    config = temp_dir / "config.yaml"
    config.write_text("central_root: ~/banks\ncheckout_window: 20\n")

    settings = load_settings(config, env={})

    assert settings.central_root == Path.home() / "banks"
    assert settings.checkout_window == 20


def test_env_overrides_file(temp_dir):
    config = temp_dir / "config.yaml"
    config.write_text(f"central_root: {temp_dir / 'from-file'}\n")

    settings = load_settings(
        config,
        env={
            "MEMBANK_CENTRAL_ROOT": str(temp_dir / "from-env"),
            "MEMBANK_REGISTER_EXCLUDESFILE": "false",
        },
    )

    assert settings.central_root == temp_dir / "from-env"
    assert settings.register_excludesfile is False


def test_env_list_uses_pathsep(temp_dir):
    value = os.pathsep.join(["Gemfile", "go.mod"])
    settings = load_settings(
        env={"MEMBANK_CONFIG": str(temp_dir / "none.yaml"), "MEMBANK_PROJECT_MARKERS": value}
    )
    assert settings.project_markers == ["Gemfile", "go.mod"]


def test_config_from_env_path(temp_dir):
    config = temp_dir / "membank.yaml"
    config.write_text("local_dir_name: .bank\n")

    settings = load_settings(env={"MEMBANK_CONFIG": str(config)})
    assert settings.local_dir_name == ".bank"


def test_invalid_yaml(temp_dir):
    config = temp_dir / "config.yaml"
    config.write_text("central_root: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_settings(config, env={})


def test_non_mapping(temp_dir):
    config = temp_dir / "config.yaml"
    config.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="Expected a mapping"):
        load_settings(config, env={})


def test_invalid_value(temp_dir):
    config = temp_dir / "config.yaml"
    config.write_text("checkout_window: 0\n")
    with pytest.raises(ConfigError, match="Invalid settings"):
        load_settings(config, env={})


def test_explicit_missing_file(temp_dir):
    with pytest.raises(ConfigError, match="Failed to read"):
        load_settings(temp_dir / "absent.yaml", env={})
