"""Settings loader.

Reads settings from a YAML file (``$MEMBANK_CONFIG`` or
``~/.config/membank/config.yaml``), then applies ``MEMBANK_*`` environment
overrides on top of the defaults.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CHECKOUT_REFLOG_WINDOW, LOCAL_DIR_NAME, REBASE_REFLOG_WINDOW

DEFAULT_CONFIG_PATH = Path("~/.config/membank/config.yaml")

DEFAULT_PROJECT_MARKERS = ["package.json", "Cargo.toml", "pom.xml", "pyproject.toml", "*.xcodeproj"]

ENV_PREFIX = "MEMBANK_"


class ConfigError(Exception):
    """Settings file could not be read or validated."""

    pass


class Settings(BaseModel):
    """Where banks live and how git history is inspected.

    Paths are user-expanded on load, so ``~`` is accepted everywhere.
    """

    model_config = ConfigDict(validate_default=True)

    central_root: Path = Path("~/code/ai-memory-banks")
    domains_root: Path = Path("~/code/domains")
    legacy_root: Path = Path("~/code")
    hooks_dir: Path = Path("~/.git-hooks")
    global_gitignore: Path = Path("~/.gitignore_global")
    local_dir_name: str = LOCAL_DIR_NAME
    project_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_PROJECT_MARKERS))
    temp_roots: list[Path] = Field(default_factory=lambda: [Path(tempfile.gettempdir())])
    checkout_window: int = Field(default=CHECKOUT_REFLOG_WINDOW, ge=1)
    rebase_window: int = Field(default=REBASE_REFLOG_WINDOW, ge=1)
    register_excludesfile: bool = True
    log_file: Path | None = None

    @field_validator(
        "central_root", "domains_root", "legacy_root", "hooks_dir", "global_gitignore", "log_file"
    )
    @classmethod
    def _expand_path(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return Path(value).expanduser()

    @field_validator("temp_roots")
    @classmethod
    def _expand_paths(cls, value: list[Path]) -> list[Path]:
        return [Path(p).expanduser() for p in value]

    @property
    def resolved_log_file(self) -> Path:
        """Log file location (defaults to membank.log under the central root)."""
        return self.log_file or self.central_root / "membank.log"


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")
    return data


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect MEMBANK_<FIELD> overrides.

    List fields take an os.pathsep separated value.
    """
    overrides: dict[str, Any] = {}
    for name, field in Settings.model_fields.items():
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if field.annotation in (list[str], list[Path]):
            overrides[name] = [part for part in raw.split(os.pathsep) if part]
        else:
            overrides[name] = raw
    return overrides


def load_settings(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings.

    Precedence (lowest first): defaults, YAML config file, environment.

    Args:
        config_path: Explicit config file. Must exist when given.
        env: Environment mapping (default: os.environ)

    Returns:
        Validated Settings

    Raises:
        ConfigError: If the config file is unreadable or invalid
    """
    env = os.environ if env is None else env

    data: dict[str, Any] = {}
    if config_path is not None:
        data.update(_read_config_file(Path(config_path).expanduser()))
    else:
        candidate = Path(env.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG_PATH)).expanduser()
        if candidate.exists():
            data.update(_read_config_file(candidate))

    data.update(_env_overrides(env))

    try:
        return Settings.model_validate(data)
    except ValueError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
