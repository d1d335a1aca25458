"""Configuration for Claude Context Bar.

Settings are layered: built-in defaults, then the JSON file at
``~/.claude/context-bar.json``, then ``CLAUDE_CONTEXT_BAR_*`` environment
variables, then explicit overrides from the command line.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from claude_context_bar.utils.paths import get_config_path, get_projects_dir

ENV_PREFIX = "CLAUDE_CONTEXT_BAR_"


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or is invalid."""


class Settings(BaseModel):
    """Tunable scan and display settings."""

    projects_dir: Optional[Path] = None
    idle_timeout_seconds: float = Field(default=300, gt=0)
    max_sessions: int = Field(default=5, gt=0)
    refresh_interval_seconds: float = Field(default=30, gt=0)
    context_limit: int = Field(default=200_000, gt=0)
    warning_threshold: int = Field(default=50, ge=0, le=100)
    danger_threshold: int = Field(default=75, ge=0, le=100)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def _check_thresholds(self):
        if self.warning_threshold > self.danger_threshold:
            raise ValueError("warning_threshold must not exceed danger_threshold")
        return self

    def resolved_projects_dir(self) -> Path:
        if self.projects_dir is not None:
            return self.projects_dir.expanduser()
        return get_projects_dir()


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _read_environment() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name in Settings.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value:
            values[name] = value
    return values


def load_settings(
    config_file: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None
) -> Settings:
    """Load settings from file, environment and overrides.

    Raises:
        ConfigError: If an explicit config file is missing, or any layer
            holds invalid values.
    """
    data: Dict[str, Any] = {}

    if config_file is not None:
        if not config_file.exists():
            raise ConfigError(f"Config file {config_file} not found")
        data.update(_read_config_file(config_file))
    else:
        default_path = get_config_path()
        if default_path.exists():
            data.update(_read_config_file(default_path))

    data.update(_read_environment())
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
