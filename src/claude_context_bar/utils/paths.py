"""Path utilities for locating Claude Code session logs."""

import os
import re
from pathlib import Path
from typing import Tuple

DEFAULT_CLAUDE_DIR = Path.home() / ".claude"
PROJECTS_DIR_NAME = "projects"
CONFIG_FILE_NAME = "context-bar.json"

_DRIVE_LETTER = re.compile(r"^[a-zA-Z]$")


def get_claude_dir() -> Path:
    """Return Claude data dir. Honors CLAUDE_DATA_DIR env var, defaults to ~/.claude/."""
    env = os.environ.get("CLAUDE_DATA_DIR")
    if env:
        return Path(env).expanduser()
    return DEFAULT_CLAUDE_DIR


def get_projects_dir() -> Path:
    """Return the directory holding one sub-directory per project."""
    return get_claude_dir() / PROJECTS_DIR_NAME


def get_config_path() -> Path:
    return get_claude_dir() / CONFIG_FILE_NAME


def decode_project_path(encoded_name: str) -> Tuple[str, str]:
    """Convert a project dir name back to (project name, full path).

    '-Users-foo-bar' becomes ('bar', '/Users/foo/bar') and '-c-dev-bar'
    becomes ('bar', 'C:\\dev\\bar'). Dashes inside original folder names
    are indistinguishable from separators, so the result is best effort.
    """
    decoded = encoded_name[1:] if encoded_name.startswith("-") else encoded_name
    parts = decoded.split("-")

    if parts and _DRIVE_LETTER.match(parts[0]):
        full_path = parts[0].upper() + ":\\" + "\\".join(parts[1:])
    else:
        full_path = "/" + "/".join(parts)

    name = parts[-1] if parts and parts[-1] else "Unknown"
    return name, full_path
