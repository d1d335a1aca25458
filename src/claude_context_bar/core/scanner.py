"""Enumerate candidate session logs under the Claude projects directory.

Every decision here is a static predicate over names and modification
times; log content is only read by the extractor.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NamedTuple

from claude_context_bar.core.extractor import read_snapshot
from claude_context_bar.models.session import SessionSnapshot

logger = logging.getLogger(__name__)

SESSION_LOG_SUFFIX = ".jsonl"
BACKGROUND_LOG_PREFIX = "agent-"
# Background agent storage, not interactive sessions
EXCLUDED_PROJECT_MARKERS = ("claude-plugins", "claude-mem")


class LogCandidate(NamedTuple):
    path: Path
    last_modified: datetime


def is_session_log(name: str) -> bool:
    return name.endswith(SESSION_LOG_SUFFIX) and not name.startswith(
        BACKGROUND_LOG_PREFIX
    )


def is_excluded_project(dir_name: str) -> bool:
    return any(marker in dir_name for marker in EXCLUDED_PROJECT_MARKERS)


def list_project_dirs(projects_dir: Path) -> List[Path]:
    """List interactive project directories, sorted by name.

    A missing or unlistable root yields an empty list.
    """
    try:
        entries = sorted(os.scandir(projects_dir), key=lambda e: e.name)
    except OSError as e:
        logger.warning("Cannot list projects dir %s: %s", projects_dir, e)
        return []

    project_dirs: List[Path] = []
    for entry in entries:
        if is_excluded_project(entry.name):
            continue
        try:
            if entry.is_dir():
                project_dirs.append(Path(entry.path))
        except OSError:
            continue
    return project_dirs


def list_candidates(
    project_dir: Path, now: datetime, idle_timeout: float
) -> List[LogCandidate]:
    """Return session logs modified within idle_timeout seconds of now.

    Sorted most recently modified first.
    """
    cutoff = now.timestamp() - idle_timeout
    candidates: List[LogCandidate] = []

    try:
        entries = list(os.scandir(project_dir))
    except OSError as e:
        logger.warning("Cannot list project dir %s: %s", project_dir, e)
        return []

    for entry in entries:
        if not is_session_log(entry.name):
            continue
        try:
            mtime = entry.stat().st_mtime
        except OSError:
            # Vanished between listing and stat
            continue
        if mtime > cutoff:
            candidates.append(
                LogCandidate(
                    Path(entry.path), datetime.fromtimestamp(mtime, tz=timezone.utc)
                )
            )

    candidates.sort(key=lambda c: (c.last_modified, c.path.name), reverse=True)
    return candidates


def scan_project(
    project_dir: Path, now: datetime, idle_timeout: float
) -> List[SessionSnapshot]:
    """Extract snapshots for one project, dropping sessions with no usage."""
    snapshots: List[SessionSnapshot] = []
    for candidate in list_candidates(project_dir, now, idle_timeout):
        snapshot = read_snapshot(candidate.path, candidate.last_modified)
        if snapshot.total_tokens > 0:
            snapshots.append(snapshot)
        else:
            logger.debug("Dropping %s: no token usage", candidate.path.name)
    return snapshots
