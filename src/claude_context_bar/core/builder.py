"""Build the ranked set of active sessions across all projects."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from claude_context_bar.config import Settings
from claude_context_bar.core.resolver import resolve_project
from claude_context_bar.core.scanner import list_project_dirs, scan_project
from claude_context_bar.core.state import HideSet
from claude_context_bar.models.session import ActiveSession, SessionSnapshot
from claude_context_bar.utils.paths import decode_project_path

logger = logging.getLogger(__name__)


class ProjectGroup(NamedTuple):
    name: str
    path: str
    snapshots: List[SessionSnapshot]


def collect_project_groups(
    projects_dir: Path, now: datetime, idle_timeout: float
) -> Dict[str, ProjectGroup]:
    """Scan every project dir and group snapshots by decoded project name."""
    groups: Dict[str, ProjectGroup] = {}
    for project_dir in list_project_dirs(projects_dir):
        snapshots = scan_project(project_dir, now, idle_timeout)
        if not snapshots:
            continue
        name, full_path = decode_project_path(project_dir.name)
        group = groups.get(name)
        if group is None:
            groups[name] = ProjectGroup(name, full_path, snapshots)
        else:
            group.snapshots.extend(snapshots)
    return groups


def rank_sessions(sessions: List[ActiveSession], limit: int) -> List[ActiveSession]:
    """Most recently modified first, capped at limit across all projects."""
    ranked = sorted(
        sessions, key=lambda s: s.snapshot.modified_key, reverse=True
    )
    return ranked[:limit]


def _build(
    settings: Settings, now: datetime, hide_set: Optional[HideSet]
) -> List[ActiveSession]:
    groups = collect_project_groups(
        settings.resolved_projects_dir(), now, settings.idle_timeout_seconds
    )

    sessions: List[ActiveSession] = []
    for group in groups.values():
        resolved = resolve_project(
            group.name,
            group.snapshots,
            project_path=group.path,
            default_context_limit=settings.context_limit,
        )
        if hide_set is not None:
            resolved = [s for s in resolved if not hide_set.is_hidden(s.snapshot)]
        sessions.extend(resolved)

    return rank_sessions(sessions, settings.max_sessions)


def build_active_sessions(
    settings: Settings,
    now: Optional[datetime] = None,
    hide_set: Optional[HideSet] = None,
) -> List[ActiveSession]:
    """Run one full scan pass.

    Any unexpected failure degrades the pass to an empty result; the next
    pass is the retry.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    try:
        return _build(settings, now, hide_set)
    except Exception:
        logger.exception("Scan pass failed")
        return []
