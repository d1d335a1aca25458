"""Drive scan passes from a timer and from log file changes.

Both triggers are consumed on one thread, so passes never interleave.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from watchfiles import Change, watch

from claude_context_bar.core.monitor import SessionMonitor
from claude_context_bar.core.scanner import SESSION_LOG_SUFFIX

logger = logging.getLogger(__name__)


def session_log_filter(change: Change, path: str) -> bool:
    return path.endswith(SESSION_LOG_SUFFIX)


def _poll(
    monitor: SessionMonitor,
    stop_event: threading.Event,
    until_dir: Optional[Path] = None,
) -> None:
    """Refresh every interval until stopped or until_dir exists."""
    interval = monitor.settings.refresh_interval_seconds
    while not stop_event.wait(interval):
        monitor.refresh()
        if until_dir is not None and until_dir.is_dir():
            return


def watch_sessions(
    monitor: SessionMonitor, stop_event: Optional[threading.Event] = None
) -> None:
    """Refresh the monitor until stop_event is set.

    Runs an initial pass, then one pass per batch of ``.jsonl`` changes
    and one per refresh interval without changes.
    """
    if stop_event is None:
        stop_event = threading.Event()

    monitor.refresh()
    if stop_event.is_set():
        return

    projects_dir: Path = monitor.settings.resolved_projects_dir()
    if not projects_dir.is_dir():
        logger.warning(
            "Projects dir %s not found, refreshing periodically until it appears",
            projects_dir,
        )
        _poll(monitor, stop_event, projects_dir)
        if stop_event.is_set():
            return

    interval_ms = int(monitor.settings.refresh_interval_seconds * 1000)
    logger.info("Watching %s", projects_dir)
    for changes in watch(
        projects_dir,
        watch_filter=session_log_filter,
        stop_event=stop_event,
        rust_timeout=interval_ms,
        yield_on_timeout=True,
    ):
        if changes:
            logger.debug("%d log files changed", len(changes))
        monitor.refresh()
