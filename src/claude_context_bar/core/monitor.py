"""Session monitor: the stateful front of the scan engine."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from claude_context_bar.config import Settings
from claude_context_bar.core.builder import build_active_sessions
from claude_context_bar.core.state import DisplayRegistry, HideSet, PassGuard
from claude_context_bar.models.session import ActiveSession

logger = logging.getLogger(__name__)

Listener = Callable[[List[ActiveSession]], None]


class SessionMonitor:
    """Owns the hide set and display registry and runs guarded passes."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.hide_set = HideSet()
        self.registry = DisplayRegistry()
        self._guard = PassGuard()
        self._listeners: List[Listener] = []
        self._last_result: List[ActiveSession] = []

    @property
    def sessions(self) -> List[ActiveSession]:
        """Result of the last completed pass."""
        return list(self._last_result)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def refresh(self, now: Optional[datetime] = None) -> Optional[List[ActiveSession]]:
        """Run one scan pass.

        Returns None if the trigger was coalesced into a running pass.
        """
        result = self._guard.run(lambda: self._pass(now))
        if result is None:
            return None

        added, _, removed = self.registry.sync(result)
        if added or removed:
            logger.info(
                "Active sessions: %d (+%d, -%d)", len(result), len(added), len(removed)
            )
        self._last_result = result

        for listener in list(self._listeners):
            try:
                listener(list(result))
            except Exception:
                logger.exception("Session listener failed")
        return result

    def _pass(self, now: Optional[datetime]) -> List[ActiveSession]:
        return build_active_sessions(
            self.settings,
            now=now or datetime.now(timezone.utc),
            hide_set=self.hide_set,
        )

    def hide(self, key: str) -> bool:
        """Hide a session until its log is next written.

        Returns False if the session's modification time is unknown.
        """
        shown = self.registry.get(key)
        if shown is not None:
            last_modified = shown.snapshot.last_modified
        else:
            try:
                mtime = Path(key).stat().st_mtime
            except OSError:
                logger.debug("Cannot hide %s: not found", key)
                return False
            last_modified = datetime.fromtimestamp(mtime, tz=timezone.utc)

        self.hide_set.hide(key, last_modified)
        return True

    def unhide(self, key: str) -> bool:
        return self.hide_set.unhide(key)

    def shutdown(self) -> None:
        self.hide_set.clear()
        self.registry.clear()
        self._listeners.clear()
        self._last_result = []
