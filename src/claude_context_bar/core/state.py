"""Process-scoped state shared between scan passes.

None of this survives a restart. Passes run on a single timeline; the
only guarantee needed is that two passes never overlap, which
``PassGuard`` provides.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from claude_context_bar.models.session import ActiveSession, SessionSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HideSet:
    """Sessions the user hid, keyed by log path.

    A hidden session reappears once its log is modified after the moment
    it was hidden.
    """

    def __init__(self):
        self._hidden: Dict[str, datetime] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._hidden

    def __len__(self) -> int:
        return len(self._hidden)

    def hide(self, key: str, last_modified: datetime) -> None:
        self._hidden[key] = last_modified

    def unhide(self, key: str) -> bool:
        return self._hidden.pop(key, None) is not None

    def is_hidden(self, snapshot: SessionSnapshot) -> bool:
        """Check a snapshot, forgetting the entry if the log has advanced."""
        key = str(snapshot.source_path)
        recorded = self._hidden.get(key)
        if recorded is None:
            return False
        if snapshot.last_modified > recorded:
            del self._hidden[key]
            logger.debug("Unhiding %s: new activity", key)
            return False
        return True

    def clear(self) -> None:
        self._hidden.clear()


class DisplayRegistry:
    """The presentation layer's view of which sessions are on screen.

    Keyed by log path so an indicator is updated in place rather than
    recreated when its ordinal or ranking changes.
    """

    def __init__(self):
        self._entries: Dict[str, ActiveSession] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[ActiveSession]:
        return self._entries.get(key)

    def sync(
        self, sessions: Iterable[ActiveSession]
    ) -> Tuple[List[str], List[str], List[str]]:
        """Replace the registry with a pass result.

        Returns:
            ``(added, updated, removed)`` lists of keys.
        """
        incoming = {session.key: session for session in sessions}
        added = [key for key in incoming if key not in self._entries]
        updated = [key for key in incoming if key in self._entries]
        removed = [key for key in self._entries if key not in incoming]
        self._entries = incoming
        return added, updated, removed

    def clear(self) -> None:
        self._entries.clear()


class PassGuard:
    """Serialise scan passes, coalescing triggers that arrive mid-pass.

    A trigger that arrives while a pass is running does not start a
    second pass; it marks the running one to go around exactly once more.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending = False

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def run(self, pass_fn: Callable[[], T]) -> Optional[T]:
        """Run pass_fn unless a pass is in flight.

        Returns:
            The result of the last pass run, or None if coalesced.
        """
        if not self._lock.acquire(blocking=False):
            self._pending = True
            logger.debug("Pass already running, coalescing trigger")
            return None
        self._pending = False
        try:
            result = pass_fn()
            while self._pending:
                self._pending = False
                result = pass_fn()
            return result
        finally:
            self._lock.release()
