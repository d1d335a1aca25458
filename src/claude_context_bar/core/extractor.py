"""Derive a SessionSnapshot from the events of one session log.

Extraction is two passes over the decoded events:

1. A backward pass finds the most recent ``/clear`` command and counts
   the user turns that followed it. Only the last clear matters.
2. A forward fold over the *effective window* (everything after that
   clear) picks up the creation time, the first real user message, the
   latest model and the latest usage counters.

Usage counters in the log are cumulative, so the last value observed in
the window is the session's total; nothing is summed across records.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import reduce
from pathlib import Path
from typing import Optional, Sequence, Tuple

from claude_context_bar.core.decoder import decode_lines
from claude_context_bar.models.event import Event, EventKind, TokenUsage
from claude_context_bar.models.session import SessionSnapshot
from claude_context_bar.utils.formatting import truncate_preview

logger = logging.getLogger(__name__)

CLEAR_MARKER = "<command-name>/clear</command-name>"
COMMAND_MARKERS = ("<command-name>", "<local-command-", "Caveat:")
PREVIEW_LENGTH = 60


@dataclass(frozen=True)
class _WindowState:
    created_at: Optional[datetime] = None
    first_message: str = ""
    model: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)


def _is_user_turn(event: Event) -> bool:
    return event.kind is EventKind.USER and event.has_content


def find_clear_point(events: Sequence[Event]) -> Tuple[Optional[int], int]:
    """Locate the last clear command.

    Returns:
        ``(index, user_turns_after)`` where index is None when the log
        contains no clear command.
    """
    user_turns_after = 0
    for index in range(len(events) - 1, -1, -1):
        event = events[index]
        if not _is_user_turn(event):
            continue
        # Block-array content is matched on its first block's text
        if CLEAR_MARKER in event.text:
            return index, user_turns_after
        user_turns_after += 1
    return None, user_turns_after


def _is_command_text(text: str) -> bool:
    return any(marker in text for marker in COMMAND_MARKERS)


def _fold(state: _WindowState, event: Event) -> _WindowState:
    changes = {}
    if state.created_at is None and event.timestamp is not None:
        changes["created_at"] = event.timestamp
    if not state.first_message and _is_user_turn(event):
        text = event.text
        if text and not _is_command_text(text):
            changes["first_message"] = truncate_preview(text, PREVIEW_LENGTH)
    if event.model:
        changes["model"] = event.model
    if event.usage is not None:
        changes["usage"] = event.usage
    return replace(state, **changes) if changes else state


def extract_snapshot(
    events: Sequence[Event], source_path: Path, last_modified: datetime
) -> SessionSnapshot:
    """Build the snapshot for one log file from its ordered events."""
    clear_index, user_turns_after = find_clear_point(events)
    was_cleared = clear_index is not None and user_turns_after == 0
    start = clear_index + 1 if clear_index is not None else 0

    state = reduce(_fold, events[start:], _WindowState())

    return SessionSnapshot(
        source_path=source_path,
        last_modified=last_modified,
        created_at=state.created_at,
        was_cleared=was_cleared,
        model=state.model,
        first_message=state.first_message,
        usage=state.usage,
    )


def empty_snapshot(source_path: Path, last_modified: datetime) -> SessionSnapshot:
    """Snapshot for an empty or unreadable file; it reports no usage."""
    return SessionSnapshot(source_path=source_path, last_modified=last_modified)


def read_snapshot(source_path: Path, last_modified: datetime) -> SessionSnapshot:
    """Read a session log from disk and extract its snapshot.

    Read failures are absorbed: the file yields a zero-usage snapshot and
    is dropped downstream.
    """
    try:
        if source_path.stat().st_size == 0:
            return empty_snapshot(source_path, last_modified)
        with open(source_path, encoding="utf-8", errors="replace") as f:
            events, failures = decode_lines(f)
    except OSError as e:
        logger.debug("Could not read %s: %s", source_path, e)
        return empty_snapshot(source_path, last_modified)

    if failures:
        logger.debug("Skipped %d malformed lines in %s", failures, source_path)

    return extract_snapshot(events, source_path, last_modified)
