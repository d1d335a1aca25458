"""Decode raw session log lines into events.

Session logs are append-only and may be written concurrently by another
process, so a truncated or corrupt trailing line is normal. Decoding
never raises: anything that is not a well-formed record yields ``None``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from claude_context_bar.models.event import ContentBlock, Event, EventKind, TokenUsage

logger = logging.getLogger(__name__)

_KINDS = {kind.value: kind for kind in EventKind}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning an aware datetime or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _clean(text: str) -> str:
    # Lone surrogates from split \uXXXX escapes cannot be encoded for output
    return text.encode("utf-8", "replace").decode("utf-8")


def _decode_content(raw: Any):
    if isinstance(raw, str):
        return _clean(raw)
    if not isinstance(raw, list):
        return None

    blocks: List[ContentBlock] = []
    for item in raw:
        if isinstance(item, dict):
            text = item.get("text")
            block_type = item.get("type")
            blocks.append(
                ContentBlock(
                    type=_clean(block_type) if isinstance(block_type, str) else None,
                    text=_clean(text) if isinstance(text, str) else None,
                )
            )
        else:
            blocks.append(ContentBlock())
    return tuple(blocks)


def _decode_usage(raw: Any) -> Optional[TokenUsage]:
    if not isinstance(raw, dict):
        return None
    return TokenUsage(
        input_tokens=raw.get("input_tokens", 0),
        cache_read_tokens=raw.get("cache_read_input_tokens", 0),
        cache_creation_tokens=raw.get("cache_creation_input_tokens", 0),
    )


def decode_record(entry: Dict[str, Any]) -> Event:
    """Build an Event from an already-parsed record."""
    discriminator = entry.get("type", entry.get("kind"))
    kind = EventKind.OTHER
    if isinstance(discriminator, str):
        kind = _KINDS.get(discriminator, EventKind.OTHER)

    message = entry.get("message")
    if not isinstance(message, dict):
        message = {}

    model = message.get("model")
    # Usage may sit on the message or at the top level of the record
    usage = _decode_usage(message.get("usage")) or _decode_usage(entry.get("usage"))

    return Event(
        kind=kind,
        timestamp=parse_timestamp(entry.get("timestamp")),
        content=_decode_content(message.get("content")),
        model=_clean(model) if isinstance(model, str) and model else None,
        usage=usage,
    )


def decode_line(line: str) -> Optional[Event]:
    """Decode one log line, returning None for blank or malformed input."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        entry = json.loads(stripped)
    except (ValueError, RecursionError):
        # ValueError also covers integer literals over the digit limit
        return None
    if not isinstance(entry, dict):
        return None
    try:
        return decode_record(entry)
    except ValidationError:
        return None


def decode_lines(lines: Iterable[str]) -> Tuple[List[Event], int]:
    """Decode a file's lines in order.

    Returns:
        The decoded events and the number of non-blank lines that failed.
    """
    events: List[Event] = []
    failures = 0
    for line in lines:
        event = decode_line(line)
        if event is not None:
            events.append(event)
        elif line.strip():
            failures += 1
    return events, failures
