"""Data models for Claude Context Bar."""

from .event import ContentBlock, Event, EventKind, TokenUsage
from .session import ActiveSession, Resolution, SessionSnapshot

__all__ = [
    "ActiveSession",
    "ContentBlock",
    "Event",
    "EventKind",
    "Resolution",
    "SessionSnapshot",
    "TokenUsage",
]
