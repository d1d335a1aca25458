"""Event model for decoded session log records."""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, field_validator


class EventKind(str, Enum):
    """Who authored a log record."""

    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"


class TokenUsage(BaseModel):
    """Token counters reported by one record.

    Counts are cumulative snapshots of the context window, not deltas.
    """

    input_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0

    model_config = {"frozen": True}

    @field_validator(
        "input_tokens", "cache_read_tokens", "cache_creation_tokens", mode="before"
    )
    @classmethod
    def _non_negative(cls, value):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return 0
        return value

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.cache_read_tokens + self.cache_creation_tokens


class ContentBlock(BaseModel):
    """One block of a structured message body."""

    type: Optional[str] = None
    text: Optional[str] = None

    model_config = {"frozen": True}


class Event(BaseModel):
    """A single decoded line of a session log."""

    kind: EventKind = EventKind.OTHER
    timestamp: Optional[datetime] = None
    content: Union[str, Tuple[ContentBlock, ...], None] = None
    model: Optional[str] = None
    usage: Optional[TokenUsage] = None

    model_config = {"frozen": True}

    @property
    def text(self) -> str:
        """Effective string content: the bare string or the first block's text."""
        if isinstance(self.content, str):
            return self.content
        if self.content:
            return self.content[0].text or ""
        return ""

    @property
    def has_content(self) -> bool:
        return bool(self.content)
