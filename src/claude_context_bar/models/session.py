"""Session models derived from a single scan pass."""

import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from claude_context_bar.utils.formatting import severity as _severity

from .event import TokenUsage


class SessionSnapshot(BaseModel):
    """The state of one session log file at scan time."""

    source_path: Path
    last_modified: datetime
    created_at: Optional[datetime] = None
    was_cleared: bool = False
    model: str = ""
    first_message: str = ""
    usage: TokenUsage = TokenUsage()

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def input_tokens(self) -> int:
        return self.usage.input_tokens

    @property
    def cache_read_tokens(self) -> int:
        return self.usage.cache_read_tokens

    @property
    def cache_creation_tokens(self) -> int:
        return self.usage.cache_creation_tokens

    @property
    def total_tokens(self) -> int:
        return self.usage.total_tokens

    @property
    def session_id(self) -> str:
        return self.source_path.stem

    @property
    def short_id(self) -> str:
        return self.session_id[:8]

    @property
    def created_key(self) -> float:
        """Creation time in epoch seconds; a missing timestamp sorts as earliest."""
        if self.created_at is None:
            return 0.0
        return self.created_at.timestamp()

    @property
    def modified_key(self) -> float:
        return self.last_modified.timestamp()


class ActiveSession(BaseModel):
    """A surviving session with its resolved display identity."""

    snapshot: SessionSnapshot
    project_name: str
    project_path: str = ""
    ordinal: int = 1
    context_limit: int = 200_000

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def display_name(self) -> str:
        if self.ordinal <= 1:
            return self.project_name
        return f"{self.project_name}-{self.ordinal}"

    @property
    def key(self) -> str:
        """Stable key for the presentation layer."""
        return str(self.snapshot.source_path)

    @property
    def percentage(self) -> int:
        if self.context_limit <= 0:
            return 0
        return math.floor(self.snapshot.total_tokens * 100 / self.context_limit + 0.5)

    def severity(self, warning_threshold: int, danger_threshold: int) -> str:
        """Classify usage as ``ok``, ``warning`` or ``danger``."""
        return _severity(self.percentage, warning_threshold, danger_threshold)


class Resolution(BaseModel):
    """Why the resolver kept or dropped one snapshot."""

    snapshot: SessionSnapshot
    superseded: bool = False
    reason: str = ""
    superseded_by: Optional[SessionSnapshot] = None

    model_config = {"arbitrary_types_allowed": True}
