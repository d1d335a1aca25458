"""Formatting helpers for token counts, timestamps and previews."""

from datetime import datetime

ELLIPSIS = "..."
LARGE_CONTEXT_LIMIT = 1_000_000


def truncate_preview(text: str, max_length: int) -> str:
    """Cut text to max_length characters, appending '...' if truncated."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def format_tokens(tokens: int) -> str:
    """Format a token count as 1.2M, 45K or a plain number."""
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    if tokens >= 1000:
        return f"{int(tokens / 1000 + 0.5)}K"
    return str(tokens)


def format_time(dt: datetime) -> str:
    """Format an aware datetime as local 'HH:MM:SS'."""
    return dt.astimezone().strftime("%H:%M:%S")


def context_limit_for_model(model: str, default_limit: int) -> int:
    """Return the context window for a model id.

    Sonnet 1M variants have a million-token window; everything else uses
    the configured limit.
    """
    lowered = model.lower()
    if "sonnet" in lowered and "1m" in lowered:
        return LARGE_CONTEXT_LIMIT
    return default_limit


def severity(percentage: int, warning_threshold: int, danger_threshold: int) -> str:
    if percentage >= danger_threshold:
        return "danger"
    if percentage >= warning_threshold:
        return "warning"
    return "ok"
