"""Shared fixtures for building fake Claude Code session logs."""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

CLEAR_COMMAND = (
    "<command-name>/clear</command-name>\n"
    "<command-message>clear</command-message>\n"
    "<command-args></command-args>"
)

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def user_record(content, timestamp=None):
    record = {"type": "user", "message": {"role": "user", "content": content}}
    if timestamp is not None:
        record["timestamp"] = iso(timestamp) if isinstance(timestamp, datetime) else timestamp
    return record


def assistant_record(
    input_tokens=0, cache_read=0, cache_creation=0, model="claude-sonnet-4-5", timestamp=None
):
    record = {
        "type": "assistant",
        "message": {
            "role": "assistant",
            "model": model,
            "content": [{"type": "text", "text": "Done."}],
            "usage": {
                "input_tokens": input_tokens,
                "cache_read_input_tokens": cache_read,
                "cache_creation_input_tokens": cache_creation,
                "output_tokens": 12,
            },
        },
    }
    if timestamp is not None:
        record["timestamp"] = iso(timestamp) if isinstance(timestamp, datetime) else timestamp
    return record


def write_log(path: Path, records, mtime: datetime = None) -> Path:
    """Write records as JSONL; strings are written verbatim as raw lines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            line = record if isinstance(record, str) else json.dumps(record)
            f.write(line + "\n")
    if mtime is not None:
        ts = mtime.timestamp()
        os.utime(path, (ts, ts))
    return path


@pytest.fixture
def projects_dir():
    """Create a temporary Claude projects directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "projects"
