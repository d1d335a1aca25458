"""Tests for supersession and stable numbering within one project."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from claude_context_bar.core.resolver import explain, resolve_project, surviving
from claude_context_bar.models.event import TokenUsage
from claude_context_bar.models.session import SessionSnapshot


def epoch(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def snap(
    name: str,
    created: Optional[float],
    modified: float,
    cleared: bool = False,
    model: str = "claude-sonnet-4-5",
) -> SessionSnapshot:
    return SessionSnapshot(
        source_path=Path(f"/logs/{name}.jsonl"),
        last_modified=epoch(modified),
        created_at=epoch(created) if created is not None else None,
        was_cleared=cleared,
        model=model,
        usage=TokenUsage(input_tokens=1000),
    )


def names(sessions):
    return [s.snapshot.session_id for s in sessions]


def test_newer_session_created_after_last_touch_supersedes():
    """B was created after A was last modified, so A was abandoned."""
    a = snap("A", created=10, modified=10)
    b = snap("B", created=20, modified=20)

    result = resolve_project("app", [a, b])

    assert names(result) == ["B"]
    assert result[0].display_name == "app"


def test_overlapping_sessions_both_survive():
    """A is still touched after B starts, and A started before B was touched."""
    a = snap("A", created=10, modified=15)
    b = snap("B", created=12, modified=12)

    result = resolve_project("app", [b, a])

    assert names(result) == ["A", "B"]
    assert [s.display_name for s in result] == ["app", "app-2"]


def test_equal_timestamps_do_not_supersede():
    """A successor created in the same instant as the last write is not newer."""
    a = snap("A", created=10, modified=20)
    b = snap("B", created=20, modified=25)

    result = resolve_project("app", [a, b])

    assert names(result) == ["A", "B"]


def test_cleared_session_is_always_dropped():
    a = snap("A", created=10, modified=50)
    b = snap("B", created=20, modified=60, cleared=True)

    result = resolve_project("app", [a, b])

    assert names(result) == ["A"]


def test_numbering_follows_creation_not_modification():
    x = snap("X", created=1, modified=300)
    y = snap("Y", created=2, modified=200)
    z = snap("Z", created=3, modified=100)

    result = resolve_project("app", [z, x, y])

    assert [(s.snapshot.session_id, s.ordinal) for s in result] == [
        ("X", 1),
        ("Y", 2),
        ("Z", 3),
    ]
    assert [s.display_name for s in result] == ["app", "app-2", "app-3"]


def test_missing_creation_time_sorts_earliest():
    unknown = snap("N", created=None, modified=5)
    b = snap("B", created=10, modified=10)

    resolutions = explain([unknown, b])

    assert [r.snapshot.session_id for r in resolutions] == ["B", "N"]
    assert resolutions[1].superseded
    assert resolutions[1].superseded_by.session_id == "B"


def test_any_dominating_successor_is_enough():
    """The oldest is superseded even though the middle one does not dominate it."""
    old = snap("old", created=0, modified=30)
    mid = snap("mid", created=25, modified=100)
    new = snap("new", created=40, modified=110)

    resolutions = {r.snapshot.session_id: r for r in explain([old, mid, new])}

    assert not resolutions["new"].superseded
    assert not resolutions["mid"].superseded
    assert resolutions["old"].superseded
    assert resolutions["old"].reason == "superseded by new"


def test_explain_reasons():
    a = snap("A", created=10, modified=10)
    b = snap("B", created=20, modified=30, cleared=True)

    resolutions = explain([a, b])

    assert resolutions[0].reason == "ended with /clear"
    # A cleared session still counts as a successor
    assert resolutions[1].superseded
    assert resolutions[1].superseded_by.session_id == "B"


def test_surviving_is_idempotent():
    group = [
        snap("A", created=10, modified=15),
        snap("B", created=12, modified=40),
        snap("C", created=30, modified=35),
    ]

    first = surviving(group)
    second = surviving(list(reversed(group)))

    assert [s.session_id for s in first] == [s.session_id for s in second]


def test_context_limit_by_model():
    big = snap("big", created=1, modified=100, model="claude-sonnet-4-5[1m]")
    normal = snap("normal", created=2, modified=100, model="claude-opus-4")

    result = resolve_project("app", [big, normal], default_context_limit=150_000)

    assert [s.context_limit for s in result] == [1_000_000, 150_000]
    assert result[1].percentage == 1


def test_empty_group():
    assert resolve_project("app", []) == []
