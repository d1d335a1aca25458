"""Decide which sessions of one project are still live.

There is no explicit "session closed" signal in the logs. A session is
considered abandoned (superseded) when another session of the same
project was *created* after it was last *modified*: the user walked away
from it before its successor began. Sessions that ended on ``/clear``
are always dropped.

Survivors are numbered by creation time so that the numbering a user
sees does not reshuffle as sessions are touched in a different order.
"""

from typing import Iterable, List

from claude_context_bar.models.session import ActiveSession, Resolution, SessionSnapshot
from claude_context_bar.utils.formatting import context_limit_for_model

DEFAULT_CONTEXT_LIMIT = 200_000


def explain(snapshots: Iterable[SessionSnapshot]) -> List[Resolution]:
    """Return a verdict for every snapshot, newest first."""
    ordered = sorted(snapshots, key=lambda s: s.created_key, reverse=True)
    resolutions: List[Resolution] = []

    for i, snapshot in enumerate(ordered):
        if snapshot.was_cleared:
            resolutions.append(
                Resolution(
                    snapshot=snapshot,
                    superseded=True,
                    reason="ended with /clear",
                )
            )
            continue

        verdict = Resolution(snapshot=snapshot)
        for newer in ordered[:i]:
            # Strictly greater: a successor created in the same instant
            # as the last write does not supersede
            if newer.created_key > snapshot.modified_key:
                verdict = Resolution(
                    snapshot=snapshot,
                    superseded=True,
                    reason=f"superseded by {newer.short_id}",
                    superseded_by=newer,
                )
                break
        resolutions.append(verdict)

    return resolutions


def surviving(snapshots: Iterable[SessionSnapshot]) -> List[SessionSnapshot]:
    """Return the live snapshots, oldest created first."""
    survivors = [r.snapshot for r in explain(snapshots) if not r.superseded]
    survivors.sort(key=lambda s: s.created_key)
    return survivors


def resolve_project(
    project_name: str,
    snapshots: Iterable[SessionSnapshot],
    project_path: str = "",
    default_context_limit: int = DEFAULT_CONTEXT_LIMIT,
) -> List[ActiveSession]:
    """Resolve one project's snapshots into numbered active sessions.

    The oldest survivor keeps the bare project name; later ones become
    ``name-2``, ``name-3`` and so on.
    """
    return [
        ActiveSession(
            snapshot=snapshot,
            project_name=project_name,
            project_path=project_path,
            ordinal=ordinal,
            context_limit=context_limit_for_model(
                snapshot.model, default_context_limit
            ),
        )
        for ordinal, snapshot in enumerate(surviving(snapshots), start=1)
    ]
