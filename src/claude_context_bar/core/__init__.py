"""Scan engine: decode, extract, scan, resolve and rank session logs."""

from .builder import build_active_sessions
from .monitor import SessionMonitor
from .resolver import explain, resolve_project
from .state import DisplayRegistry, HideSet, PassGuard

__all__ = [
    "DisplayRegistry",
    "HideSet",
    "PassGuard",
    "SessionMonitor",
    "build_active_sessions",
    "explain",
    "resolve_project",
]
