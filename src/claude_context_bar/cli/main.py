"""Main CLI interface for Claude Context Bar."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table

from claude_context_bar.config import ConfigError, Settings, load_settings
from claude_context_bar.core.builder import build_active_sessions
from claude_context_bar.core.extractor import read_snapshot
from claude_context_bar.core.monitor import SessionMonitor
from claude_context_bar.core.resolver import explain
from claude_context_bar.core.scanner import list_candidates, list_project_dirs
from claude_context_bar.core.watcher import watch_sessions
from claude_context_bar.logging_config import setup_logging
from claude_context_bar.models.session import ActiveSession, SessionSnapshot
from claude_context_bar.utils.formatting import format_time, format_tokens
from claude_context_bar.utils.paths import decode_project_path

console = Console()

_SEVERITY_STYLES = {"ok": "green", "warning": "yellow", "danger": "bold red"}


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def session_to_dict(session: ActiveSession) -> Dict:
    """Serialise an active session for ``status --json``."""
    snapshot = session.snapshot
    return {
        "display_name": session.display_name,
        "project_name": session.project_name,
        "project_path": session.project_path,
        "ordinal": session.ordinal,
        "session_id": snapshot.session_id,
        "source_path": str(snapshot.source_path),
        "model": snapshot.model,
        "first_message": snapshot.first_message,
        "created_at": _iso(snapshot.created_at),
        "last_modified": _iso(snapshot.last_modified),
        "input_tokens": snapshot.input_tokens,
        "cache_read_tokens": snapshot.cache_read_tokens,
        "cache_creation_tokens": snapshot.cache_creation_tokens,
        "total_tokens": snapshot.total_tokens,
        "context_limit": session.context_limit,
        "percentage": session.percentage,
    }


def sessions_table(sessions: List[ActiveSession], settings: Settings) -> Table:
    """Render active sessions as a rich table."""
    table = Table(title="Active Claude Sessions")
    table.add_column("Session", style="cyan", no_wrap=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Model", style="magenta")
    table.add_column("Context", justify="right")
    table.add_column("Tokens", justify="right", style="blue")
    table.add_column("Updated", style="green")
    table.add_column("First message")

    for session in sessions:
        snapshot = session.snapshot
        level = session.severity(settings.warning_threshold, settings.danger_threshold)
        table.add_row(
            session.display_name,
            snapshot.short_id,
            escape(snapshot.model or "Unknown"),
            f"[{_SEVERITY_STYLES[level]}]{session.percentage}%[/]",
            f"{format_tokens(snapshot.total_tokens)} / "
            f"{format_tokens(session.context_limit)}",
            format_time(snapshot.last_modified),
            escape(snapshot.first_message),
        )
    return table


@click.group()
@click.version_option(package_name="claude-context-bar")
@click.option(
    "--projects-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Claude projects directory (default: ~/.claude/projects)",
)
@click.option("--idle-timeout", type=float, help="Seconds before a session is idle")
@click.option("--max-sessions", type=int, help="Maximum sessions to show")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings JSON file",
)
@click.option("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
@click.option(
    "--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Log file"
)
@click.pass_context
def main(
    ctx: click.Context,
    projects_dir: Optional[Path],
    idle_timeout: Optional[float],
    max_sessions: Optional[int],
    config_file: Optional[Path],
    log_level: Optional[str],
    log_file: Optional[Path],
):
    """Claude Context Bar - live context usage of Claude Code sessions."""
    setup_logging(log_level, log_file)
    try:
        ctx.obj = load_settings(
            config_file,
            {
                "projects_dir": projects_dir,
                "idle_timeout_seconds": idle_timeout,
                "max_sessions": max_sessions,
            },
        )
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print sessions as JSON")
@click.pass_obj
def status(settings: Settings, as_json: bool):
    """Show currently active sessions."""
    sessions = build_active_sessions(settings)

    if as_json:
        click.echo(json.dumps([session_to_dict(s) for s in sessions], indent=2))
        return

    if not sessions:
        console.print("[yellow]No active sessions[/yellow]")
        return

    console.print(sessions_table(sessions, settings))


@main.command()
@click.argument("project_filter", required=False)
@click.pass_obj
def debug(settings: Settings, project_filter: Optional[str]):
    """Explain which sessions are shown or hidden, and why."""
    projects_dir = settings.resolved_projects_dir()
    now = datetime.now(timezone.utc)

    console.print("[bold]========== CLAUDE CONTEXT BAR DEBUG ==========[/bold]")
    console.print(f"Time: {now.isoformat()}")
    console.print(f"Projects dir: {projects_dir}")

    if not projects_dir.is_dir():
        console.print("[red]Claude projects directory not found![/red]")
        return

    groups: Dict[str, List[SessionSnapshot]] = {}
    for project_dir in list_project_dirs(projects_dir):
        if project_filter and project_filter not in project_dir.name:
            continue
        candidates = list_candidates(project_dir, now, settings.idle_timeout_seconds)
        if not candidates:
            continue

        console.print(f"\n[bold]--- Project: {project_dir.name} ---[/bold]")
        console.print(f"Found {len(candidates)} active session files\n")

        name, _ = decode_project_path(project_dir.name)
        for candidate in candidates:
            snapshot = read_snapshot(candidate.path, candidate.last_modified)
            created = _iso(snapshot.created_at) or "unknown"
            console.print(f"  [cyan]{snapshot.short_id}[/cyan]...")
            console.print(f"     Created:  {created}")
            console.print(f"     LastUpd:  {snapshot.last_modified.isoformat()}")
            console.print(f"     Tokens:   {snapshot.total_tokens}")
            console.print(f"     Cleared:  {snapshot.was_cleared}")
            console.print(f'     FirstMsg: "{escape(snapshot.first_message)}"')
            if snapshot.total_tokens > 0:
                groups.setdefault(name, []).append(snapshot)

    console.print("\n[bold]========== SUPERSESSION ANALYSIS ==========[/bold]\n")

    shown = 0
    for name, snapshots in groups.items():
        console.print(f"Project: {name}")
        for resolution in explain(snapshots):
            snapshot = resolution.snapshot
            if resolution.superseded:
                console.print(f"  [red]HIDE[/red] {snapshot.short_id}")
                console.print(f"      Reason: {resolution.reason}")
            else:
                shown += 1
                console.print(f"  [green]SHOW[/green] {snapshot.short_id}")
            console.print(f"      Created: {_iso(snapshot.created_at)}")
            console.print(f"      LastUpd: {snapshot.last_modified.isoformat()}")
        console.print()

    found = [s for snapshots in groups.values() for s in snapshots]
    console.print("[bold]========== SUMMARY ==========[/bold]")
    console.print(f"Total sessions found: {len(found)}")
    console.print(
        "Would be shown (before supersession): "
        f"{sum(1 for s in found if not s.was_cleared)}"
    )
    console.print(f"Shown after supersession: {shown}")


@main.command()
@click.pass_obj
def watch(settings: Settings):
    """Continuously display active sessions until interrupted."""
    monitor = SessionMonitor(settings)

    with Live(sessions_table([], settings), console=console) as live:
        monitor.add_listener(
            lambda sessions: live.update(sessions_table(sessions, settings))
        )
        try:
            watch_sessions(monitor)
        except KeyboardInterrupt:
            pass
        finally:
            monitor.shutdown()


if __name__ == "__main__":
    main()
