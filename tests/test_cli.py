"""Tests for the command-line interface."""

import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from click.testing import CliRunner

from claude_context_bar.cli.main import main
from conftest import CLEAR_COMMAND, assistant_record, user_record, write_log


@pytest.fixture
def claude_home(monkeypatch):
    """A fake ~/.claude with two live sessions, one abandoned and one cleared."""
    with tempfile.TemporaryDirectory() as temp_dir:
        home = Path(temp_dir)
        monkeypatch.setenv("CLAUDE_DATA_DIR", temp_dir)
        now = datetime.now(timezone.utc)

        def ago(seconds):
            return now - timedelta(seconds=seconds)

        app = home / "projects" / "-Users-me-work-app"
        write_log(
            app / "aaaaaaaa-1111.jsonl",
            [user_record("abandoned work", ago(250)), assistant_record(900, timestamp=ago(245))],
            mtime=ago(240),
        )
        write_log(
            app / "bbbbbbbb-2222.jsonl",
            [
                user_record("add the [red] parser", ago(200)),
                assistant_record(150_000, 10_000, 0, model="claude-opus-4", timestamp=ago(30)),
            ],
            mtime=ago(20),
        )
        write_log(
            app / "cccccccc-3333.jsonl",
            [
                user_record("old", ago(190)),
                assistant_record(500, timestamp=ago(180)),
                user_record(CLEAR_COMMAND, ago(15)),
            ],
            mtime=ago(15),
        )
        write_log(
            home / "projects" / "-Users-me-lib" / "dddddddd-4444.jsonl",
            [user_record("lib work", ago(100)), assistant_record(2000, timestamp=ago(90))],
            mtime=ago(10),
        )
        yield home


def test_status_json(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["status", "--json"])

    assert result.exit_code == 0, result.output
    sessions = json.loads(result.output)
    assert [s["display_name"] for s in sessions] == ["lib", "app"]
    app = sessions[1]
    assert app["session_id"] == "bbbbbbbb-2222"
    assert app["total_tokens"] == 160_000
    assert app["percentage"] == 80
    assert app["model"] == "claude-opus-4"
    assert app["project_path"] == "/Users/me/work/app"


def test_status_table(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["status"])

    assert result.exit_code == 0, result.output
    assert "Active Claude Sessions" in result.output
    assert "lib" in result.output


def test_split_emoji_does_not_crash_output(claude_home):
    """A lone surrogate from a split emoji escape is printed as a placeholder."""
    now = datetime.now(timezone.utc)
    write_log(
        claude_home / "projects" / "-Users-me-emoji" / "eeeeeeee-5555.jsonl",
        [
            user_record("fix the \ud83d bug", now - timedelta(seconds=60)),
            assistant_record(1000, timestamp=now - timedelta(seconds=50)),
        ],
        mtime=now - timedelta(seconds=5),
    )
    runner = CliRunner()

    status = runner.invoke(main, ["status"])
    debug = runner.invoke(main, ["debug", "emoji"])

    assert status.exit_code == 0, status.output
    assert debug.exit_code == 0, debug.output
    assert '"fix the ? bug"' in debug.output


def test_status_max_sessions(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["--max-sessions", "1", "status", "--json"])

    assert [s["display_name"] for s in json.loads(result.output)] == ["lib"]


def test_status_no_sessions(claude_home):
    runner = CliRunner()

    result = runner.invoke(
        main, ["--projects-dir", str(claude_home / "empty"), "status"]
    )

    assert result.exit_code == 0
    assert "No active sessions" in result.output


def test_debug_report(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["debug", "work-app"])

    assert result.exit_code == 0, result.output
    assert "SUPERSESSION ANALYSIS" in result.output
    assert "Found 3 active session files" in result.output
    assert "superseded by bbbbbbbb" in result.output
    assert "lib work" not in result.output
    assert "Total sessions found: 2" in result.output
    assert "Shown after supersession: 1" in result.output


def test_invalid_settings_abort(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["--max-sessions", "0", "status"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_missing_config_file_aborts(claude_home):
    runner = CliRunner()

    result = runner.invoke(main, ["--config", str(claude_home / "nope.json"), "status"])

    assert result.exit_code == 1
    assert "not found" in result.output
