"""Tests for the CLI context management module."""

import json
from pathlib import Path

import pytest

from bridge.config import settings
from bridge.jobs.models import Destination
from cli.context import (
    CliContext,
    context_file,
    load_context,
    remember_response,
    remember_target,
    resolve_destination,
    resolve_workbook,
    save_context,
)


@pytest.fixture
def temp_context_dir(tmp_path, monkeypatch):
    """Override the config directory to use a temporary path."""
    context_dir = tmp_path / ".sheetbridge"
    monkeypatch.setattr("cli.context.settings.cli_config_dir", context_dir)
    return context_dir


def test_load_default_context(temp_context_dir):
    """Should return defaults when no file exists."""
    ctx = load_context()
    assert isinstance(ctx, CliContext)
    assert ctx.workbook_path is None
    assert ctx.destination is None
    assert ctx.last_response_id is None


def test_save_and_load_roundtrip(temp_context_dir):
    """Should save context to disk and load it back correctly."""
    ctx = CliContext(
        workbook_path="/tmp/prices.xlsx",
        destination="active",
        last_response_id="job-1234",
    )
    save_context(ctx)

    path = temp_context_dir / "context.json"
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["last_response_id"] == "job-1234"

    assert load_context() == ctx


def test_corrupt_context_loads_defaults(temp_context_dir):
    """Invalid JSON or unknown keys should fall back to defaults."""
    temp_context_dir.mkdir(parents=True)
    path = context_file()

    path.write_text("{not json", encoding="utf-8")
    assert load_context() == CliContext()

    path.write_text(json.dumps({"unexpected": 1}), encoding="utf-8")
    assert load_context() == CliContext()


def test_resolve_workbook_precedence(temp_context_dir, monkeypatch):
    monkeypatch.setattr("cli.context.settings.workbook_path", Path("default.xlsx"))

    assert resolve_workbook(Path("explicit.xlsx"), CliContext(workbook_path="last.xlsx")) == Path("explicit.xlsx")
    assert resolve_workbook(None, CliContext(workbook_path="last.xlsx")) == Path("last.xlsx")
    assert resolve_workbook(None, CliContext()) == settings.workbook_path


def test_unknown_keys_and_non_string_values_are_dropped(temp_context_dir):
    temp_context_dir.mkdir(parents=True)
    context_file().write_text(
        json.dumps({"workbook_path": "a.xlsx", "last_response_id": 7, "extra": "x"}),
        encoding="utf-8",
    )

    assert load_context() == CliContext(workbook_path="a.xlsx")


def test_save_leaves_no_temporary_file(temp_context_dir):
    save_context(CliContext(last_response_id="job-1"))

    assert [p.name for p in temp_context_dir.iterdir()] == ["context.json"]


def test_remember_helpers_persist(temp_context_dir):
    ctx = CliContext()
    remember_target(ctx, Path("out.xlsx"), Destination.ACTIVE_SHEET)
    remember_response(ctx, "job-9")

    assert load_context() == CliContext(
        workbook_path="out.xlsx", destination="active", last_response_id="job-9"
    )


def test_resolve_destination_precedence():
    saved = CliContext(destination="active")

    assert resolve_destination(Destination.NEW_SHEET, saved) is Destination.NEW_SHEET
    assert resolve_destination(None, saved) is Destination.ACTIVE_SHEET
    assert resolve_destination(None, CliContext()) is Destination.NEW_SHEET
    assert resolve_destination(None, CliContext(destination="bogus")) is Destination.NEW_SHEET
