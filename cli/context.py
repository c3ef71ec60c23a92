"""Persistent state for the sheet bridge CLI.

Remembers the last workbook, destination and submitted response ID so
follow-up commands (``resume``, ``status``, ``sheets``) can default to them.
Stored in `~/.sheetbridge/context.json`.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import typer

from bridge.config import settings
from bridge.jobs.models import Destination


@dataclass
class CliContext:
    workbook_path: str | None = None
    destination: str | None = None
    last_response_id: str | None = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, data: str) -> CliContext:
        """Parse *data*, keeping only known keys that hold strings."""
        try:
            raw = json.loads(data)
        except json.JSONDecodeError:
            return cls()
        if not isinstance(raw, dict):
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known and isinstance(v, str)})


def context_file() -> Path:
    return settings.cli_config_dir / "context.json"


def load_context() -> CliContext:
    """Read the saved context; a missing or unreadable file gives defaults."""
    path = context_file()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return CliContext()
    except OSError as exc:
        typer.secho(f"⚠️  Ignoring unreadable {path}: {exc}", fg=typer.colors.YELLOW, err=True)
        return CliContext()
    return CliContext.from_json(text)


def save_context(ctx: CliContext) -> None:
    """Write *ctx* through a temporary file so a crash never truncates it."""
    path = context_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(ctx.to_json(), encoding="utf-8")
    tmp.replace(path)


def remember_target(ctx: CliContext, workbook: Path, destination: Destination) -> None:
    ctx.workbook_path = str(workbook)
    ctx.destination = destination.value
    save_context(ctx)


def remember_response(ctx: CliContext, job_id: str) -> None:
    ctx.last_response_id = job_id
    save_context(ctx)


def resolve_workbook(workbook: Path | None, ctx: CliContext) -> Path:
    """Explicit option → last used workbook → ``settings.workbook_path``."""
    if workbook is not None:
        return workbook
    if ctx.workbook_path:
        return Path(ctx.workbook_path)
    return settings.workbook_path


def resolve_destination(option: Destination | None, ctx: CliContext) -> Destination:
    """Explicit option → last used destination → a new sheet."""
    if option is not None:
        return option
    try:
        return Destination(ctx.destination or Destination.NEW_SHEET.value)
    except ValueError:
        return Destination.NEW_SHEET
