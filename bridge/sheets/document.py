"""Workbook document capability used by the sheet writer.

``WorkbookDocument`` is the small surface the writer needs from a
spreadsheet host.  Value and formatting writes are *queued* and only
applied when :meth:`WorkbookDocument.sync` is called, mirroring hosts that
batch document edits behind a single commit.

``OpenpyxlDocument`` implements it on top of an ``.xlsx`` file.
"""

from __future__ import annotations

import threading
import zipfile
from abc import ABC, abstractmethod
from copy import copy
from functools import partial
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from bridge.errors import WriteError


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class WorkbookDocument(ABC):
    """Table-writing capability of a spreadsheet document.

    Rows and columns are 0-based.  Every method raises
    :class:`~bridge.errors.WriteError` on failure.
    """

    @abstractmethod
    def sheet_names(self) -> List[str]:
        """Names of all sheets, in workbook order."""

    @abstractmethod
    def add_sheet(self, name: str) -> str:
        """Create a sheet called *name* and return its name."""

    @abstractmethod
    def active_sheet(self) -> str:
        """Name of the currently active sheet."""

    @abstractmethod
    def used_row_count(self, sheet: str) -> int:
        """Number of rows up to and including the last non-empty one."""

    @abstractmethod
    def write_values(
        self, sheet: str, row: int, col: int, values: Sequence[Sequence[Any]]
    ) -> None:
        """Queue a rectangular block of values anchored at (*row*, *col*)."""

    @abstractmethod
    def set_bold(
        self, sheet: str, row: int, col: int, row_count: int, col_count: int, bold: bool
    ) -> None:
        """Queue a bold / non-bold font change over a rectangular range."""

    @abstractmethod
    def sync(self) -> None:
        """Apply every queued operation and persist the document."""

    def detach_sync(self) -> Callable[[], None]:
        """Take the queued operations now; the returned callable commits them.

        Lets a caller claim its own writes on the event loop and run the
        commit on a worker thread without picking up another run's queue.
        """
        return self.sync


# ---------------------------------------------------------------------------
# openpyxl implementation
# ---------------------------------------------------------------------------

class OpenpyxlDocument(WorkbookDocument):
    """An ``.xlsx`` workbook edited through openpyxl.

    Args:
        path: Workbook file.  Loaded if it exists, created on the first
            :meth:`sync` otherwise.  ``None`` keeps the workbook in memory.
        workbook: Use this workbook object instead of loading *path*.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        workbook: Optional[Workbook] = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        if workbook is not None:
            self.workbook = workbook
        elif self.path is not None and self.path.exists():
            try:
                self.workbook = load_workbook(self.path)
            except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
                raise WriteError(f"cannot open workbook {self.path}: {exc}") from exc
        else:
            self.workbook = Workbook()
        self._pending: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Number of queued, not yet applied operations."""
        return len(self._pending)

    def _sheet(self, name: str) -> Worksheet:
        try:
            return self.workbook[name]
        except KeyError as exc:
            raise WriteError(f"no sheet named {name!r}") from exc

    # -- reads -------------------------------------------------------------

    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def active_sheet(self) -> str:
        ws = self.workbook.active
        if ws is None:
            raise WriteError("workbook has no active sheet")
        return ws.title

    def used_row_count(self, sheet: str) -> int:
        ws = self._sheet(sheet)
        last = 0
        for index, row in enumerate(ws.iter_rows(values_only=True), start=1):
            if any(value not in (None, "") for value in row):
                last = index
        return last

    # -- writes ------------------------------------------------------------

    def add_sheet(self, name: str) -> str:
        if name.lower() in {n.lower() for n in self.workbook.sheetnames}:
            raise WriteError(f"sheet {name!r} already exists")
        try:
            ws = self.workbook.create_sheet(title=name)
        except ValueError as exc:
            raise WriteError(f"cannot create sheet {name!r}: {exc}") from exc
        return ws.title

    def write_values(
        self, sheet: str, row: int, col: int, values: Sequence[Sequence[Any]]
    ) -> None:
        ws = self._sheet(sheet)
        self._pending.append(partial(_apply_values, ws, row, col, values))

    def set_bold(
        self, sheet: str, row: int, col: int, row_count: int, col_count: int, bold: bool
    ) -> None:
        ws = self._sheet(sheet)
        self._pending.append(
            partial(_apply_bold, ws, row, col, row_count, col_count, bold)
        )

    def sync(self) -> None:
        self.detach_sync()()

    def detach_sync(self) -> Callable[[], None]:
        ops, self._pending = self._pending, []
        return partial(self._commit, ops)

    def _commit(self, ops: List[Callable[[], None]]) -> None:
        # Commits may run on worker threads; one at a time per workbook.
        with self._lock:
            try:
                for op in ops:
                    op()
                if self.path is not None:
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                    self.workbook.save(self.path)
            except (IllegalCharacterError, ValueError, TypeError, OSError) as exc:
                raise WriteError(f"workbook commit failed: {exc}") from exc


def _apply_values(
    ws: Worksheet, row: int, col: int, values: Sequence[Sequence[Any]]
) -> None:
    for r, row_values in enumerate(values):
        for c, value in enumerate(row_values):
            ws.cell(row=row + r + 1, column=col + c + 1, value=value)


def _apply_bold(
    ws: Worksheet, row: int, col: int, row_count: int, col_count: int, bold: bool
) -> None:
    for r in range(row + 1, row + row_count + 1):
        for c in range(col + 1, col + col_count + 1):
            cell = ws.cell(row=r, column=c)
            font = copy(cell.font)
            font.bold = bold
            cell.font = font
