"""Writes a :class:`~bridge.ingest.models.Table` into a workbook sheet."""

from __future__ import annotations

import asyncio
import json
from typing import Any, List

from bridge.config import settings
from bridge.ingest.models import Table
from bridge.jobs.models import Destination
from bridge.sheets.document import WorkbookDocument


def _cell_value(row: dict[str, Any], header: str) -> Any:
    """Value written for *header*; absent or null fields become ``""``."""
    value = row.get(header)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


class SheetWriter:
    """Places header and data rows on a new or the active sheet.

    Headers always land on row 0 in bold.  Data rows start right below the
    header on an empty sheet, or after the last used row when the sheet
    already holds more than one row, so earlier results are kept.  Running
    twice against the active sheet re-stamps row 0 with the latest headers.
    """

    def __init__(self, document: WorkbookDocument, *, base_name: str | None = None) -> None:
        self._document = document
        self._base_name = base_name or settings.new_sheet_name

    @property
    def document(self) -> WorkbookDocument:
        return self._document

    def unique_sheet_name(self) -> str:
        """First of ``"New Sheet"``, ``"New Sheet 1"``, … not taken yet."""
        taken = {name.lower() for name in self._document.sheet_names()}
        candidate = self._base_name
        counter = 1
        while candidate.lower() in taken:
            candidate = f"{self._base_name} {counter}"
            counter += 1
        return candidate

    def resolve_target(self, destination: Destination) -> str:
        if destination is Destination.NEW_SHEET:
            return self._document.add_sheet(self.unique_sheet_name())
        return self._document.active_sheet()

    @staticmethod
    def start_row(used_rows: int) -> int:
        """0-based row index where data rows begin."""
        return used_rows if used_rows > 1 else 1

    async def write(self, table: Table, destination: Destination) -> str:
        """Write *table* and commit; return the name of the sheet written.

        Raises:
            WriteError: The document rejected an operation or the commit.
        """
        sheet = self.resolve_target(destination)
        width = len(table.headers)
        start = self.start_row(self._document.used_row_count(sheet))

        if width:
            self._document.write_values(sheet, 0, 0, [list(table.headers)])
            self._document.set_bold(sheet, 0, 0, 1, width, True)

            if table.rows:
                values: List[List[Any]] = [
                    [_cell_value(row, header) for header in table.headers]
                    for row in table.rows
                ]
                self._document.write_values(sheet, start, 0, values)
                self._document.set_bold(sheet, start, 0, len(values), width, False)

        print(f"[WRITE] {len(table.rows)} row(s) → {sheet!r} starting at row {start + 1}")
        await asyncio.to_thread(self._document.detach_sync())
        return sheet
