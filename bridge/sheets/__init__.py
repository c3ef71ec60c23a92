"""Sheets package: workbook document capability and table writer."""

from bridge.sheets.document import OpenpyxlDocument, WorkbookDocument
from bridge.sheets.writer import SheetWriter

__all__ = ["WorkbookDocument", "OpenpyxlDocument", "SheetWriter"]
