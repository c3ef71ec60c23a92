"""Ingest package: decode finished job envelopes into tables."""

from bridge.ingest.extractor import extract_summary, extract_table
from bridge.ingest.models import PriceSummary, Table

__all__ = ["extract_table", "extract_summary", "Table", "PriceSummary"]
