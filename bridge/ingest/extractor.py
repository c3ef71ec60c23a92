"""Envelope decoding: turns a finished job payload into a :class:`Table`.

The backend answers with a positional array::

    [
        {"Lowest Price": ..., "Average Price": ..., "Highest Price": ..., "Trend": "..."},
        {"headers": ["colX", "colY"]},
        {"colX": ..., "colY": ...},   # one object per data row
        ...
    ]

A named form ``{"summary": {...}, "header": {"headers": [...]}, "rows": [...]}``
is accepted as well; it is normalised to the positional one first, so both
forms obey the same rules.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List

from pydantic import ValidationError

from bridge.errors import MalformedPayload
from bridge.ingest.models import HeaderRecord, PriceSummary, Table

_MIN_RECORDS = 3


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _normalise(envelope: Any) -> List[Any]:
    """Return *envelope* as a positional record list of at least 3 items."""
    if isinstance(envelope, Mapping) and "header" in envelope:
        rows = envelope.get("rows", [])
        if not isinstance(rows, list):
            raise MalformedPayload("envelope 'rows' must be a list")
        envelope = [envelope.get("summary", {}), envelope["header"], *rows]

    if not isinstance(envelope, list):
        raise MalformedPayload(
            f"expected a list of records, got {type(envelope).__name__}"
        )
    if len(envelope) < _MIN_RECORDS:
        raise MalformedPayload(
            f"expected at least {_MIN_RECORDS} records, got {len(envelope)}"
        )
    return envelope


def _headers(record: Any) -> List[str]:
    if not isinstance(record, Mapping) or "headers" not in record:
        raise MalformedPayload("record[1] carries no 'headers' list")
    try:
        headers = HeaderRecord.model_validate(record).headers
    except ValidationError as exc:
        raise MalformedPayload(f"record[1] 'headers' is not a list of names: {exc}") from exc
    if not headers:
        raise MalformedPayload("record[1] 'headers' is empty")

    seen: set[str] = set()
    for name in headers:
        if name in seen:
            raise MalformedPayload(f"duplicate header {name!r}")
        seen.add(name)
    return headers


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_table(envelope: Any) -> Table:
    """Decode the header record and the data rows of *envelope*.

    Rows are kept as the backend sent them; a row missing some header is
    not an error here (the writer fills the gap with an empty cell).

    Raises:
        MalformedPayload: Fewer than 3 records, an empty or unusable
            ``headers`` list, or a data row that is not an object.
    """
    records = _normalise(envelope)
    headers = _headers(records[1])

    rows: List[dict[str, Any]] = []
    for index, record in enumerate(records[2:], start=2):
        if not isinstance(record, Mapping):
            raise MalformedPayload(
                f"record[{index}] is a {type(record).__name__}, expected an object"
            )
        rows.append(dict(record))

    return Table(headers=headers, rows=rows)


def extract_summary(envelope: Any) -> PriceSummary:
    """Decode the price summary record (``record[0]``) of *envelope*."""
    records = _normalise(envelope)
    summary = records[0]
    if not isinstance(summary, Mapping):
        raise MalformedPayload("record[0] is not a summary object")
    try:
        return PriceSummary.model_validate(dict(summary))
    except ValidationError as exc:
        raise MalformedPayload(f"record[0] is not a valid summary: {exc}") from exc
