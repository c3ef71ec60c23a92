"""Data models produced from a finished job's envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class PriceSummary(BaseModel):
    """The summary record heading every envelope.

    The backend uses display names (``"Lowest Price"``); fields are
    populated by alias and any extra keys are preserved.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    lowest_price: Any = Field(default=None, alias="Lowest Price")
    average_price: Any = Field(default=None, alias="Average Price")
    highest_price: Any = Field(default=None, alias="Highest Price")
    trend: Any = Field(default="", alias="Trend")


class HeaderRecord(BaseModel):
    """The second envelope record: ordered column names."""

    headers: List[str]


@dataclass
class Table:
    """Normalised tabular result: ordered headers plus row mappings."""

    headers: List[str]
    rows: List[dict[str, Any]] = field(default_factory=list)
