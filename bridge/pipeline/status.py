"""Status sink capability: where the pipeline reports its progress."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from bridge.ingest.models import PriceSummary


class Severity(str, Enum):
    NORMAL = "normal"
    ERROR = "error"


class StatusSink(ABC):
    """Implemented by the host UI (the CLI prints coloured lines)."""

    @abstractmethod
    def set_status(self, message: str, severity: Severity = Severity.NORMAL) -> None:
        """Replace the visible status line."""

    def show_summary(self, summary: PriceSummary) -> None:
        """Display the price summary of a finished job.  Optional."""
