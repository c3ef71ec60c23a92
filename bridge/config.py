"""Centralised settings for the sheet bridge.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str) -> bool:
    """Read a boolean environment variable (``1/true/yes/on`` are truthy)."""
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Job backend (proxy)
    # ------------------------------------------------------------------
    proxy_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "BRIDGE_PROXY_BASE_URL", "https://localhost:3000"
        )
    )
    verify_tls: bool = field(
        default_factory=lambda: _env_flag("BRIDGE_VERIFY_TLS", "true")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------
    poll_interval: float = field(
        default_factory=lambda: float(os.environ.get("POLL_INTERVAL", "10.0"))
    )
    # 0 keeps polling until the job resolves or the loop is cancelled.
    poll_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("POLL_MAX_ATTEMPTS", "0"))
    )
    poll_backoff: float = field(
        default_factory=lambda: float(os.environ.get("POLL_BACKOFF", "1.0"))
    )
    poll_max_interval: float = field(
        default_factory=lambda: float(os.environ.get("POLL_MAX_INTERVAL", "60.0"))
    )

    # ------------------------------------------------------------------
    # Workbook output
    # ------------------------------------------------------------------
    workbook_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("BRIDGE_WORKBOOK", "sheetbridge.xlsx")
        )
    )
    new_sheet_name: str = field(
        default_factory=lambda: os.environ.get("NEW_SHEET_NAME", "New Sheet")
    )

    # ------------------------------------------------------------------
    # CLI state
    # ------------------------------------------------------------------
    cli_config_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("BRIDGE_CLI_DIR", Path.home() / ".sheetbridge")
        )
    )

    @property
    def proxy_url(self) -> str:
        """Job submission endpoint."""
        return f"{self.proxy_base_url.rstrip('/')}/proxy"

    @property
    def reply_url(self) -> str:
        """Job status endpoint (takes a ``responseId`` query parameter)."""
        return f"{self.proxy_base_url.rstrip('/')}/reply"


# Module-level singleton. Import this everywhere:
#   from bridge.config import settings
settings = Settings()
