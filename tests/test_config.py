"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

from bridge.config import Settings


def test_defaults(monkeypatch):
    for name in (
        "BRIDGE_PROXY_BASE_URL",
        "BRIDGE_VERIFY_TLS",
        "POLL_INTERVAL",
        "POLL_MAX_ATTEMPTS",
        "POLL_BACKOFF",
        "NEW_SHEET_NAME",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings()
    assert s.proxy_base_url == "https://localhost:3000"
    assert s.verify_tls is True
    assert s.poll_interval == 10.0
    assert s.poll_max_attempts == 0
    assert s.poll_backoff == 1.0
    assert s.new_sheet_name == "New Sheet"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BRIDGE_PROXY_BASE_URL", "http://proxy.internal:8080/")
    monkeypatch.setenv("BRIDGE_VERIFY_TLS", "false")
    monkeypatch.setenv("POLL_INTERVAL", "2.5")
    monkeypatch.setenv("POLL_MAX_ATTEMPTS", "12")
    monkeypatch.setenv("BRIDGE_WORKBOOK", "/data/prices.xlsx")

    s = Settings()
    assert s.verify_tls is False
    assert s.poll_interval == 2.5
    assert s.poll_max_attempts == 12
    assert s.workbook_path == Path("/data/prices.xlsx")
    assert s.proxy_url == "http://proxy.internal:8080/proxy"
    assert s.reply_url == "http://proxy.internal:8080/reply"
