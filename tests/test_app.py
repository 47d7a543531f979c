"""Tests for the command line entry point and its exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests

from fakes import CATALOG_URL, FakeResponse, FakeSession, catalog_payload, token_payload
from flood_notifier import app
from flood_notifier.seen_registry import SeenFileRegistry

SECRETS = {
    "tenant_id": "tenant-1",
    "client_id": "client-1",
    "client_secret": "shh",
    "chat_id": "chat-1",
}
NOTICE = ("10971", "Flood Notice A", "https://x/a.pdf")


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CATALOG_ENDPOINT", CATALOG_URL)
    monkeypatch.setenv("AUTHORITY_HOST", "https://login.test")
    monkeypatch.setenv("GRAPH_BASE_URL", "https://graph.test/v1.0")
    monkeypatch.setenv("REGISTRY_DB", str(tmp_path / "sqlite.db"))
    monkeypatch.setenv("SECRETS_FILE", str(tmp_path / "secrets.json"))
    monkeypatch.setenv("CREDENTIALS_FILE", str(tmp_path / "credentials.json"))
    monkeypatch.setenv("LOG_FILE", "")
    monkeypatch.setattr(app, "configure_logging", lambda *args, **kwargs: None)
    (tmp_path / "secrets.json").write_text(json.dumps(SECRETS))
    (tmp_path / "credentials.json").write_text(json.dumps(token_payload("0")))
    return tmp_path


def _install_remote(monkeypatch: pytest.MonkeyPatch, token_status: int = 200) -> FakeSession:
    def respond(method: str, url: str, **kwargs) -> FakeResponse:
        if url == CATALOG_URL:
            return FakeResponse(payload=catalog_payload(NOTICE))
        if url.endswith("/token"):
            if token_status >= 400:
                return FakeResponse(status_code=token_status, payload={"error": "invalid_grant"})
            return FakeResponse(payload=token_payload("1"))
        return FakeResponse(status_code=201, payload={"id": "msg"})

    session = FakeSession(respond)
    monkeypatch.setattr(requests, "Session", lambda: session)
    return session


def test_new_file_run_exits_zero(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    session = _install_remote(monkeypatch)

    assert app.main([]) == 0

    assert [call["method"] for call in session.calls] == ["GET", "POST", "POST"]
    saved = json.loads((workdir / "credentials.json").read_text())
    assert saved["access_token"] == "access-1"
    assert SeenFileRegistry(workdir / "sqlite.db").exists("10971")


def test_idle_run_exits_zero(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_remote(monkeypatch)
    assert app.main([]) == 0

    session = _install_remote(monkeypatch)
    assert app.main([]) == 0
    assert [call["method"] for call in session.calls] == ["GET"]


def test_refresh_failure_exits_non_zero(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    session = _install_remote(monkeypatch, token_status=400)

    assert app.main([]) == 5

    assert not any(call["url"].endswith("/messages") for call in session.calls)
    assert SeenFileRegistry(workdir / "sqlite.db").exists("10971")


def test_missing_secrets_exits_before_network(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (workdir / "secrets.json").unlink()
    session = _install_remote(monkeypatch)

    assert app.main([]) == 2
    assert session.calls == []


def test_invalid_setting_is_config_error(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "0")

    assert app.main([]) == 2


def test_dry_run_leaves_registry_empty(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    session = _install_remote(monkeypatch)

    assert app.main(["--dry-run"]) == 0

    assert [call["method"] for call in session.calls] == ["GET"]
    assert SeenFileRegistry(workdir / "sqlite.db").count() == 0


def test_registry_is_closed_after_run(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    closed: list[Path] = []
    original_close = SeenFileRegistry.close

    def tracking_close(self: SeenFileRegistry) -> None:
        closed.append(self.db_path)
        original_close(self)

    monkeypatch.setattr(SeenFileRegistry, "close", tracking_close)
    _install_remote(monkeypatch, token_status=400)

    assert app.main([]) == 5
    assert closed == [workdir / "sqlite.db"]


def test_empty_url_setting_is_config_error(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRAPH_BASE_URL", "  ")
    session = _install_remote(monkeypatch)

    assert app.main([]) == 2
    assert session.calls == []
