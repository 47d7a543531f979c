"""Shared fixtures for the pipeline tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from fakes import CATALOG_URL, token_payload
from flood_notifier.config import Settings
from flood_notifier.models import Credential, Secrets


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        catalog_endpoint=CATALOG_URL,
        authority_host="https://login.test",
        graph_base_url="https://graph.test/v1.0",
        registry_db=tmp_path / "sqlite.db",
        secrets_file=tmp_path / "secrets.json",
        credentials_file=tmp_path / "credentials.json",
        http_timeout_seconds=5,
        log_file=None,
    )


@pytest.fixture()
def secrets() -> Secrets:
    return Secrets(
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="shh",
        chat_id="19:chat@thread.v2",
    )


@pytest.fixture()
def credential() -> Credential:
    return Credential.from_dict(token_payload("0"))


@pytest.fixture()
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
