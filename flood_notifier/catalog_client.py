"""Client for the disaster data center's file-listing endpoint."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import Settings
from .errors import MalformedResponseError, RemoteFetchError
from .models import FileDetail

logger = logging.getLogger(__name__)


class FileCatalogClient:
    """Fetch the current list of downloadable files."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.endpoint = settings.catalog_endpoint

    def list_files(self) -> list[FileDetail]:
        """Return the catalog entries in the order the remote lists them."""
        logger.debug("Fetching catalog listing %s", self.endpoint)
        try:
            resp = self.session.get(self.endpoint, timeout=self.settings.http_timeout_seconds)
        except requests.RequestException as exc:
            raise RemoteFetchError(f"Catalog request failed: {exc}") from exc
        if resp.status_code >= 400:
            logger.error("Catalog request failed (%s): %s", resp.status_code, resp.text)
            raise RemoteFetchError(f"Catalog answered with HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Catalog response is not JSON: {exc}") from exc

        files = self._parse_envelope(payload)
        logger.debug("Catalog returned %d files: %s", len(files), files)
        return files

    @classmethod
    def _parse_envelope(cls, payload: Any) -> list[FileDetail]:
        if not isinstance(payload, dict):
            raise MalformedResponseError("Catalog response is not a JSON object")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedResponseError("No data in catalog response")
        file_list = data.get("file_list")
        if file_list is None:
            raise MalformedResponseError("No file_list in catalog response")
        if not isinstance(file_list, list):
            raise MalformedResponseError("Catalog file_list is not a list")
        return [cls._to_file(raw) for raw in file_list]

    @staticmethod
    def _to_file(raw: Any) -> FileDetail:
        if not isinstance(raw, dict):
            raise MalformedResponseError(f"Catalog entry is not an object: {raw!r}")
        missing = [key for key in ("ID", "Subject", "LinkDownload") if key not in raw]
        if missing:
            raise MalformedResponseError(f"Catalog entry missing field {missing[0]!r}: {raw!r}")

        file_id = raw["ID"]
        if isinstance(file_id, int) and not isinstance(file_id, bool):
            file_id = str(file_id)
        if not isinstance(file_id, str):
            raise MalformedResponseError(f"Catalog entry has an invalid ID: {raw!r}")
        for key in ("Subject", "LinkDownload"):
            if not isinstance(raw[key], str):
                raise MalformedResponseError(f"Catalog entry has an invalid {key}: {raw!r}")

        return FileDetail(
            file_id=file_id,
            subject=raw["Subject"],
            link_download=raw["LinkDownload"],
        )
