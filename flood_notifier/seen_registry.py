"""SQLite-backed registry of catalog files that have already been seen."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import sqlite_utils

from .errors import DuplicateKeyError, StorageError
from .models import FileDetail, SeenFileRecord, storage_key

logger = logging.getLogger(__name__)


class SeenFileRegistry:
    """Append-only set of file ids, keyed by their integer storage key."""

    TABLE = "content"

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db = sqlite_utils.Database(str(self.db_path))
            self._ensure_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Unable to open registry {self.db_path}: {exc}") from exc

    def _ensure_schema(self) -> None:
        self.db[self.TABLE].create(
            {
                "id": int,
                "subject": str,
                "linkDownload": str,
            },
            pk="id",
            if_not_exists=True,
        )

    def exists(self, file_id: str) -> bool:
        table = self.db[self.TABLE]
        try:
            return table.count_where("id = ?", [storage_key(file_id)]) > 0
        except sqlite3.Error as exc:
            raise StorageError(f"Registry lookup failed for id {file_id}: {exc}") from exc

    def record(self, file: FileDetail) -> None:
        """Insert a row for ``file``; the caller is expected to have checked ``exists``."""
        try:
            self.db[self.TABLE].insert(self._row(file), pk="id")
        except sqlite3.IntegrityError as exc:
            raise DuplicateKeyError(file.storage_key) from exc
        except sqlite3.Error as exc:
            raise StorageError(f"Registry insert failed for id {file.file_id}: {exc}") from exc

    def claim(self, file: FileDetail) -> bool:
        """Insert ``file`` unless its key is present; True when a row was written."""
        row = self._row(file)
        try:
            with self.db.conn:
                cursor = self.db.execute(
                    f"INSERT OR IGNORE INTO [{self.TABLE}] (id, subject, linkDownload) "
                    "VALUES (?, ?, ?)",
                    [row["id"], row["subject"], row["linkDownload"]],
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Registry insert failed for id {file.file_id}: {exc}") from exc
        return cursor.rowcount == 1

    def get(self, file_id: str) -> Optional[SeenFileRecord]:
        try:
            rows = list(
                self.db[self.TABLE].rows_where("id = ?", [storage_key(file_id)], limit=1)
            )
        except sqlite3.Error as exc:
            raise StorageError(f"Registry lookup failed for id {file_id}: {exc}") from exc
        if not rows:
            return None
        row = rows[0]
        return SeenFileRecord(
            id=row["id"], subject=row["subject"], link_download=row["linkDownload"]
        )

    def count(self) -> int:
        return self.db[self.TABLE].count

    def close(self) -> None:
        self.db.close()

    @staticmethod
    def _row(file: FileDetail) -> dict:
        return {
            "id": file.storage_key,
            "subject": file.subject,
            "linkDownload": file.link_download,
        }
