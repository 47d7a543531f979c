"""Error kinds raised by the pipeline components.

Each kind carries the process exit code the entry point reports for it.
"""

from __future__ import annotations

from typing import Sequence


class FloodNotifierError(Exception):
    """Base class for every failure the pipeline knows how to report."""

    exit_code = 1


class ConfigError(FloodNotifierError):
    """Secrets, credential document or settings are missing or unparsable."""

    exit_code = 2


class CatalogError(FloodNotifierError):
    exit_code = 3


class RemoteFetchError(CatalogError):
    """The catalog could not be reached or answered with an error status."""


class MalformedResponseError(CatalogError):
    """The catalog answered, but not with the expected envelope."""


class StorageError(FloodNotifierError):
    exit_code = 4


class DuplicateKeyError(StorageError):
    def __init__(self, key: int) -> None:
        super().__init__(f"Registry already contains id {key}")
        self.key = key


class AuthError(FloodNotifierError):
    """Refreshing the OAuth credential failed."""

    exit_code = 5


class NotifyError(FloodNotifierError):
    exit_code = 6


class PartialNotifyError(NotifyError):
    """Some notifications of a run failed; the rest were still sent."""

    def __init__(self, failures: Sequence, attempted: int) -> None:
        ids = ", ".join(failure.file.file_id for failure in failures)
        super().__init__(
            f"{len(failures)} of {attempted} notifications failed (ids: {ids})"
        )
        self.failures = list(failures)
        self.attempted = attempted
