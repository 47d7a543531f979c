"""Typed containers shared across the pipeline."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Optional

# Registry keys are stored as signed 32-bit integers.
_KEY_MIN = -(2**31)
_KEY_MAX = 2**31 - 1
_ASCII_INTEGER = re.compile(r"[+-]?[0-9]+")


def storage_key(file_id: str) -> int:
    """Map a catalog id onto its registry key; non-numeric ids collapse to 0.

    Only plain ASCII integers count as numeric. Whitespace, digit-group
    underscores and non-ASCII digits all map to 0, matching the keys
    already stored in existing registries.
    """
    if not isinstance(file_id, str) or not _ASCII_INTEGER.fullmatch(file_id):
        return 0
    key = int(file_id)
    if key < _KEY_MIN or key > _KEY_MAX:
        return 0
    return key


@dataclass(frozen=True)
class FileDetail:
    """One downloadable file as listed by the remote catalog."""

    file_id: str
    subject: str
    link_download: str

    @property
    def storage_key(self) -> int:
        return storage_key(self.file_id)


@dataclass(frozen=True)
class SeenFileRecord:
    """Row persisted in the registry's ``content`` table."""

    id: int
    subject: str
    link_download: str


@dataclass(frozen=True)
class Credential:
    """OAuth2 token bundle used to authenticate against Graph."""

    token_type: str
    scope: str
    expires_in: int
    ext_expires_in: int
    access_token: str
    refresh_token: str
    id_token: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Credential":
        """Build a credential from a token response or the stored document.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when a field is
        missing or has the wrong shape; callers translate these into their
        own error kinds.
        """
        if not isinstance(raw, dict):
            raise TypeError(f"Expected a JSON object, got {type(raw).__name__}")
        return cls(
            token_type=str(raw["token_type"]),
            scope=str(raw["scope"]),
            expires_in=int(raw["expires_in"]),
            ext_expires_in=int(raw["ext_expires_in"]),
            access_token=str(raw["access_token"]),
            refresh_token=str(raw["refresh_token"]),
            id_token=str(raw["id_token"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Secrets:
    """Static application identity and chat target."""

    tenant_id: str
    client_id: str
    client_secret: str
    chat_id: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Secrets":
        if not isinstance(raw, dict):
            raise TypeError(f"Expected a JSON object, got {type(raw).__name__}")
        values = {}
        for item in fields(cls):
            value = raw[item.name]
            if not isinstance(value, str) or not value:
                raise ValueError(f"'{item.name}' must be a non-empty string")
            values[item.name] = value
        return cls(**values)


class RunState(str, Enum):
    INIT = "init"
    FETCHING = "fetching"
    DIFFING = "diffing"
    IDLE = "idle"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class NotifyFailure:
    file: FileDetail
    reason: str


@dataclass
class RunReport:
    """Outcome of one pipeline run."""

    state: RunState = RunState.INIT
    fetched: int = 0
    new_files: list[FileDetail] = field(default_factory=list)
    refreshed: bool = False
    notified: list[FileDetail] = field(default_factory=list)
    failures: list[NotifyFailure] = field(default_factory=list)
    dry_run: bool = False
    error: Optional[str] = None
