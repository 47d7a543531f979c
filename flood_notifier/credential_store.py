"""Loading and persisting the OAuth credential and the application secrets."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .models import Credential, Secrets

logger = logging.getLogger(__name__)


class CredentialProvider(ABC):
    """Owns the durable representation of the secrets and the live credential."""

    @abstractmethod
    def load_secrets(self) -> Secrets:
        ...

    @abstractmethod
    def load_credential(self) -> Credential:
        ...

    @abstractmethod
    def save_credential(self, credential: Credential) -> None:
        ...


class JsonFileCredentialStore(CredentialProvider):
    """Keep secrets and credential in two JSON documents on disk.

    The secrets document is provisioned out of band and never written. The
    credential document is overwritten after every successful refresh.
    """

    def __init__(self, secrets_path: Path, credentials_path: Path) -> None:
        self.secrets_path = Path(secrets_path)
        self.credentials_path = Path(credentials_path)

    def load_secrets(self) -> Secrets:
        raw = self._read_document(self.secrets_path, "secrets")
        try:
            return Secrets.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid secrets file {self.secrets_path}: {exc}") from exc

    def load_credential(self) -> Credential:
        raw = self._read_document(self.credentials_path, "credentials")
        try:
            return Credential.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(
                f"Invalid credentials file {self.credentials_path}: {exc}"
            ) from exc

    def save_credential(self, credential: Credential) -> None:
        path = self.credentials_path
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(credential.to_dict()), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise ConfigError(f"Unable to write credentials file {path}: {exc}") from exc
        logger.debug("Credential written to %s", path)

    @staticmethod
    def _read_document(path: Path, label: str) -> Any:
        if not path.exists():
            raise ConfigError(f"No {label} file found at {path}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Error reading {label} file {path}: {exc}") from exc
