"""Fetch, deduplicate, persist, refresh and notify: one poll of the catalog."""

from __future__ import annotations

import logging

from .catalog_client import FileCatalogClient
from .credential_store import CredentialProvider
from .errors import FloodNotifierError, NotifyError, PartialNotifyError
from .models import FileDetail, NotifyFailure, RunReport, RunState
from .notifier import ChatNotifier
from .seen_registry import SeenFileRegistry
from .token_refresher import TokenRefresher

logger = logging.getLogger(__name__)


class Pipeline:
    """Run the notification pipeline once.

    Ids are persisted during the diff pass, before the credential is
    refreshed. A refresh or notification failure therefore leaves those ids
    marked as seen, and they are not offered again on later runs.
    """

    def __init__(
        self,
        *,
        credentials: CredentialProvider,
        catalog: FileCatalogClient,
        registry: SeenFileRegistry,
        refresher: TokenRefresher,
        notifier: ChatNotifier,
    ) -> None:
        self.credentials = credentials
        self.catalog = catalog
        self.registry = registry
        self.refresher = refresher
        self.notifier = notifier
        self.report = RunReport()

    def run(self, dry_run: bool = False) -> RunReport:
        """Execute one run and return its report; errors propagate to the caller."""
        self.report = RunReport(dry_run=dry_run)
        try:
            self._run(dry_run)
        except FloodNotifierError as exc:
            self.report.error = str(exc)
            self._enter(RunState.FAILED)
            raise
        return self.report

    def _run(self, dry_run: bool) -> None:
        report = self.report

        self._enter(RunState.INIT)
        secrets = self.credentials.load_secrets()
        credential = self.credentials.load_credential()

        self._enter(RunState.FETCHING)
        files = self.catalog.list_files()
        report.fetched = len(files)

        self._enter(RunState.DIFFING)
        new_files = self._preview(files) if dry_run else self._diff(files)
        # Last discovered file is announced first.
        new_files.reverse()
        report.new_files = new_files

        if not new_files:
            logger.info("No new files found")
            self._enter(RunState.IDLE)
            return

        logger.info("New files found: %s", [file.file_id for file in new_files])
        if dry_run:
            for file in new_files:
                logger.info("[DRY-RUN] Would notify '%s' (%s)", file.subject, file.link_download)
            self._enter(RunState.DONE)
            return

        self._enter(RunState.NOTIFYING)
        credential = self.refresher.refresh(secrets, credential)
        self.credentials.save_credential(credential)
        report.refreshed = True
        logger.info("Token refreshed successfully")

        for file in new_files:
            try:
                self.notifier.notify(secrets, credential, file)
            except NotifyError as exc:
                logger.error("Error sending message for file %s: %s", file.file_id, exc)
                report.failures.append(NotifyFailure(file=file, reason=str(exc)))
                continue
            report.notified.append(file)
            logger.info("Message sent successfully for file %s", file.file_id)

        if report.failures:
            raise PartialNotifyError(report.failures, attempted=len(new_files))
        self._enter(RunState.DONE)

    def _diff(self, files: list[FileDetail]) -> list[FileDetail]:
        new_files: list[FileDetail] = []
        for file in files:
            if self.registry.claim(file):
                logger.info("New file found: %s", file.file_id)
                new_files.append(file)
            else:
                logger.debug("Already seen file %s; skipping", file.file_id)
        return new_files

    def _preview(self, files: list[FileDetail]) -> list[FileDetail]:
        new_files: list[FileDetail] = []
        keys: set[int] = set()
        for file in files:
            if file.storage_key in keys or self.registry.exists(file.file_id):
                continue
            keys.add(file.storage_key)
            new_files.append(file)
        return new_files

    def _enter(self, state: RunState) -> None:
        logger.debug("Pipeline state %s -> %s", self.report.state.value, state.value)
        self.report.state = state
