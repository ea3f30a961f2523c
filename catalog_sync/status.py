"""Track the refreshed condition, commit and version snapshot of a catalog.

The `Refreshed` condition moves through these states:

- `Unknown("syncing catalog")` while a run is in progress, persisted as soon as
  the run starts so observers can see it.
- `True` when every chart was applied.
- `False` with reason `Error` when templates failed to be created or updated.
  The commit is reset so the next run re-evaluates every chart.
- `False` with reason `IgnoredError` when charts are invalid upstream but
  everything else was applied. The commit advances and the caller is told not
  to retry immediately.

The `Upgraded` condition records whether every update of the last commit was
applied, which allows unchanged charts to be skipped.
"""

import logging

from .config import SyncConfig
from .exceptions import HardSyncError, SoftSyncError
from .manifest import (
    REFRESHED,
    UPGRADED,
    Catalog,
    CatalogStatus,
    ConditionStatus,
    VersionCommitSnapshot,
)
from .store import CatalogStatusWriter

__all__ = [
    "StatusTracker",
    "REASON_ERROR",
    "REASON_IGNORED_ERROR",
]

_LOGGER = logging.getLogger(__name__)

REASON_ERROR = "Error"
REASON_IGNORED_ERROR = "IgnoredError"


def _format_errors(errors: dict[str, str]) -> str:
    return "; ".join(f"{chart}: {error}" for chart, error in errors.items())


class StatusTracker:
    """Owns the status of a catalog during a sync run."""

    def __init__(
        self, catalog: Catalog, writer: CatalogStatusWriter, config: SyncConfig
    ) -> None:
        """Initialize StatusTracker."""
        self._catalog = catalog
        self._writer = writer
        self._config = config

    @property
    def status(self) -> CatalogStatus:
        return self._catalog.status

    def has_all_updates(self) -> bool:
        """Return True if the last run applied every update of its commit."""
        return self.status.is_condition(UPGRADED, ConditionStatus.TRUE)

    def is_up_to_date(self, commit: str) -> bool:
        """Return True if the commit was already fully applied."""
        return bool(commit) and commit == self.status.commit and self.has_all_updates()

    def needs_sync_marker(self) -> bool:
        """Return True if the in-progress marker should be persisted."""
        if not self.status.conditions:
            return True
        if (refreshed := self.status.refreshed) is None:
            return True
        if refreshed.status == ConditionStatus.TRUE:
            return True
        return refreshed.status == ConditionStatus.UNKNOWN and (
            self._config.syncing_message not in (refreshed.message or "")
        )

    async def mark_syncing(self) -> None:
        """Persist the in-progress marker."""
        _LOGGER.debug("Catalog [%s] marking sync in progress", self._catalog.name)
        self.status.set_condition(
            REFRESHED, ConditionStatus.UNKNOWN, message=self._config.syncing_message
        )
        await self._writer.save_catalog_status(self._catalog)

    async def finish(
        self,
        commit: str,
        snapshot: VersionCommitSnapshot,
        create_failures: dict[str, str],
        update_failures: dict[str, str],
        invalid_charts: dict[str, str],
        result: object | None = None,
    ) -> None:
        """Persist the final state of the run.

        Raises:
            HardSyncError: If any template failed to be created or updated.
            SoftSyncError: If only invalid charts were found.
        """
        status = self.status
        status.helm_version_commits = snapshot

        errstrings = []
        if create_failures:
            errstrings.append(
                f"failed to create templates: {_format_errors(create_failures)}"
            )
        if update_failures:
            errstrings.append(
                f"failed to update templates: {_format_errors(update_failures)}"
            )
        if errstrings:
            if invalid_charts:
                errstrings.append(f"Error in chart(s): {_format_errors(invalid_charts)}")
            message = "; ".join(errstrings)
            status.commit = ""
            status.set_condition(
                REFRESHED, ConditionStatus.FALSE, message=message, reason=REASON_ERROR
            )
            status.set_condition(UPGRADED, ConditionStatus.FALSE)
            await self._writer.save_catalog_status(self._catalog)
            _LOGGER.error("Catalog [%s] failed to sync: %s", self._catalog.name, message)
            raise HardSyncError(
                {**create_failures, **update_failures}, message, result
            )

        status.commit = commit
        status.set_condition(UPGRADED, ConditionStatus.TRUE)
        if invalid_charts:
            message = f"Error in chart(s): {_format_errors(invalid_charts)}"
            status.set_condition(
                REFRESHED,
                ConditionStatus.FALSE,
                message=message,
                reason=REASON_IGNORED_ERROR,
            )
            await self._writer.save_catalog_status(self._catalog)
            _LOGGER.error(
                "Catalog [%s] failed to sync templates. Multiple error(s) occurred: %s",
                self._catalog.name,
                message,
            )
            raise SoftSyncError(invalid_charts, message, result)

        status.set_condition(REFRESHED, ConditionStatus.TRUE)
        await self._writer.save_catalog_status(self._catalog)
