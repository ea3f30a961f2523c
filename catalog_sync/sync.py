"""Synchronize the templates of a catalog with its chart repository index.

A sync run compares the current index against the version snapshot persisted
by the previous run, rebuilds the templates of charts that changed, creates or
updates them in the store, deletes the templates of charts that disappeared,
and records the outcome on the catalog status.

Example usage:
```python
from catalog_sync.sync import CatalogSync

catalog = Catalog(name="library", status=await status_writer.load())
engine = CatalogSync(catalog, LocalChartRepository(path), store, status_writer)
try:
    result = await engine.sync()
except SoftSyncError as err:
    print(f"Some charts are invalid: {err.invalid_charts}")
```

A run for a catalog must not overlap with another run for the same catalog.
"""

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
import logging

from .builder import TemplateBuilder, template_name
from .config import SyncConfig
from .context import trace_collector, trace_context
from .detector import detect, removed_packages
from .exceptions import ObjectNotFoundError, SyncCancelledError
from .index import preprocess
from .manifest import Catalog, VersionCommitSnapshot
from .metadata import MetadataExtractor
from .reconciler import ReconcileOutcome, Reconciler
from .repo import ChartSource
from .status import StatusTracker
from .store import CatalogStatusWriter, TemplateStore

__all__ = [
    "CatalogSync",
    "SyncResult",
    "PlannedAction",
    "PlannedChange",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Summary of a sync run."""

    catalog: str
    """Name of the catalog synced."""

    commit: str
    """Revision of the index the run was computed from."""

    up_to_date: bool = False
    """True when the commit was already applied and nothing was done."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    """Charts unchanged since the last run."""

    create_failures: dict[str, str] = field(default_factory=dict)
    update_failures: dict[str, str] = field(default_factory=dict)
    invalid: dict[str, str] = field(default_factory=dict)
    """Charts with invalid index entries or descriptor files."""

    snapshot: VersionCommitSnapshot = field(default_factory=dict)
    """The version snapshot persisted by the run."""

    timings: dict[str, float] = field(default_factory=dict)
    """Seconds spent in each phase of the run."""

    @property
    def failed(self) -> dict[str, str]:
        """Charts whose template failed to be created or updated."""
        return {**self.create_failures, **self.update_failures}


class PlannedAction(StrEnum):
    """What a sync would do to the template of a chart."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UNCHANGED = "unchanged"
    INVALID = "invalid"


@dataclass(frozen=True)
class PlannedChange:
    """A change a sync would apply."""

    chart: str
    action: PlannedAction
    detail: str = ""


def _check_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise SyncCancelledError("Sync cancelled before all templates were applied")


class CatalogSync:
    """Runs syncs for a single catalog.

    All collaborators are passed in, the engine keeps no state between runs
    other than what is persisted on the catalog status.
    """

    def __init__(
        self,
        catalog: Catalog,
        source: ChartSource,
        store: TemplateStore,
        status_writer: CatalogStatusWriter,
        config: SyncConfig | None = None,
    ) -> None:
        """Initialize CatalogSync."""
        self._catalog = catalog
        self._source = source
        self._store = store
        self._config = config or SyncConfig()
        self._tracker = StatusTracker(catalog, status_writer, self._config)
        self._extractor = MetadataExtractor(source, self._config.supported_files)
        self._reconciler = Reconciler(store)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    async def plan(self) -> list[PlannedChange]:
        """Return the changes a sync would apply, without writing anything."""
        catalog = self._catalog
        index = await self._source.load_index()
        namespace = TemplateBuilder(catalog, self._config).namespace
        previous = catalog.status.helm_version_commits
        all_updates = self._tracker.has_all_updates()
        invalid, entries = preprocess(index, catalog.name)

        changes = []
        for chart, releases in entries.items():
            change = detect(releases, previous.get(chart))
            detail = f"{len(change.versions)} versions"
            if change.version_count_delta:
                detail += f", {change.version_count_delta} removed"
            if not change.changed and all_updates:
                changes.append(PlannedChange(chart, PlannedAction.UNCHANGED, detail))
                continue
            try:
                await self._store.get_template(namespace, template_name(catalog.name, chart))
            except ObjectNotFoundError:
                changes.append(PlannedChange(chart, PlannedAction.CREATE, detail))
            else:
                changes.append(PlannedChange(chart, PlannedAction.UPDATE, detail))
        for chart in removed_packages(index.entries.keys(), previous):
            changes.append(PlannedChange(chart, PlannedAction.DELETE))
        for chart, error in invalid.items():
            changes.append(PlannedChange(chart, PlannedAction.INVALID, error))
        return changes

    async def sync(
        self, commit: str | None = None, cancel: asyncio.Event | None = None
    ) -> SyncResult:
        """Run a sync of the catalog.

        Args:
            commit: Revision of the index, read from the source when not given.
            cancel: When set, the run stops before its next store write.

        Raises:
            HardSyncError: Templates failed to be created or updated.
            SoftSyncError: Charts are invalid upstream, everything else was applied.
            SyncCancelledError: The run was cancelled, no final status was persisted.
        """
        if commit is None:
            commit = await self._source.commit()
        result = SyncResult(catalog=self._catalog.name, commit=commit)
        with trace_collector() as collector:
            try:
                with trace_context(f"Sync {self._catalog.name}"):
                    await self._run(commit, cancel, result)
            finally:
                result.timings = dict(collector.timings)
        return result

    async def _run(
        self, commit: str, cancel: asyncio.Event | None, result: SyncResult
    ) -> None:
        catalog = self._catalog
        if self._tracker.is_up_to_date(commit):
            _LOGGER.debug(
                "Stopping catalog [%s] update, catalog already up to date", catalog.name
            )
            result.up_to_date = True
            result.snapshot = dict(catalog.status.helm_version_commits)
            return

        with trace_context("Load index"):
            index = await self._source.load_index()

        if self._tracker.needs_sync_marker():
            await self._tracker.mark_syncing()

        builder = TemplateBuilder(catalog, self._config)
        previous = catalog.status.helm_version_commits
        all_updates = self._tracker.has_all_updates()
        invalid, entries = preprocess(index, catalog.name)
        result.invalid.update(invalid)

        snapshot: VersionCommitSnapshot = {}
        for chart, releases in entries.items():
            change = detect(releases, previous.get(chart))
            snapshot[chart] = change.versions
            if not change.changed and all_updates:
                _LOGGER.debug(
                    "chart %s has not been changed. Skipping generating templates for it",
                    chart,
                )
                result.skipped.append(chart)
                continue

            with trace_context(f"Build {chart}"):
                package = await self._extractor.extract(chart, releases)
                icon_filename, icon_url = await self._source.icon(releases)
                template = builder.build(package, icon_filename, icon_url)
            if package.errors:
                # Kept in the snapshot so the template is pruned once the chart
                # is removed, a fixed descriptor changes the digest
                result.invalid[chart] = "; ".join(package.errors)

            _check_cancelled(cancel)
            _LOGGER.debug("Catalog [%s] found chart template for [%s]", catalog.name, chart)
            with trace_context(f"Reconcile {chart}"):
                reconciled = await self._reconciler.reconcile(template)
            if reconciled.outcome == ReconcileOutcome.CREATED:
                result.created.append(chart)
            elif reconciled.outcome == ReconcileOutcome.UPDATED:
                result.updated.append(chart)
            elif reconciled.outcome == ReconcileOutcome.CREATE_FAILED:
                result.create_failures[chart] = reconciled.error or "unknown error"
            else:
                result.update_failures[chart] = reconciled.error or "unknown error"
            if reconciled.failed:
                snapshot.pop(chart, None)

        _check_cancelled(cancel)
        with trace_context("Prune"):
            result.deleted = await self._reconciler.prune(
                catalog.name,
                removed_packages(index.entries.keys(), previous),
                builder.namespace,
            )

        result.snapshot = snapshot
        _LOGGER.info(
            "Catalog sync done. %d templates created, %d templates updated, "
            "%d templates deleted, %d templates failed",
            len(result.created),
            len(result.updated),
            len(result.deleted),
            len(result.failed) + len(result.invalid),
        )
        await self._tracker.finish(
            commit,
            snapshot,
            result.create_failures,
            result.update_failures,
            result.invalid,
            result,
        )
