"""Apply built templates to the store and prune templates of removed charts.

Create and update failures are returned to the caller to be aggregated, since
they concern a single chart. A failed lookup or delete means the store itself
is in trouble and is raised, stopping the run.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
import logging

from .builder import template_name
from .exceptions import ObjectNotFoundError, StoreError
from .manifest import CatalogTemplate
from .store import TemplateStore

__all__ = [
    "ReconcileOutcome",
    "ReconcileResult",
    "Reconciler",
]

_LOGGER = logging.getLogger(__name__)


class ReconcileOutcome(StrEnum):
    """Result of applying a template to the store."""

    CREATED = "created"
    UPDATED = "updated"
    CREATE_FAILED = "create_failed"
    UPDATE_FAILED = "update_failed"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling a single template."""

    outcome: ReconcileOutcome
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.outcome in (
            ReconcileOutcome.CREATE_FAILED,
            ReconcileOutcome.UPDATE_FAILED,
        )


class Reconciler:
    """Writes the templates of a catalog to the store."""

    def __init__(self, store: TemplateStore) -> None:
        """Initialize Reconciler."""
        self._store = store

    async def reconcile(self, template: CatalogTemplate) -> ReconcileResult:
        """Create the template if it does not exist, otherwise update it."""
        try:
            existing = await self._store.get_template(template.namespace, template.name)
        except ObjectNotFoundError:
            try:
                await self._store.create_template(template)
            except StoreError as err:
                _LOGGER.error(
                    "Failed to create template %s: %s", template.namespaced_name, err
                )
                return ReconcileResult(ReconcileOutcome.CREATE_FAILED, error=str(err))
            return ReconcileResult(ReconcileOutcome.CREATED)

        try:
            await self._store.update_template(existing, template)
        except StoreError as err:
            _LOGGER.error("Failed to update template %s: %s", template.namespaced_name, err)
            return ReconcileResult(ReconcileOutcome.UPDATE_FAILED, error=str(err))
        return ReconcileResult(ReconcileOutcome.UPDATED)

    async def prune(
        self, catalog_name: str, charts: Iterable[str], namespace: str
    ) -> list[str]:
        """Delete the templates of charts no longer in the index.

        Returns the charts whose templates were deleted. Any failure other than the
        template already being gone is raised.
        """
        deleted = []
        for chart in charts:
            name = template_name(catalog_name, chart)
            _LOGGER.debug(
                "Deleting template %s and its associated template versions in namespace %s",
                name,
                namespace,
            )
            try:
                await self._store.delete_template(name, namespace)
            except ObjectNotFoundError:
                _LOGGER.debug("Template %s/%s already deleted", namespace, name)
                continue
            deleted.append(chart)
        return deleted
