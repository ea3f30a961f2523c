"""Persistence of the catalog status between sync runs."""

from abc import ABC, abstractmethod
import copy
import logging
from pathlib import Path

from catalog_sync.exceptions import StoreError
from catalog_sync.manifest import Catalog, CatalogStatus, read_status, write_status

_LOGGER = logging.getLogger(__name__)


class CatalogStatusWriter(ABC):
    """Persists the status of a catalog."""

    @abstractmethod
    async def save_catalog_status(self, catalog: Catalog) -> None:
        """Persist the current status of the catalog."""


class InMemoryStatusWriter(CatalogStatusWriter):
    """Keeps a copy of every status saved, for inspection."""

    def __init__(self) -> None:
        self.history: list[CatalogStatus] = []

    async def save_catalog_status(self, catalog: Catalog) -> None:
        self.history.append(copy.deepcopy(catalog.status))

    @property
    def last(self) -> CatalogStatus | None:
        """The most recently saved status."""
        return self.history[-1] if self.history else None


class LocalStatusWriter(CatalogStatusWriter):
    """Writes the catalog status to a YAML file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    async def load(self) -> CatalogStatus:
        """Return the persisted status, or an empty status for a new catalog."""
        if not self._path.exists():
            _LOGGER.debug("No catalog status at %s", self._path)
            return CatalogStatus()
        return await read_status(self._path)

    async def save_catalog_status(self, catalog: Catalog) -> None:
        _LOGGER.debug("Writing catalog [%s] status to %s", catalog.name, self._path)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            await write_status(self._path, catalog.status)
        except OSError as err:
            raise StoreError(f"Failed to save catalog {catalog.name} status: {err}") from err
