"""Test fixtures for catalog-sync."""

import pytest

from catalog_sync.manifest import Catalog
from catalog_sync.store import InMemoryStatusWriter
from catalog_sync.sync import CatalogSync

from . import FakeChartSource, FlakyTemplateStore


@pytest.fixture
def source() -> FakeChartSource:
    """Create an empty chart source."""
    return FakeChartSource()


@pytest.fixture
def store() -> FlakyTemplateStore:
    """Create an in-memory template store for testing."""
    return FlakyTemplateStore()


@pytest.fixture
def status_writer() -> InMemoryStatusWriter:
    return InMemoryStatusWriter()


@pytest.fixture
def catalog() -> Catalog:
    """Create a global catalog that was never synced."""
    return Catalog(name="mycatalog")


@pytest.fixture
def engine(
    catalog: Catalog,
    source: FakeChartSource,
    store: FlakyTemplateStore,
    status_writer: InMemoryStatusWriter,
) -> CatalogSync:
    return CatalogSync(catalog, source, store, status_writer)
