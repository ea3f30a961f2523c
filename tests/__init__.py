"""Test helpers for catalog-sync."""

import copy

from catalog_sync.exceptions import StoreError
from catalog_sync.index import IndexSnapshot
from catalog_sync.manifest import CatalogTemplate, ChartFile, ChartRelease
from catalog_sync.repo import ChartSource
from catalog_sync.store import InMemoryTemplateStore


def release(chart: str, version: str, digest: str | None = None, **kwargs) -> ChartRelease:  # type: ignore[no-untyped-def]
    """Return an index entry with a digest derived from the version by default."""
    return ChartRelease(
        name=chart,
        version=version,
        digest=digest if digest is not None else f"sha-{chart}-{version}",
        **kwargs,
    )


class FakeChartSource(ChartSource):
    """A chart source serving an index and release files held in memory."""

    def __init__(
        self,
        entries: dict[str, list[ChartRelease]] | None = None,
        revision: str = "rev-1",
    ) -> None:
        self.entries = entries or {}
        self.revision = revision
        self.files: dict[tuple[str, str], list[ChartFile]] = {}
        self.fetch_errors: dict[str, Exception] = {}
        self.fetched: list[tuple[str, str]] = []

    def add_file(self, chart: str, version: str, path: str, contents: str) -> None:
        self.files.setdefault((chart, version), []).append(
            ChartFile(name=f"{chart}/{path}", contents=contents)
        )

    async def load_index(self) -> IndexSnapshot:
        return IndexSnapshot(entries=copy.deepcopy(self.entries))

    async def fetch_local_files(self, release: ChartRelease) -> list[ChartFile]:
        if (err := self.fetch_errors.get(release.name)) is not None:
            raise err
        self.fetched.append((release.name, release.version))
        return list(self.files.get((release.name, release.version), []))

    async def icon(self, releases: list[ChartRelease]) -> tuple[str, str]:
        for entry in releases:
            if entry.icon:
                return (entry.icon.rsplit("/", 1)[-1], entry.icon)
        return ("", "")

    async def commit(self) -> str:
        return self.revision


class FlakyTemplateStore(InMemoryTemplateStore):
    """An in-memory store that fails writes for selected template names."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_create: set[str] = set()
        self.fail_update: set[str] = set()
        self.get_errors: dict[str, Exception] = {}
        self.delete_errors: dict[str, Exception] = {}
        self.writes: list[tuple[str, str]] = []

    async def get_template(self, namespace: str, name: str) -> CatalogTemplate:
        if (err := self.get_errors.get(name)) is not None:
            raise err
        return await super().get_template(namespace, name)

    async def create_template(self, template: CatalogTemplate) -> None:
        self.writes.append(("create", template.name))
        if template.name in self.fail_create:
            raise StoreError(f"create of {template.name} rejected")
        await super().create_template(template)

    async def update_template(
        self, existing: CatalogTemplate, template: CatalogTemplate
    ) -> None:
        self.writes.append(("update", template.name))
        if template.name in self.fail_update:
            raise StoreError(f"update of {template.name} rejected")
        await super().update_template(existing, template)

    async def delete_template(self, name: str, namespace: str) -> None:
        self.writes.append(("delete", name))
        if (err := self.delete_errors.get(name)) is not None:
            raise err
        await super().delete_template(name, namespace)
