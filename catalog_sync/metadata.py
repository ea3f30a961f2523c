"""Extract descriptor metadata from the files of each chart release.

A chart release may ship a descriptor file (e.g. `questions.yml`) declaring the
platform versions it is compatible with, the namespace it must be installed
into, its categories and labels:

```yaml
rancher_min_version: 2.3.0
rancher_max_version: 2.5.99
namespace: cattle-monitoring
categories:
  - monitoring
labels:
  io.cattle.role: cluster
```

Descriptors that fail to parse are reported on the `PackageMetadata` rather
than raised, so one malformed chart does not block the rest of the catalog.
"""

from dataclasses import dataclass, field
import logging
from typing import Any

import yaml

from .config import DEFAULT_SUPPORTED_FILES
from .exceptions import InputException
from .manifest import ChartFile, ChartRelease, PackageMetadata, ReleaseMetadata
from .repo import ChartSource

__all__ = [
    "CatalogDescriptor",
    "MetadataExtractor",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class CatalogDescriptor:
    """Fields read from a chart release descriptor file."""

    compat_min: str | None = None
    compat_max: str | None = None
    namespace: str | None = None
    categories: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse_doc(cls, doc: Any) -> "CatalogDescriptor":
        """Parse a descriptor from a yaml document, an empty document is allowed."""
        if doc is None:
            return cls()
        if not isinstance(doc, dict):
            raise InputException(f"expected dictionary but was {type(doc).__name__}")
        categories = doc.get("categories") or []
        if not isinstance(categories, list):
            raise InputException(f"categories must be a list: {categories}")
        labels = doc.get("labels") or {}
        if not isinstance(labels, dict):
            raise InputException(f"labels must be a dictionary: {labels}")
        return cls(
            compat_min=_optional_str(doc.get("rancher_min_version")),
            compat_max=_optional_str(doc.get("rancher_max_version")),
            namespace=_optional_str(doc.get("namespace")),
            categories=[str(category) for category in categories],
            labels={str(k): str(v) for k, v in labels.items()},
        )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


class MetadataExtractor:
    """Reads descriptor files of every release of a chart and merges them."""

    def __init__(
        self,
        source: ChartSource,
        supported_files: tuple[str, ...] = DEFAULT_SUPPORTED_FILES,
    ) -> None:
        """Initialize MetadataExtractor."""
        self._source = source
        self._supported_files = supported_files

    def _candidates(self, chart: str) -> set[str]:
        return {f"{chart}/{filename}".lower() for filename in self._supported_files}

    def _read_descriptor(
        self, chart: str, version: str, files: list[ChartFile], errors: list[str]
    ) -> CatalogDescriptor | None:
        """Return the descriptor from the first supported file that parses."""
        candidates = self._candidates(chart)
        for file in files:
            if file.name.lower() not in candidates:
                continue
            try:
                return CatalogDescriptor.parse_doc(yaml.safe_load(file.contents))
            except (yaml.YAMLError, InputException) as err:
                _LOGGER.debug(
                    "Chart %s version %s descriptor %s is invalid: %s",
                    chart,
                    version,
                    file.name,
                    err,
                )
                errors.append(f"chart {chart} version {version} file {file.name}: {err}")
        return None

    async def extract(
        self, chart: str, releases: list[ChartRelease]
    ) -> PackageMetadata:
        """Return the metadata of every release of the chart.

        Errors fetching the release files propagate to the caller.
        """
        package = PackageMetadata(name=chart, releases=[])
        for release in releases:
            metadata = ReleaseMetadata(
                version=release.version,
                digest=release.digest,
                description=release.description,
                sources=list(release.sources),
                required_namespace=release.namespace_hint,
                kube_version=release.kube_version,
                storage_dir=release.dir,
                storage_name=release.name,
                storage_urls=list(release.urls),
            )
            files = await self._source.fetch_local_files(release)
            if descriptor := self._read_descriptor(
                chart, release.version, files, package.errors
            ):
                metadata.compat_min = descriptor.compat_min
                metadata.compat_max = descriptor.compat_max
                if descriptor.namespace:
                    metadata.required_namespace = descriptor.namespace
                metadata.categories = set(descriptor.categories)
                metadata.labels = dict(descriptor.labels)
                package.labels.update(descriptor.labels)
                package.categories.update(descriptor.categories)
            package.releases.append(metadata)
        return package
