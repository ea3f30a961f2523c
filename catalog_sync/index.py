"""Library for reading a chart repository index.

The index is the snapshot of everything an upstream chart repository offers:
a mapping of chart name to its releases, newest first by convention. It is
produced by a `ChartSource` and only ever read by the sync engine.

Example usage:
```python
from catalog_sync import index

snapshot = await index.read_index(Path("charts/index.yaml"))
invalid, valid = index.preprocess(snapshot, "library")
for chart, releases in valid.items():
    print(f"Found chart {chart} with {len(releases)} versions")
```
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from typing import Any

import aiofiles
import yaml

from .builder import template_name
from .exceptions import InputException
from .manifest import BaseManifest, ChartRelease
from .version import is_valid_version

__all__ = [
    "IndexSnapshot",
    "read_index",
    "preprocess",
]

_LOGGER = logging.getLogger(__name__)

# RFC 1123 subdomain, the constraint on resource names in the store
_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
_MAX_NAME_LENGTH = 253


@dataclass
class IndexSnapshot(BaseManifest):
    """An immutable view of a chart repository index."""

    entries: dict[str, list[ChartRelease]] = field(default_factory=dict)
    """Releases of each chart, in the order listed by the index."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "IndexSnapshot":
        """Parse an IndexSnapshot from a helm repository `index.yaml` document."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid index, expected mapping: {doc}")
        entries = doc.get("entries") or {}
        if not isinstance(entries, dict):
            raise InputException(f"Invalid index entries, expected mapping: {entries}")
        result: dict[str, list[ChartRelease]] = {}
        for chart, releases in entries.items():
            if not isinstance(releases, list):
                raise InputException(
                    f"Invalid index entry for chart {chart}, expected list: {releases}"
                )
            result[str(chart)] = [ChartRelease.parse_doc(release) for release in releases]
        return cls(entries=result)

    def __contains__(self, chart: object) -> bool:
        return chart in self.entries


async def read_index(index_path: Path) -> IndexSnapshot:
    """Read and parse a helm repository index file."""
    async with aiofiles.open(str(index_path)) as index_file:
        content = await index_file.read()
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Index {index_path} failed to parse as yaml: {err}") from err
    return IndexSnapshot.parse_doc(doc or {})


def _validate_chart(
    catalog_name: str, chart: str, releases: list[ChartRelease]
) -> str | None:
    """Return a description of why the chart cannot be processed, if any."""
    name = template_name(catalog_name, chart)
    if not name or len(name) > _MAX_NAME_LENGTH or not _NAME_RE.match(name):
        return f"chart {chart}: invalid template name {name!r}"
    if not releases:
        return f"chart {chart}: no versions"
    for release in releases:
        if not is_valid_version(release.version):
            return f"chart {chart}: invalid version {release.version!r}"
        if not release.digest:
            return f"chart {chart}: version {release.version} is missing a digest"
    return None


def preprocess(
    index: IndexSnapshot, catalog_name: str
) -> tuple[dict[str, str], dict[str, list[ChartRelease]]]:
    """Split the index into invalid charts and charts to process.

    Returns a mapping of invalid chart name to error message, and the valid
    entries in index order.
    """
    invalid: dict[str, str] = {}
    valid: dict[str, list[ChartRelease]] = {}
    for chart, releases in index.entries.items():
        if error := _validate_chart(catalog_name, chart, releases):
            _LOGGER.warning("Catalog [%s] skipping invalid %s", catalog_name, error)
            invalid[chart] = error
            continue
        valid[chart] = releases
    return invalid, valid
