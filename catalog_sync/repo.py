"""Sources of chart repository content consumed by the sync engine.

A `ChartSource` provides the index snapshot, the local files of each release
(used to read descriptor files), the chart icon and the revision identifier of
the content. The engine treats every error raised here as a hard failure.

`LocalChartRepository` reads a chart repository checked out on local disk. It
uses `index.yaml` at the root of the repository when present, otherwise it
builds the index by walking the `charts/<chart>/<version>/` directory layout:

```
charts/
  nginx/
    1.0.0/
      Chart.yaml
      questions.yml
      templates/...
```
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import hashlib
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlparse

import aiofiles
import git
import yaml
from semver import Version

from .exceptions import InputException
from .index import IndexSnapshot, read_index
from .manifest import ChartFile, ChartRelease
from .version import parse_version

__all__ = [
    "ChartSource",
    "LocalChartRepository",
]

_LOGGER = logging.getLogger(__name__)

INDEX_FILE = "index.yaml"
CHARTS_DIR = "charts"
CHART_FILE = "Chart.yaml"
ICON_SCHEMES = {"", "http", "https", "file"}


class ChartSource(ABC):
    """Provides the content of a chart repository."""

    @abstractmethod
    async def load_index(self) -> IndexSnapshot:
        """Return the current index of the repository."""

    @abstractmethod
    async def fetch_local_files(self, release: ChartRelease) -> list[ChartFile]:
        """Return the files of a chart release, named `<chart>/<path>`."""

    @abstractmethod
    async def icon(self, releases: list[ChartRelease]) -> tuple[str, str]:
        """Return the icon filename and URL for a chart."""

    @abstractmethod
    async def commit(self) -> str:
        """Return an identifier of the current revision of the repository."""


def _sort_key(version_dir: Path) -> tuple[int, Any]:
    try:
        # Negate the ordering so the newest version sorts first
        return (0, _Descending(parse_version(version_dir.name)))
    except ValueError:
        return (1, version_dir.name)


@dataclass(frozen=True)
class _Descending:
    version: Version

    def __lt__(self, other: "_Descending") -> bool:
        return self.version > other.version


class LocalChartRepository(ChartSource):
    """A chart repository on the local filesystem."""

    def __init__(self, path: Path) -> None:
        """Initialize LocalChartRepository rooted at `path`."""
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def load_index(self) -> IndexSnapshot:
        """Return the index from `index.yaml` or by walking the charts directory."""
        index_path = self._path / INDEX_FILE
        if index_path.exists():
            _LOGGER.debug("Reading index from %s", index_path)
            return await read_index(index_path)
        charts_path = self._path / CHARTS_DIR
        if not charts_path.is_dir():
            raise InputException(
                f"Chart repository {self._path} has no {INDEX_FILE} or {CHARTS_DIR} directory"
            )
        entries: dict[str, list[ChartRelease]] = {}
        for chart_dir in sorted(p for p in charts_path.iterdir() if p.is_dir()):
            # Newest first like a generated helm index, unparseable versions last
            version_dirs = sorted(
                (p for p in chart_dir.iterdir() if p.is_dir()), key=_sort_key
            )
            releases = [
                await self._read_release(chart_dir.name, version_dir)
                for version_dir in version_dirs
            ]
            if releases:
                entries[chart_dir.name] = releases
        _LOGGER.debug("Found %d charts in %s", len(entries), charts_path)
        return IndexSnapshot(entries=entries)

    async def _read_release(self, chart: str, version_dir: Path) -> ChartRelease:
        """Build an index entry from a chart version directory."""
        doc: dict[str, Any] = {}
        chart_file = version_dir / CHART_FILE
        if chart_file.exists():
            async with aiofiles.open(str(chart_file)) as fd:
                content = await fd.read()
            try:
                doc = yaml.safe_load(content) or {}
            except yaml.YAMLError as err:
                raise InputException(
                    f"`{chart_file}` failed to parse as yaml: {err}"
                ) from err
            if not isinstance(doc, dict):
                raise InputException(f"`{chart_file}` was not a dictionary: {doc}")
        release = ChartRelease.parse_doc(
            {
                **doc,
                "name": chart,
                "version": doc.get("version") or version_dir.name,
                "digest": await self._digest(version_dir),
                "dir": str(version_dir.relative_to(self._path)),
            }
        )
        return release

    async def _digest(self, version_dir: Path) -> str:
        """Return a digest over the relative paths and contents of every file."""
        sha = hashlib.sha256()
        for file_path in self._walk(version_dir):
            sha.update(str(file_path.relative_to(version_dir)).encode("utf-8"))
            async with aiofiles.open(str(file_path), mode="rb") as fd:
                sha.update(await fd.read())
        return sha.hexdigest()

    @staticmethod
    def _walk(path: Path) -> list[Path]:
        files = []
        for root, dirs, filenames in os.walk(str(path)):
            dirs.sort()
            files.extend(Path(root) / filename for filename in sorted(filenames))
        return files

    async def fetch_local_files(self, release: ChartRelease) -> list[ChartFile]:
        """Return every file of the release directory."""
        if not release.dir:
            _LOGGER.debug(
                "Chart %s version %s has no local directory",
                release.name,
                release.version,
            )
            return []
        release_path = self._path / release.dir
        if not release_path.is_dir():
            raise InputException(
                f"Chart {release.name} version {release.version} directory {release_path} does not exist"
            )
        files = []
        try:
            for file_path in self._walk(release_path):
                async with aiofiles.open(
                    str(file_path), encoding="utf-8", errors="replace"
                ) as fd:
                    contents = await fd.read()
                relative = PurePosixPath(file_path.relative_to(release_path).as_posix())
                files.append(ChartFile(name=f"{release.name}/{relative}", contents=contents))
        except OSError as err:
            raise InputException(
                f"Failed to read files of chart {release.name} version {release.version}: {err}"
            ) from err
        return files

    async def icon(self, releases: list[ChartRelease]) -> tuple[str, str]:
        """Return the icon of the first release that declares one."""
        for release in releases:
            if not release.icon:
                continue
            parsed = urlparse(release.icon)
            if parsed.scheme not in ICON_SCHEMES:
                raise InputException(
                    f"Chart {release.name} icon {release.icon} has unsupported scheme {parsed.scheme}"
                )
            return (PurePosixPath(parsed.path).name, release.icon)
        return ("", "")

    async def commit(self) -> str:
        """Return the git HEAD of a clean checkout, otherwise a digest of the index."""
        try:
            repo = git.Repo(str(self._path), search_parent_directories=True)
            if not repo.is_dirty(untracked_files=True, path=str(self._path)):
                return repo.head.commit.hexsha
            _LOGGER.debug("Repository %s has local changes", self._path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            _LOGGER.debug("Repository %s is not a git repository", self._path)
        except ValueError as err:
            # Raised for a repository without any commit
            _LOGGER.debug("Repository %s has no HEAD: %s", self._path, err)
        index = await self.load_index()
        sha = hashlib.sha256()
        for chart, releases in sorted(index.entries.items()):
            for release in releases:
                sha.update(f"{chart}/{release.version}={release.digest}\n".encode("utf-8"))
        return sha.hexdigest()
