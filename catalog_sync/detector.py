"""Detect which charts changed since the last sync.

Each chart is compared against the version to digest map persisted by the
previous run. A chart is changed when a version is new, when a digest differs,
or when a version disappeared upstream.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

from .manifest import ChartRelease, VersionCommits, VersionCommitSnapshot

__all__ = [
    "ChangeResult",
    "detect",
    "removed_packages",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeResult:
    """Outcome of comparing a chart against the previous snapshot."""

    changed: bool
    """True when the chart must be regenerated."""

    version_count_delta: int
    """Number of previously seen versions that are no longer listed."""

    versions: VersionCommits = field(default_factory=dict)
    """The version to digest map to persist for this chart."""


def detect(
    releases: Iterable[ChartRelease], previous: VersionCommits | None
) -> ChangeResult:
    """Compare the releases of a chart with the digests seen by the last run."""
    previous = previous or {}
    versions: VersionCommits = {}
    changed = False
    matched = 0
    for release in releases:
        versions[release.version] = release.digest
        digest = previous.get(release.version)
        if digest is None or digest != release.digest:
            changed = True
        if digest is not None:
            matched += 1
    # A version was removed upstream. This compares counts rather than
    # membership, an added version always marks the chart changed above.
    delta = len(previous) - matched
    if delta != 0:
        _LOGGER.debug("%d previously synced versions no longer listed", delta)
        changed = True
    return ChangeResult(changed=changed, version_count_delta=delta, versions=versions)


def removed_packages(
    charts: Iterable[str], snapshot: VersionCommitSnapshot
) -> list[str]:
    """Return charts present in the snapshot but no longer listed upstream."""
    current = set(charts)
    return [chart for chart in snapshot if chart not in current]
