"""Ordering policy for chart versions.

Chart versions follow semantic versioning 2.0, as helm requires. A leading
`v` is accepted and a missing minor or patch number defaults to zero, so
`v1.2` parses as `1.2.0`. Build metadata (`+build.1`) never affects ordering.
"""

from semver import Version

__all__ = [
    "parse_version",
    "is_valid_version",
    "can_upgrade",
]


def parse_version(version: str) -> Version:
    """Parse a chart version, raising `ValueError` when it is not semantic."""
    value = version.strip()
    if value[:1] in ("v", "V"):
        value = value[1:]
    return Version.parse(value, optional_minor_and_patch=True)


def is_valid_version(version: str) -> bool:
    if not version:
        return False
    try:
        parse_version(version)
    except ValueError:
        return False
    return True


def can_upgrade(from_version: str, to_version: str) -> bool:
    """Return True if a release at `from_version` can be upgraded in place to `to_version`."""
    try:
        source = parse_version(from_version).replace(build=None)
        target = parse_version(to_version).replace(build=None)
    except ValueError:
        return False
    return source < target
