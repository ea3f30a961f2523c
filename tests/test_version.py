"""Tests for the version ordering policy."""

import pytest

from catalog_sync.version import can_upgrade, is_valid_version, parse_version


@pytest.mark.parametrize(
    ("from_version", "to_version", "expected"),
    [
        ("1.0.0", "1.1.0", True),
        ("1.1.0", "1.0.0", False),
        ("1.0.0", "1.0.0", False),
        ("1.9.0", "1.10.0", True),
        ("v1.0.0", "2.0.0", True),
        ("1.0.0-rc.1", "1.0.0", True),
        ("0.1.0-rancher1", "0.1.0-rancher2", True),
        ("0.2.0-SNAPSHOT", "0.2.0", True),
        ("1.0.0-alpha", "1.0.0-alpha.1", True),
        ("1.0.0+b1", "1.0.0+b2", False),
        ("1.0.0+b2", "1.0.1+b1", True),
        ("not-a-version", "1.0.0", False),
    ],
)
def test_can_upgrade(from_version: str, to_version: str, expected: bool) -> None:
    """Versions upgrade to strictly greater semantic versions only."""
    assert can_upgrade(from_version, to_version) == expected


@pytest.mark.parametrize(
    ("version", "expected"),
    [
        ("1.0.0", True),
        ("v2.3.4", True),
        ("0.1.0-alpha.1", True),
        ("0.1.0-rancher1", True),
        ("0.2.0-SNAPSHOT", True),
        ("1.0.0+build.5", True),
        ("1.2", True),
        ("", False),
        ("latest", False),
        ("1.0.0.0", False),
    ],
)
def test_is_valid_version(version: str, expected: bool) -> None:
    assert is_valid_version(version) == expected


def test_parse_version() -> None:
    assert str(parse_version("v1.2")) == "1.2.0"
    assert str(parse_version(" 0.1.0-rancher1 ")) == "0.1.0-rancher1"
