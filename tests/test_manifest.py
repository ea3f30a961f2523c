"""Tests for the manifest data model."""

from pathlib import Path

import pytest

from catalog_sync.exceptions import InputException
from catalog_sync.manifest import (
    REFRESHED,
    UPGRADED,
    Catalog,
    CatalogStatus,
    ChartRelease,
    ClusterScope,
    ConditionStatus,
    GlobalScope,
    ProjectScope,
    read_status,
    write_status,
)


def test_catalog_type() -> None:
    assert Catalog(name="library").catalog_type == "catalog"
    assert (
        Catalog(name="c", scope=ClusterScope(namespace="c-1")).catalog_type
        == "clusterCatalog"
    )
    assert (
        Catalog(name="p", scope=ProjectScope(namespace="p-1")).catalog_type
        == "projectCatalog"
    )


def test_global_scope() -> None:
    scope = GlobalScope()
    assert scope.template_namespace("cattle-global-data") == "cattle-global-data"
    owner = scope.owner("library")
    assert owner.fields == {"catalog_id": "library"}
    assert owner.labels == {}


def test_cluster_scope() -> None:
    scope = ClusterScope(namespace="c-1", cluster_id="c-1")
    assert scope.template_namespace("cattle-global-data") == "c-1"
    owner = scope.owner("internal")
    assert owner.fields == {"cluster_catalog_id": "c-1:internal", "cluster_id": "c-1"}
    assert owner.labels == {"c-1-internal": "internal"}
    with pytest.raises(InputException, match="no longer available"):
        scope.owner("")


@pytest.mark.parametrize("project_id", ["", "p-1"])
def test_project_scope_invalid(project_id: str) -> None:
    scope = ProjectScope(namespace="p-1", project_id=project_id)
    with pytest.raises(InputException, match="Project ID"):
        scope.owner("team")


def test_chart_release_parse_doc() -> None:
    entry = ChartRelease.parse_doc(
        {"name": "nginx", "version": 1.0, "digest": "a", "appVersion": 2}
    )
    assert entry.version == "1.0"
    assert entry.app_version == "2"
    assert entry.sources == []
    with pytest.raises(InputException, match="expected mapping"):
        ChartRelease.parse_doc(["nginx"])  # type: ignore[arg-type]


def test_status_conditions() -> None:
    """Setting a condition replaces the previous value of the same type."""
    status = CatalogStatus()
    assert status.refreshed is None
    status.set_condition(REFRESHED, ConditionStatus.UNKNOWN, message="syncing catalog")
    status.set_condition(UPGRADED, ConditionStatus.TRUE)
    status.set_condition(REFRESHED, ConditionStatus.TRUE)
    assert [c.type for c in status.conditions] == [REFRESHED, UPGRADED]
    assert status.is_condition(REFRESHED, ConditionStatus.TRUE)
    assert not status.is_condition(UPGRADED, ConditionStatus.FALSE)
    assert str(status.conditions[0]) == "Refreshed=True"


async def test_read_write_status(tmp_path: Path) -> None:
    status = CatalogStatus(
        commit="abc", helm_version_commits={"nginx": {"1.0": "a", "1.10": "b"}}
    )
    status.set_condition(UPGRADED, ConditionStatus.TRUE)
    path = tmp_path / "status.yaml"
    await write_status(path, status)
    assert await read_status(path) == status


async def test_read_empty_status(tmp_path: Path) -> None:
    path = tmp_path / "status.yaml"
    path.write_text("")
    with pytest.raises(InputException, match="is empty"):
        await read_status(path)
