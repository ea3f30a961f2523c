"""Flags and helpers shared by the catalog-sync commands."""

from argparse import ArgumentParser
import pathlib

from catalog_sync.exceptions import InputException
from catalog_sync.manifest import (
    Catalog,
    CatalogScope,
    ClusterScope,
    GlobalScope,
    ProjectScope,
)
from catalog_sync.repo import LocalChartRepository
from catalog_sync.store import LocalStatusWriter, LocalTemplateStore

SCOPES = ["global", "cluster", "project"]
STATUS_DIR = "status"
TEMPLATES_DIR = "templates"


def add_catalog_flags(args: ArgumentParser) -> None:
    """Add flags identifying the catalog."""
    args.add_argument(
        "--catalog",
        "-c",
        required=True,
        help="Name of the catalog",
    )
    args.add_argument(
        "--scope",
        choices=SCOPES,
        default="global",
        help="Scope of the catalog, cluster and project catalogs need --namespace",
    )
    args.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="Namespace of a cluster or project catalog",
    )
    args.add_argument(
        "--cluster-id",
        default=None,
        help="Cluster owning a cluster catalog",
    )
    args.add_argument(
        "--project-id",
        default=None,
        help="Project owning a project catalog, formatted as `cluster:project`",
    )
    args.add_argument(
        "--state-dir",
        type=pathlib.Path,
        default=pathlib.Path(".catalog-sync"),
        help="Directory holding the synced templates and the catalog status",
    )


def add_repo_flags(args: ArgumentParser) -> None:
    """Add flags identifying the chart repository."""
    args.add_argument(
        "--path",
        type=pathlib.Path,
        default=pathlib.Path("."),
        help="Path to a local chart repository",
    )


def build_scope(
    scope: str,
    namespace: str | None,
    cluster_id: str | None,
    project_id: str | None,
) -> CatalogScope:
    """Return the catalog scope for the command line flags."""
    if scope == "global":
        return GlobalScope()
    if not namespace:
        raise InputException(f"--namespace is required for a {scope} catalog")
    if scope == "cluster":
        if not cluster_id:
            raise InputException("--cluster-id is required for a cluster catalog")
        return ClusterScope(namespace=namespace, cluster_id=cluster_id)
    if not project_id:
        raise InputException("--project-id is required for a project catalog")
    return ProjectScope(namespace=namespace, project_id=project_id)


def status_writer(state_dir: pathlib.Path, catalog: str) -> LocalStatusWriter:
    return LocalStatusWriter(state_dir / STATUS_DIR / f"{catalog}.yaml")


def template_store(state_dir: pathlib.Path) -> LocalTemplateStore:
    return LocalTemplateStore(state_dir / TEMPLATES_DIR)


def chart_repository(path: pathlib.Path) -> LocalChartRepository:
    if not path.is_dir():
        raise InputException(f"Chart repository path {path} is not a directory")
    return LocalChartRepository(path)


async def load_catalog(
    catalog: str,
    scope: str,
    namespace: str | None,
    cluster_id: str | None,
    project_id: str | None,
    state_dir: pathlib.Path,
    helm_version: str | None = None,
) -> tuple[Catalog, LocalStatusWriter]:
    """Return the catalog with its persisted status, and the status writer."""
    writer = status_writer(state_dir, catalog)
    return (
        Catalog(
            name=catalog,
            scope=build_scope(scope, namespace, cluster_id, project_id),
            helm_version=helm_version,
            status=await writer.load(),
        ),
        writer,
    )
