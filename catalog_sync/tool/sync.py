"""Catalog-sync sync action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from catalog_sync.exceptions import SyncError
from catalog_sync.sync import CatalogSync, SyncResult

from . import common
from .format import formatter

_LOGGER = logging.getLogger(__name__)


def _rows(result: SyncResult) -> list[dict[str, str]]:
    rows = []
    for action, charts in (
        ("created", result.created),
        ("updated", result.updated),
        ("deleted", result.deleted),
        ("unchanged", result.skipped),
    ):
        rows.extend({"chart": chart, "action": action, "error": ""} for chart in charts)
    for chart, error in result.failed.items():
        rows.append({"chart": chart, "action": "failed", "error": error})
    for chart, error in result.invalid.items():
        rows.append({"chart": chart, "action": "invalid", "error": error})
    return rows


class SyncAction:
    """Sync the templates of a catalog with a local chart repository."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "sync",
                help="Sync catalog templates with a chart repository",
                description=(
                    "Create, update and delete the templates of a catalog so they "
                    "match the charts of a local chart repository."
                ),
            ),
        )
        common.add_repo_flags(args)
        common.add_catalog_flags(args)
        args.add_argument(
            "--commit",
            default=None,
            help="Revision of the repository, defaults to the git HEAD",
        )
        args.add_argument(
            "--helm-version",
            default=None,
            help="Helm version recorded on the templates",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=["table", "yaml", "json"],
            default="table",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path,
        catalog,
        scope,
        namespace,
        cluster_id,
        project_id,
        state_dir,
        commit,
        helm_version,
        output,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        source = common.chart_repository(path)
        catalog_obj, writer = await common.load_catalog(
            catalog, scope, namespace, cluster_id, project_id, state_dir, helm_version
        )
        engine = CatalogSync(
            catalog_obj, source, common.template_store(state_dir), writer
        )
        try:
            result = await engine.sync(commit=commit)
        except SyncError as err:
            if isinstance(err.result, SyncResult):
                formatter(output, ["chart", "action", "error"]).print(_rows(err.result))
            raise
        if result.up_to_date:
            print(f"Catalog {catalog} is already up to date at {result.commit}")
            return
        formatter(output, ["chart", "action"]).print(_rows(result))
