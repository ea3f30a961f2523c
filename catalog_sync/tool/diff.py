"""Catalog-sync diff action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from catalog_sync.sync import CatalogSync, PlannedAction

from . import common
from .format import formatter

_LOGGER = logging.getLogger(__name__)


class DiffAction:
    """Show the changes a sync would apply."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "diff",
                help="Show the template changes a sync would apply",
                description=(
                    "Compare a local chart repository with the snapshot of the last "
                    "sync and print the templates that would be created, updated "
                    "or deleted."
                ),
            ),
        )
        common.add_repo_flags(args)
        common.add_catalog_flags(args)
        args.add_argument(
            "--all",
            "-a",
            dest="show_all",
            action="store_true",
            help="Also print charts that are unchanged",
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
        show_all,
        output,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        catalog_obj, writer = await common.load_catalog(
            catalog, scope, namespace, cluster_id, project_id, state_dir
        )
        engine = CatalogSync(
            catalog_obj,
            common.chart_repository(path),
            common.template_store(state_dir),
            writer,
        )
        changes = [
            change
            for change in await engine.plan()
            if show_all or change.action != PlannedAction.UNCHANGED
        ]
        _LOGGER.debug("Catalog %s has %d planned changes", catalog, len(changes))
        if not changes:
            print(f"Catalog {catalog} has no changes")
            return
        formatter(output, ["chart", "action", "detail"]).print(
            [
                {"chart": c.chart, "action": str(c.action), "detail": c.detail}
                for c in changes
            ]
        )
