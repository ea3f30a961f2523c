"""Catalog-sync get action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import pathlib
from typing import Any, cast

from . import common
from .format import formatter

_LOGGER = logging.getLogger(__name__)


class GetTemplatesAction:
    """Get details about synced templates."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "templates",
                aliases=["tmpl", "template"],
                help="Get synced templates",
                description="Print information about the templates written by sync",
            ),
        )
        args.add_argument(
            "--state-dir",
            type=pathlib.Path,
            default=pathlib.Path(".catalog-sync"),
            help="Directory holding the synced templates and the catalog status",
        )
        args.add_argument(
            "--namespace",
            "-n",
            default=None,
            help="Only print templates in this namespace",
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
        state_dir,
        namespace,
        output,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        store = common.template_store(state_dir)
        templates = await store.list_templates(namespace)
        if not templates:
            print("No templates found")
            return
        results: list[dict[str, Any]]
        if output == "table":
            results = [
                {
                    "namespace": t.namespace,
                    "name": t.name,
                    "version": t.default_version,
                    "versions": len(t.versions),
                }
                for t in templates
            ]
        else:
            results = [t.to_dict() for t in templates]
        formatter(output, ["namespace", "name", "version", "versions"]).print(results)


class GetStatusAction:
    """Get the persisted status of a catalog."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "status",
                help="Get the status of a catalog",
                description="Print the conditions and commit recorded by the last sync",
            ),
        )
        args.add_argument(
            "--catalog",
            "-c",
            required=True,
            help="Name of the catalog",
        )
        args.add_argument(
            "--state-dir",
            type=pathlib.Path,
            default=pathlib.Path(".catalog-sync"),
            help="Directory holding the synced templates and the catalog status",
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
        catalog,
        state_dir,
        output,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        status = await common.status_writer(state_dir, catalog).load()
        if output != "table":
            formatter(output).print([status.to_dict()])
            return
        print(f"Commit: {status.commit or '<none>'}")
        print(f"Charts: {len(status.helm_version_commits)}")
        formatter(output, ["type", "status", "reason", "message"]).print(
            [
                {
                    "type": c.type,
                    "status": str(c.status),
                    "reason": c.reason or "",
                    "message": c.message or "",
                }
                for c in status.conditions
            ]
        )


class GetAction:
    """Get details about catalog-sync objects."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print information about synced objects",
                description="Print information about synced templates and catalog status.",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        GetTemplatesAction.register(subcmds)
        GetStatusAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args
