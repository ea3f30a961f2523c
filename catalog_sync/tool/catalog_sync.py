"""Command line tool for syncing catalog templates with a chart repository."""

import argparse
import asyncio
import logging
import sys
import traceback
from typing import Any

import yaml

from catalog_sync.exceptions import CatalogSyncException, SoftSyncError
from . import diff, get, sync

_LOGGER = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_INVALID_CHARTS = 2


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for syncing catalog templates.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    sync.SyncAction.register(subparsers)
    diff.DiffAction.register(subparsers)
    get.GetAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Catalog-sync command line tool main entry point."""

    def str_presenter(dumper: yaml.Dumper, data: Any) -> Any:
        """Represent multi-line yaml strings as block scalars."""
        return dumper.represent_scalar(
            "tag:yaml.org,2002:str", data, style="|" if data.count("\n") > 0 else None
        )

    yaml.add_representer(str, str_presenter)

    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except SoftSyncError as err:
        print("catalog-sync warning: ", err, file=sys.stderr)
        sys.exit(EXIT_INVALID_CHARTS)
    except CatalogSyncException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("catalog-sync error: ", err, file=sys.stderr)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
