"""Command line tool for reconciling objects against a kubernetes cluster."""

import argparse
import asyncio
import logging
import sys
import traceback

from kube_sync.exceptions import KubeSyncException
from . import apply, delete, get


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for reconciling objects in a cluster.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )
    parser.add_argument(
        "--kubeconfig",
        default=None,
        help="Path to the kubeconfig file to use",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="The kubeconfig context to use",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    apply.ApplyAction.register(subparsers)
    get.GetAction.register(subparsers)
    get.ListAction.register(subparsers)
    get.PodsAction.register(subparsers)
    delete.DeleteAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Kube-sync command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except KubeSyncException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("kube-sync error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
