"""Flags and helpers shared by the kube-sync actions."""

from argparse import ArgumentParser
from typing import Any

from kube_sync.config import ClientConfig, DEFAULT_NAMESPACE
from kube_sync.service import Services


def add_namespace_flag(args: ArgumentParser) -> None:
    """Add the namespace flag to a subcommand."""
    args.add_argument(
        "--namespace",
        "-n",
        type=str,
        default=None,
        help=f"Namespace of the objects (default: {DEFAULT_NAMESPACE})",
    )


def build_services(
    kubeconfig: str | None = None,
    context: str | None = None,
    namespace: str | None = None,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> Services:
    """Create the services for the cluster selected on the command line."""
    config = ClientConfig(
        kubeconfig=kubeconfig,
        context=context,
        namespace=namespace or DEFAULT_NAMESPACE,
    )
    return Services.from_config(config)


def resolve_namespace(namespace: str | None) -> str:
    """Return the namespace to use for a command."""
    return namespace or DEFAULT_NAMESPACE
