"""Kube-sync get, list and pods actions."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from kube_sync import kinds
from kube_sync.exceptions import InputException
from kube_sync.manifest import KubeObject
from kube_sync.service import WorkloadService

from . import common
from .format import TableFormatter, formatter

_LOGGER = logging.getLogger(__name__)


def _row(obj: KubeObject) -> dict[str, Any]:
    return {
        "namespace": obj.namespace,
        "name": obj.name,
        "resource_version": obj.resource_version,
    }


class GetAction:
    """Print a single object."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print an object from the cluster",
                description="Fetch a single object and print it as yaml or json",
            ),
        )
        args.add_argument("kind", help="Kind of the object, e.g. StatefulSet or sts")
        args.add_argument("name", help="Name of the object")
        common.add_namespace_flag(args)
        args.add_argument(
            "--output",
            "-o",
            choices=["yaml", "json"],
            default="yaml",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        kind: str,
        name: str,
        namespace: str | None,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        desc = kinds.lookup(kind)
        services = common.build_services(namespace=namespace, **kwargs)
        try:
            obj = await services.for_kind(desc).get(
                common.resolve_namespace(namespace), name
            )
        finally:
            await services.close()
        formatter(output).print(obj.to_doc())


class ListAction:
    """Print a table of the objects of a kind."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "list",
                aliases=["ls"],
                help="List objects of a kind",
                description="Print the name and resource version of every object",
            ),
        )
        args.add_argument("kind", help="Kind of the objects, e.g. ConfigMap or cm")
        common.add_namespace_flag(args)
        args.add_argument(
            "--selector",
            "-l",
            default=None,
            help="Label selector to filter on, e.g. app=redis",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        kind: str,
        namespace: str | None,
        selector: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        desc = kinds.lookup(kind)
        _LOGGER.debug("Listing %s with selector %s", desc.kind, selector)
        services = common.build_services(namespace=namespace, **kwargs)
        try:
            objects = await services.for_kind(desc).list(
                common.resolve_namespace(namespace), label_selector=selector
            )
        finally:
            await services.close()
        if not objects:
            print(f"No {desc.kind} objects found")
            return
        cols = ["name", "resource_version"]
        if desc.namespaced:
            cols.insert(0, "namespace")
        TableFormatter(cols).print([_row(obj) for obj in objects])


class PodsAction:
    """Print the pods governed by a StatefulSet or Deployment."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "pods",
                help="List the pods of a StatefulSet or Deployment",
                description="""List the pods selected by the match labels of a
                    StatefulSet or Deployment.""",
            ),
        )
        args.add_argument("kind", help="StatefulSet or Deployment")
        args.add_argument("name", help="Name of the workload")
        common.add_namespace_flag(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        kind: str,
        name: str,
        namespace: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        desc = kinds.lookup(kind)
        services = common.build_services(namespace=namespace, **kwargs)
        try:
            service = services.for_kind(desc)
            if not isinstance(service, WorkloadService):
                raise InputException(f"{desc.kind} does not govern pods")
            pods = await service.get_pods(common.resolve_namespace(namespace), name)
        finally:
            await services.close()
        if not pods:
            print(f"No pods found for {desc.kind} {name}")
            return
        TableFormatter(["name", "phase"]).print(
            [
                {"name": pod.name, "phase": (pod.body.get("status") or {}).get("phase")}
                for pod in pods
            ]
        )
