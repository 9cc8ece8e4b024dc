"""Kube-sync apply action."""

import logging
import pathlib
import sys
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

import yaml

from kube_sync import kinds
from kube_sync.exceptions import InputException
from kube_sync.manifest import KubeObject

from . import common

_LOGGER = logging.getLogger(__name__)


def read_documents(filename: str) -> list[dict[str, Any]]:
    """Read all yaml documents from a file, or stdin for `-`."""
    try:
        if filename == "-":
            docs = list(yaml.safe_load_all(sys.stdin))
        else:
            docs = list(yaml.safe_load_all(pathlib.Path(filename).read_text()))
    except (OSError, yaml.YAMLError) as err:
        raise InputException(f"Unable to read {filename}: {err}") from err
    results = []
    for doc in docs:
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise InputException(f"Expected a mapping in {filename}, got: {doc}")
        if doc.get("kind") == "List":
            results.extend(doc.get("items") or [])
        else:
            results.append(doc)
    return results


class ApplyAction:
    """Create or update objects from yaml files."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "apply",
                help="Create or update objects from a yaml file",
                description="""Reconcile every object in the file against the
                    cluster: objects that do not exist are created, existing
                    objects are replaced using their latest resource version.""",
            ),
        )
        args.add_argument(
            "--filename",
            "-f",
            required=True,
            help="Yaml file with the objects to apply, or - for stdin",
        )
        common.add_namespace_flag(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        filename: str,
        namespace: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        objects = [KubeObject.parse_doc(doc) for doc in read_documents(filename)]
        _LOGGER.debug("Read %d objects from %s", len(objects), filename)
        services = common.build_services(namespace=namespace, **kwargs)
        try:
            for obj in objects:
                kind = kinds.lookup(obj.kind)
                target_ns = None
                if kind.namespaced:
                    target_ns = obj.namespace or common.resolve_namespace(namespace)
                    obj.namespace = target_ns
                outcome = await services.for_kind(kind).create_or_update(
                    target_ns, obj
                )
                print(f"{kind.kind.lower()}/{obj.name} {outcome.lower()}")
        finally:
            await services.close()
