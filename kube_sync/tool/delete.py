"""Kube-sync delete action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from kube_sync import kinds

from . import common

_LOGGER = logging.getLogger(__name__)


class DeleteAction:
    """Delete an object and its dependents."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "delete",
                help="Delete an object from the cluster",
                description="""Delete an object using foreground propagation so
                    that its dependents are removed first.""",
            ),
        )
        args.add_argument("kind", help="Kind of the object, e.g. StatefulSet or sts")
        args.add_argument("name", help="Name of the object")
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
        _LOGGER.debug("Deleting %s %s", desc.kind, name)
        services = common.build_services(namespace=namespace, **kwargs)
        try:
            await services.for_kind(desc).delete(
                common.resolve_namespace(namespace), name
            )
        finally:
            await services.close()
        print(f"{desc.kind.lower()}/{name} deleted")
