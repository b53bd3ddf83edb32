"""Resource command: list the resources processors can be connected to."""

import asyncio
import logging

from trifonius.commands.common import add_common_arguments, load_resource_registry, make_api
from trifonius.resource.types import ResourceType
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)


def handle_resource_list(args):
    """Handle the resource list command."""
    asyncio.run(_handle_resource_list(args))


async def _handle_resource_list(args):
    target = EngineTarget.from_env()
    registry = await load_resource_registry(args, target, make_api(args, target))
    if args.type:
        descriptors = registry.descriptors_by_type(ResourceType.parse(args.type))
    else:
        descriptors = registry.descriptors()
    if not descriptors:
        logger.info("No resources found.")
        return
    for d in descriptors:
        access = ("r" if d.readable else "-") + ("w" if d.writable else "-")
        topic = d.topic.topic if d.topic is not None else ""
        logger.info(f"{str(d.identifier):50} {access} {topic}")


def register_resource_command(subparsers):
    """Register the resource subcommand."""
    parser = subparsers.add_parser("resource", help="List tenant resources")
    actions = parser.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List resources")
    add_common_arguments(list_parser)
    list_parser.add_argument(
        "--type",
        choices=[t.value for t in ResourceType],
        default=None,
        help="Only list resources of this type",
    )
    list_parser.set_defaults(func=handle_resource_list)
