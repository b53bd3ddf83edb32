"""Processor commands: list, show, deploy, status, undeploy and compatible resources."""

import asyncio
import logging

import yaml

from trifonius.commands.common import (
    add_common_arguments,
    load_processor_registry,
    load_resource_registry,
    make_api,
    parse_bindings,
    parse_key_values,
)
from trifonius.placeholder import template_mapping
from trifonius.processor.descriptor import processor_descriptor
from trifonius.processor.instance import ProcessorInstance
from trifonius.processor.types import ProcessorTechnology
from trifonius.resource.registry import ResourceRegistry
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)


def handle_list(args):
    """Handle the processor list command (no target needed)."""
    registry = load_processor_registry(args)
    technology = ProcessorTechnology(args.technology) if args.technology else None
    configs = registry.configs(technology)
    if not configs:
        logger.info("No processors found.")
        return
    for config in configs:
        identity = config.identity
        logger.info(f"{identity.realization_id:30} {identity.technology.value:12} {str(identity.version):8} {identity.label}")


def handle_show(args):
    """Handle the processor show command."""
    config = load_processor_registry(args).get(args.realization)
    target = EngineTarget.from_env()
    descriptor = processor_descriptor(config, template_mapping(target))
    logger.info(yaml.safe_dump(descriptor.to_dict(), sort_keys=False).rstrip())


def _instances(args, names):
    target = EngineTarget.from_env()
    api = make_api(args, target)
    # status and undeploy only need the deployment name, not the resources
    config = load_processor_registry(args).get(args.realization)
    return [ProcessorInstance(config, name, target, api, ResourceRegistry(), pipeline_id=args.pipeline) for name in names]


def handle_deploy(args):
    """Handle the processor deploy command."""
    asyncio.run(_handle_deploy(args))


async def _handle_deploy(args):
    config = load_processor_registry(args).get(args.realization)
    target = EngineTarget.from_env()
    api = make_api(args, target)
    resource_registry = await load_resource_registry(args, target, api)
    instance = ProcessorInstance(config, args.name, target, api, resource_registry, pipeline_id=args.pipeline)

    kwargs = {
        "inbound": parse_bindings(args.inbound, "--inbound"),
        "outbound": parse_bindings(args.outbound, "--outbound"),
        "parameters": parse_key_values(args.param, "--param"),
        "profile_id": args.profile,
    }
    if args.dry_run:
        logger.info(f"[dry-run] deployment of {instance.service_name}:")
        logger.info(instance.deploy_dry_run(**kwargs))
        return
    await instance.deploy(**kwargs)
    logger.info(f"Deployed {instance.service_name}")


def handle_status(args):
    """Handle the processor status command."""
    asyncio.run(_handle_status(args))


async def _handle_status(args):
    instances = _instances(args, args.names)
    # Results come back in the order of the names, not in completion order
    statuses = await asyncio.gather(*(instance.status() for instance in instances))
    for instance, status in zip(instances, statuses):
        logger.info(f"{instance.service_name:40} {status}")


def handle_undeploy(args):
    """Handle the processor undeploy command."""
    asyncio.run(_handle_undeploy(args))


async def _handle_undeploy(args):
    for instance in _instances(args, args.names):
        if await instance.undeploy():
            logger.info(f"{instance.service_name} undeployed")
        else:
            logger.info(f"{instance.service_name} was not deployed")


def handle_compatible(args):
    """Handle the processor compatible command."""
    asyncio.run(_handle_compatible(args))


async def _handle_compatible(args):
    config = load_processor_registry(args).get(args.realization)
    target = EngineTarget.from_env()
    api = make_api(args, target)
    resource_registry = await load_resource_registry(args, target, api)
    instance = ProcessorInstance(config, config.realization_id, target, api, resource_registry)
    resources = instance.compatible_resources(args.junction)
    if not resources:
        logger.info(f"No resources compatible with junction {args.junction}.")
    for resource in resources:
        logger.info(str(resource))


def register_processor_command(subparsers):
    """Register the processor subcommand and its actions."""
    parser = subparsers.add_parser("processor", help="Show, deploy and manage processors")
    actions = parser.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List processor realizations")
    add_common_arguments(list_parser)
    list_parser.add_argument(
        "--technology",
        choices=[t.value for t in ProcessorTechnology],
        default=None,
        help="Only list processors of this technology",
    )
    list_parser.set_defaults(func=handle_list)

    show_parser = actions.add_parser("show", help="Show a processor realization")
    add_common_arguments(show_parser)
    show_parser.add_argument("realization", help="Processor realization id")
    show_parser.set_defaults(func=handle_show)

    deploy_parser = actions.add_parser("deploy", help="Deploy a processor instance")
    add_common_arguments(deploy_parser)
    deploy_parser.add_argument("realization", help="Processor realization id")
    deploy_parser.add_argument("name", help="Processor id of the new instance")
    deploy_parser.add_argument(
        "--inbound",
        action="append",
        metavar="JUNCTION=RESOURCE[,RESOURCE]",
        help="Bind resources to an inbound junction (repeatable); a resource is ID or ID:TYPE",
    )
    deploy_parser.add_argument(
        "--outbound",
        action="append",
        metavar="JUNCTION=RESOURCE[,RESOURCE]",
        help="Bind resources to an outbound junction (repeatable)",
    )
    deploy_parser.add_argument("--param", action="append", metavar="KEY=VALUE", help="Deployment parameter (repeatable)")
    deploy_parser.add_argument("--profile", default=None, help="Profile id (default: the only profile)")
    deploy_parser.add_argument("--pipeline", default=None, help="Pipeline id the instance belongs to")
    deploy_parser.set_defaults(func=handle_deploy)

    for action, handler, help_text in (
        ("status", handle_status, "Show the status of processor instances"),
        ("undeploy", handle_undeploy, "Undeploy processor instances"),
    ):
        action_parser = actions.add_parser(action, help=help_text)
        add_common_arguments(action_parser)
        action_parser.add_argument("realization", help="Processor realization id")
        action_parser.add_argument("names", nargs="+", help="Processor ids of the instances")
        action_parser.add_argument("--pipeline", default=None, help="Pipeline id the instances belong to")
        action_parser.set_defaults(func=handler)

    compatible_parser = actions.add_parser("compatible", help="List resources compatible with a junction")
    add_common_arguments(compatible_parser)
    compatible_parser.add_argument("realization", help="Processor realization id")
    compatible_parser.add_argument("junction", help="Junction id")
    compatible_parser.set_defaults(func=handle_compatible)
