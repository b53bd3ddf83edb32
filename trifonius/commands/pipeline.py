"""Pipeline commands: deploy, status and undeploy all processors of a pipeline."""

import asyncio
import logging

from trifonius.commands.common import add_common_arguments, load_processor_registry, load_resource_registry, make_api
from trifonius.pipeline.config import load_pipeline_config
from trifonius.pipeline.pipeline import Pipeline
from trifonius.resource.registry import ResourceRegistry
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)


async def _load_pipeline(args, with_resources: bool) -> Pipeline:
    config = load_pipeline_config(args.pipeline_file)
    target = EngineTarget.from_env()
    api = make_api(args, target)
    resource_registry = await load_resource_registry(args, target, api) if with_resources else ResourceRegistry()
    return Pipeline(config, load_processor_registry(args), target, api, resource_registry)


def handle_pipeline_deploy(args):
    """Handle the pipeline deploy command."""
    asyncio.run(_handle_pipeline_deploy(args))


async def _handle_pipeline_deploy(args):
    pipeline = await _load_pipeline(args, with_resources=True)
    if args.dry_run:
        for service_name, payload in pipeline.deploy_dry_run().items():
            logger.info(f"[dry-run] deployment of {service_name}:")
            logger.info(payload)
        return
    await pipeline.deploy()


def handle_pipeline_status(args):
    """Handle the pipeline status command."""
    asyncio.run(_handle_pipeline_status(args))


async def _handle_pipeline_status(args):
    pipeline = await _load_pipeline(args, with_resources=False)
    for service_name, status in await pipeline.status():
        logger.info(f"{service_name:40} {status}")


def handle_pipeline_undeploy(args):
    """Handle the pipeline undeploy command."""
    asyncio.run(_handle_pipeline_undeploy(args))


async def _handle_pipeline_undeploy(args):
    pipeline = await _load_pipeline(args, with_resources=False)
    for service_name, undeployed in await pipeline.undeploy():
        logger.info(f"{service_name} {'undeployed' if undeployed else 'was not deployed'}")


def register_pipeline_command(subparsers):
    """Register the pipeline subcommand and its actions."""
    parser = subparsers.add_parser("pipeline", help="Deploy and manage pipelines")
    actions = parser.add_subparsers(dest="action", required=True)

    for action, handler, help_text in (
        ("deploy", handle_pipeline_deploy, "Deploy all processors of a pipeline"),
        ("status", handle_pipeline_status, "Show the status of the processors of a pipeline"),
        ("undeploy", handle_pipeline_undeploy, "Undeploy all processors of a pipeline"),
    ):
        action_parser = actions.add_parser(action, help=help_text)
        add_common_arguments(action_parser)
        action_parser.add_argument("pipeline_file", help="Pipeline configuration file (TOML, YAML or JSON)")
        action_parser.set_defaults(func=handler)
