"""Helpers shared by the CLI commands: target, registries and argument parsing."""

import logging
import os

from trifonius.errors import ValidationError
from trifonius.platform.api import DshApiClient
from trifonius.processor.registry import ProcessorRegistry
from trifonius.resource.registry import ResourceRegistry, load_datastreams
from trifonius.resource.types import ResourceIdentifier
from trifonius.target import ENV_DATASTREAMS_FILE, EngineTarget, config_dir

logger = logging.getLogger(__name__)


def add_common_arguments(parser):
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Configuration directory (default: $TRIFONIUS_CONFIG_DIR or ./config)",
    )
    parser.add_argument(
        "--datastreams",
        default=None,
        help="Datastreams file (JSON or YAML) describing the tenant's topics (default: $TRIFONIUS_DATASTREAMS_FILE)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent to the platform without sending it",
    )


def load_processor_registry(args) -> ProcessorRegistry:
    return ProcessorRegistry.from_config_dir(args.config_dir or config_dir())


async def load_resource_registry(args, target: EngineTarget, api: DshApiClient) -> ResourceRegistry:
    """Resources from the datastreams file plus, unless dry-running, the tenant's scratch topics."""
    path = args.datastreams or os.environ.get(ENV_DATASTREAMS_FILE)
    datastreams = load_datastreams(path) if path else {}
    topic_ids = [] if api.dry_run else await api.list_topic_ids()
    return ResourceRegistry.from_datastreams(datastreams, target, topic_ids)


def make_api(args, target: EngineTarget) -> DshApiClient:
    return DshApiClient(target, dry_run=getattr(args, "dry_run", False))


def parse_key_values(values, option: str) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` arguments."""
    result = {}
    for value in values or []:
        key, sep, val = value.partition("=")
        if not sep or not key:
            raise ValidationError(f"invalid {option} argument '{value}', expected KEY=VALUE")
        result[key.strip()] = val
    return result


def parse_bindings(values, option: str) -> dict[str, list[ResourceIdentifier]]:
    """Parse repeated ``JUNCTION=RESOURCE[,RESOURCE...]`` arguments."""
    bindings: dict[str, list[ResourceIdentifier]] = {}
    for junction, resources in parse_key_values(values, option).items():
        identifiers = [ResourceIdentifier.parse(r.strip()) for r in resources.split(",") if r.strip()]
        bindings.setdefault(junction, []).extend(identifiers)
    return bindings
