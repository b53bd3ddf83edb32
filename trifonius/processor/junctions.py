"""Junction binding: reduce the resources bound to each junction to one value."""

import logging

from trifonius.errors import CardinalityViolation, MissingRequiredJunction, UnknownResource, WrongResourceType
from trifonius.identifiers import JunctionId
from trifonius.processor.types import JunctionConfig, JunctionDirection
from trifonius.resource.types import ResourceIdentifier

logger = logging.getLogger(__name__)


def resolve_junction(
    direction: JunctionDirection,
    junction_id: JunctionId,
    junction_config: JunctionConfig,
    resources: list[ResourceIdentifier],
    resource_registry,
) -> str:
    """Validate the resources bound to one junction and join their topics."""
    allowed = sorted(t.value for t in junction_config.allowed_resource_types)
    for resource in resources:
        if resource.resource_type not in junction_config.allowed_resource_types:
            raise WrongResourceType(str(resource), str(direction), junction_id, allowed)

    minimum, maximum = junction_config.range
    if len(resources) < minimum or (maximum is not None and len(resources) > maximum):
        raise CardinalityViolation(str(direction), junction_id, len(resources), minimum, maximum)

    topics = []
    for resource in resources:
        topic = resource_registry.resolve_topic(resource)
        if topic is None:
            raise UnknownResource(str(resource), str(direction), junction_id)
        topics.append(topic)
    return junction_config.separator.join(topics)


def resolve_junctions(
    direction: JunctionDirection,
    bindings: dict[JunctionId, list[ResourceIdentifier]],
    junction_configs: dict[JunctionId, JunctionConfig],
    resource_registry,
) -> dict[JunctionId, str]:
    """Resolve every declared junction of one direction.

    A junction without a binding entry is only accepted when it can have no
    connections at all (minimum and maximum both 0); it is then left out of the
    result. A junction bound to an empty list goes through the cardinality check
    and resolves to an empty string. Bindings for junctions that are not declared
    are not looked at.

    Args:
        resource_registry: anything with ``resolve_topic(identifier) -> str | None``.
    """
    resolved = {}
    for junction_id, junction_config in sorted(junction_configs.items()):
        if junction_id not in bindings:
            if junction_config.range != (0, 0):
                raise MissingRequiredJunction(str(direction), junction_id)
            continue
        resources = bindings[junction_id]
        resolved[junction_id] = resolve_junction(direction, junction_id, junction_config, resources, resource_registry)
        logger.debug(f"{direction} junction {junction_id} -> {resolved[junction_id]}")
    return resolved
