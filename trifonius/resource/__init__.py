"""Resources that processor junctions can be connected to."""

from trifonius.resource.registry import (
    ResourceRegistry,
    load_datastreams,
    resource_id_from_stream_name,
    topic_descriptor_from_stream,
    topic_descriptor_from_topic_id,
)
from trifonius.resource.types import (
    DshTopicDescriptor,
    DshTopicType,
    ResourceDescriptor,
    ResourceIdentifier,
    ResourceType,
)

__all__ = [
    "DshTopicDescriptor",
    "DshTopicType",
    "ResourceDescriptor",
    "ResourceIdentifier",
    "ResourceRegistry",
    "ResourceType",
    "load_datastreams",
    "resource_id_from_stream_name",
    "topic_descriptor_from_stream",
    "topic_descriptor_from_topic_id",
]
