"""Registry of the resources available on the target tenant."""

import hashlib
import json
import logging
import os

import yaml

from trifonius.errors import ValidationError
from trifonius.identifiers import ResourceId
from trifonius.resource.types import (
    DshTopicDescriptor,
    DshTopicType,
    ResourceDescriptor,
    ResourceIdentifier,
    ResourceType,
)
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)

_MAX_RESOURCE_ID_LENGTH = 50


def resource_id_from_stream_name(stream_name: str) -> str:
    """Derive a resource id from a datastream or topic name.

    ``stream.foo`` becomes ``stream-foo`` and ``internal.foo.tenant`` becomes
    ``internal-tenant-foo``. Ids that would be too long are shortened and
    suffixed with a hash of the full name.
    """
    parts = stream_name.split(".")
    if len(parts) == 3:
        parts = [parts[0], parts[2], parts[1]]
    resource_id = "-".join(parts).replace("_", "-").lower()
    if len(resource_id) > _MAX_RESOURCE_ID_LENGTH:
        digest = hashlib.sha256(stream_name.encode()).hexdigest()[:16]
        resource_id = f"{resource_id[:33]}-{digest}"
    return resource_id


def _console_url(target: EngineTarget | None, topic_type: DshTopicType) -> str | None:
    if target is None or target.platform.console_url is None:
        return None
    section = "topics" if topic_type == DshTopicType.SCRATCH else "streams"
    return f"{target.platform.console_url}/#/profiles/{target.tenant}/resources/{section}"


def topic_descriptor_from_stream(stream_name: str, stream: dict, target: EngineTarget | None = None) -> ResourceDescriptor:
    """Build a ``dsh-topic`` resource descriptor from one datastreams entry."""
    read = stream.get("read", "") or ""
    write = stream.get("write", "") or ""
    topic_name = write or stream_name
    topic_type = DshTopicType.from_topic_name(topic_name)

    viewer_url = None
    if target is not None:
        app_domain = target.platform.app_domain(target.tenant)
        if app_domain is not None:
            viewer_url = f"https://eavesdropper.{app_domain}?topics={topic_name}"

    return ResourceDescriptor(
        resource_type=ResourceType.DSH_TOPIC,
        id=ResourceId(resource_id_from_stream_name(stream_name)),
        label=stream_name,
        description="DSH Kafka topic",
        readable=bool(read),
        writable=bool(write),
        more_info_url=_console_url(target, topic_type),
        viewer_url=viewer_url,
        topic=DshTopicDescriptor(
            name=stream_name,
            topic=topic_name,
            topic_type=topic_type,
            partitions=int(stream.get("partitions", 1)),
            replication=int(stream.get("replication", 1)),
            read=read,
            write=write,
            gateway_topic=f"{stream_name}.dsh" if topic_type == DshTopicType.STREAM else None,
            partitioner=stream.get("partitioner", "default-partitioner"),
            partitioning_depth=int(stream.get("partitioningDepth", 0)),
            can_retain=bool(stream.get("canRetain", False)),
            cluster=stream.get("cluster", ""),
        ),
    )


def topic_descriptor_from_topic_id(topic_id: str, target: EngineTarget | None = None) -> ResourceDescriptor:
    """Build a ``dsh-topic`` resource descriptor for a tenant scratch topic."""
    topic_name = f"scratch.{topic_id}.{target.tenant}" if target is not None else f"scratch.{topic_id}"
    return topic_descriptor_from_stream(topic_name, {"read": topic_name, "write": topic_name}, target)


class ResourceRegistry:
    """In-memory registry of resource descriptors, keyed by resource identifier."""

    def __init__(self, descriptors=None):
        self._descriptors: dict[ResourceIdentifier, ResourceDescriptor] = {}
        for descriptor in descriptors or []:
            self.add(descriptor)

    def add(self, descriptor: ResourceDescriptor):
        identifier = descriptor.identifier
        if identifier in self._descriptors:
            logger.debug(f"Replacing resource {identifier}")
        self._descriptors[identifier] = descriptor

    def descriptor(self, identifier: ResourceIdentifier) -> ResourceDescriptor | None:
        return self._descriptors.get(identifier)

    def descriptors(self) -> list[ResourceDescriptor]:
        return sorted(self._descriptors.values(), key=lambda d: (d.resource_type.value, d.id))

    def descriptors_by_type(self, resource_type: ResourceType) -> list[ResourceDescriptor]:
        return [d for d in self.descriptors() if d.resource_type == resource_type]

    def resolve_topic(self, identifier: ResourceIdentifier) -> str | None:
        """Topic name that a processor connected to *identifier* should use."""
        descriptor = self._descriptors.get(identifier)
        if descriptor is None or descriptor.topic is None:
            return None
        return descriptor.topic.topic

    def __contains__(self, identifier) -> bool:
        return identifier in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    @classmethod
    def from_datastreams(cls, datastreams: dict, target: EngineTarget | None = None, topic_ids=None) -> "ResourceRegistry":
        """Build a registry from a DSH datastreams document and optional scratch topic ids."""
        registry = cls()
        for stream_name, stream in sorted((datastreams.get("streams") or {}).items()):
            registry.add(topic_descriptor_from_stream(stream.get("name", stream_name), stream, target))
        for topic_id in topic_ids or []:
            registry.add(topic_descriptor_from_topic_id(topic_id, target))
        logger.debug(f"Loaded {len(registry)} resource(s)")
        return registry


def load_datastreams(path: str) -> dict:
    """Read a datastreams document (JSON or YAML)."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Datastreams file not found: {path}")
    with open(path) as f:
        try:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValidationError(f"could not parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"datastreams file {path} does not contain a mapping")
    return data
