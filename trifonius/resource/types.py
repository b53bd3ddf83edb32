"""Resource dataclass types."""

from dataclasses import dataclass, field
from enum import Enum

from trifonius.errors import ValidationError
from trifonius.identifiers import ResourceId


class ResourceType(str, Enum):
    DSH_TOPIC = "dsh-topic"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "ResourceType":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"invalid resource type '{value}', expected one of: {', '.join(t.value for t in cls)}"
            ) from None


class DshTopicType(str, Enum):
    INTERNAL = "internal"
    SCRATCH = "scratch"
    STREAM = "stream"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_topic_name(cls, topic_name: str) -> "DshTopicType":
        for topic_type in cls:
            if topic_name.startswith(f"{topic_type.value}."):
                return topic_type
        raise ValidationError(f"could not determine topic type from topic name '{topic_name}'")


@dataclass(frozen=True)
class ResourceIdentifier:
    """Reference to a concrete resource of a given type."""

    resource_type: ResourceType
    id: ResourceId

    @classmethod
    def parse(cls, representation: str) -> "ResourceIdentifier":
        """Parse ``id`` or ``id:type``; the type defaults to ``dsh-topic``."""
        resource_id, _, resource_type = representation.partition(":")
        return cls(
            resource_type=ResourceType.parse(resource_type) if resource_type else ResourceType.DSH_TOPIC,
            id=ResourceId.parse(resource_id),
        )

    def __str__(self) -> str:
        return f"{self.id}:{self.resource_type}"


@dataclass
class DshTopicDescriptor:
    """Kafka topic details of a ``dsh-topic`` resource."""

    name: str
    topic: str
    topic_type: DshTopicType
    partitions: int = 1
    replication: int = 1
    read: str = ""
    write: str = ""
    gateway_topic: str | None = None
    partitioner: str = "default-partitioner"
    partitioning_depth: int = 0
    can_retain: bool = False
    cluster: str = ""

    @property
    def dsh_envelope(self) -> bool:
        return self.topic_type == DshTopicType.STREAM


@dataclass
class ResourceDescriptor:
    """Everything known about a resource that processors can be connected to."""

    resource_type: ResourceType
    id: ResourceId
    label: str
    description: str
    readable: bool = True
    writable: bool = True
    more_info_url: str | None = None
    viewer_url: str | None = None
    topic: DshTopicDescriptor | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(self.resource_type, self.id)
