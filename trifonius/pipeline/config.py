"""Pipeline configuration: resources, processors and the connections between them."""

import logging
from dataclasses import dataclass, field

from trifonius.errors import ValidationError
from trifonius.identifiers import JunctionId, PipelineId, ProcessorId, ProfileId, ResourceId
from trifonius.placeholder import CONFIG_TEMPLATE_PLACEHOLDERS, validate_template
from trifonius.processor.config import load_config_file
from trifonius.resource.types import ResourceIdentifier
from trifonius.version import Version

logger = logging.getLogger(__name__)


def _string_map(d) -> dict[str, str]:
    return {str(k): str(v).lower() if isinstance(v, bool) else str(v) for k, v in (d or {}).items()}


@dataclass(frozen=True)
class PipelineResource:
    """A resource used by the pipeline, under a pipeline local id."""

    resource_id: str
    resource_realization: ResourceIdentifier

    @classmethod
    def from_dict(cls, d: dict) -> "PipelineResource":
        if "resource-id" not in d or "resource-realization" not in d:
            raise ValidationError("pipeline resource requires 'resource-id' and 'resource-realization' attributes")
        return cls(
            resource_id=ResourceId.parse(d["resource-id"]),
            resource_realization=ResourceIdentifier.parse(d["resource-realization"]),
        )


@dataclass(frozen=True)
class PipelineProcessor:
    """A processor instance in the pipeline."""

    processor_id: ProcessorId
    processor_realization: str
    parameters: dict[str, str] = field(default_factory=dict)
    profile_id: ProfileId | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "PipelineProcessor":
        if "processor-id" not in d or "processor-realization" not in d:
            raise ValidationError("pipeline processor requires 'processor-id' and 'processor-realization' attributes")
        profile_id = d.get("profile-id")
        return cls(
            processor_id=ProcessorId.parse(d["processor-id"]),
            processor_realization=d["processor-realization"],
            parameters=_string_map(d.get("parameters")),
            profile_id=ProfileId.parse(profile_id) if profile_id is not None else None,
        )


@dataclass(frozen=True)
class ProcessorJunction:
    processor_id: ProcessorId
    junction: JunctionId

    @classmethod
    def from_dict(cls, d: dict) -> "ProcessorJunction":
        if "processor-id" not in d or "junction" not in d:
            raise ValidationError("processor junction requires 'processor-id' and 'junction' attributes")
        return cls(processor_id=ProcessorId.parse(d["processor-id"]), junction=JunctionId.parse(d["junction"]))

    def __str__(self) -> str:
        return f"{self.processor_id}.{self.junction}"


@dataclass(frozen=True)
class PipelineConnection:
    """Connection from resources to a processor junction, or from a processor junction to resources.

    Exactly one side is a processor junction and the other a list of pipeline
    resource ids, except for processor to processor connections.
    """

    source: ProcessorJunction | tuple[str, ...]
    target: ProcessorJunction | tuple[str, ...]

    @classmethod
    def from_dict(cls, d: dict) -> "PipelineConnection":
        if "source" not in d or "target" not in d:
            raise ValidationError("pipeline connection requires 'source' and 'target' attributes")
        source = cls._endpoint(d["source"])
        target = cls._endpoint(d["target"])
        if isinstance(source, tuple) and isinstance(target, tuple):
            raise ValidationError("pipeline connection cannot connect resources to resources")
        return cls(source=source, target=target)

    @staticmethod
    def _endpoint(value):
        if isinstance(value, dict):
            return ProcessorJunction.from_dict(value)
        if isinstance(value, str):
            value = [value]
        return tuple(ResourceId.parse(v) for v in value)


@dataclass(frozen=True)
class PipelineConfig:
    pipeline_id: PipelineId
    version: Version
    name: str
    description: str
    resources: tuple[PipelineResource, ...] = ()
    processors: tuple[PipelineProcessor, ...] = ()
    connections: tuple[PipelineConnection, ...] = ()
    icon: str | None = None
    tags: tuple[str, ...] = ()
    more_info_url: str | None = None
    metrics_url: str | None = None
    viewer_url: str | None = None
    metadata: tuple[tuple[str, str], ...] = ()

    def resource(self, resource_id: str) -> PipelineResource | None:
        return next((r for r in self.resources if r.resource_id == resource_id), None)

    def processor(self, processor_id: str) -> PipelineProcessor | None:
        return next((p for p in self.processors if p.processor_id == processor_id), None)

    def validate(self):
        if not self.name:
            raise ValidationError(f"pipeline '{self.pipeline_id}' name cannot be empty")
        if not self.description:
            raise ValidationError(f"pipeline '{self.pipeline_id}' description cannot be empty")
        for attribute, url in (
            ("more-info-url", self.more_info_url),
            ("metrics-url", self.metrics_url),
            ("viewer-url", self.viewer_url),
        ):
            if url is None:
                continue
            if not url:
                raise ValidationError(f"{attribute} template cannot be empty")
            validate_template(url, CONFIG_TEMPLATE_PLACEHOLDERS)

        resource_ids = [r.resource_id for r in self.resources]
        processor_ids = [p.processor_id for p in self.processors]
        for kind, ids in (("resource", resource_ids), ("processor", processor_ids)):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValidationError(f"pipeline {kind} '{duplicates[0]}' is defined more than once")

        for connection in self.connections:
            for endpoint in (connection.source, connection.target):
                if isinstance(endpoint, ProcessorJunction):
                    if endpoint.processor_id not in processor_ids:
                        raise ValidationError(f"connection references undefined processor '{endpoint.processor_id}'")
                else:
                    for resource_id in endpoint:
                        if resource_id not in resource_ids:
                            raise ValidationError(f"connection references undefined resource '{resource_id}'")

    @classmethod
    def from_dict(cls, d: dict) -> "PipelineConfig":
        for key in ("pipeline-id", "version", "name", "description"):
            if key not in d:
                raise ValidationError(f"pipeline requires a '{key}' attribute")
        config = cls(
            pipeline_id=PipelineId.parse(d["pipeline-id"]),
            version=Version.parse(d["version"]),
            name=d["name"],
            description=d["description"],
            resources=tuple(PipelineResource.from_dict(r) for r in d.get("resources", [])),
            processors=tuple(PipelineProcessor.from_dict(p) for p in d.get("processors", [])),
            connections=tuple(PipelineConnection.from_dict(c) for c in d.get("connections", [])),
            icon=d.get("icon"),
            tags=tuple(d.get("tags", [])),
            more_info_url=d.get("more-info-url"),
            metrics_url=d.get("metrics-url"),
            viewer_url=d.get("viewer-url"),
            metadata=tuple((str(k), str(v)) for k, v in d.get("metadata", [])),
        )
        config.validate()
        return config


def load_pipeline_config(path: str) -> PipelineConfig:
    """Load and validate a pipeline configuration file (TOML, YAML or JSON)."""
    logger.debug(f"Reading pipeline config file: {path}")
    try:
        return PipelineConfig.from_dict(load_config_file(path))
    except ValidationError as e:
        raise ValidationError(f"{path}: {e}") from e
