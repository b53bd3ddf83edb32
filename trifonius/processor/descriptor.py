"""Deployment descriptor (the payload sent to the platform) and processor descriptor."""

import logging
from dataclasses import dataclass, field

from trifonius.errors import UnresolvedPlaceholder
from trifonius.placeholder import TemplateMapping, resolve_template
from trifonius.processor.types import (
    AppConfig,
    HealthCheck,
    JunctionDirection,
    Metrics,
    PortMapping,
    ProcessorConfig,
    ProfileConfig,
    Secret,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentDescriptor:
    """Fully resolved deployment of one processor instance."""

    image: str
    cpus: float
    mem: int
    instances: int
    env: dict[str, str] = field(default_factory=dict)
    user: str = ""
    exposed_ports: dict[str, PortMapping] = field(default_factory=dict)
    health_check: HealthCheck | None = None
    metrics: Metrics | None = None
    secrets: tuple[Secret, ...] = ()
    volumes: dict[str, str] = field(default_factory=dict)
    single_instance: bool = False
    needs_token: bool = False
    spread_group: str | None = None

    def to_dict(self) -> dict:
        """Application payload in the platform API's JSON schema."""
        d = {
            "cpus": self.cpus,
            "env": dict(self.env),
            "exposedPorts": {port: _port_mapping_to_dict(m) for port, m in self.exposed_ports.items()},
            "image": self.image,
            "instances": self.instances,
            "mem": self.mem,
            "needsToken": self.needs_token,
            "readableStreams": [],
            "secrets": [{"name": s.name, "injections": [dict(i) for i in s.injections]} for s in self.secrets],
            "singleInstance": self.single_instance,
            "topics": [],
            "user": self.user,
            "volumes": {path: {"name": name} for path, name in self.volumes.items()},
            "writableStreams": [],
        }
        if self.health_check is not None:
            d["healthCheck"] = {"path": self.health_check.path, "port": self.health_check.port}
            if self.health_check.protocol is not None:
                d["healthCheck"]["protocol"] = self.health_check.protocol
        if self.metrics is not None:
            d["metrics"] = {"path": self.metrics.path, "port": self.metrics.port}
        if self.spread_group is not None:
            d["spreadGroup"] = self.spread_group
        return d


def _port_mapping_to_dict(mapping: PortMapping) -> dict:
    d = {"paths": [{"prefix": p} for p in mapping.paths]}
    for key, value in (
        ("auth", mapping.auth),
        ("mode", mapping.mode),
        ("serviceGroup", mapping.service_group),
        ("tls", mapping.tls),
        ("vhost", mapping.vhost),
        ("whitelist", mapping.whitelist),
    ):
        if value is not None:
            d[key] = value
    return d


def build_descriptor(
    config: ProcessorConfig,
    profile: ProfileConfig,
    env: dict[str, str],
    user: str,
    mapping: TemplateMapping,
) -> DeploymentDescriptor:
    """Assemble the deployment descriptor; only the image goes through template resolution."""
    platform = config.platform
    image = resolve_template(platform.image, mapping)
    if isinstance(platform, AppConfig):
        return DeploymentDescriptor(
            image=image,
            cpus=profile.cpus,
            mem=profile.mem,
            instances=profile.instances,
            env=dict(env),
            user=user,
        )
    return DeploymentDescriptor(
        image=image,
        cpus=profile.cpus,
        mem=profile.mem,
        instances=profile.instances,
        env=dict(env),
        user=user,
        exposed_ports=dict(platform.exposed_ports),
        health_check=platform.health_check,
        metrics=platform.metrics,
        secrets=tuple(platform.secrets),
        volumes=dict(platform.volumes),
        single_instance=platform.single_instance,
        needs_token=platform.needs_token,
        spread_group=platform.spread_group,
    )


# ── Processor descriptor ──────────────────────────────────────────


@dataclass
class JunctionDescriptor:
    id: str
    direction: JunctionDirection
    label: str
    description: str
    minimum: int
    maximum: int | None
    allowed_resource_types: list[str]


@dataclass
class ProcessorDescriptor:
    """Human facing summary of a processor realization, with its urls resolved."""

    technology: str
    id: str
    label: str
    description: str
    version: str
    icon: str | None = None
    tags: list[str] = field(default_factory=list)
    inbound_junctions: list[JunctionDescriptor] = field(default_factory=list)
    outbound_junctions: list[JunctionDescriptor] = field(default_factory=list)
    deployment_parameters: list[dict] = field(default_factory=list)
    profiles: list[dict] = field(default_factory=list)
    metadata: list[tuple[str, str]] = field(default_factory=list)
    more_info_url: str | None = None
    metrics_url: str | None = None
    viewer_url: str | None = None

    def to_dict(self) -> dict:
        def _junction(j: JunctionDescriptor) -> dict:
            return {
                "id": j.id,
                "label": j.label,
                "description": j.description,
                "minimum-number-of-connections": j.minimum,
                "maximum-number-of-connections": j.maximum,
                "allowed-resource-types": j.allowed_resource_types,
            }

        return {
            "technology": self.technology,
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "version": self.version,
            "icon": self.icon,
            "tags": self.tags,
            "inbound-junctions": [_junction(j) for j in self.inbound_junctions],
            "outbound-junctions": [_junction(j) for j in self.outbound_junctions],
            "deployment-parameters": self.deployment_parameters,
            "profiles": self.profiles,
            "metadata": [list(m) for m in self.metadata],
            "more-info-url": self.more_info_url,
            "metrics-url": self.metrics_url,
            "viewer-url": self.viewer_url,
        }


def _resolve_url(template: str | None, mapping: TemplateMapping) -> str | None:
    if template is None:
        return None
    try:
        return resolve_template(template, mapping)
    except UnresolvedPlaceholder as e:
        # e.g. CONSOLE_URL on platforms without a console
        logger.debug(f"Leaving out url '{template}': {e}")
        return None


def processor_descriptor(config: ProcessorConfig, mapping: TemplateMapping) -> ProcessorDescriptor:
    identity = config.identity

    def _junctions(direction: JunctionDirection) -> list[JunctionDescriptor]:
        descriptors = []
        for junction_id, junction in sorted(config.junctions(direction).items()):
            minimum, maximum = junction.range
            descriptors.append(
                JunctionDescriptor(
                    id=str(junction_id),
                    direction=direction,
                    label=junction.label,
                    description=junction.description,
                    minimum=minimum,
                    maximum=maximum,
                    allowed_resource_types=sorted(t.value for t in junction.allowed_resource_types),
                )
            )
        return descriptors

    return ProcessorDescriptor(
        technology=identity.technology.value,
        id=str(identity.realization_id),
        label=identity.label,
        description=identity.description,
        version=str(identity.version),
        icon=identity.icon,
        tags=list(identity.tags),
        inbound_junctions=_junctions(JunctionDirection.INBOUND),
        outbound_junctions=_junctions(JunctionDirection.OUTBOUND),
        deployment_parameters=[
            {
                "id": str(p.id),
                "type": p.type.value,
                "label": p.label,
                "description": p.description,
                "initial-value": p.initial_value,
                "options": [o.id for o in p.options],
                "optional": p.optional,
                "default": p.default,
            }
            for p in config.deployment_parameters
        ],
        profiles=[
            {
                "id": str(p.id),
                "label": p.label,
                "description": p.description,
                "cpus": p.cpus,
                "instances": p.instances,
                "mem": p.mem,
            }
            for p in config.profiles
        ],
        metadata=list(identity.metadata),
        more_info_url=_resolve_url(identity.more_info_url, mapping),
        metrics_url=_resolve_url(identity.metrics_url, mapping),
        viewer_url=_resolve_url(identity.viewer_url, mapping),
    )
