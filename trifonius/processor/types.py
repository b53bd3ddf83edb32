"""Processor configuration dataclass types.

The types mirror the sections of a processor configuration file. Keys in the
file are kebab-case; ``from_dict`` maps them onto the snake_case fields and
checks the invariants of each section.
"""

from dataclasses import dataclass, field
from enum import Enum

from trifonius.errors import ValidationError
from trifonius.identifiers import JunctionId, ParameterId, ProcessorRealizationId, ProfileId
from trifonius.resource.types import ResourceType
from trifonius.version import Version


def _require(d: dict, key: str, context: str):
    if key not in d or d[key] is None:
        raise ValidationError(f"{context} requires a '{key}' attribute")
    return d[key]


def _require_int(d: dict, key: str, context: str) -> int:
    return _as_int(_require(d, key, context), key, context)


def _require_float(d: dict, key: str, context: str) -> float:
    value = _require(d, key, context)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{context} attribute '{key}' must be a number, got '{value}'")
    return float(value)


def _optional_int(d: dict, key: str, context: str) -> int | None:
    value = d.get(key)
    return None if value is None else _as_int(value, key, context)


def _as_int(value, key: str, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{context} attribute '{key}' must be an integer, got '{value}'")
    return value


def _enum_value(enum_cls, value, context: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{context} has invalid value '{value}', expected one of: {allowed}") from None


class ProcessorTechnology(str, Enum):
    DSH_SERVICE = "dsh-service"
    DSH_APP = "dsh-app"

    def __str__(self) -> str:
        return self.value


class JunctionDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"

    def __str__(self) -> str:
        return self.value


# ── Junctions ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class JunctionConfig:
    """Connection point of a processor that is bound to resources at deploy time."""

    label: str
    description: str
    minimum: int | None = None
    maximum: int | None = None
    allowed_resource_types: frozenset = frozenset({ResourceType.DSH_TOPIC})
    separator: str = ","

    @property
    def range(self) -> tuple[int, int | None]:
        """Effective (minimum, maximum) number of bound resources; ``None`` means unbounded."""
        if self.minimum is None and self.maximum is None:
            return 1, 1
        if self.minimum is None:
            return 0, self.maximum
        return self.minimum, self.maximum

    def validate(self, junction_id: str):
        if not self.label:
            raise ValidationError(f"junction '{junction_id}' has empty label")
        if not self.description:
            raise ValidationError(f"junction '{junction_id}' has empty description")
        if self.minimum is not None and self.minimum < 0:
            raise ValidationError(f"junction '{junction_id}' minimum number of resources cannot be negative")
        if self.minimum is None and self.maximum is not None and self.maximum < 1:
            raise ValidationError(f"junction '{junction_id}' maximum number of resources must be 1 or greater")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValidationError(
                f"junction '{junction_id}' maximum number of resources must be greater or equal to the minimum number of resources"
            )
        if not self.allowed_resource_types:
            raise ValidationError(f"junction '{junction_id}' allows no resource types")

    @classmethod
    def from_dict(cls, junction_id: str, d: dict) -> "JunctionConfig":
        context = f"junction '{junction_id}'"
        types = d.get("allowed-resource-types", [ResourceType.DSH_TOPIC.value])
        if isinstance(types, str):
            types = [types]
        config = cls(
            label=_require(d, "label", context),
            description=_require(d, "description", context),
            minimum=_optional_int(d, "minimum-number-of-connections", context),
            maximum=_optional_int(d, "maximum-number-of-connections", context),
            allowed_resource_types=frozenset(_enum_value(ResourceType, t, context) for t in types),
            separator=d.get("multiple-connections-separator", ","),
        )
        config.validate(junction_id)
        return config


# ── Deployment parameters ─────────────────────────────────────────


class DeploymentParameterType(str, Enum):
    BOOLEAN = "boolean"
    FREE_TEXT = "free-text"
    SELECTION = "selection"
    SINK_TOPIC = "sink-topic"
    SOURCE_TOPIC = "source-topic"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParameterOption:
    id: str
    label: str | None = None
    description: str | None = None

    @classmethod
    def from_value(cls, parameter_id: str, value) -> "ParameterOption":
        if isinstance(value, str):
            if not value:
                raise ValidationError(f"empty id for parameter '{parameter_id}'")
            return cls(id=value)
        option = cls(id=value.get("id", ""), label=value.get("label", ""), description=value.get("description"))
        if not option.id:
            raise ValidationError(f"empty id for parameter '{parameter_id}'")
        if not option.label:
            raise ValidationError(f"empty label for parameter '{parameter_id}.{option.id}'")
        if option.description is not None and not option.description:
            raise ValidationError(f"empty description for parameter '{parameter_id}.{option.id}'")
        return option


@dataclass(frozen=True)
class DeploymentParameterConfig:
    type: DeploymentParameterType
    id: ParameterId
    label: str
    description: str = ""
    initial_value: str | None = None
    options: tuple[ParameterOption, ...] = ()
    optional: bool = False
    default: str | None = None

    def validate(self):
        if not self.label:
            raise ValidationError(f"empty label for parameter '{self.id}'")
        if self.type == DeploymentParameterType.SELECTION and not self.options:
            raise ValidationError(f"empty options list for parameter '{self.id}'")
        if self.optional and self.default is None:
            raise ValidationError(f"optional parameter '{self.id}' requires a default value")

    @classmethod
    def from_dict(cls, d: dict) -> "DeploymentParameterConfig":
        raw_id = d.get("id")
        if not ParameterId.is_valid(raw_id):
            raise ValidationError(f"illegal parameter identifier '{raw_id}'")
        context = f"parameter '{raw_id}'"
        options = d.get("options")
        if options is None and d.get("type") == DeploymentParameterType.SELECTION.value:
            raise ValidationError(f"missing options attribute for {context}")
        default = d.get("default")
        config = cls(
            type=_enum_value(DeploymentParameterType, _require(d, "type", context), context),
            id=ParameterId(raw_id),
            label=d.get("label", ""),
            description=d.get("description", ""),
            initial_value=_as_string(d.get("initial-value")),
            options=tuple(ParameterOption.from_value(raw_id, o) for o in options or []),
            optional=bool(d.get("optional", False)),
            default=_as_string(default),
        )
        config.validate()
        return config


def _as_string(value) -> str | None:
    # TOML and YAML happily parse defaults like `true` or `3` into non-strings
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ── Environment variables ─────────────────────────────────────────


class VariableType(str, Enum):
    DEPLOYMENT_PARAMETER = "deployment-parameter"
    INBOUND_JUNCTION = "inbound-junction"
    OUTBOUND_JUNCTION = "outbound-junction"
    TEMPLATE = "template"
    VALUE = "value"

    def __str__(self) -> str:
        return self.value


_REFERENCE_DESCRIPTIONS = {
    VariableType.DEPLOYMENT_PARAMETER: "deployment parameter",
    VariableType.INBOUND_JUNCTION: "inbound junction",
    VariableType.OUTBOUND_JUNCTION: "outbound junction",
}


@dataclass(frozen=True)
class VariableBinding:
    """Source of the value of one environment variable."""

    type: VariableType
    id: str | None = None
    value: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.type in _REFERENCE_DESCRIPTIONS

    def validate(self, variable: str):
        if self.is_reference:
            referenced = _REFERENCE_DESCRIPTIONS[self.type]
            if self.id is None:
                raise ValidationError(f"variable '{variable}' referencing {referenced} requires a 'id' attribute")
            if not self.id:
                raise ValidationError(f"variable '{variable}' referencing {referenced} requires a non-empty 'id' attribute")
        elif self.value is None:
            raise ValidationError(f"variable '{variable}' requires a 'value' attribute")

    @classmethod
    def from_dict(cls, variable: str, d) -> "VariableBinding":
        if not isinstance(d, dict):
            # Shorthand: a plain string is a literal value
            return cls(type=VariableType.VALUE, value=_as_string(d))
        context = f"variable '{variable}'"
        binding = cls(
            type=_enum_value(VariableType, _require(d, "type", context), context),
            id=d.get("id"),
            value=_as_string(d.get("value")),
        )
        binding.validate(variable)
        return binding


def _variables_from_dict(d: dict | None) -> dict[str, VariableBinding]:
    return {name: VariableBinding.from_dict(name, binding) for name, binding in (d or {}).items()}


# ── Profiles ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProfileConfig:
    """Named sizing choice (cpus, memory, instances) for a deployment."""

    id: ProfileId
    label: str
    description: str
    cpus: float
    instances: int
    mem: int
    environment_variables: dict[str, VariableBinding] = field(default_factory=dict)

    def validate(self):
        if not self.label:
            raise ValidationError(f"profile '{self.id}' has empty label")
        if not self.description:
            raise ValidationError(f"profile '{self.id}' has empty description")
        if self.cpus < 0.1:
            raise ValidationError(f"profile '{self.id}' has number of cpus smaller than 0.1")
        if self.instances < 1:
            raise ValidationError(f"profile '{self.id}' must have at least one instance")
        if self.mem < 1:
            raise ValidationError(f"profile '{self.id}' must have a positive amount of memory")

    @classmethod
    def from_dict(cls, d: dict) -> "ProfileConfig":
        raw_id = d.get("id")
        if not ProfileId.is_valid(raw_id):
            raise ValidationError(f"profile has invalid identifier '{raw_id}'")
        context = f"profile '{raw_id}'"
        profile = cls(
            id=ProfileId(raw_id),
            label=d.get("label", ""),
            description=d.get("description", ""),
            cpus=_require_float(d, "cpus", context),
            instances=_require_int(d, "instances", context),
            mem=_require_int(d, "mem", context),
            environment_variables=_variables_from_dict(d.get("environment-variables")),
        )
        profile.validate()
        return profile


# ── DSH service block ─────────────────────────────────────────────


@dataclass(frozen=True)
class PortMapping:
    paths: tuple[str, ...] = ()
    auth: str | None = None
    mode: str | None = None
    service_group: str | None = None
    tls: str | None = None
    vhost: str | None = None
    whitelist: str | None = None

    @classmethod
    def from_dict(cls, port: str, d: dict) -> "PortMapping":
        tls = d.get("tls")
        if tls is not None and tls not in ("auto", "none"):
            raise ValidationError(f"exposed port '{port}' has invalid tls value '{tls}', expected auto or none")
        return cls(
            paths=tuple(d.get("paths", [])),
            auth=d.get("auth"),
            mode=d.get("mode"),
            service_group=d.get("service-group"),
            tls=tls,
            vhost=d.get("vhost"),
            whitelist=d.get("whitelist"),
        )


@dataclass(frozen=True)
class HealthCheck:
    path: str
    port: int
    protocol: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "HealthCheck":
        protocol = d.get("protocol")
        if protocol is not None and protocol not in ("http", "https"):
            raise ValidationError(f"health check has invalid protocol '{protocol}', expected http or https")
        return cls(
            path=_require(d, "path", "health check"),
            port=_require_int(d, "port", "health check"),
            protocol=protocol,
        )


@dataclass(frozen=True)
class Metrics:
    path: str
    port: int

    @classmethod
    def from_dict(cls, d: dict) -> "Metrics":
        return cls(path=_require(d, "path", "metrics"), port=_require_int(d, "port", "metrics"))


@dataclass(frozen=True)
class Secret:
    name: str
    injections: tuple[dict, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> "Secret":
        return cls(
            name=_require(d, "name", "secret"),
            injections=tuple(dict(i) for i in d.get("injections", [])),
        )


@dataclass(frozen=True)
class ServiceConfig:
    """Platform block of a ``dsh-service`` processor."""

    image: str
    needs_token: bool = False
    single_instance: bool = False
    spread_group: str | None = None
    exposed_ports: dict[str, PortMapping] = field(default_factory=dict)
    health_check: HealthCheck | None = None
    metrics: Metrics | None = None
    secrets: tuple[Secret, ...] = ()
    volumes: dict[str, str] = field(default_factory=dict)
    environment_variables: dict[str, VariableBinding] = field(default_factory=dict)
    profiles: tuple[ProfileConfig, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> "ServiceConfig":
        context = "dsh service configuration"
        image = _require(d, "image", context)
        if not image:
            raise ValidationError("dsh service image cannot be empty")
        spread_group = d.get("spread-group")
        if spread_group is not None and not spread_group:
            raise ValidationError("spread group cannot be empty")
        exposed_ports = d.get("exposed-ports")
        if exposed_ports is not None and not exposed_ports:
            raise ValidationError("exposed ports cannot be empty")
        health_check = d.get("health-check")
        metrics = d.get("metrics")
        return cls(
            image=image,
            needs_token=bool(_require(d, "needs-token", context)),
            single_instance=bool(_require(d, "single-instance", context)),
            spread_group=spread_group,
            exposed_ports={str(port): PortMapping.from_dict(str(port), m) for port, m in (exposed_ports or {}).items()},
            health_check=HealthCheck.from_dict(health_check) if health_check is not None else None,
            metrics=Metrics.from_dict(metrics) if metrics is not None else None,
            secrets=tuple(Secret.from_dict(s) for s in d.get("secrets", [])),
            volumes={str(path): str(name) for path, name in (d.get("volumes") or {}).items()},
            environment_variables=_variables_from_dict(d.get("environment-variables")),
            profiles=tuple(ProfileConfig.from_dict(p) for p in d.get("profiles", [])),
        )


@dataclass(frozen=True)
class AppConfig:
    """Platform block of a ``dsh-app`` (app catalog) processor."""

    name: str
    manifest_urn: str
    stopped: bool = False
    environment_variables: dict[str, VariableBinding] = field(default_factory=dict)
    profiles: tuple[ProfileConfig, ...] = ()

    @property
    def image(self) -> str:
        return self.manifest_urn

    @classmethod
    def from_dict(cls, d: dict) -> "AppConfig":
        context = "dsh app configuration"
        manifest_urn = _require(d, "manifest-urn", context)
        if not manifest_urn:
            raise ValidationError("dsh app manifest urn cannot be empty")
        return cls(
            name=d.get("name", ""),
            manifest_urn=manifest_urn,
            stopped=bool(d.get("stopped", False)),
            environment_variables=_variables_from_dict(d.get("environment-variables")),
            profiles=tuple(ProfileConfig.from_dict(p) for p in d.get("profiles", [])),
        )


# ── Processor ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProcessorIdentity:
    """The ``[processor]`` section: what a processor is, independent of how it is deployed."""

    technology: ProcessorTechnology
    realization_id: ProcessorRealizationId
    label: str
    description: str
    version: Version
    icon: str | None = None
    tags: tuple[str, ...] = ()
    more_info_url: str | None = None
    metrics_url: str | None = None
    viewer_url: str | None = None
    metadata: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> "ProcessorIdentity":
        context = "processor"
        realization_id = _require(d, "processor-realization-id", context)
        if not ProcessorRealizationId.is_valid(realization_id):
            raise ValidationError(f"illegal processor realization id '{realization_id}'")
        description = d.get("description", "")
        if not description:
            raise ValidationError(f"processor '{realization_id}' description cannot be empty")
        return cls(
            technology=_enum_value(ProcessorTechnology, _require(d, "processor-technology", context), context),
            realization_id=ProcessorRealizationId(realization_id),
            label=_require(d, "label", context),
            description=description,
            version=Version.parse(_require(d, "version", context)),
            icon=d.get("icon"),
            tags=tuple(d.get("tags", [])),
            more_info_url=d.get("more-info-url"),
            metrics_url=d.get("metrics-url"),
            viewer_url=d.get("viewer-url"),
            metadata=tuple((str(k), str(v)) for k, v in d.get("metadata", [])),
        )


@dataclass(frozen=True)
class ProcessorConfig:
    """Complete, validated configuration of a processor realization."""

    identity: ProcessorIdentity
    platform: ServiceConfig | AppConfig
    inbound_junctions: dict[JunctionId, JunctionConfig] = field(default_factory=dict)
    outbound_junctions: dict[JunctionId, JunctionConfig] = field(default_factory=dict)
    deployment_parameters: tuple[DeploymentParameterConfig, ...] = ()

    @property
    def technology(self) -> ProcessorTechnology:
        return self.identity.technology

    @property
    def realization_id(self) -> ProcessorRealizationId:
        return self.identity.realization_id

    @property
    def environment_variables(self) -> dict[str, VariableBinding]:
        return self.platform.environment_variables

    @property
    def profiles(self) -> tuple[ProfileConfig, ...]:
        return self.platform.profiles

    def junctions(self, direction: JunctionDirection) -> dict[JunctionId, JunctionConfig]:
        if direction == JunctionDirection.INBOUND:
            return self.inbound_junctions
        return self.outbound_junctions

    def parameter(self, parameter_id: str) -> DeploymentParameterConfig | None:
        for parameter in self.deployment_parameters:
            if parameter.id == parameter_id:
                return parameter
        return None
