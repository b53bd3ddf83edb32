"""Processor configuration loading and validation."""

import json
import logging
import os
import tomllib

import yaml

from trifonius.errors import ValidationError
from trifonius.identifiers import JunctionId
from trifonius.placeholder import CONFIG_TEMPLATE_PLACEHOLDERS, validate_template
from trifonius.processor.types import (
    AppConfig,
    DeploymentParameterConfig,
    JunctionConfig,
    ProcessorConfig,
    ProcessorIdentity,
    ProcessorTechnology,
    ServiceConfig,
    VariableType,
)

logger = logging.getLogger(__name__)

CONFIG_EXTENSIONS = (".toml", ".yaml", ".yml", ".json")

# Section holding the platform specific block, per technology
_PLATFORM_SECTIONS = {
    ProcessorTechnology.DSH_SERVICE: ("dshservice", ServiceConfig),
    ProcessorTechnology.DSH_APP: ("dshapp", AppConfig),
}


def load_config_file(path: str) -> dict:
    """Read a TOML, YAML or JSON configuration file into a dict.

    The format is chosen by file extension.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext == ".toml":
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValidationError(f"could not parse {path}: {e}") from e
    elif ext in (".yaml", ".yml"):
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValidationError(f"could not parse {path}: {e}") from e
    elif ext == ".json":
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"could not parse {path}: {e}") from e
    else:
        raise ValidationError(f"unsupported configuration file type '{ext}' ({path}), expected one of: {', '.join(CONFIG_EXTENSIONS)}")
    if not isinstance(data, dict):
        raise ValidationError(f"configuration file {path} does not contain a mapping")
    return data


def _junctions_from_dict(d: dict | None) -> dict[JunctionId, JunctionConfig]:
    junctions = {}
    for raw_id, junction in (d or {}).items():
        junction_id = JunctionId.parse(raw_id)
        junctions[junction_id] = JunctionConfig.from_dict(junction_id, junction)
    return junctions


def _validate_variable_references(variables: dict, parameters: tuple[DeploymentParameterConfig, ...]):
    declared = {p.id for p in parameters}
    for name, binding in variables.items():
        if binding.type != VariableType.DEPLOYMENT_PARAMETER:
            continue
        if not declared:
            raise ValidationError(f"variable '{name}' references deployment parameter '{binding.id}' but none are specified")
        if binding.id not in declared:
            raise ValidationError(f"variable '{name}' references unspecified deployment parameter '{binding.id}'")


def validate_processor_config(config: ProcessorConfig):
    """Cross-section checks that cannot be made while parsing a single section."""
    identity = config.identity
    for attribute, url in (
        ("more-info-url", identity.more_info_url),
        ("metrics-url", identity.metrics_url),
        ("viewer-url", identity.viewer_url),
    ):
        if url is None:
            continue
        if not url:
            raise ValidationError(f"{attribute} template cannot be empty")
        validate_template(url, CONFIG_TEMPLATE_PLACEHOLDERS)

    ambiguous = sorted(set(config.inbound_junctions) & set(config.outbound_junctions))
    if ambiguous:
        raise ValidationError(f"'{ambiguous[0]}' used as inbound as well as outbound id")

    parameter_ids = [p.id for p in config.deployment_parameters]
    duplicates = sorted({p for p in parameter_ids if parameter_ids.count(p) > 1})
    if duplicates:
        raise ValidationError(f"deployment parameter '{duplicates[0]}' is declared more than once")

    _validate_variable_references(config.environment_variables, config.deployment_parameters)
    if not config.profiles:
        raise ValidationError("no profiles defined")
    profile_ids = [p.id for p in config.profiles]
    duplicates = sorted({p for p in profile_ids if profile_ids.count(p) > 1})
    if duplicates:
        raise ValidationError(f"profile '{duplicates[0]}' is defined more than once")
    for profile in config.profiles:
        _validate_variable_references(profile.environment_variables, config.deployment_parameters)


def processor_config_from_dict(d: dict, technology: ProcessorTechnology | None = None) -> ProcessorConfig:
    """Build and validate a ProcessorConfig from a parsed configuration document."""
    if "processor" not in d:
        raise ValidationError("configuration requires a 'processor' section")
    identity = ProcessorIdentity.from_dict(d["processor"])
    if technology is not None and identity.technology != technology:
        raise ValidationError(f"processor type '{identity.technology}' doesn't match expected type '{technology}'")

    section, platform_cls = _PLATFORM_SECTIONS[identity.technology]
    if section not in d:
        raise ValidationError(f"{identity.technology} configuration missing")

    config = ProcessorConfig(
        identity=identity,
        platform=platform_cls.from_dict(d[section]),
        inbound_junctions=_junctions_from_dict(d.get("inbound-junctions")),
        outbound_junctions=_junctions_from_dict(d.get("outbound-junctions")),
        deployment_parameters=tuple(
            DeploymentParameterConfig.from_dict(p) for p in (d.get("deploy") or {}).get("parameters", [])
        ),
    )
    validate_processor_config(config)
    return config


def load_processor_config(path: str, technology: ProcessorTechnology | None = None) -> ProcessorConfig:
    """Load and validate a processor configuration file.

    Raises:
        FileNotFoundError: *path* does not exist.
        ValidationError: the file cannot be parsed or violates a constraint.
    """
    logger.debug(f"Reading processor config file: {path}")
    try:
        config = processor_config_from_dict(load_config_file(path), technology)
    except ValidationError as e:
        raise ValidationError(f"{path}: {e}") from e
    logger.debug(f"Validated processor config {config.realization_id} ({config.technology})")
    return config
