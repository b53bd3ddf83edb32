"""Processor configuration, resolution and lifecycle."""

from trifonius.processor.config import load_config_file, load_processor_config, processor_config_from_dict
from trifonius.processor.descriptor import (
    DeploymentDescriptor,
    ProcessorDescriptor,
    build_descriptor,
    processor_descriptor,
)
from trifonius.processor.environment import bind_environment, fixed_environment
from trifonius.processor.instance import ProcessorInstance, ProcessorStatus
from trifonius.processor.junctions import resolve_junctions
from trifonius.processor.parameters import resolve_parameters
from trifonius.processor.profiles import select_profile
from trifonius.processor.registry import ProcessorRegistry
from trifonius.processor.types import (
    AppConfig,
    DeploymentParameterConfig,
    DeploymentParameterType,
    JunctionConfig,
    JunctionDirection,
    ProcessorConfig,
    ProcessorIdentity,
    ProcessorTechnology,
    ProfileConfig,
    ServiceConfig,
    VariableBinding,
    VariableType,
)

__all__ = [
    "AppConfig",
    "DeploymentDescriptor",
    "DeploymentParameterConfig",
    "DeploymentParameterType",
    "JunctionConfig",
    "JunctionDirection",
    "ProcessorConfig",
    "ProcessorDescriptor",
    "ProcessorIdentity",
    "ProcessorInstance",
    "ProcessorRegistry",
    "ProcessorStatus",
    "ProcessorTechnology",
    "ProfileConfig",
    "ServiceConfig",
    "VariableBinding",
    "VariableType",
    "bind_environment",
    "build_descriptor",
    "fixed_environment",
    "load_config_file",
    "load_processor_config",
    "processor_config_from_dict",
    "processor_descriptor",
    "resolve_junctions",
    "resolve_parameters",
    "select_profile",
]
