"""Environment variable binding for a deployment."""

from trifonius.errors import MissingJunctionBinding, MissingParameterBinding
from trifonius.placeholder import TemplateMapping, resolve_template
from trifonius.processor.types import VariableBinding, VariableType

ENV_PIPELINE_ID = "TRIFONIUS_PIPELINE_ID"
ENV_PROCESSOR_ID = "TRIFONIUS_PROCESSOR_ID"
ENV_PROCESSOR_TECHNOLOGY = "TRIFONIUS_PROCESSOR_TECHNOLOGY"
ENV_PROCESSOR_REALIZATION_ID = "TRIFONIUS_PROCESSOR_REALIZATION_ID"
ENV_SERVICE_NAME = "TRIFONIUS_SERVICE_NAME"


def fixed_environment(
    processor_id: str,
    technology: str,
    realization_id: str,
    service_name: str,
    pipeline_id: str | None = None,
) -> dict[str, str]:
    """Variables every deployed processor gets, regardless of its configuration."""
    env = {}
    if pipeline_id:
        env[ENV_PIPELINE_ID] = str(pipeline_id)
    env[ENV_PROCESSOR_ID] = str(processor_id)
    env[ENV_PROCESSOR_TECHNOLOGY] = str(technology)
    env[ENV_PROCESSOR_REALIZATION_ID] = str(realization_id)
    env[ENV_SERVICE_NAME] = str(service_name)
    return env


def bind_variable(
    name: str,
    binding: VariableBinding,
    inbound: dict[str, str],
    outbound: dict[str, str],
    parameters: dict[str, str],
    mapping: TemplateMapping,
) -> str:
    """Value of environment variable *name* according to *binding*."""
    if binding.type == VariableType.INBOUND_JUNCTION:
        if binding.id not in inbound:
            raise MissingJunctionBinding("inbound", binding.id, name)
        return inbound[binding.id]
    if binding.type == VariableType.OUTBOUND_JUNCTION:
        if binding.id not in outbound:
            raise MissingJunctionBinding("outbound", binding.id, name)
        return outbound[binding.id]
    if binding.type == VariableType.DEPLOYMENT_PARAMETER:
        if binding.id not in parameters:
            raise MissingParameterBinding(binding.id, name)
        return parameters[binding.id]
    if binding.type == VariableType.TEMPLATE:
        return resolve_template(binding.value, mapping)
    return binding.value


def bind_environment(
    bindings: dict[str, VariableBinding],
    inbound: dict[str, str],
    outbound: dict[str, str],
    parameters: dict[str, str],
    mapping: TemplateMapping,
    fixed: dict[str, str] | None = None,
) -> dict[str, str]:
    """Build the environment of a deployment.

    The *fixed* variables are set first and the declared *bindings* are applied
    on top of them in declaration order, so a declared variable with the same
    name replaces a fixed one.
    """
    env = dict(fixed or {})
    for name, binding in bindings.items():
        env[name] = bind_variable(name, binding, inbound, outbound, parameters, mapping)
    return env
