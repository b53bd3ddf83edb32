"""Deployment parameter resolution: supplied values, defaults and mandatory checks."""

import logging

from trifonius.errors import MissingMandatoryParameter
from trifonius.processor.types import DeploymentParameterConfig

logger = logging.getLogger(__name__)


def resolve_parameters(declared, supplied: dict[str, str]) -> dict[str, str]:
    """Produce the parameter values for one deployment.

    A supplied value wins over the default. A mandatory parameter without a
    value raises ``MissingMandatoryParameter``; an optional one without a
    default is left out. Supplied parameters that are not declared are ignored.
    """
    declared: list[DeploymentParameterConfig] = list(declared)
    resolved = {}
    for parameter in declared:
        if parameter.id in supplied:
            resolved[parameter.id] = supplied[parameter.id]
        elif parameter.default is not None:
            resolved[parameter.id] = parameter.default
        elif not parameter.optional:
            raise MissingMandatoryParameter(parameter.id)

    declared_ids = {p.id for p in declared}
    for parameter_id in supplied:
        if parameter_id not in declared_ids:
            logger.debug(f"Ignoring undeclared deployment parameter '{parameter_id}'")
    return resolved
