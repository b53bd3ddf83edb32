"""Processor instance: a processor realization deployed under a name on the target tenant."""

import json
import logging
from dataclasses import dataclass

from trifonius.errors import (
    AuthorizationFailure,
    NotAuthorized,
    NotFound,
    UnexpectedApiError,
    ValidationError,
)
from trifonius.identifiers import JunctionId, PipelineId, ProcessorId, ServiceName
from trifonius.placeholder import Placeholder, TemplateMapping, template_mapping
from trifonius.processor.descriptor import DeploymentDescriptor, build_descriptor
from trifonius.processor.environment import bind_environment, fixed_environment
from trifonius.processor.junctions import resolve_junctions
from trifonius.processor.parameters import resolve_parameters
from trifonius.processor.profiles import select_profile
from trifonius.processor.types import JunctionDirection, ProcessorConfig
from trifonius.resource.types import ResourceIdentifier
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessorStatus:
    deployed: bool
    up: bool | None = None

    def __str__(self) -> str:
        if not self.deployed:
            return "not-deployed"
        if self.up is None:
            return "deployed:unknown"
        return "deployed:up" if self.up else "deployed:down"


class ProcessorInstance:
    """Deploys, inspects and removes one instance of a processor realization.

    Resolution is pure: junctions, parameters and the profile are resolved,
    the environment is bound and the descriptor is assembled before anything
    is sent to the platform. The first failure aborts the deployment.
    """

    def __init__(
        self,
        config: ProcessorConfig,
        processor_id: str,
        target: EngineTarget,
        api,
        resource_registry,
        pipeline_id: str | None = None,
    ):
        self.config = config
        self.processor_id = ProcessorId.parse(processor_id)
        self.pipeline_id = PipelineId.parse(pipeline_id) if pipeline_id is not None else None
        self.target = target
        self.api = api
        self.resource_registry = resource_registry
        self.service_name = ServiceName.for_processor(self.processor_id, self.pipeline_id)

    def __repr__(self) -> str:
        return f"ProcessorInstance({self.config.realization_id}, {self.service_name})"

    def template_mapping(self) -> TemplateMapping:
        mapping = template_mapping(self.target)
        mapping[Placeholder.PROCESSOR_ID] = self.processor_id
        mapping[Placeholder.PROCESSOR_REALIZATION_ID] = self.config.realization_id
        mapping[Placeholder.SERVICE_NAME] = self.service_name
        if self.pipeline_id is not None:
            mapping[Placeholder.PIPELINE_ID] = self.pipeline_id
        return mapping

    def resolve(
        self,
        inbound: dict[JunctionId, list[ResourceIdentifier]] | None = None,
        outbound: dict[JunctionId, list[ResourceIdentifier]] | None = None,
        parameters: dict[str, str] | None = None,
        profile_id: str | None = None,
    ) -> DeploymentDescriptor:
        """Resolve a deployment without contacting the platform."""
        config = self.config
        resolved_inbound = resolve_junctions(
            JunctionDirection.INBOUND, inbound or {}, config.inbound_junctions, self.resource_registry
        )
        resolved_outbound = resolve_junctions(
            JunctionDirection.OUTBOUND, outbound or {}, config.outbound_junctions, self.resource_registry
        )
        resolved_parameters = resolve_parameters(config.deployment_parameters, parameters or {})
        profile = select_profile(config.profiles, profile_id)
        logger.debug(f"Using profile {profile.id} for {self.service_name}")

        mapping = self.template_mapping()
        fixed = fixed_environment(
            processor_id=self.processor_id,
            technology=config.technology,
            realization_id=config.realization_id,
            service_name=self.service_name,
            pipeline_id=self.pipeline_id,
        )
        # Profile variables are applied after the processor level table
        bindings = {**config.environment_variables, **profile.environment_variables}
        env = bind_environment(bindings, resolved_inbound, resolved_outbound, resolved_parameters, mapping, fixed)
        return build_descriptor(config, profile, env, self.target.user, mapping)

    async def deploy(self, inbound=None, outbound=None, parameters=None, profile_id=None) -> None:
        descriptor = self.resolve(inbound, outbound, parameters, profile_id)
        logger.info(f"Deploying {self.config.technology} {self.config.realization_id} as {self.service_name}")
        try:
            await self.api.create(self.service_name, descriptor.to_dict())
        except NotFound as e:
            raise UnexpectedApiError(f"unexpected NotFound response when deploying service {self.service_name}") from e
        except NotAuthorized as e:
            raise AuthorizationFailure(f"authorization failure when deploying service {self.service_name}") from e
        except UnexpectedApiError as e:
            raise UnexpectedApiError(f"unexpected error when deploying service {self.service_name} ({e})") from e

    def deploy_dry_run(self, inbound=None, outbound=None, parameters=None, profile_id=None) -> str:
        """Resolve a deployment and return the payload as pretty printed JSON."""
        descriptor = self.resolve(inbound, outbound, parameters, profile_id)
        return json.dumps(descriptor.to_dict(), indent=2)

    async def status(self) -> ProcessorStatus:
        try:
            allocation_status = await self.api.get_allocation_status(self.service_name)
        except NotFound:
            return ProcessorStatus(deployed=False)
        return ProcessorStatus(deployed=True, up=allocation_status.provisioned)

    async def undeploy(self) -> bool:
        """Remove the deployment; returns False when there was nothing to remove."""
        try:
            await self.api.delete(self.service_name)
        except NotFound:
            logger.debug(f"{self.service_name} was not deployed")
            return False
        logger.info(f"Undeployed {self.service_name}")
        return True

    async def start(self):
        raise NotImplementedError("start method not yet implemented")

    async def stop(self):
        raise NotImplementedError("stop method not yet implemented")

    def compatible_resources(self, junction_id: str) -> list[ResourceIdentifier]:
        """Resources that can be connected to *junction_id*.

        Inbound junctions accept readable resources, outbound junctions
        writable ones.
        """
        if junction_id in self.config.inbound_junctions:
            junction = self.config.inbound_junctions[junction_id]
            access = "readable"
        elif junction_id in self.config.outbound_junctions:
            junction = self.config.outbound_junctions[junction_id]
            access = "writable"
        else:
            raise ValidationError(f"processor '{self.config.realization_id}' has no junction '{junction_id}'")
        compatible = []
        for resource_type in sorted(junction.allowed_resource_types, key=lambda t: t.value):
            for descriptor in self.resource_registry.descriptors_by_type(resource_type):
                if getattr(descriptor, access):
                    compatible.append(descriptor.identifier)
        return compatible
