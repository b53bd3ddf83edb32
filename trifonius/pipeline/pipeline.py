"""Pipeline deployment: turn connections into junction bindings and deploy each processor."""

import asyncio
import logging

from trifonius.errors import ValidationError
from trifonius.pipeline.config import PipelineConfig, PipelineProcessor, ProcessorJunction
from trifonius.processor.instance import ProcessorInstance, ProcessorStatus
from trifonius.processor.registry import ProcessorRegistry
from trifonius.resource.types import ResourceIdentifier
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)


class Pipeline:
    """All processor instances of one pipeline, with their bindings."""

    def __init__(
        self,
        config: PipelineConfig,
        processor_registry: ProcessorRegistry,
        target: EngineTarget,
        api,
        resource_registry,
    ):
        self.config = config
        self.instances: dict[str, ProcessorInstance] = {}
        for processor in config.processors:
            self.instances[processor.processor_id] = ProcessorInstance(
                processor_registry.get(processor.processor_realization),
                processor.processor_id,
                target,
                api,
                resource_registry,
                pipeline_id=config.pipeline_id,
            )
        self._validate_junctions()

    def _validate_junctions(self):
        for connection in self.config.connections:
            for endpoint, inbound in ((connection.target, True), (connection.source, False)):
                if not isinstance(endpoint, ProcessorJunction):
                    continue
                processor_config = self.instances[endpoint.processor_id].config
                junctions = processor_config.inbound_junctions if inbound else processor_config.outbound_junctions
                if endpoint.junction not in junctions:
                    direction = "inbound" if inbound else "outbound"
                    raise ValidationError(
                        f"processor '{endpoint.processor_id}' ({processor_config.realization_id}) "
                        f"has no {direction} junction '{endpoint.junction}'"
                    )

    def _resources(self, resource_ids) -> list[ResourceIdentifier]:
        return [self.config.resource(resource_id).resource_realization for resource_id in resource_ids]

    def bindings(self, processor_id: str) -> tuple[dict, dict]:
        """Inbound and outbound junction bindings of one processor."""
        inbound: dict[str, list[ResourceIdentifier]] = {}
        outbound: dict[str, list[ResourceIdentifier]] = {}
        for connection in self.config.connections:
            source, target = connection.source, connection.target
            if isinstance(source, ProcessorJunction) and isinstance(target, ProcessorJunction):
                if processor_id in (source.processor_id, target.processor_id):
                    raise ValidationError(
                        f"processor to processor connection {source} -> {target} is not supported, "
                        "connect the processors through a resource"
                    )
                continue
            if isinstance(target, ProcessorJunction) and target.processor_id == processor_id:
                inbound.setdefault(target.junction, []).extend(self._resources(source))
            elif isinstance(source, ProcessorJunction) and source.processor_id == processor_id:
                outbound.setdefault(source.junction, []).extend(self._resources(target))
        return inbound, outbound

    def _deploy_arguments(self, processor: PipelineProcessor) -> dict:
        inbound, outbound = self.bindings(processor.processor_id)
        return {
            "inbound": inbound,
            "outbound": outbound,
            "parameters": processor.parameters,
            "profile_id": processor.profile_id,
        }

    async def deploy(self):
        """Deploy every processor in declaration order, stopping at the first failure.

        All deployments are resolved before the first one is sent, so a
        configuration error never leaves a partially deployed pipeline.
        """
        arguments = {p.processor_id: self._deploy_arguments(p) for p in self.config.processors}
        for processor_id, kwargs in arguments.items():
            self.instances[processor_id].resolve(**kwargs)
        for processor_id, kwargs in arguments.items():
            await self.instances[processor_id].deploy(**kwargs)
        logger.info(f"Deployed pipeline {self.config.pipeline_id} ({len(arguments)} processor(s))")

    def deploy_dry_run(self) -> dict[str, str]:
        """Deployment payload (JSON) per service name."""
        payloads = {}
        for processor in self.config.processors:
            instance = self.instances[processor.processor_id]
            payloads[instance.service_name] = instance.deploy_dry_run(**self._deploy_arguments(processor))
        return payloads

    async def status(self) -> list[tuple[str, ProcessorStatus]]:
        """Status per service name, in declaration order."""
        instances = list(self.instances.values())
        statuses = await asyncio.gather(*(instance.status() for instance in instances))
        return [(instance.service_name, status) for instance, status in zip(instances, statuses)]

    async def undeploy(self) -> list[tuple[str, bool]]:
        results = []
        for instance in self.instances.values():
            results.append((instance.service_name, await instance.undeploy()))
        return results
