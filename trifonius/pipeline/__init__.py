"""Pipelines: sets of connected processor instances deployed together."""

from trifonius.pipeline.config import (
    PipelineConfig,
    PipelineConnection,
    PipelineProcessor,
    PipelineResource,
    ProcessorJunction,
    load_pipeline_config,
)
from trifonius.pipeline.pipeline import Pipeline

__all__ = [
    "Pipeline",
    "PipelineConfig",
    "PipelineConnection",
    "PipelineProcessor",
    "PipelineResource",
    "ProcessorJunction",
    "load_pipeline_config",
]
