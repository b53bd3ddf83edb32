"""Tests for pipeline configuration parsing and validation."""

import copy

import pytest
import yaml

from trifonius.errors import ValidationError
from trifonius.pipeline.config import PipelineConfig, PipelineResource, ProcessorJunction, load_pipeline_config
from trifonius.resource.types import ResourceIdentifier

PIPELINE_DICT = {
    "pipeline-id": "demo",
    "version": "1.0",
    "name": "Demo",
    "description": "Demo pipeline",
    "more-info-url": "${CONSOLE_URL}/#/profiles/${TENANT}",
    "resources": [
        {"resource-id": "orders", "resource-realization": "internal-orders"},
        {"resource-id": "scratch", "resource-realization": "scratch-tenant-scratch-topic:dsh-topic"},
    ],
    "processors": [
        {
            "processor-id": "first",
            "processor-realization": "test-service",
            "parameters": {"mode": "fast", "retries": 5},
            "profile-id": "minimal",
        },
    ],
    "connections": [
        {"source": "orders", "target": {"processor-id": "first", "junction": "inbound-topic"}},
        {"source": {"processor-id": "first", "junction": "outbound-topic"}, "target": ["scratch", "orders"]},
    ],
}


def _invalid(mutate, match):
    d = copy.deepcopy(PIPELINE_DICT)
    mutate(d)
    with pytest.raises(ValidationError, match=match):
        PipelineConfig.from_dict(d)


def test_from_dict():
    config = PipelineConfig.from_dict(copy.deepcopy(PIPELINE_DICT))

    assert config.pipeline_id == "demo"
    assert str(config.version) == "1.0.0"
    assert str(config.resource("scratch").resource_realization) == "scratch-tenant-scratch-topic:dsh-topic"
    processor = config.processor("first")
    assert processor.parameters == {"mode": "fast", "retries": "5"}
    assert processor.profile_id == "minimal"
    assert config.connections[0].source == ("orders",)
    assert config.connections[0].target == ProcessorJunction("first", "inbound-topic")
    assert config.connections[1].target == ("scratch", "orders")


def test_load_yaml(tmp_path):
    path = tmp_path / "demo.yaml"
    path.write_text(yaml.safe_dump(PIPELINE_DICT))
    assert load_pipeline_config(str(path)).name == "Demo"


def test_resource_is_only_a_named_realization():
    d = copy.deepcopy(PIPELINE_DICT)
    d["resources"][0]["parameters"] = {"retention": "7d"}
    config = PipelineConfig.from_dict(d)

    assert config.resource("orders") == PipelineResource("orders", ResourceIdentifier.parse("internal-orders"))


def test_load_prefixes_path(tmp_path):
    d = copy.deepcopy(PIPELINE_DICT)
    d["name"] = ""
    path = tmp_path / "demo.yaml"
    path.write_text(yaml.safe_dump(d))
    with pytest.raises(ValidationError, match="demo.yaml: pipeline 'demo' name cannot be empty"):
        load_pipeline_config(str(path))


def test_invalid_pipeline_id():
    _invalid(lambda d: d.update({"pipeline-id": "demo-pipeline"}), "invalid pipeline id")


def test_missing_attribute():
    _invalid(lambda d: d.pop("version"), "requires a 'version' attribute")


def test_empty_description():
    _invalid(lambda d: d.update(description=""), "description cannot be empty")


def test_forbidden_url_placeholder():
    _invalid(lambda d: d.update({"viewer-url": "${PROCESSOR_ID}"}), "'PROCESSOR_ID' is not allowed")


def test_duplicate_resource():
    _invalid(lambda d: d["resources"].append(dict(d["resources"][0])), "resource 'orders' is defined more than once")


def test_duplicate_processor():
    _invalid(lambda d: d["processors"].append(dict(d["processors"][0])), "processor 'first' is defined more than once")


def test_undefined_resource():
    _invalid(lambda d: d["connections"][0].update(source="nothing"), "undefined resource 'nothing'")


def test_undefined_processor():
    def mutate(d):
        d["connections"][0]["target"] = {"processor-id": "other", "junction": "inbound-topic"}

    _invalid(mutate, "undefined processor 'other'")


def test_resource_to_resource_connection():
    _invalid(lambda d: d["connections"].append({"source": "orders", "target": "scratch"}), "resources to resources")


def test_connection_without_target():
    _invalid(lambda d: d["connections"][0].pop("target"), "requires 'source' and 'target'")
