"""Tests for processor configuration loading and validation."""

import copy
import json

import pytest
import yaml

from trifonius.errors import ValidationError
from trifonius.processor.config import load_config_file, load_processor_config, processor_config_from_dict
from trifonius.processor.types import (
    DeploymentParameterType,
    JunctionConfig,
    ProcessorTechnology,
    ServiceConfig,
    VariableType,
)
from trifonius.resource.types import ResourceType
from trifonius.version import Version


# ── load_processor_config ────────────────────────────────────────


def test_load_service_config(service_toml):
    config = load_processor_config(service_toml, ProcessorTechnology.DSH_SERVICE)

    assert config.technology == ProcessorTechnology.DSH_SERVICE
    assert config.realization_id == "test-service"
    assert config.identity.description == "Test service description"
    assert config.identity.version == Version(0, 1, 2)
    assert config.identity.metadata == (("metadata1", "METADATA1"), ("metadata2", "METADATA2"))
    assert isinstance(config.platform, ServiceConfig)


def test_load_junctions(service_toml):
    config = load_processor_config(service_toml)

    inbound = config.inbound_junctions["inbound-topic"]
    assert inbound.label == "Test inbound topic"
    assert inbound.allowed_resource_types == frozenset({ResourceType.DSH_TOPIC})
    assert inbound.range == (1, 1)
    assert config.outbound_junctions["outbound-topic"].range == (0, 2)


def test_load_parameters(service_toml):
    config = load_processor_config(service_toml)

    retries = config.parameter("retries")
    assert retries.type == DeploymentParameterType.FREE_TEXT
    assert retries.optional is True
    assert retries.default == "3"

    mode = config.parameter("mode")
    assert mode.type == DeploymentParameterType.SELECTION
    assert [o.id for o in mode.options] == ["fast", "safe"]
    assert mode.options[1].description == "Safe mode"


def test_load_service_block(service_toml):
    service = load_processor_config(service_toml).platform

    assert service.image == "registry.cp.kpn-dsh.com/${TENANT}/test-service:0.1.2"
    assert service.needs_token is True
    assert service.single_instance is False
    assert service.exposed_ports["8080"].paths == ("/api",)
    assert service.exposed_ports["8080"].tls == "auto"
    assert service.health_check.port == 8081
    assert service.metrics.path == "/metrics"
    assert service.secrets[0].name == "test-secret"
    assert service.volumes == {"/data": "test-volume"}
    assert service.environment_variables["RETRIES"].type == VariableType.DEPLOYMENT_PARAMETER
    assert [p.id for p in service.profiles] == ["minimal", "large"]
    assert service.profiles[1].environment_variables["LOG_LEVEL"].value == "warn"


def test_load_yaml_and_json_configs(tmp_path, service_dict):
    yaml_path = tmp_path / "service.yaml"
    yaml_path.write_text(yaml.safe_dump(service_dict))
    json_path = tmp_path / "service.json"
    json_path.write_text(json.dumps(service_dict))

    assert load_processor_config(str(yaml_path)).realization_id == "test-service"
    assert load_processor_config(str(json_path)).realization_id == "test-service"


def test_load_wrong_technology(service_toml):
    with pytest.raises(ValidationError, match="doesn't match expected type 'dsh-app'"):
        load_processor_config(service_toml, ProcessorTechnology.DSH_APP)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_processor_config(str(tmp_path / "missing.toml"))


def test_load_unsupported_extension(tmp_path):
    path = tmp_path / "service.ini"
    path.write_text("[processor]\n")
    with pytest.raises(ValidationError, match="unsupported configuration file type"):
        load_config_file(str(path))


def test_load_unparsable_toml(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[processor\n")
    with pytest.raises(ValidationError, match="could not parse"):
        load_config_file(str(path))


# ── Validation ───────────────────────────────────────────────────


def _invalid(service_dict, mutate, match):
    d = copy.deepcopy(service_dict)
    mutate(d)
    with pytest.raises(ValidationError, match=match):
        processor_config_from_dict(d)


def test_empty_description(service_dict):
    _invalid(service_dict, lambda d: d["processor"].update(description=""), "description cannot be empty")


def test_url_template_with_forbidden_placeholder(service_dict):
    _invalid(
        service_dict,
        lambda d: d["processor"].update({"viewer-url": "https://x/${SERVICE_NAME}"}),
        "'SERVICE_NAME' is not allowed",
    )


def test_empty_url_template(service_dict):
    _invalid(service_dict, lambda d: d["processor"].update({"metrics-url": ""}), "metrics-url template cannot be empty")


def test_junction_used_in_both_directions(service_dict):
    def mutate(d):
        d["outbound-junctions"]["inbound-topic"] = d["inbound-junctions"]["inbound-topic"]

    _invalid(service_dict, mutate, "'inbound-topic' used as inbound as well as outbound id")


def test_missing_platform_block(service_dict):
    _invalid(service_dict, lambda d: d.pop("dshservice"), "dsh-service configuration missing")


def test_empty_image(service_dict):
    _invalid(service_dict, lambda d: d["dshservice"].update(image=""), "image cannot be empty")


def test_empty_spread_group(service_dict):
    _invalid(service_dict, lambda d: d["dshservice"].update({"spread-group": ""}), "spread group cannot be empty")


def test_empty_exposed_ports(service_dict):
    _invalid(service_dict, lambda d: d["dshservice"].update({"exposed-ports": {}}), "exposed ports cannot be empty")


def test_invalid_tls(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["exposed-ports"]["8080"].update(tls="sometimes"),
        "invalid tls value 'sometimes'",
    )


def test_no_profiles(service_dict):
    _invalid(service_dict, lambda d: d["dshservice"].update(profiles=[]), "no profiles defined")


def test_profile_with_too_few_cpus(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["profiles"][0].update(cpus=0.05),
        "profile 'minimal' has number of cpus smaller than 0.1",
    )


def test_duplicate_profile(service_dict):
    def mutate(d):
        d["dshservice"]["profiles"][1]["id"] = "minimal"

    _invalid(service_dict, mutate, "profile 'minimal' is defined more than once")


def test_variable_references_unspecified_parameter(service_dict):
    def mutate(d):
        d["dshservice"]["environment-variables"]["OTHER"] = {"type": "deployment-parameter", "id": "other"}

    _invalid(service_dict, mutate, "variable 'OTHER' references unspecified deployment parameter 'other'")


def test_variable_reference_without_declared_parameters(service_dict):
    def mutate(d):
        d.pop("deploy")
        for name in ("RETRIES", "MODE"):
            d["dshservice"]["environment-variables"].pop(name)
        d["dshservice"]["environment-variables"]["OTHER"] = {"type": "deployment-parameter", "id": "other"}

    _invalid(service_dict, mutate, "but none are specified")


def test_variable_without_id(service_dict):
    def mutate(d):
        d["dshservice"]["environment-variables"]["INBOUND"] = {"type": "inbound-junction"}

    _invalid(service_dict, mutate, "variable 'INBOUND' referencing inbound junction requires a 'id' attribute")


def test_variable_with_empty_id(service_dict):
    def mutate(d):
        d["dshservice"]["environment-variables"]["OUTBOUND"] = {"type": "outbound-junction", "id": ""}

    _invalid(service_dict, mutate, "requires a non-empty 'id' attribute")


def test_value_variable_without_value(service_dict):
    def mutate(d):
        d["dshservice"]["environment-variables"]["LOG_LEVEL"] = {"type": "value"}

    _invalid(service_dict, mutate, "variable 'LOG_LEVEL' requires a 'value' attribute")


def test_unknown_variable_type(service_dict):
    def mutate(d):
        d["dshservice"]["environment-variables"]["LOG_LEVEL"] = {"type": "secret", "value": "x"}

    _invalid(service_dict, mutate, "invalid value 'secret'")


def test_selection_without_options(service_dict):
    _invalid(service_dict, lambda d: d["deploy"]["parameters"][1].pop("options"), "missing options attribute")


def test_selection_with_empty_options(service_dict):
    _invalid(service_dict, lambda d: d["deploy"]["parameters"][1].update(options=[]), "empty options list")


def test_option_with_empty_label(service_dict):
    _invalid(
        service_dict,
        lambda d: d["deploy"]["parameters"][1].update(options=[{"id": "safe", "label": ""}]),
        "empty label for parameter 'mode.safe'",
    )


def test_optional_parameter_without_default(service_dict):
    _invalid(
        service_dict,
        lambda d: d["deploy"]["parameters"][0].pop("default"),
        "optional parameter 'retries' requires a default value",
    )


def test_illegal_parameter_id(service_dict):
    _invalid(service_dict, lambda d: d["deploy"]["parameters"][0].update(id="Retries"), "illegal parameter identifier")


# ── JunctionConfig ───────────────────────────────────────────────


@pytest.mark.parametrize(
    "minimum, maximum, expected",
    [(None, None, (1, 1)), (None, 3, (0, 3)), (2, None, (2, None)), (0, 0, (0, 0)), (1, 4, (1, 4))],
)
def test_junction_range(minimum, maximum, expected):
    assert JunctionConfig("label", "description", minimum, maximum).range == expected


def test_junction_maximum_below_one_without_minimum():
    with pytest.raises(ValidationError, match="must be 1 or greater"):
        JunctionConfig("label", "description", None, 0).validate("j1")


def test_junction_minimum_above_maximum():
    with pytest.raises(ValidationError, match="greater or equal to the minimum"):
        JunctionConfig("label", "description", 3, 2).validate("j1")


def test_junction_unknown_resource_type():
    with pytest.raises(ValidationError, match="invalid value 'kafka'"):
        JunctionConfig.from_dict("j1", {"label": "l", "description": "d", "allowed-resource-types": ["kafka"]})


def test_junction_separator():
    junction = JunctionConfig.from_dict(
        "j1", {"label": "l", "description": "d", "multiple-connections-separator": ";"}
    )
    assert junction.separator == ";"


# ── Numeric attributes ───────────────────────────────────────────


def test_profile_memory_not_a_number(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["profiles"][0].update(mem="lots"),
        "profile 'minimal' attribute 'mem' must be an integer, got 'lots'",
    )


def test_profile_cpus_not_a_number(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["profiles"][1].update(cpus="many"),
        "profile 'large' attribute 'cpus' must be a number",
    )


def test_profile_instances_as_boolean(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["profiles"][0].update(instances=True),
        "profile 'minimal' attribute 'instances' must be an integer",
    )


def test_profile_integer_cpus_accepted(service_dict):
    service_dict["dshservice"]["profiles"][1]["cpus"] = 2
    assert processor_config_from_dict(service_dict).profiles[1].cpus == 2.0


def test_junction_bound_as_string(service_dict):
    _invalid(
        service_dict,
        lambda d: d["inbound-junctions"]["inbound-topic"].update({"minimum-number-of-connections": "1"}),
        "junction 'inbound-topic' attribute 'minimum-number-of-connections' must be an integer",
    )


def test_health_check_port_not_a_number(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["health-check"].update(port="x"),
        "health check attribute 'port' must be an integer, got 'x'",
    )


def test_metrics_port_not_a_number(service_dict):
    _invalid(
        service_dict,
        lambda d: d["dshservice"]["metrics"].update(port="x"),
        "metrics attribute 'port' must be an integer",
    )
