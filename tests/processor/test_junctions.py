"""Tests for junction binding."""

import pytest

from trifonius.errors import CardinalityViolation, MissingRequiredJunction, UnknownResource, WrongResourceType
from trifonius.identifiers import JunctionId
from trifonius.processor.junctions import resolve_junction, resolve_junctions
from trifonius.processor.types import JunctionConfig, JunctionDirection
from trifonius.resource.types import ResourceIdentifier

INBOUND = JunctionDirection.INBOUND


def _ids(*representations):
    return [ResourceIdentifier.parse(r) for r in representations]


def _junction(minimum=None, maximum=None, separator=","):
    return JunctionConfig("Junction", "Junction description", minimum, maximum, separator=separator)


def test_single_resource(resource_registry):
    value = resolve_junction(INBOUND, JunctionId("j1"), _junction(), _ids("internal-orders"), resource_registry)
    assert value == "internal.orders.tenant"


def test_multiple_resources_joined_in_order(resource_registry):
    value = resolve_junction(
        INBOUND, JunctionId("j1"), _junction(1, 3), _ids("stream-weather", "internal-orders"), resource_registry
    )
    assert value == "stream.weather,internal.orders.tenant"


def test_custom_separator(resource_registry):
    value = resolve_junction(
        INBOUND,
        JunctionId("j1"),
        _junction(0, 2, separator=";"),
        _ids("internal-orders", "scratch-tenant-scratch-topic"),
        resource_registry,
    )
    assert value == "internal.orders.tenant;scratch.scratch-topic.tenant"


def test_too_few_resources(resource_registry):
    with pytest.raises(CardinalityViolation, match="at least 2") as exc:
        resolve_junction(INBOUND, JunctionId("j1"), _junction(2, 3), _ids("internal-orders"), resource_registry)
    assert exc.value.count == 1


def test_too_many_resources(resource_registry):
    with pytest.raises(CardinalityViolation, match="at most 1"):
        resolve_junction(
            INBOUND, JunctionId("j1"), _junction(), _ids("internal-orders", "stream-weather"), resource_registry
        )


def test_unbounded_maximum(resource_registry):
    resources = _ids("internal-orders", "stream-weather", "scratch-tenant-scratch-topic")
    value = resolve_junction(INBOUND, JunctionId("j1"), _junction(1, None), resources, resource_registry)
    assert value.count(",") == 2


def test_unknown_resource(resource_registry):
    with pytest.raises(UnknownResource, match="'nothing-here:dsh-topic'"):
        resolve_junction(INBOUND, JunctionId("j1"), _junction(), _ids("nothing-here"), resource_registry)


def test_wrong_resource_type(resource_registry):
    junction = JunctionConfig("Junction", "Junction description", allowed_resource_types=frozenset())
    with pytest.raises(WrongResourceType):
        resolve_junction(INBOUND, JunctionId("j1"), junction, _ids("internal-orders"), resource_registry)


def test_type_checked_before_cardinality(resource_registry):
    junction = JunctionConfig("Junction", "Junction description", 2, 2, allowed_resource_types=frozenset())
    with pytest.raises(WrongResourceType):
        resolve_junction(INBOUND, JunctionId("j1"), junction, _ids("internal-orders"), resource_registry)


# ── resolve_junctions ────────────────────────────────────────────


def test_missing_required_junction(resource_registry):
    configs = {JunctionId("j1"): _junction()}
    with pytest.raises(MissingRequiredJunction) as exc:
        resolve_junctions(INBOUND, {}, configs, resource_registry)
    assert exc.value.junction_id == "j1"
    assert exc.value.direction == "inbound"


@pytest.mark.parametrize("minimum", [0, None])
def test_optional_junction_without_entry_is_missing(resource_registry, minimum):
    configs = {JunctionId("j1"): _junction(minimum, 2)}
    with pytest.raises(MissingRequiredJunction, match="required inbound junction resources 'j1' are not provided"):
        resolve_junctions(INBOUND, {}, configs, resource_registry)


def test_unconnectable_junction_without_entry_left_out(resource_registry):
    configs = {JunctionId("j1"): _junction(), JunctionId("j2"): _junction(0, 0)}
    bindings = {JunctionId("j1"): _ids("internal-orders")}
    assert resolve_junctions(INBOUND, bindings, configs, resource_registry) == {"j1": "internal.orders.tenant"}


def test_optional_junction_bound_to_empty_list(resource_registry):
    configs = {JunctionId("j1"): _junction(), JunctionId("j2"): _junction(0, 1)}
    bindings = {JunctionId("j1"): _ids("internal-orders"), JunctionId("j2"): []}
    assert resolve_junctions(INBOUND, bindings, configs, resource_registry) == {
        "j1": "internal.orders.tenant",
        "j2": "",
    }


def test_required_junction_bound_to_empty_list(resource_registry):
    configs = {JunctionId("j1"): _junction()}
    with pytest.raises(CardinalityViolation):
        resolve_junctions(INBOUND, {JunctionId("j1"): []}, configs, resource_registry)


def test_undeclared_bindings_ignored(resource_registry):
    configs = {JunctionId("j1"): _junction()}
    bindings = {JunctionId("j1"): _ids("internal-orders"), JunctionId("other"): _ids("nothing-here")}
    assert resolve_junctions(INBOUND, bindings, configs, resource_registry) == {"j1": "internal.orders.tenant"}
