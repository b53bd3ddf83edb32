"""Shared pytest fixtures for all test modules."""

import json
import os
import subprocess
import sys
import tomllib
from unittest.mock import AsyncMock

import pytest

from trifonius.platform.api import AllocationStatus
from trifonius.processor.config import processor_config_from_dict
from trifonius.resource.registry import ResourceRegistry
from trifonius.target import EngineTarget, get_platform

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

SERVICE_TOML = """\
[processor]
processor-technology = "dsh-service"
processor-realization-id = "test-service"
label = "Test service"
description = "Test service description"
version = "0.1.2"
more-info-url = "${CONSOLE_URL}/#/profiles/${TENANT}/services"
metadata = [["metadata1", "METADATA1"], ["metadata2", "METADATA2"]]

[inbound-junctions.inbound-topic]
allowed-resource-types = ["dsh-topic"]
label = "Test inbound topic"
description = "Test inbound topic description"
minimum-number-of-connections = 1
maximum-number-of-connections = 1

[outbound-junctions.outbound-topic]
allowed-resource-types = ["dsh-topic"]
label = "Test outbound topic"
description = "Test outbound topic description"
maximum-number-of-connections = 2

[[deploy.parameters]]
type = "free-text"
id = "retries"
label = "Retries"
description = "Number of retries"
optional = true
default = "3"

[[deploy.parameters]]
type = "selection"
id = "mode"
label = "Mode"
description = "Processing mode"
options = ["fast", { id = "safe", label = "Safe", description = "Safe mode" }]

[dshservice]
image = "registry.cp.kpn-dsh.com/${TENANT}/test-service:0.1.2"
needs-token = true
single-instance = false

[dshservice.exposed-ports.8080]
auth = "basic-auth@realm:user:hash"
paths = ["/api"]
tls = "auto"
vhost = "{ vhost('test.${PUBLIC_VHOSTS_DOMAIN}') }"

[dshservice.health-check]
path = "/health"
port = 8081
protocol = "http"

[dshservice.metrics]
path = "/metrics"
port = 9090

[[dshservice.secrets]]
name = "test-secret"
injections = [{ env = "SECRET" }]

[dshservice.volumes]
"/data" = "test-volume"

[dshservice.environment-variables]
INBOUND = { type = "inbound-junction", id = "inbound-topic" }
OUTBOUND = { type = "outbound-junction", id = "outbound-topic" }
RETRIES = { type = "deployment-parameter", id = "retries" }
MODE = { type = "deployment-parameter", id = "mode" }
TENANT_USER = { type = "template", value = "${TENANT}-${USER}" }
LOG_LEVEL = { type = "value", value = "info" }

[[dshservice.profiles]]
id = "minimal"
label = "Minimal"
description = "Minimal profile"
cpus = 0.1
instances = 1
mem = 256

[[dshservice.profiles]]
id = "large"
label = "Large"
description = "Large profile"
cpus = 2.0
instances = 3
mem = 4096
environment-variables = { LOG_LEVEL = { type = "value", value = "warn" } }
"""

DATASTREAMS = {
    "streams": {
        "internal.orders": {
            "name": "internal.orders",
            "cluster": "/tt",
            "read": "internal\\.orders\\.[^.]*",
            "write": "internal.orders.tenant",
            "partitions": 3,
            "replication": 3,
            "partitioner": "default-partitioner",
            "partitioningDepth": 0,
            "canRetain": True,
        },
        "stream.weather": {
            "name": "stream.weather",
            "cluster": "/tt",
            "read": "stream\\.weather\\.[^.]*",
            "write": "",
            "partitions": 1,
            "replication": 3,
        },
    }
}


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the trifonius CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "trifonius.trifonius", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def target():
    return EngineTarget(platform=get_platform("nplz"), tenant="tenant", user="1903:1903", token="test-token")


@pytest.fixture
def resource_registry(target):
    return ResourceRegistry.from_datastreams(DATASTREAMS, target, topic_ids=["scratch-topic"])


@pytest.fixture
def api():
    """Stand-in for the platform API; every call succeeds."""
    mock = AsyncMock()
    mock.get_allocation_status.return_value = AllocationStatus(provisioned=True)
    return mock


@pytest.fixture
def config_dir(tmp_path):
    """Create a temp config directory with one dsh-service processor."""
    processors_dir = tmp_path / "processors" / "dshservice"
    processors_dir.mkdir(parents=True)
    (processors_dir / "test-service.toml").write_text(SERVICE_TOML)
    return tmp_path


@pytest.fixture
def service_toml(config_dir):
    """Path of the sample dsh-service configuration file."""
    return str(config_dir / "processors" / "dshservice" / "test-service.toml")


@pytest.fixture
def service_dict():
    """The sample dsh-service configuration as a parsed dict."""
    return tomllib.loads(SERVICE_TOML)


@pytest.fixture
def service_config(service_dict):
    return processor_config_from_dict(service_dict)


@pytest.fixture
def datastreams_file(tmp_path):
    path = tmp_path / "datastreams.json"
    path.write_text(json.dumps(DATASTREAMS))
    return str(path)
