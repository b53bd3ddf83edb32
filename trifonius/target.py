"""Deployment target: the platform and tenant the engine talks to.

The target is built once (usually with ``EngineTarget.from_env()``) and passed
explicitly to everything that needs tenant or platform context.
"""

import logging
import os
from dataclasses import dataclass

from trifonius.errors import ValidationError

logger = logging.getLogger(__name__)

ENV_PLATFORM = "TRIFONIUS_TARGET_PLATFORM"
ENV_TENANT = "TRIFONIUS_TARGET_TENANT"
ENV_TOKEN = "TRIFONIUS_TARGET_TOKEN"
ENV_CONFIG_DIR = "TRIFONIUS_CONFIG_DIR"
ENV_DATASTREAMS_FILE = "TRIFONIUS_DATASTREAMS_FILE"

DEFAULT_CONFIG_DIR = "config"


def tenant_user_env_var(tenant: str) -> str:
    """Name of the env var holding the user id for *tenant*."""
    return f"TRIFONIUS_TARGET_TENANT_{tenant.upper().replace('-', '_')}_USER"


@dataclass(frozen=True)
class Platform:
    """A DSH platform and the endpoints derived from it."""

    name: str
    realm: str
    rest_api_url: str
    rest_access_token_url: str
    console_url: str | None = None
    domain: str | None = None

    def monitoring_url(self, tenant: str) -> str | None:
        if self.domain is None:
            return None
        return f"https://monitoring-{tenant}.{self.domain}"

    @property
    def public_vhosts_domain(self) -> str | None:
        return self.domain

    def dsh_internal_domain(self, tenant: str) -> str | None:
        if self.domain is None:
            return None
        return f"{tenant}.marathon.mesos"

    def app_domain(self, tenant: str) -> str | None:
        if self.domain is None:
            return None
        return f"{tenant}.{self.domain}"

    def __str__(self) -> str:
        return self.name


def _platform(name, realm, api_domain, console_url=None, domain=None) -> Platform:
    return Platform(
        name=name,
        realm=realm,
        rest_api_url=f"https://api.{api_domain}/resources/v0",
        rest_access_token_url=f"https://auth.{api_domain}/auth/realms/{realm}/protocol/openid-connect/token",
        console_url=console_url,
        domain=domain,
    )


PLATFORMS: dict[str, Platform] = {
    "nplz": _platform(
        "nplz",
        "dev-lz-dsh",
        "dsh-dev.dsh.np.aws.kpn.com",
        console_url="https://console.dsh-dev.dsh.np.aws.kpn.com",
        domain="dsh-dev.dsh.np.aws.kpn.com",
    ),
    "poc": _platform(
        "poc",
        "poc-dsh",
        "poc.kpn-dsh.com",
        console_url="https://console.poc.kpn-dsh.com",
        domain="poc.kpn-dsh.com",
    ),
    "prod": _platform("prod", "tt-dsh", "kpn-dsh.com"),
    "prodaz": _platform("prodaz", "prod-azure-dsh", "az.kpn-dsh.com"),
    "prodlz": _platform(
        "prodlz",
        "prod-lz-dsh",
        "dsh-prod.dsh.prod.aws.kpn.com",
        console_url="https://console.dsh-prod.dsh.prod.aws.kpn.com",
        domain="dsh-prod.dsh.prod.aws.kpn.com",
    ),
}


def get_platform(name: str) -> Platform:
    """Look up a platform by name (case-insensitive)."""
    platform = PLATFORMS.get(name.strip().lower())
    if platform is None:
        raise ValidationError(f"invalid platform name {name}. Available platforms: {', '.join(PLATFORMS)}")
    return platform


@dataclass(frozen=True)
class EngineTarget:
    """Tenant context for resolution and for the platform API client."""

    platform: Platform
    tenant: str
    user: str
    token: str | None = None

    @classmethod
    def from_env(cls, environ=None) -> "EngineTarget":
        """Build the target from ``TRIFONIUS_TARGET_*`` environment variables."""
        environ = os.environ if environ is None else environ

        platform_name = environ.get(ENV_PLATFORM)
        if not platform_name:
            raise ValidationError(f"environment variable {ENV_PLATFORM} not set")
        tenant = environ.get(ENV_TENANT)
        if not tenant:
            raise ValidationError(f"environment variable {ENV_TENANT} not set")
        user_var = tenant_user_env_var(tenant)
        user = environ.get(user_var)
        if not user:
            raise ValidationError(f"environment variable {user_var} not set")

        target = cls(
            platform=get_platform(platform_name),
            tenant=tenant,
            user=user,
            token=environ.get(ENV_TOKEN) or None,
        )
        logger.debug(f"Target: tenant {target.tenant} on platform {target.platform} as user {target.user}")
        return target


def config_dir(environ=None) -> str:
    """Directory holding processor and pipeline configuration files."""
    environ = os.environ if environ is None else environ
    return environ.get(ENV_CONFIG_DIR) or DEFAULT_CONFIG_DIR
