"""Template placeholders: ``${NAME}`` tokens resolved against a closed set of values."""

import random
import re
import uuid
from enum import Enum

from trifonius.errors import UnresolvedPlaceholder, ValidationError
from trifonius.target import EngineTarget

TOKEN_PATTERN = re.compile(r"\$\{([A-Z][A-Z0-9_]*)\}")


class Placeholder(str, Enum):
    APP_DOMAIN = "APP_DOMAIN"
    CONSOLE_URL = "CONSOLE_URL"
    DSH_INTERNAL_DOMAIN = "DSH_INTERNAL_DOMAIN"
    MONITORING_URL = "MONITORING_URL"
    PIPELINE_ID = "PIPELINE_ID"
    PLATFORM = "PLATFORM"
    PROCESSOR_ID = "PROCESSOR_ID"
    PROCESSOR_REALIZATION_ID = "PROCESSOR_REALIZATION_ID"
    PUBLIC_VHOSTS_DOMAIN = "PUBLIC_VHOSTS_DOMAIN"
    RANDOM = "RANDOM"
    RANDOM_UUID = "RANDOM_UUID"
    REALM = "REALM"
    REST_ACCESS_TOKEN_URL = "REST_ACCESS_TOKEN_URL"
    REST_API_URL = "REST_API_URL"
    SERVICE_NAME = "SERVICE_NAME"
    TENANT = "TENANT"
    USER = "USER"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Placeholder | None":
        try:
            return cls(name)
        except ValueError:
            return None


TemplateMapping = dict[Placeholder, str]

# Placeholders that may be used in the more-info, metrics and viewer urls of a processor
CONFIG_TEMPLATE_PLACEHOLDERS = frozenset(
    {
        Placeholder.APP_DOMAIN,
        Placeholder.CONSOLE_URL,
        Placeholder.MONITORING_URL,
        Placeholder.PLATFORM,
        Placeholder.PUBLIC_VHOSTS_DOMAIN,
        Placeholder.REALM,
        Placeholder.REST_ACCESS_TOKEN_URL,
        Placeholder.REST_API_URL,
        Placeholder.TENANT,
        Placeholder.USER,
    }
)


def resolve_template(template: str, mapping: TemplateMapping) -> str:
    """Substitute every ``${NAME}`` token in *template* with its value from *mapping*.

    Values are inserted verbatim, a value that itself contains a token is not
    resolved again. Text outside tokens is kept as is.

    Raises:
        UnresolvedPlaceholder: a token names an unknown placeholder, or a known
            placeholder that has no value in *mapping*.
    """

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        placeholder = Placeholder.from_name(name)
        if placeholder is None:
            raise UnresolvedPlaceholder(name, "is not recognized")
        value = mapping.get(placeholder)
        if value is None:
            raise UnresolvedPlaceholder(name)
        return value

    return TOKEN_PATTERN.sub(_substitute, template)


def validate_template(template: str, allowed) -> None:
    """Check that every token in *template* names a placeholder in *allowed*.

    Raises:
        ValidationError: a token is unknown or not allowed.
    """
    for name in TOKEN_PATTERN.findall(template):
        placeholder = Placeholder.from_name(name)
        if placeholder is None:
            raise ValidationError(f"invalid template because placeholder '{name}' is not recognized")
        if placeholder not in allowed:
            raise ValidationError(f"invalid template because placeholder '{name}' is not allowed")


def template_mapping(target: EngineTarget) -> TemplateMapping:
    """Build the placeholder values available for *target*.

    Per-deployment values (processor id, pipeline id, service name) are added by
    the caller.
    """
    platform = target.platform
    tenant = target.tenant
    mapping: TemplateMapping = {
        Placeholder.PLATFORM: platform.name,
        Placeholder.RANDOM: f"{random.randint(0x10000000, 0xFFFFFFFF):x}",
        Placeholder.RANDOM_UUID: str(uuid.uuid4()),
        Placeholder.REALM: platform.realm,
        Placeholder.REST_ACCESS_TOKEN_URL: platform.rest_access_token_url,
        Placeholder.REST_API_URL: platform.rest_api_url,
        Placeholder.TENANT: tenant,
        Placeholder.USER: target.user,
    }
    optional = {
        Placeholder.APP_DOMAIN: platform.app_domain(tenant),
        Placeholder.CONSOLE_URL: platform.console_url,
        Placeholder.DSH_INTERNAL_DOMAIN: platform.dsh_internal_domain(tenant),
        Placeholder.MONITORING_URL: platform.monitoring_url(tenant),
        Placeholder.PUBLIC_VHOSTS_DOMAIN: platform.public_vhosts_domain,
    }
    mapping.update({k: v for k, v in optional.items() if v is not None})
    return mapping
