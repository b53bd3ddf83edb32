"""Platform REST API access."""

from trifonius.platform.api import AllocationStatus, DshApiClient, PlatformApi

__all__ = [
    "AllocationStatus",
    "DshApiClient",
    "PlatformApi",
]
