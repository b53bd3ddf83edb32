"""DSH platform REST API: create, delete and inspect application deployments."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from trifonius.errors import NotAuthorized, NotFound, UnexpectedApiError
from trifonius.target import EngineTarget

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class AllocationStatus:
    provisioned: bool
    notifications: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> "AllocationStatus":
        return cls(provisioned=bool(d.get("provisioned", False)), notifications=list(d.get("notifications") or []))


class PlatformApi(Protocol):
    """Capability the processor lifecycle needs from the platform."""

    async def create(self, name: str, descriptor: dict) -> None: ...

    async def delete(self, name: str) -> None: ...

    async def get_allocation_status(self, name: str) -> AllocationStatus: ...


def _raise_for_status(resp: httpx.Response, method: str, url: str):
    if resp.is_success:
        return
    if resp.status_code == 404:
        raise NotFound(f"{method} {url}: not found")
    if resp.status_code in (401, 403):
        raise NotAuthorized(f"{method} {url}: not authorized ({resp.status_code})")
    raise UnexpectedApiError(f"{method} {url}: {resp.status_code} {resp.text}".strip())


class DshApiClient:
    """PlatformApi implementation over the DSH REST API.

    In dry-run mode requests are logged instead of sent, and reads return
    empty results.
    """

    def __init__(self, target: EngineTarget, api_url: str | None = None, dry_run: bool = False, transport=None):
        self.target = target
        self.api_url = (api_url or target.platform.rest_api_url).rstrip("/")
        self.dry_run = dry_run
        self._transport = transport

    # ── API helpers ───────────────────────────────────────────────

    def _application_path(self, name: str, resource: str) -> str:
        return f"/allocation/{self.target.tenant}/application/{name}/{resource}"

    async def _request(self, method: str, path: str, data=None):
        """Make an authenticated request and return the parsed JSON body, if any."""
        url = f"{self.api_url}{path}"

        if self.dry_run:
            logger.info(f"[dry-run] {method} {url}")
            if data is not None:
                logger.info(f"[dry-run] payload: {json.dumps(data, indent=2)}")
            return None

        headers = {"Accept": "application/json"}
        if self.target.token:
            headers["Authorization"] = f"Bearer {self.target.token}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(method, url, json=data, headers=headers, timeout=DEFAULT_TIMEOUT)
        except httpx.HTTPError as e:
            raise UnexpectedApiError(f"{method} {url}: {e}") from e
        _raise_for_status(resp, method, url)
        if not resp.content:
            return None
        return resp.json()

    # ── PlatformApi ───────────────────────────────────────────────

    async def create(self, name: str, descriptor: dict) -> None:
        """PUT /allocation/{tenant}/application/{name}/configuration"""
        await self._request("PUT", self._application_path(name, "configuration"), descriptor)

    async def delete(self, name: str) -> None:
        """DELETE /allocation/{tenant}/application/{name}/configuration"""
        await self._request("DELETE", self._application_path(name, "configuration"))

    async def get_allocation_status(self, name: str) -> AllocationStatus:
        """GET /allocation/{tenant}/application/{name}/status"""
        result = await self._request("GET", self._application_path(name, "status"))
        if result is None:
            return AllocationStatus(provisioned=False)
        return AllocationStatus.from_dict(result)

    async def list_topic_ids(self) -> list[str]:
        """GET /allocation/{tenant}/topic"""
        result = await self._request("GET", f"/allocation/{self.target.tenant}/topic")
        return sorted(result or [])
