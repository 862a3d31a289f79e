"""
REST session collaborator.

Sessions talk to a site's administrative REST endpoints through a shared
httpx.AsyncClient. The client is the shared connection handle: it is
created once per run and outlives the per-target sessions.

Endpoints, relative to the site URL:
  GET  policy                  read the version policy
  PUT  policy                  apply a version policy
  GET  policy/status           read policy application progress
  POST cleanup-jobs            queue a version cleanup job
  GET  cleanup-jobs/latest     read the most recent cleanup job

Non-2xx responses raise httpx.HTTPStatusError. Deciding which of those are
throttle signals is left to HttpErrorClassifier.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, SecretStr

from ..operations import CleanupJobSpec, VersionPolicy
from ..strategies.errors import ContextEstablishmentError

logger = logging.getLogger(__name__)


class ClientCredentials(BaseModel):
    """Client identity used to authenticate against every site."""

    client_id: str
    tenant: str = ""
    access_token: SecretStr

    def headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.access_token.get_secret_value()}",
            "X-Client-Id": self.client_id,
        }
        if self.tenant:
            headers["X-Tenant"] = self.tenant
        return headers


def _join(target: str, path: str) -> str:
    return f"{target.rstrip('/')}/{path}"


class RestSiteSession:
    """Session bound to one site."""

    def __init__(self, client: httpx.AsyncClient, target: str, headers: dict[str, str]):
        self.client = client
        self.target = target
        self._headers = headers
        self._closed = False

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if self._closed:
            raise RuntimeError(f"Session for {self.target} is closed")
        response = await self.client.request(
            method, _join(self.target, path), headers=self._headers, json=json
        )
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def get_policy(self) -> Any:
        return await self._request("GET", "policy")

    async def set_policy(self, policy: VersionPolicy) -> Any:
        return await self._request("PUT", "policy", json=policy.model_dump(mode="json"))

    async def get_policy_status(self) -> Any:
        return await self._request("GET", "policy/status")

    async def create_cleanup_job(self, job: CleanupJobSpec) -> Any:
        return await self._request("POST", "cleanup-jobs", json=job.model_dump(mode="json"))

    async def get_cleanup_job_status(self) -> Any:
        return await self._request("GET", "cleanup-jobs/latest")

    async def close(self) -> None:
        # The shared client stays open for the next target
        self._closed = True


class RestSessionFactory:
    """
    Opens RestSiteSessions after probing each site with the run's credentials.

    Probe failures are reported as ContextEstablishmentError so the batch can
    record them and move on.
    """

    def __init__(self, client: httpx.AsyncClient, credentials: ClientCredentials):
        self.client = client
        self.credentials = credentials

    async def connect(self, target: str) -> RestSiteSession:
        headers = self.credentials.headers()
        try:
            response = await self.client.get(target, headers=headers)
        except httpx.TransportError as e:
            raise ContextEstablishmentError(
                target, f"unreachable ({type(e).__name__}: {e})"
            ) from e

        if response.status_code in (401, 403):
            raise ContextEstablishmentError(
                target, f"authorization denied (HTTP {response.status_code})"
            )
        if response.is_error:
            raise ContextEstablishmentError(
                target, f"site probe failed (HTTP {response.status_code})"
            )

        logger.debug(f"Session established for {target}")
        return RestSiteSession(self.client, target, headers)
