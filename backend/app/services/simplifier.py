"""Simplifier.net catalog client.

Thin async wrapper around the Simplifier REST API used by the last wizard
step: list/create projects, upload a generated StructureDefinition, create an
ImplementationGuide that references uploaded profiles, and run the remote
validator. Every call requires an API key.
"""

import logging
from typing import Any

import httpx

from app.errors import NotConfiguredError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.simplifier.net"
PUBLIC_SITE_URL = "https://simplifier.net"
DEFAULT_TIMEOUT_SECONDS = 55.0

NOT_CONFIGURED_MESSAGE = "Simplifier API key not configured"


def build_implementation_guide(ig_name: str, profiles: list[dict[str, Any]]) -> dict[str, Any]:
    """Build a draft R4 ImplementationGuide listing the given profiles."""
    return {
        "resourceType": "ImplementationGuide",
        "id": "-".join(ig_name.lower().split()),
        "name": ig_name,
        "status": "draft",
        "fhirVersion": ["4.0.1"],
        "definition": {
            "resource": [
                {
                    "reference": {"reference": f"StructureDefinition/{profile.get('id')}"},
                    "name": profile.get("title") or profile.get("name"),
                    "description": profile.get("description"),
                }
                for profile in profiles
            ]
        },
    }


class SimplifierClient:
    """Async client for the Simplifier.net API.

    Example:
        client = SimplifierClient(api_key=key)
        projects = await client.get_projects()
        await client.upload_profile("my-project", profile, "MyPatient.json")
        await client.close()
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize SimplifierClient.

        Args:
            api_key: Bearer credential. Empty means unconfigured.
            base_url: API root.
            timeout_seconds: Per-request timeout.
            http_client: Optional pre-configured httpx client (for testing).
        """
        self._api_key = api_key
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
        )

    def is_configured(self) -> bool:
        """True if an API key is set."""
        return bool(self._api_key)

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, failure: str, **kwargs: Any) -> Any:
        if not self.is_configured():
            raise NotConfiguredError(NOT_CONFIGURED_MESSAGE)

        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("Simplifier %s %s timed out", method, url)
            raise UpstreamTimeoutError(f"{failure}: request timed out") from e
        except httpx.HTTPError as e:
            logger.error("Simplifier %s %s failed: %s", method, url, e)
            raise UpstreamError(failure) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{failure}: invalid JSON response") from e

    async def get_projects(self) -> list[dict[str, Any]]:
        """List the projects visible to the configured account."""
        data = await self._request("GET", "/projects", "Failed to fetch projects from Simplifier")
        return data if isinstance(data, list) else []

    async def create_project(self, name: str, scope: str, description: str | None = None) -> dict[str, Any]:
        """Create a private project."""
        return await self._request(
            "POST",
            "/projects",
            "Failed to create project on Simplifier",
            json={
                "name": name,
                "scope": scope,
                "description": description,
                "visibility": "private",
            },
        )

    async def upload_profile(self, project_scope: str, profile: dict[str, Any], filename: str) -> dict[str, Any]:
        """Upload a StructureDefinition into a project.

        Returns:
            ``{"success": True, "url": ...}``; the url falls back to the
            project's resource page when the API does not return one.
        """
        data = await self._request(
            "POST",
            f"/projects/{project_scope}/resources",
            "Failed to upload profile to Simplifier",
            json={
                "resourceType": "StructureDefinition",
                "resource": profile,
                "filename": filename,
            },
        )
        url = data.get("url") if isinstance(data, dict) else None
        logger.info("Uploaded %s to Simplifier project %s", filename, project_scope)
        return {
            "success": True,
            "url": url or f"{PUBLIC_SITE_URL}/{project_scope}/~resources?id={profile.get('id')}",
        }

    async def create_implementation_guide(
        self, project_scope: str, ig_name: str, profiles: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Create an ImplementationGuide referencing the given profiles."""
        data = await self._request(
            "POST",
            f"/projects/{project_scope}/implementationguides",
            "Failed to create Implementation Guide on Simplifier",
            json=build_implementation_guide(ig_name, profiles),
        )
        url = data.get("url") if isinstance(data, dict) else None
        return {"success": True, "url": url or f"{PUBLIC_SITE_URL}/{project_scope}/~guides"}

    async def validate_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        """Run Simplifier's validator on a profile."""
        data = await self._request(
            "POST",
            "/validate",
            "Failed to validate profile",
            json={"resource": profile},
        )
        if not isinstance(data, dict):
            data = {}
        return {"valid": bool(data.get("valid", False)), "issues": data.get("issues") or []}
