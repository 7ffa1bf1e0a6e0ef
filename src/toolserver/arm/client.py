"""Azure Resource Manager client.

Lists subscriptions, resource groups and tagged virtual machines through
the ARM REST API. Tokens come from an azure-identity credential
(DefaultAzureCredential unless one is injected); list responses are
followed through their nextLink pages.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential

from src.toolserver.errors import ParseError, UpstreamError

logger = logging.getLogger(__name__)

MANAGEMENT_SCOPE = "https://management.azure.com/.default"
SUBSCRIPTIONS_API_VERSION = "2022-12-01"
RESOURCE_GROUPS_API_VERSION = "2021-04-01"
COMPUTE_API_VERSION = "2024-07-01"


class AzureClient:
    """Async Azure Resource Manager client.

    Attributes:
        management_url: ARM endpoint (public cloud by default).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        management_url: str = "https://management.azure.com",
        credential: Optional[TokenCredential] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.management_url = management_url.rstrip("/")
        self.timeout = timeout
        self._credential = credential
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def credential(self) -> TokenCredential:
        if self._credential is None:
            self._credential = DefaultAzureCredential()
        return self._credential

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.management_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _access_token(self) -> str:
        # azure-identity's sync credentials block on network I/O
        token = await asyncio.to_thread(self.credential.get_token, MANAGEMENT_SCOPE)
        return token.token

    async def _list(self, path: str, api_version: str) -> List[Dict[str, Any]]:
        """GET an ARM list endpoint and follow nextLink until exhausted."""
        headers = {"Authorization": f"Bearer {await self._access_token()}"}
        items: List[Dict[str, Any]] = []
        url: Optional[str] = path
        params: Optional[Dict[str, str]] = {"api-version": api_version}

        while url:
            try:
                response = await self.client.get(url, params=params, headers=headers)
            except httpx.HTTPError as exc:
                raise UpstreamError(
                    message=f"Azure request GET {path} failed: {exc}",
                    request_path=path,
                ) from exc

            if not response.is_success:
                logger.error(
                    "Azure API error",
                    extra={"status_code": response.status_code, "path": path},
                )
                raise UpstreamError(
                    message=f"Azure API error {response.status_code} for GET {path}",
                    status_code=response.status_code,
                    response_body=response.text,
                    request_path=path,
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ParseError("<json body>", request_path=path) from exc
            if not isinstance(payload, dict) or not isinstance(payload.get("value"), list):
                raise ParseError("value", request_path=path)

            items.extend(payload["value"])
            # nextLink is absolute and already carries the api-version
            url = payload.get("nextLink")
            params = None

        return items

    async def get_subscriptions(self) -> Dict[str, str]:
        """Map subscription display names to subscription ids."""
        subscriptions = await self._list("/subscriptions", SUBSCRIPTIONS_API_VERSION)
        return {
            item.get("displayName", item.get("subscriptionId", "")): item.get("subscriptionId", "")
            for item in subscriptions
        }

    async def get_resource_groups(self, subscription_id: str) -> Dict[str, str]:
        """Map resource group names to resource ids within a subscription."""
        groups = await self._list(
            f"/subscriptions/{subscription_id}/resourcegroups",
            RESOURCE_GROUPS_API_VERSION,
        )
        return {item.get("name", ""): item.get("id", "") for item in groups}

    async def get_virtual_machines_with_tag(
        self, subscription_id: str, tag_key: str
    ) -> Dict[str, Dict[str, str]]:
        """Map VM names to their tags, for VMs carrying ``tag_key``."""
        machines = await self._list(
            f"/subscriptions/{subscription_id}/providers/Microsoft.Compute/virtualMachines",
            COMPUTE_API_VERSION,
        )
        result: Dict[str, Dict[str, str]] = {}
        for machine in machines:
            tags = machine.get("tags") or {}
            if tag_key in tags:
                result[machine.get("name", "")] = dict(tags)
        return result
