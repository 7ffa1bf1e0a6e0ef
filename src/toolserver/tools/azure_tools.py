"""Azure inspection tools: subscriptions, resource groups, tagged VMs."""

import logging
from typing import Dict

from src.toolserver.arm.client import AzureClient

logger = logging.getLogger(__name__)


class AzureTools:
    """Read-only Azure queries exposed as tools."""

    def __init__(self, client: AzureClient):
        self.client = client

    async def get_azure_subscriptions(self) -> Dict[str, str]:
        try:
            return await self.client.get_subscriptions()
        except Exception:
            logger.exception("Error in get_azure_subscriptions")
            raise

    async def get_list_of_resource_groups(self, subscription_id: str) -> Dict[str, str]:
        try:
            return await self.client.get_resource_groups(subscription_id)
        except Exception:
            logger.exception(
                "Error in get_list_of_resource_groups",
                extra={"subscription_id": subscription_id},
            )
            raise

    async def get_virtual_machines_match_tag_key(
        self, subscription_id: str, tag_key: str
    ) -> Dict[str, Dict[str, str]]:
        try:
            return await self.client.get_virtual_machines_with_tag(subscription_id, tag_key)
        except Exception:
            logger.exception(
                "Error in get_virtual_machines_match_tag_key",
                extra={"subscription_id": subscription_id, "tag_key": tag_key},
            )
            raise
