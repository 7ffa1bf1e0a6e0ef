"""Azure Resource Manager access for the subscription and VM listing tools."""

from src.toolserver.arm.client import AzureClient

__all__ = ["AzureClient"]
