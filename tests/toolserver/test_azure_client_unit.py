"""Unit tests for the Azure Resource Manager client."""

import asyncio

import httpx
import pytest
from azure.core.credentials import AccessToken

from src.toolserver.arm.client import MANAGEMENT_SCOPE, AzureClient
from src.toolserver.errors import ParseError, UpstreamError


class FakeCredential:
    def __init__(self):
        self.scopes = []

    def get_token(self, *scopes, **kwargs):
        self.scopes.extend(scopes)
        return AccessToken("arm-token", 4102444800)


def make_client(handler, credential=None) -> AzureClient:
    return AzureClient(
        credential=credential or FakeCredential(),
        transport=httpx.MockTransport(handler),
    )


class TestSubscriptions:
    def test_maps_display_name_to_id_with_bearer_token(self):
        credential = FakeCredential()
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["api_version"] = request.url.params["api-version"]
            return httpx.Response(
                200,
                json={"value": [{"displayName": "Production", "subscriptionId": "sub-1"}]},
            )

        result = asyncio.run(make_client(handler, credential).get_subscriptions())

        assert result == {"Production": "sub-1"}
        assert seen["auth"] == "Bearer arm-token"
        assert seen["api_version"]
        assert credential.scopes == [MANAGEMENT_SCOPE]

    def test_follows_next_link(self):
        next_link = "https://management.azure.com/subscriptions?api-version=2022-12-01&$skiptoken=abc"

        def handler(request):
            if "skiptoken" in str(request.url):
                return httpx.Response(
                    200, json={"value": [{"displayName": "Dev", "subscriptionId": "sub-2"}]}
                )
            return httpx.Response(
                200,
                json={
                    "value": [{"displayName": "Prod", "subscriptionId": "sub-1"}],
                    "nextLink": next_link,
                },
            )

        result = asyncio.run(make_client(handler).get_subscriptions())

        assert result == {"Prod": "sub-1", "Dev": "sub-2"}

    def test_forbidden_is_upstream_error(self):
        def handler(request):
            return httpx.Response(403, json={"error": {"code": "AuthorizationFailed"}})

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(make_client(handler).get_subscriptions())

        assert exc_info.value.status_code == 403

    def test_missing_value_is_parse_error(self):
        def handler(request):
            return httpx.Response(200, json={"count": 0})

        with pytest.raises(ParseError):
            asyncio.run(make_client(handler).get_subscriptions())


class TestResourceGroups:
    def test_maps_name_to_id(self):
        def handler(request):
            assert request.url.path == "/subscriptions/sub-1/resourcegroups"
            return httpx.Response(
                200,
                json={"value": [{"name": "rg-app", "id": "/subscriptions/sub-1/resourceGroups/rg-app"}]},
            )

        result = asyncio.run(make_client(handler).get_resource_groups("sub-1"))

        assert result == {"rg-app": "/subscriptions/sub-1/resourceGroups/rg-app"}


class TestVirtualMachines:
    def test_only_machines_with_tag_key(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "value": [
                        {"name": "vm-1", "tags": {"costcenter": "42", "env": "prod"}},
                        {"name": "vm-2", "tags": {"env": "dev"}},
                        {"name": "vm-3"},
                    ]
                },
            )

        result = asyncio.run(
            make_client(handler).get_virtual_machines_with_tag("sub-1", "costcenter")
        )

        assert result == {"vm-1": {"costcenter": "42", "env": "prod"}}
