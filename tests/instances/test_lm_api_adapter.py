"""Tests for the LMDeviceDatasourceAPI adapter.

LMClient is mocked; these tests check the paths, query parameters and
bodies the adapter hands to the client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.lmtoggle.api.client import LMClient, PaginationConfig
from src.lmtoggle.instances.adapters.lm_api_adapter import LMDeviceDatasourceAPI


@pytest.fixture
def mock_client():
    client = MagicMock(spec=LMClient)
    client.extract_items = LMClient.extract_items
    return client


@pytest.fixture
def adapter(mock_client):
    return LMDeviceDatasourceAPI(mock_client)


class TestLMDeviceDatasourceAPI:

    @pytest.mark.asyncio
    async def test_fetch_applied_modules(self, adapter, mock_client):
        mock_client.fetch_all = AsyncMock(return_value=[{"id": 1}])

        modules = await adapter.fetch_applied_modules(42, page_size=500)

        assert modules == [{"id": 1}]
        mock_client.fetch_all.assert_awaited_once_with(
            "/device/devices/42/devicedatasources",
            config=PaginationConfig(page_size=500),
            params={"sort": "id"},
        )

    @pytest.mark.asyncio
    async def test_fetch_instances_without_filter(self, adapter, mock_client):
        mock_client.get = AsyncMock(return_value={"items": [{"id": 9}]})

        instances = await adapter.fetch_instances(42, 1234)

        assert instances == [{"id": 9}]
        mock_client.get.assert_awaited_once_with(
            "/device/devices/42/devicedatasources/1234/instances",
            params=None,
        )

    @pytest.mark.asyncio
    async def test_fetch_instances_encodes_filter(self, adapter, mock_client):
        mock_client.get = AsyncMock(return_value={"data": {"items": []}})

        await adapter.fetch_instances(42, 1234, 'displayName~"Gi0/1",description!~"up link"')

        params = mock_client.get.await_args.kwargs["params"]
        assert params == {"filter": 'displayName~"Gi0%2F1",description!~"up%20link"'}

    @pytest.mark.asyncio
    async def test_patch_instance(self, adapter, mock_client):
        mock_client.patch = AsyncMock(return_value={"id": 9, "disableAlerting": False})

        response = await adapter.patch_instance(42, 1234, 9, {"disableAlerting": False})

        assert response["id"] == 9
        mock_client.patch.assert_awaited_once_with(
            "/device/devices/42/devicedatasources/1234/instances/9",
            json_body={"disableAlerting": False},
        )
