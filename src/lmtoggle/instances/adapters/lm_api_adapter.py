"""LogicMonitor API adapter for device datasource operations.

This adapter implements IDeviceDatasourceAPI and wraps LMClient to
provide the three calls the toggle workflow needs.
"""

import logging
from typing import Any

from ...api.client import LMClient, PaginationConfig
from ...api.filters import escape_filter
from ..domain.ports import IDeviceDatasourceAPI

logger = logging.getLogger(__name__)


class LMDeviceDatasourceAPI(IDeviceDatasourceAPI):
    """LogicMonitor adapter for applied modules and their instances.

    The applied-module listing is paginated. The instance listing is a
    single request: only the first page the portal returns is read, so
    modules with more instances than the portal's default page size are
    truncated. That asymmetry is kept deliberately.
    """

    DEVICE_DATASOURCES = "/device/devices/{device_id}/devicedatasources"
    INSTANCES = "/device/devices/{device_id}/devicedatasources/{module_id}/instances"
    INSTANCE = "/device/devices/{device_id}/devicedatasources/{module_id}/instances/{instance_id}"

    def __init__(self, client: LMClient):
        """Initialize the API adapter.

        Args:
            client: LMClient inside its async context
        """
        self.client = client

    async def fetch_applied_modules(
        self,
        device_id: int,
        page_size: int,
    ) -> list[dict[str, Any]]:
        """Fetch all modules applied to a device, sorted by id."""
        return await self.client.fetch_all(
            self.DEVICE_DATASOURCES.format(device_id=device_id),
            config=PaginationConfig(page_size=page_size),
            params={"sort": "id"},
        )

    async def fetch_instances(
        self,
        device_id: int,
        module_id: int,
        filter_expr: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch the first page of instances of an applied module.

        Args:
            device_id: Device id
            module_id: Device-scoped applied-module id
            filter_expr: Raw filter; quoted values are percent-encoded here

        Returns:
            Raw instance records
        """
        params = None
        if filter_expr:
            params = {"filter": escape_filter(filter_expr)}
            logger.debug(f"Instance filter: {params['filter']}")

        data = await self.client.get(
            self.INSTANCES.format(device_id=device_id, module_id=module_id),
            params=params,
        )
        return self.client.extract_items(data)

    async def patch_instance(
        self,
        device_id: int,
        module_id: int,
        instance_id: int,
        body: dict[str, Any],
    ) -> dict[str, Any]:
        """PATCH one instance and return the echoed record."""
        return await self.client.patch(
            self.INSTANCE.format(
                device_id=device_id,
                module_id=module_id,
                instance_id=instance_id,
            ),
            json_body=body,
        )
