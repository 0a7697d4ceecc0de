"""Port interfaces for instance toggle operations.

Ports define the contracts between the use cases and the infrastructure.
Use cases depend only on these interfaces; the LogicMonitor adapter
implements them over LMClient, and tests implement them with in-memory
fakes.
"""

from abc import ABC, abstractmethod
from typing import Any

from .entities import AppliedModule, ModuleInstance


class IDeviceDatasourceAPI(ABC):
    """Port for the device datasource endpoints.

    Implementations raise LMError subclasses on transport or HTTP failure.
    """

    @abstractmethod
    async def fetch_applied_modules(
        self,
        device_id: int,
        page_size: int,
    ) -> list[dict[str, Any]]:
        """Fetch every module applied to a device (paginated).

        Args:
            device_id: Device id
            page_size: Items per page

        Returns:
            Raw applied-module records, in id order
        """
        ...

    @abstractmethod
    async def fetch_instances(
        self,
        device_id: int,
        module_id: int,
        filter_expr: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch the instances of one applied module (single request).

        Args:
            device_id: Device id
            module_id: Device-scoped applied-module id
            filter_expr: Optional raw filter expression (escaped by the adapter)

        Returns:
            Raw instance records from the first page
        """
        ...

    @abstractmethod
    async def patch_instance(
        self,
        device_id: int,
        module_id: int,
        instance_id: int,
        body: dict[str, Any],
    ) -> dict[str, Any]:
        """Update one instance.

        Returns:
            The updated instance record echoed by the API
        """
        ...


class IFieldMapper(ABC):
    """Port for mapping raw API records to domain entities."""

    @abstractmethod
    def map_applied_module(self, raw: dict[str, Any]) -> AppliedModule:
        ...

    @abstractmethod
    def map_instance(self, raw: dict[str, Any]) -> ModuleInstance:
        ...

    @abstractmethod
    def parse_flag(self, value: Any) -> bool | None:
        """Interpret a boolean that may arrive as a string on the wire."""
        ...
