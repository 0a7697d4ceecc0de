"""Field mapper adapter for transforming LogicMonitor records to domain entities.

Applied modules come from /device/devices/{id}/devicedatasources and
instances from .../devicedatasources/{id}/instances. Booleans on these
records are JSON booleans in API v3, but older portals and some proxies
return them as strings ("True"/"False"), so flags go through parse_flag.
"""

from typing import Any

from ..domain.entities import AppliedModule, ModuleInstance
from ..domain.ports import IFieldMapper


class DatasourceFieldMapper(IFieldMapper):
    """Maps LogicMonitor device datasource records to domain entities."""

    def map_applied_module(self, raw: dict[str, Any]) -> AppliedModule:
        """Transform a devicedatasource record to an AppliedModule.

        Args:
            raw: Raw record from the devicedatasources listing

        Returns:
            AppliedModule with the device-scoped id and datasource name
        """
        return AppliedModule(
            id=int(raw["id"]),
            name=raw.get("dataSourceName") or "",
            instance_count=int(raw.get("instanceNumber") or 0),
            datasource_id=self._optional_int(raw.get("dataSourceId")),
            display_name=raw.get("dataSourceDisplayName"),
            raw_data=raw,
        )

    def map_instance(self, raw: dict[str, Any]) -> ModuleInstance:
        """Transform an instance record to a ModuleInstance."""
        return ModuleInstance(
            id=int(raw["id"]),
            display_name=raw.get("displayName") or raw.get("name") or str(raw["id"]),
            alerting_disabled=bool(self.parse_flag(raw.get("disableAlerting"))),
            monitoring_stopped=bool(self.parse_flag(raw.get("stopMonitoring"))),
            raw_data=raw,
        )

    def parse_flag(self, value: Any) -> bool | None:
        """Interpret a wire boolean.

        Strings are compared case-insensitively against "false"; any other
        non-empty value counts as set. None (field absent) stays None.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if not text:
            return None
        return text != "false"

    @staticmethod
    def _optional_int(value: Any) -> int | None:
        if value is None or value == "":
            return None
        return int(value)
