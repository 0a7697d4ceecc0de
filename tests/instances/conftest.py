"""Shared test doubles for the instance toggle use cases."""

from typing import Any

import pytest

from src.lmtoggle.instances.adapters.field_mapper import DatasourceFieldMapper
from src.lmtoggle.instances.domain.ports import IDeviceDatasourceAPI


class MockDeviceDatasourceAPI(IDeviceDatasourceAPI):
    """In-memory implementation of IDeviceDatasourceAPI that records calls."""

    def __init__(
        self,
        modules: list[dict[str, Any]] | None = None,
        instances: dict[int, list[dict[str, Any]]] | None = None,
        modules_error: Exception | None = None,
        instances_error: Exception | None = None,
        patch_errors: dict[int, Exception] | None = None,
        echo_as_strings: bool = False,
    ):
        self.modules = modules or []
        self.instances = instances or {}
        self.modules_error = modules_error
        self.instances_error = instances_error
        self.patch_errors = patch_errors or {}
        self.echo_as_strings = echo_as_strings

        self.module_calls: list[tuple[int, int]] = []
        self.instance_calls: list[tuple[int, int, str | None]] = []
        self.patch_calls: list[tuple[int, int, int, dict[str, Any]]] = []

    @property
    def call_count(self) -> int:
        return len(self.module_calls) + len(self.instance_calls) + len(self.patch_calls)

    async def fetch_applied_modules(self, device_id: int, page_size: int) -> list[dict[str, Any]]:
        self.module_calls.append((device_id, page_size))
        if self.modules_error:
            raise self.modules_error
        return self.modules

    async def fetch_instances(
        self,
        device_id: int,
        module_id: int,
        filter_expr: str | None = None,
    ) -> list[dict[str, Any]]:
        self.instance_calls.append((device_id, module_id, filter_expr))
        if self.instances_error:
            raise self.instances_error
        return self.instances.get(module_id, [])

    async def patch_instance(
        self,
        device_id: int,
        module_id: int,
        instance_id: int,
        body: dict[str, Any],
    ) -> dict[str, Any]:
        self.patch_calls.append((device_id, module_id, instance_id, dict(body)))
        if instance_id in self.patch_errors:
            raise self.patch_errors[instance_id]
        echoed = {"id": instance_id, "disableAlerting": False, "stopMonitoring": False, **body}
        if self.echo_as_strings:
            echoed = {k: str(v) if isinstance(v, bool) else v for k, v in echoed.items()}
        return echoed


def make_instances(count: int, start: int = 1) -> list[dict[str, Any]]:
    return [
        {"id": i, "displayName": f"Gi0/{i}", "disableAlerting": True, "stopMonitoring": True}
        for i in range(start, start + count)
    ]


@pytest.fixture
def mapper():
    return DatasourceFieldMapper()


@pytest.fixture
def api_factory():
    """Build a MockDeviceDatasourceAPI; keyword arguments as its constructor."""
    return MockDeviceDatasourceAPI


@pytest.fixture
def instance_records():
    return make_instances
