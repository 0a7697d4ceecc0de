"""Toggle Instances Use Case - Update alerting/monitoring flags on instances.

Workflow for one applied module:
1. Skip the module if it reports no instances
2. Fetch its instances (single request, optional filter)
3. PATCH each instance in turn, recording one MutationResult per instance
4. Return a BatchOutcome summarising the batch

An instance-listing failure propagates to the caller. A failed PATCH only
fails that instance; the loop always continues to the next one.
"""

import logging
from typing import Any, Optional

from ...api.error_sanitizer import sanitize_error_message
from ...api.exceptions import ErrorCollector, LMError
from ..domain.entities import (
    AppliedModule,
    BatchOutcome,
    BatchStatus,
    Device,
    ModuleInstance,
    MutationResult,
    ToggleAction,
)
from ..domain.ports import IDeviceDatasourceAPI, IFieldMapper


def build_patch_body(action: ToggleAction, alerting_only: bool) -> dict[str, Any]:
    """PATCH body for an instance.

    Alerting-only updates leave stopMonitoring untouched.
    """
    body: dict[str, Any] = {"disableAlerting": action.flag_value}
    if not alerting_only:
        body["stopMonitoring"] = action.flag_value
    return body


class InstanceMutator:
    """Applies a flag change to every instance of one applied module.

    Example:
        mutator = InstanceMutator(
            api=LMDeviceDatasourceAPI(client),
            mapper=DatasourceFieldMapper(),
        )
        outcome = await mutator.apply(device, module, filter_expr='name~"Gi"')
    """

    def __init__(
        self,
        api: IDeviceDatasourceAPI,
        mapper: IFieldMapper,
        logger: Optional[logging.Logger] = None,
    ):
        self.api = api
        self.mapper = mapper
        self.logger = logger or logging.getLogger(__name__)

    async def list_instances(
        self,
        device: Device,
        module: AppliedModule,
        filter_expr: str | None = None,
    ) -> list[ModuleInstance]:
        """Fetch and map the instances of a module.

        Modules that report no instances are not queried.

        Raises:
            LMError: If the listing request fails
        """
        if not module.has_instances:
            self.logger.warning(
                f"Module '{module.name}' (id={module.id}) on device {device.label} "
                f"has no instances"
            )
            return []

        raw_instances = await self.api.fetch_instances(device.id, module.id, filter_expr)
        instances = [self.mapper.map_instance(raw) for raw in raw_instances]

        if not instances:
            self.logger.warning(
                f"No instances of module '{module.name}' (id={module.id}) "
                f"returned for device {device.label}"
                + (f" with filter {filter_expr}" if filter_expr else "")
            )
        return instances

    async def apply(
        self,
        device: Device,
        module: AppliedModule,
        filter_expr: str | None = None,
        alerting_only: bool = False,
        action: ToggleAction = ToggleAction.ENABLE,
        dry_run: bool = False,
    ) -> BatchOutcome:
        """Toggle the flags of a module's instances.

        Args:
            device: Device the module is applied to
            module: Resolved applied module
            filter_expr: Optional instance filter expression
            alerting_only: Only change disableAlerting
            action: ENABLE clears the flags, DISABLE sets them
            dry_run: List instances and log the change without patching

        Returns:
            BatchOutcome with one MutationResult per instance attempted

        Raises:
            LMError: If the instance listing fails
        """
        instances = await self.list_instances(device, module, filter_expr)
        return await self.mutate(
            device,
            module,
            instances,
            alerting_only=alerting_only,
            action=action,
            dry_run=dry_run,
        )

    async def mutate(
        self,
        device: Device,
        module: AppliedModule,
        instances: list[ModuleInstance],
        alerting_only: bool = False,
        action: ToggleAction = ToggleAction.ENABLE,
        dry_run: bool = False,
    ) -> BatchOutcome:
        """PATCH each of the given instances, one at a time."""
        if not instances:
            return BatchOutcome(module=module, status=BatchStatus.NO_INSTANCES)

        body = build_patch_body(action, alerting_only)
        self.logger.info(
            f"{action.value.capitalize()} {'alerting' if alerting_only else 'alerting and monitoring'} "
            f"on {len(instances)} instance(s) of '{module.name}'"
        )

        if dry_run:
            for instance in instances:
                self.logger.info(
                    f"[dry-run] Would patch instance '{instance.display_name}' "
                    f"(id={instance.id}) with {body}"
                )
            return BatchOutcome(module=module, status=BatchStatus.DRY_RUN)

        results: list[MutationResult] = []
        collector = ErrorCollector()

        for instance in instances:
            result = await self._patch_one(device, module, instance, body, collector)
            results.append(result)

        status = BatchStatus.COMPLETED
        if collector.has_errors():
            status = BatchStatus.PARTIAL_FAILURE
            succeeded = sum(1 for r in results if r.success)
            self.logger.error(
                sanitize_error_message(str(collector.to_exception(succeeded=succeeded)))
            )

        return BatchOutcome(module=module, status=status, results=results)

    async def _patch_one(
        self,
        device: Device,
        module: AppliedModule,
        instance: ModuleInstance,
        body: dict[str, Any],
        collector: ErrorCollector,
    ) -> MutationResult:
        try:
            response = await self.api.patch_instance(device.id, module.id, instance.id, body)
        except LMError as e:
            message = sanitize_error_message(str(e))
            collector.add(e, context={"instance_id": instance.id})
            self.logger.error(
                f"Failed to update instance '{instance.display_name}' (id={instance.id}): {message}"
            )
            return MutationResult(
                instance_id=instance.id,
                instance_name=instance.display_name,
                success=False,
                error=message,
            )

        alerting_disabled = self.mapper.parse_flag(response.get("disableAlerting"))
        monitoring_stopped = self.mapper.parse_flag(response.get("stopMonitoring"))

        self.logger.info(
            f"Instance '{instance.display_name}' (id={instance.id}): "
            f"alerting {self._describe(alerting_disabled, 'disabled', 'enabled')}, "
            f"monitoring {self._describe(monitoring_stopped, 'stopped', 'active')}"
        )

        if alerting_disabled is not None and alerting_disabled != body["disableAlerting"]:
            self.logger.warning(
                f"Instance '{instance.display_name}' (id={instance.id}) reports "
                f"disableAlerting={alerting_disabled} after update"
            )

        return MutationResult(
            instance_id=instance.id,
            instance_name=instance.display_name,
            success=True,
            alerting_disabled=alerting_disabled,
            monitoring_stopped=monitoring_stopped,
        )

    @staticmethod
    def _describe(flag: bool | None, when_set: str, when_clear: str) -> str:
        if flag is None:
            return "unknown"
        return when_set if flag else when_clear
