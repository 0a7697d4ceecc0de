"""Toggle Instances Workflow - Public entry point for the instance toggle.

The workflow drives the use cases in order and reduces everything to a
single exit status:

    IDLE -> VALIDATING -> RESOLVING_DEVICE -> FETCHING_MODULES
         -> RESOLVING_MODULE -> FETCHING_INSTANCES -> MUTATING_INSTANCES -> DONE

FAILED is reachable from any step. When no selector matches an applied
module the run ends in NO_OP_COMPLETED with status 0.

Exit status:
    0 - every attempted update succeeded, or nothing matched
    1 - invalid input, a listing failed, an update failed, or a matched
        module had no instances
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ...api.error_sanitizer import sanitize_error_message
from ...api.exceptions import InvalidInputError, LMError
from ..domain.entities import (
    BatchOutcome,
    ById,
    ByName,
    Device,
    ModuleSelector,
    ToggleAction,
    WorkflowResult,
    WorkflowState,
)
from ..domain.ports import IDeviceDatasourceAPI, IFieldMapper
from .resolve_modules import ModuleResolver
from .toggle_instances import InstanceMutator

DEFAULT_PAGE_SIZE = 1000


@dataclass
class ToggleRequest:
    """Caller input for one workflow run.

    Exactly one of device / device_id identifies the device.
    """

    device: Device | Mapping[str, Any] | None = None
    device_id: int | None = None
    module_names: list[str] = field(default_factory=list)
    module_ids: list[int] = field(default_factory=list)
    filter_expr: str | None = None
    alerting_only: bool = False
    action: ToggleAction = ToggleAction.ENABLE
    page_size: int = DEFAULT_PAGE_SIZE
    dry_run: bool = False

    def validate(self) -> None:
        """Check parameter sets before any network call.

        Raises:
            InvalidInputError: On conflicting, missing or malformed input
        """
        if self.device is not None and self.device_id is not None:
            raise InvalidInputError(
                "Provide either a device or a device id, not both",
                field="device",
            )
        if self.device is None and self.device_id is None:
            raise InvalidInputError(
                "A device or a device id is required",
                field="device",
            )
        if not self.module_names and not self.module_ids:
            raise InvalidInputError(
                "At least one module name or module id is required",
                field="module",
            )
        if self.page_size <= 0:
            raise InvalidInputError("page_size must be positive", field="page_size")

        # Malformed device objects fail here, before any request.
        self.resolve_device()
        self.selectors()

    def resolve_device(self) -> Device:
        if isinstance(self.device, Device):
            return self.device
        if self.device is not None:
            return Device.from_mapping(self.device)
        return Device.from_id(self.device_id)

    def selectors(self) -> list[ModuleSelector]:
        selectors: list[ModuleSelector] = []
        for name in self.module_names:
            if not name or not name.strip():
                raise InvalidInputError("Module names must not be empty", field="module_names")
            selectors.append(ByName(name))
        for module_id in self.module_ids:
            if isinstance(module_id, bool) or not isinstance(module_id, int) or module_id <= 0:
                raise InvalidInputError(
                    f"Module ids must be positive integers, got {module_id!r}",
                    field="module_ids",
                )
            selectors.append(ById(module_id))
        return selectors


class ToggleInstancesWorkflow:
    """Resolves modules on a device and toggles their instances.

    Example:
        async with LMClient(credentials) as client:
            workflow = ToggleInstancesWorkflow(
                api=LMDeviceDatasourceAPI(client),
                mapper=DatasourceFieldMapper(),
                logger=logging.getLogger("lmtoggle"),
            )
            result = await workflow.run(ToggleRequest(device_id=42, module_names=["snmp64_if-"]))
            sys.exit(result.exit_code)
    """

    def __init__(
        self,
        api: IDeviceDatasourceAPI,
        mapper: IFieldMapper,
        logger: Optional[logging.Logger] = None,
        resolver: Optional[ModuleResolver] = None,
        mutator: Optional[InstanceMutator] = None,
    ):
        """Initialize the workflow with its dependencies.

        Args:
            api: Port for the device datasource endpoints
            mapper: Port for mapping raw records to entities
            logger: Logger every component writes to
            resolver: Module resolver (default: built with logger)
            mutator: Instance mutator (default: built from api/mapper/logger)
        """
        self.api = api
        self.mapper = mapper
        self.logger = logger or logging.getLogger(__name__)
        self.resolver = resolver or ModuleResolver(logger=self.logger)
        self.mutator = mutator or InstanceMutator(api, mapper, logger=self.logger)
        self.state = WorkflowState.IDLE

    def _transition(self, state: WorkflowState) -> None:
        self.logger.debug(f"Workflow state: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, message: str, modules_found: int = 0, outcomes: Optional[list[BatchOutcome]] = None) -> WorkflowResult:
        self._transition(WorkflowState.FAILED)
        self.logger.error(message)
        return WorkflowResult(
            state=WorkflowState.FAILED,
            exit_code=1,
            modules_found=modules_found,
            outcomes=outcomes or [],
            error=message,
        )

    async def run(self, request: ToggleRequest) -> WorkflowResult:
        """Execute the workflow.

        Never raises for input, transport, malformed-record or per-instance
        errors; those are reported through the returned WorkflowResult.
        """
        self._transition(WorkflowState.VALIDATING)
        try:
            request.validate()
        except InvalidInputError as e:
            return self._fail(f"Invalid input: {e.message}")

        self._transition(WorkflowState.RESOLVING_DEVICE)
        device = request.resolve_device()
        selectors = request.selectors()
        self.logger.info(f"Processing device {device.label}")

        self._transition(WorkflowState.FETCHING_MODULES)
        try:
            raw_modules = await self.api.fetch_applied_modules(device.id, request.page_size)
        except LMError as e:
            return self._fail(
                sanitize_error_message(str(e), f"Failed to list applied modules for device {device.id}")
            )
        try:
            applied_modules = [self.mapper.map_applied_module(raw) for raw in raw_modules]
        except (KeyError, TypeError, ValueError) as e:
            return self._fail(
                sanitize_error_message(f"Malformed applied-module record for device {device.id}: {e!r}")
            )
        self.logger.info(f"Device {device.label} has {len(applied_modules)} applied module(s)")

        self._transition(WorkflowState.RESOLVING_MODULE)
        resolution = self.resolver.resolve(applied_modules, selectors)

        if not resolution.matches:
            self._transition(WorkflowState.NO_OP_COMPLETED)
            self.logger.info("No matching modules found, nothing to do")
            return WorkflowResult(state=WorkflowState.NO_OP_COMPLETED, exit_code=0)

        outcomes: list[BatchOutcome] = []
        for module in resolution.matches:
            self._transition(WorkflowState.FETCHING_INSTANCES)
            try:
                instances = await self.mutator.list_instances(device, module, request.filter_expr)
            except LMError as e:
                return self._fail(
                    sanitize_error_message(str(e), f"Failed to list instances of module {module.id}"),
                    modules_found=resolution.found_count,
                    outcomes=outcomes,
                )
            except (KeyError, TypeError, ValueError) as e:
                return self._fail(
                    sanitize_error_message(f"Malformed instance record in module {module.id}: {e!r}"),
                    modules_found=resolution.found_count,
                    outcomes=outcomes,
                )

            self._transition(WorkflowState.MUTATING_INSTANCES)
            outcome = await self.mutator.mutate(
                device,
                module,
                instances,
                alerting_only=request.alerting_only,
                action=request.action,
                dry_run=request.dry_run,
            )
            outcomes.append(outcome)

        exit_code = max((o.exit_code for o in outcomes), default=0)
        self._transition(WorkflowState.DONE)

        result = WorkflowResult(
            state=WorkflowState.DONE,
            exit_code=exit_code,
            modules_found=resolution.found_count,
            outcomes=outcomes,
        )
        self.logger.info(f"Workflow complete: {result.to_dict()}")
        return result
