"""Domain entities for instance toggle operations.

These are pure data structures with no infrastructure dependencies.
They represent the devices, applied modules and instances the workflow
reads, and the outcomes it reports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from ...api.exceptions import InvalidInputError


@dataclass(frozen=True)
class Device:
    """Reference to a monitored device.

    Only the id is used to build resource paths; the display name is
    carried for log output.
    """

    id: int
    display_name: str | None = None

    @classmethod
    def from_id(cls, device_id: Any) -> "Device":
        """Build a Device from a raw device id."""
        return cls(id=_positive_int(device_id, "device_id"))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Device":
        """Build a Device from an API-shaped record ({"id": ..., "displayName": ...}).

        Raises:
            InvalidInputError: If the record is not a mapping or has no usable id
        """
        if not isinstance(raw, Mapping):
            raise InvalidInputError(
                "Device must be an object with an 'id' field",
                field="device",
            )
        if "id" not in raw:
            raise InvalidInputError("Device object has no 'id' field", field="device.id")

        return cls(
            id=_positive_int(raw["id"], "device.id"),
            display_name=raw.get("displayName") or raw.get("name"),
        )

    @property
    def label(self) -> str:
        if self.display_name:
            return f"{self.display_name} (id={self.id})"
        return f"id={self.id}"


@dataclass(frozen=True)
class ByName:
    """Select applied modules by datasource name (exact match)."""

    name: str

    def __str__(self) -> str:
        return f"name '{self.name}'"


@dataclass(frozen=True)
class ById:
    """Select an applied module by its device-scoped id."""

    module_id: int

    def __str__(self) -> str:
        return f"id {self.module_id}"


ModuleSelector = Union[ByName, ById]


@dataclass
class AppliedModule:
    """A monitoring module (datasource) applied to one device.

    The id is device-scoped and differs from the datasource's global
    catalog id (datasource_id).
    """

    id: int
    name: str
    instance_count: int = 0
    datasource_id: int | None = None
    display_name: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def has_instances(self) -> bool:
        return self.instance_count > 0


@dataclass
class ModuleInstance:
    """A monitored sub-resource discovered under an applied module."""

    id: int
    display_name: str
    alerting_disabled: bool = False
    monitoring_stopped: bool = False
    raw_data: dict[str, Any] = field(default_factory=dict)


class ToggleAction(str, Enum):
    """Direction of the flag change."""

    ENABLE = "enable"
    DISABLE = "disable"

    @property
    def flag_value(self) -> bool:
        """Value written to disableAlerting/stopMonitoring."""
        return self is ToggleAction.DISABLE


@dataclass
class MutationResult:
    """Outcome of updating a single instance."""

    instance_id: int
    instance_name: str
    success: bool
    alerting_disabled: bool | None = None
    monitoring_stopped: bool | None = None
    error: str | None = None


class BatchStatus(str, Enum):
    """Outcome of processing one applied module."""

    COMPLETED = "completed"
    PARTIAL_FAILURE = "partial_failure"
    NO_INSTANCES = "no_instances"
    DRY_RUN = "dry_run"


@dataclass
class BatchOutcome:
    """Result of toggling the instances of one applied module."""

    module: AppliedModule
    status: BatchStatus
    results: list[MutationResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def exit_code(self) -> int:
        """0 when the batch is clean, 1 otherwise."""
        return 0 if self.status in (BatchStatus.COMPLETED, BatchStatus.DRY_RUN) else 1


@dataclass
class ResolutionResult:
    """Applied modules matched by a set of selectors."""

    matches: list[AppliedModule] = field(default_factory=list)
    missed: list[ModuleSelector] = field(default_factory=list)

    @property
    def found_count(self) -> int:
        return len(self.matches)


class WorkflowState(str, Enum):
    """States of the toggle workflow."""

    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING_DEVICE = "resolving_device"
    FETCHING_MODULES = "fetching_modules"
    RESOLVING_MODULE = "resolving_module"
    FETCHING_INSTANCES = "fetching_instances"
    MUTATING_INSTANCES = "mutating_instances"
    DONE = "done"
    NO_OP_COMPLETED = "no_op_completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            WorkflowState.DONE,
            WorkflowState.NO_OP_COMPLETED,
            WorkflowState.FAILED,
        )


@dataclass
class WorkflowResult:
    """Final result of a workflow run.

    The exit code is the only value surfaced to command-line callers.
    """

    state: WorkflowState
    exit_code: int
    modules_found: int = 0
    outcomes: list[BatchOutcome] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Summary for structured log output."""
        return {
            "state": self.state.value,
            "exit_code": self.exit_code,
            "modules_found": self.modules_found,
            "instances_updated": sum(o.succeeded for o in self.outcomes),
            "instances_failed": sum(o.failed for o in self.outcomes),
            "error": self.error,
        }


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be an integer", field=field_name)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"{field_name} must be an integer, got {value!r}",
            field=field_name,
        )
    if number <= 0:
        raise InvalidInputError(f"{field_name} must be positive", field=field_name)
    return number
