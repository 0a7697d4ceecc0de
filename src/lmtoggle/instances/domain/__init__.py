"""Domain layer - Pure domain entities and port interfaces.

No infrastructure dependencies allowed in this layer.
"""

from .entities import (
    AppliedModule,
    BatchOutcome,
    BatchStatus,
    ById,
    ByName,
    Device,
    ModuleInstance,
    ModuleSelector,
    MutationResult,
    ResolutionResult,
    ToggleAction,
    WorkflowResult,
    WorkflowState,
)
from .ports import IDeviceDatasourceAPI, IFieldMapper

__all__ = [
    # Entities
    "Device",
    "AppliedModule",
    "ModuleInstance",
    "MutationResult",
    # Selectors
    "ByName",
    "ById",
    "ModuleSelector",
    # Results
    "BatchOutcome",
    "BatchStatus",
    "ResolutionResult",
    "ToggleAction",
    "WorkflowResult",
    "WorkflowState",
    # Ports
    "IDeviceDatasourceAPI",
    "IFieldMapper",
]
