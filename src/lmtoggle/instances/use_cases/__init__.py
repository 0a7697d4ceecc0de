"""Use cases for the instance toggle.

Each use case covers one step of the workflow and depends only on the
domain ports, never on the HTTP client directly.
"""

from .resolve_modules import ModuleResolver
from .toggle_instances import InstanceMutator, build_patch_body
from .workflow import DEFAULT_PAGE_SIZE, ToggleInstancesWorkflow, ToggleRequest

__all__ = [
    "ModuleResolver",
    "InstanceMutator",
    "build_patch_body",
    "ToggleInstancesWorkflow",
    "ToggleRequest",
    "DEFAULT_PAGE_SIZE",
]
