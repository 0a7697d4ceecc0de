"""Resolve Modules Use Case - Match applied modules against selectors.

Selection runs as two explicit passes over the device's applied modules:

1. Name pass: every ByName selector, exact match on the datasource name
2. Id pass: every ById selector, exact match on the device-scoped id

The passes are unioned and de-duplicated by applied-module id. A selector
that matches nothing is a logged observation, not an error. When several
applied modules on one device share a name, all of them are selected.
"""

import logging
from typing import Iterable, Optional, Sequence

from ..domain.entities import (
    AppliedModule,
    ById,
    ByName,
    ModuleSelector,
    ResolutionResult,
)


class ModuleResolver:
    """Finds the applied modules a caller asked for."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def resolve(
        self,
        applied_modules: Sequence[AppliedModule],
        selectors: Iterable[ModuleSelector],
    ) -> ResolutionResult:
        """Match selectors against a device's applied modules.

        Args:
            applied_modules: Every module applied to the device
            selectors: ByName / ById selectors, in caller order

        Returns:
            ResolutionResult with matched modules (first-match order) and
            the selectors that matched nothing
        """
        selectors = list(selectors)
        result = ResolutionResult()
        seen: set[int] = set()

        for selector in selectors:
            if isinstance(selector, ByName):
                self._collect(selector, self.match_name(applied_modules, selector.name), result, seen)

        for selector in selectors:
            if isinstance(selector, ById):
                self._collect(selector, self.match_id(applied_modules, selector.module_id), result, seen)

        self.logger.info(
            f"Resolved {result.found_count} applied module(s) "
            f"from {len(selectors)} selector(s)"
        )
        return result

    @staticmethod
    def match_name(applied_modules: Sequence[AppliedModule], name: str) -> list[AppliedModule]:
        return [m for m in applied_modules if m.name == name]

    @staticmethod
    def match_id(applied_modules: Sequence[AppliedModule], module_id: int) -> list[AppliedModule]:
        return [m for m in applied_modules if m.id == module_id]

    def _collect(
        self,
        selector: ModuleSelector,
        matches: list[AppliedModule],
        result: ResolutionResult,
        seen: set[int],
    ) -> None:
        if not matches:
            self.logger.info(f"No applied module matches {selector}, skipping")
            result.missed.append(selector)
            return

        if len(matches) > 1:
            self.logger.info(f"{len(matches)} applied modules match {selector}, processing all")

        for module in matches:
            if module.id in seen:
                continue
            seen.add(module.id)
            result.matches.append(module)

            if module.has_instances:
                self.logger.info(
                    f"Found module '{module.name}' (id={module.id}) "
                    f"with {module.instance_count} instance(s)"
                )
            else:
                self.logger.info(
                    f"Found module '{module.name}' (id={module.id}) with no instances"
                )
