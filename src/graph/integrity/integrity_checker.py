"""
Project Integrity Checker.

Validates the consistency of the project entity graph:
- Broken required references (errors)
- Broken optional references and malformed IDs (warnings)
- Cycles in objective/activity hierarchies and activity dependencies

The checker only reads. Every call re-reads the store through the configured
accessors; a missing accessor disables the checks of its entity type.
"""

import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

import structlog

from src.config.settings import IntegritySettings, get_settings
from src.core.context import CheckCancelledError, CheckContext
from src.core.errors import IntegrityCheckError
from src.graph.accessors import EntityAccessor
from src.graph.schema import EntityType
from src.graph.yaml_store import YamlEntityStore
from src.graph.integrity.cycle_detector import CycleDetector
from src.graph.integrity.issues import (
    MSG_CIRCULAR_DEPENDENCY,
    MSG_CIRCULAR_PARENT_REFERENCE,
    CycleError,
    IntegrityResult,
    ReferenceViolation,
    ReferenceWarning,
)
from src.graph.integrity.reference_validator import ReferenceValidator
from src.observability.logging import LogContext

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class IntegrityChecker:
    """
    Checks referential integrity and hierarchy cycles of project entities.

    Performs:
    - Reference checks (Deliverable → Objective, Decision → Consideration, ...)
    - Cycle checks (Objective parents, Activity parents, Activity dependencies)
    - Warning checks (UseCase → Subsystem/Actor, Activity → UseCase/Deliverable, ...)

    Usage:
        ```python
        checker = IntegrityChecker(objective_accessor, deliverable_accessor)
        checker.set_decision_accessor(decisions)
        checker.set_consideration_accessor(considerations)

        result = await checker.check_all(CheckContext(timeout=10))

        if not result.valid:
            for error in result.reference_errors:
                print(error)
            for cycle in result.cycle_errors:
                print(cycle)
        ```
    """

    def __init__(
        self,
        objective_accessor: EntityAccessor | None = None,
        deliverable_accessor: EntityAccessor | None = None,
        settings: IntegritySettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().integrity
        self._accessors: dict[EntityType, EntityAccessor | None] = {
            entity_type: None for entity_type in EntityType
        }
        self._accessors[EntityType.OBJECTIVE] = objective_accessor
        self._accessors[EntityType.DELIVERABLE] = deliverable_accessor

        self._references = ReferenceValidator(
            self._accessors,
            log_findings=self._settings.log_findings,
        )
        self._cycles = CycleDetector()

    # =========================================================================
    # Accessor wiring
    # =========================================================================

    def set_accessor(self, entity_type: EntityType, accessor: EntityAccessor | None) -> None:
        """Configure (or, with None, disable) the accessor of an entity type."""
        self._accessors[EntityType(entity_type)] = accessor

    def set_objective_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.OBJECTIVE, accessor)

    def set_deliverable_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.DELIVERABLE, accessor)

    def set_consideration_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.CONSIDERATION, accessor)

    def set_decision_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.DECISION, accessor)

    def set_problem_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.PROBLEM, accessor)

    def set_risk_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.RISK, accessor)

    def set_assumption_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.ASSUMPTION, accessor)

    def set_quality_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.QUALITY, accessor)

    def set_usecase_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.USECASE, accessor)

    def set_subsystem_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.SUBSYSTEM, accessor)

    def set_actor_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.ACTOR, accessor)

    def set_activity_accessor(self, accessor: EntityAccessor | None) -> None:
        self.set_accessor(EntityType.ACTIVITY, accessor)

    # =========================================================================
    # Checks
    # =========================================================================

    async def check_all(self, ctx: CheckContext | None = None) -> IntegrityResult:
        """
        Perform every integrity check.

        Runs reference checks, then cycle checks, then warning checks.

        Args:
            ctx: Cancellation context (defaults to a background context)

        Returns:
            IntegrityResult; valid unless reference or cycle errors were found

        Raises:
            CheckCancelledError: The context was cancelled or timed out
            IntegrityCheckError: A phase failed reading the store
        """
        ctx = ctx or CheckContext.background()
        start_time = datetime.utcnow()
        result = IntegrityResult(checked_at=start_time)

        with LogContext(check_run=uuid.uuid4().hex[:8]):
            logger.info("Starting integrity check")

            result.reference_errors = await self._run_phase("reference", self.check_references, ctx)
            result.cycle_errors = await self._run_phase("cycle", self.check_cycles, ctx)
            result.warnings = await self._run_phase("warning", self.check_warnings, ctx)

            result.update_validity()
            result.duration_seconds = (datetime.utcnow() - start_time).total_seconds()

            logger.info(
                "Integrity check completed",
                valid=result.valid,
                reference_errors=len(result.reference_errors),
                cycle_errors=len(result.cycle_errors),
                warnings=len(result.warnings),
                duration_s=round(result.duration_seconds, 2),
            )

        return result

    async def _run_phase(
        self,
        phase: str,
        check: Callable[[CheckContext], Awaitable[list[T]]],
        ctx: CheckContext,
    ) -> list[T]:
        with LogContext(phase=phase):
            try:
                return await check(ctx)
            except CheckCancelledError as e:
                logger.info("Integrity check aborted", reason=str(e))
                raise
            except Exception as e:
                logger.error("Integrity check failed", error=str(e), path=getattr(e, "path", None))
                raise IntegrityCheckError(phase, e) from e

    async def check_references(self, ctx: CheckContext | None = None) -> list[ReferenceViolation]:
        """
        Find broken references that invalidate the data set.

        Covers Deliverable → Objective, Objective → parent Objective,
        Decision → Consideration (required), Quality → Deliverable (required),
        UseCase → Objective (required), and Consideration/Problem/Risk/Assumption
        → Objective/Deliverable (and Consideration → Decision).
        """
        ctx = ctx or CheckContext.background()
        return await self._references.check_references(ctx)

    async def check_warnings(self, ctx: CheckContext | None = None) -> list[ReferenceWarning]:
        """
        Find reference problems that do not invalidate the data set.

        Covers UseCase → Subsystem/Actor, Activity → UseCase, Activity
        dependencies and parent, Activity → Deliverable (related and per node),
        plus malformed IDs in any relation.
        """
        ctx = ctx or CheckContext.background()
        return await self._references.check_warnings(ctx)

    async def check_cycles(self, ctx: CheckContext | None = None) -> list[CycleError]:
        """
        Find cycles in Objective parents, Activity parents, and Activity dependencies.
        """
        ctx = ctx or CheckContext.background()
        ctx.raise_if_done()

        errors: list[CycleError] = []
        errors.extend(await self._check_objective_cycles(ctx))
        errors.extend(await self._check_activity_parent_cycles(ctx))
        errors.extend(await self._check_activity_dependency_cycles(ctx))
        return errors

    async def _check_objective_cycles(self, ctx: CheckContext) -> list[CycleError]:
        accessor = self._accessors[EntityType.OBJECTIVE]
        if accessor is None:
            return []

        ctx.raise_if_done()
        parent_map = CycleDetector.build_parent_map(await accessor.get_all(ctx))

        return [
            CycleError(
                entity_type=EntityType.OBJECTIVE.value,
                cycle=cycle,
                message=MSG_CIRCULAR_PARENT_REFERENCE,
            )
            for cycle in self._cycles.find_parent_cycles(parent_map)
        ]

    async def _check_activity_parent_cycles(self, ctx: CheckContext) -> list[CycleError]:
        accessor = self._accessors[EntityType.ACTIVITY]
        if accessor is None:
            return []

        ctx.raise_if_done()
        parent_map = CycleDetector.build_parent_map(await accessor.get_all(ctx))

        return [
            CycleError(
                entity_type=EntityType.ACTIVITY.value,
                cycle=cycle,
                message=MSG_CIRCULAR_PARENT_REFERENCE,
            )
            for cycle in self._cycles.find_parent_cycles(parent_map)
        ]

    async def _check_activity_dependency_cycles(self, ctx: CheckContext) -> list[CycleError]:
        accessor = self._accessors[EntityType.ACTIVITY]
        if accessor is None:
            return []

        ctx.raise_if_done()
        graph = CycleDetector.build_dependency_graph(
            await accessor.get_all(ctx),
            include_parent=self._settings.fold_parent_into_dependencies,
        )

        return [
            CycleError(
                entity_type=EntityType.ACTIVITY.value,
                cycle=cycle,
                message=MSG_CIRCULAR_DEPENDENCY,
            )
            for cycle in self._cycles.find_dependency_cycles(graph)
        ]


# Factory function
def create_integrity_checker(
    store: YamlEntityStore | None = None,
    settings: IntegritySettings | None = None,
) -> IntegrityChecker:
    """
    Create an integrity checker wired to every accessor of a YAML store.

    Args:
        store: Entity store (defaults to the configured data directory)
        settings: Checker settings (defaults to application settings)

    Returns:
        Fully configured IntegrityChecker
    """
    store = store or YamlEntityStore(get_settings().store.base_dir)
    checker = IntegrityChecker(settings=settings)
    for entity_type, accessor in store.accessors().items():
        checker.set_accessor(entity_type, accessor)
    return checker
