"""
Reference Validator.

Walks every declared relation and classifies each referenced ID:
- Required and empty: reference violation
- Dangling: violation or warning, per the relation's declared severity
- Malformed ID: always a warning
- Any other accessor failure: propagated, aborting the check
"""

from collections.abc import Mapping
from enum import Enum

import structlog

from src.core.context import CheckContext
from src.core.errors import EntityNotFoundError, InvalidIDError
from src.graph.accessors import EntityAccessor
from src.graph.schema import EntityModel, EntityType
from src.graph.integrity.issues import (
    ReferenceViolation,
    ReferenceWarning,
    required_missing_message,
)
from src.graph.integrity.relations import (
    RELATION_GROUPS,
    IssueSeverity,
    Relation,
    RelationGroup,
)

logger = structlog.get_logger(__name__)


class Resolution(str, Enum):
    """Outcome of resolving one referenced ID."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID_ID = "invalid_id"
    SKIPPED = "skipped"  # Target accessor not configured


class ReferenceValidator:
    """
    Validates cross-entity references over the configured accessors.

    Source types are scanned in declaration order, entities in ascending ID
    order, and relations in declaration order, so findings are reproducible
    for a given data state.

    Usage:
        ```python
        validator = ReferenceValidator(accessors)

        errors = await validator.check_references(ctx)
        warnings = await validator.check_warnings(ctx)
        ```
    """

    def __init__(
        self,
        accessors: Mapping[EntityType, EntityAccessor | None],
        groups: tuple[RelationGroup, ...] = RELATION_GROUPS,
        log_findings: bool = False,
    ) -> None:
        self._accessors = accessors
        self._groups = groups
        self._log_findings = log_findings

    async def check_references(self, ctx: CheckContext) -> list[ReferenceViolation]:
        """
        Collect references that invalidate the data set.

        Only relations declared with ERROR severity are scanned.
        """
        ctx.raise_if_done()
        violations, _ = await self._scan(ctx, only=IssueSeverity.ERROR, collect=IssueSeverity.ERROR)
        return violations

    async def check_warnings(self, ctx: CheckContext) -> list[ReferenceWarning]:
        """
        Collect reference warnings.

        Every relation is scanned: WARNING relations report dangling and
        malformed IDs, ERROR relations contribute their malformed IDs.
        """
        ctx.raise_if_done()
        _, warnings = await self._scan(ctx, only=None, collect=IssueSeverity.WARNING)
        return warnings

    async def _scan(
        self,
        ctx: CheckContext,
        only: IssueSeverity | None,
        collect: IssueSeverity,
    ) -> tuple[list[ReferenceViolation], list[ReferenceWarning]]:
        violations: list[ReferenceViolation] = []
        warnings: list[ReferenceWarning] = []
        keep_violations = collect == IssueSeverity.ERROR

        for group in self._groups:
            relations = [r for r in group.relations if only is None or r.severity == only]
            if not relations:
                continue

            source = self._accessors.get(group.source)
            if source is None:
                continue

            ctx.raise_if_done()
            entities = sorted(await source.get_all(ctx), key=lambda e: e.id)
            sibling_ids = {entity.id for entity in entities}

            logger.debug(
                "Scanning references",
                source_type=group.source.value,
                entities=len(entities),
                relations=len(relations),
            )

            for entity in entities:
                for relation in relations:
                    await self._check_relation(
                        ctx, group.source, entity, relation, sibling_ids,
                        violations if keep_violations else None,
                        None if keep_violations else warnings,
                    )

        return violations, warnings

    async def _check_relation(
        self,
        ctx: CheckContext,
        source_type: EntityType,
        entity: EntityModel,
        relation: Relation,
        sibling_ids: set[str],
        violations: list[ReferenceViolation] | None,
        warnings: list[ReferenceWarning] | None,
    ) -> None:
        """Classify one relation of one entity. Findings whose list is None are dropped."""
        for slot in relation.extract(entity):
            if not slot.target_id:
                if relation.required:
                    self._add_violation(violations, ReferenceViolation(
                        source_type=source_type.value,
                        source_id=entity.id,
                        target_type=relation.target.value,
                        target_id="",
                        message=required_missing_message(relation.field),
                    ))
                continue

            resolution = await self._resolve(ctx, relation, slot.target_id, sibling_ids)

            if resolution == Resolution.NOT_FOUND:
                message = relation.not_found_message.format(label=slot.label)
                if relation.severity == IssueSeverity.ERROR:
                    self._add_violation(violations, ReferenceViolation(
                        source_type=source_type.value,
                        source_id=entity.id,
                        target_type=relation.target.value,
                        target_id=slot.target_id,
                        message=message,
                    ))
                else:
                    self._add_warning(warnings, ReferenceWarning(
                        source_type=source_type.value,
                        source_id=entity.id,
                        target_type=relation.target.value,
                        target_id=slot.target_id,
                        message=message,
                    ))
            elif resolution == Resolution.INVALID_ID:
                self._add_warning(warnings, ReferenceWarning(
                    source_type=source_type.value,
                    source_id=entity.id,
                    target_type=relation.target.value,
                    target_id=slot.target_id,
                    message=relation.invalid_format_message.format(label=slot.label),
                ))

    async def _resolve(
        self,
        ctx: CheckContext,
        relation: Relation,
        target_id: str,
        sibling_ids: set[str],
    ) -> Resolution:
        if relation.siblings:
            return Resolution.FOUND if target_id in sibling_ids else Resolution.NOT_FOUND

        target = self._accessors.get(relation.target)
        if target is None:
            return Resolution.SKIPPED

        try:
            await target.get(ctx, target_id)
        except EntityNotFoundError:
            return Resolution.NOT_FOUND
        except InvalidIDError:
            return Resolution.INVALID_ID
        return Resolution.FOUND

    def _add_violation(self, violations: list[ReferenceViolation] | None, violation: ReferenceViolation) -> None:
        if violations is None:
            return
        violations.append(violation)
        if self._log_findings:
            logger.debug("Reference violation", finding=str(violation))

    def _add_warning(self, warnings: list[ReferenceWarning] | None, warning: ReferenceWarning) -> None:
        if warnings is None:
            return
        warnings.append(warning)
        if self._log_findings:
            logger.debug("Reference warning", finding=warning.warning())
