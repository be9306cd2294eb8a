"""
Declared Cross-Entity Relations.

Every reference the integrity checker validates is declared here, grouped by
source entity type. Declaration order is report order.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from src.graph.schema import ActivityEntity, EntityModel, EntityType, UseCaseEntity
from src.graph.integrity import issues


class IssueSeverity(str, Enum):
    """Severity of a dangling reference."""

    ERROR = "error"       # Invalidates the data set
    WARNING = "warning"   # Should be investigated


@dataclass(frozen=True)
class RelationSlot:
    """One referenced ID extracted from an entity."""

    target_id: str
    label: str = ""  # Substituted into messages, e.g. the activity node ID


def scalar(field_name: str) -> Callable[[EntityModel], list[RelationSlot]]:
    def extract(entity: EntityModel) -> list[RelationSlot]:
        return [RelationSlot(getattr(entity, field_name) or "")]
    return extract


def id_list(field_name: str) -> Callable[[EntityModel], list[RelationSlot]]:
    def extract(entity: EntityModel) -> list[RelationSlot]:
        return [RelationSlot(value) for value in getattr(entity, field_name)]
    return extract


def usecase_actors(entity: UseCaseEntity) -> list[RelationSlot]:
    return [RelationSlot(ref.actor_id) for ref in entity.actors]


def activity_node_deliverables(entity: ActivityEntity) -> list[RelationSlot]:
    return [
        RelationSlot(deliverable_id, label=node.id)
        for node in entity.nodes
        for deliverable_id in node.deliverable_ids
    ]


@dataclass(frozen=True)
class Relation:
    """
    A reference from one entity type to another.

    Attributes:
        field: Field name used in "required but missing" messages
        target: Entity type the reference points to
        severity: Class of a dangling (not found) reference
        not_found_message: Message for a dangling reference
        extract: Pulls the referenced IDs out of a source entity
        required: An empty value is itself a violation
        siblings: Resolve against the already fetched source entities
        invalid_format: Message for a malformed ID (defaults to "invalid <target> ID format")
    """

    field: str
    target: EntityType
    severity: IssueSeverity
    not_found_message: str
    extract: Callable[[EntityModel], list[RelationSlot]]
    required: bool = False
    siblings: bool = False
    invalid_format: str | None = None

    @property
    def invalid_format_message(self) -> str:
        return self.invalid_format or issues.invalid_format_message(self.target.value)


@dataclass(frozen=True)
class RelationGroup:
    """All relations declared on one source entity type."""

    source: EntityType
    relations: tuple[Relation, ...]


def _objective_ref(severity: IssueSeverity = IssueSeverity.ERROR, required: bool = False) -> Relation:
    return Relation(
        field="objective_id",
        target=EntityType.OBJECTIVE,
        severity=severity,
        not_found_message=issues.MSG_REFERENCED_OBJECTIVE_NOT_FOUND,
        extract=scalar("objective_id"),
        required=required,
    )


def _deliverable_ref(required: bool = False) -> Relation:
    return Relation(
        field="deliverable_id",
        target=EntityType.DELIVERABLE,
        severity=IssueSeverity.ERROR,
        not_found_message=issues.MSG_REFERENCED_DELIVERABLE_NOT_FOUND,
        extract=scalar("deliverable_id"),
        required=required,
    )


RELATION_GROUPS: tuple[RelationGroup, ...] = (
    RelationGroup(EntityType.DELIVERABLE, (_objective_ref(),)),
    RelationGroup(EntityType.OBJECTIVE, (
        Relation(
            field="parent_id",
            target=EntityType.OBJECTIVE,
            severity=IssueSeverity.ERROR,
            not_found_message=issues.MSG_PARENT_OBJECTIVE_NOT_FOUND,
            extract=scalar("parent_id"),
        ),
    )),
    RelationGroup(EntityType.DECISION, (
        Relation(
            field="consideration_id",
            target=EntityType.CONSIDERATION,
            severity=IssueSeverity.ERROR,
            not_found_message=issues.MSG_REFERENCED_CONSIDERATION_NOT_FOUND,
            extract=scalar("consideration_id"),
            required=True,
        ),
    )),
    RelationGroup(EntityType.QUALITY, (_deliverable_ref(required=True),)),
    RelationGroup(EntityType.USECASE, (
        _objective_ref(required=True),
        Relation(
            field="subsystem_id",
            target=EntityType.SUBSYSTEM,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_REFERENCED_SUBSYSTEM_NOT_FOUND,
            extract=scalar("subsystem_id"),
            invalid_format=issues.MSG_INVALID_SUBSYSTEM_ID_FORMAT,
        ),
        Relation(
            field="actors",
            target=EntityType.ACTOR,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_REFERENCED_ACTOR_NOT_FOUND,
            extract=usecase_actors,
            invalid_format=issues.MSG_INVALID_ACTOR_ID_FORMAT,
        ),
    )),
    RelationGroup(EntityType.CONSIDERATION, (
        _objective_ref(),
        _deliverable_ref(),
        Relation(
            field="decision_id",
            target=EntityType.DECISION,
            severity=IssueSeverity.ERROR,
            not_found_message=issues.MSG_REFERENCED_DECISION_NOT_FOUND,
            extract=scalar("decision_id"),
        ),
    )),
    RelationGroup(EntityType.PROBLEM, (_objective_ref(), _deliverable_ref())),
    RelationGroup(EntityType.RISK, (_objective_ref(), _deliverable_ref())),
    RelationGroup(EntityType.ASSUMPTION, (_objective_ref(), _deliverable_ref())),
    RelationGroup(EntityType.ACTIVITY, (
        Relation(
            field="usecase_id",
            target=EntityType.USECASE,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_REFERENCED_USECASE_NOT_FOUND,
            extract=scalar("usecase_id"),
            invalid_format=issues.MSG_INVALID_USECASE_ID_FORMAT,
        ),
        Relation(
            field="dependencies",
            target=EntityType.ACTIVITY,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_REFERENCED_ACTIVITY_NOT_FOUND,
            extract=id_list("dependencies"),
            siblings=True,
        ),
        Relation(
            field="parent_id",
            target=EntityType.ACTIVITY,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_REFERENCED_PARENT_ACTIVITY_NOT_FOUND,
            extract=scalar("parent_id"),
            siblings=True,
        ),
        Relation(
            field="related_deliverables",
            target=EntityType.DELIVERABLE,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_RELATED_DELIVERABLE_NOT_FOUND,
            extract=id_list("related_deliverables"),
            invalid_format=issues.MSG_INVALID_RELATED_DELIVERABLE_FORMAT,
        ),
        Relation(
            field="nodes",
            target=EntityType.DELIVERABLE,
            severity=IssueSeverity.WARNING,
            not_found_message=issues.MSG_NODE_DELIVERABLE_NOT_FOUND,
            extract=activity_node_deliverables,
            invalid_format=issues.MSG_INVALID_NODE_DELIVERABLE_FORMAT,
        ),
    )),
)
