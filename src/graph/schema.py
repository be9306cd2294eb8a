"""
Entity Schema Models.

Defines entity types, ID formats, and the property schemas of the project
entities stored on disk.
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.errors import InvalidIDError


class EntityType(str, Enum):
    """Entity types in the project graph."""

    OBJECTIVE = "objective"
    DELIVERABLE = "deliverable"
    CONSIDERATION = "consideration"
    DECISION = "decision"
    PROBLEM = "problem"
    RISK = "risk"
    ASSUMPTION = "assumption"
    QUALITY = "quality"
    USECASE = "usecase"
    SUBSYSTEM = "subsystem"
    ACTOR = "actor"
    ACTIVITY = "activity"


ID_PATTERNS: dict[EntityType, re.Pattern[str]] = {
    EntityType.OBJECTIVE: re.compile(r"^obj-[0-9]{3}$"),
    EntityType.DELIVERABLE: re.compile(r"^del-[0-9]{3}$"),
    EntityType.CONSIDERATION: re.compile(r"^con-[0-9]{3}$"),
    EntityType.DECISION: re.compile(r"^dec-[0-9]{3}$"),
    EntityType.PROBLEM: re.compile(r"^prob-[0-9]{3}$"),
    EntityType.RISK: re.compile(r"^risk-[0-9]{3}$"),
    EntityType.ASSUMPTION: re.compile(r"^assum-[0-9]{3}$"),
    EntityType.QUALITY: re.compile(r"^qual-[0-9]{3}$"),
    EntityType.USECASE: re.compile(r"^uc-[a-f0-9]{8}$"),
    EntityType.SUBSYSTEM: re.compile(r"^sub-[a-f0-9]{8}$"),
    EntityType.ACTOR: re.compile(r"^actor-[a-f0-9]{8}$"),
    EntityType.ACTIVITY: re.compile(r"^act-([a-f0-9]{8}|[0-9]{3})$"),
}


def validate_id(entity_type: EntityType | str, entity_id: str) -> None:
    """
    Check that an ID matches the format of its entity type.

    Raises:
        InvalidIDError: Unknown entity type or malformed ID
    """
    try:
        pattern = ID_PATTERNS[EntityType(entity_type)]
    except ValueError:
        raise InvalidIDError("entity_type", f"unknown entity type: {entity_type}") from None

    if not pattern.match(entity_id):
        raise InvalidIDError(
            "id",
            f"invalid ID format: {entity_id} (expected pattern: {pattern.pattern})",
        )


class StoredModel(BaseModel):
    """Base for models parsed from YAML, top level or nested."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        """Treat explicit YAML nulls as absent so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class EntityModel(StoredModel):
    """Base for all stored entities."""

    id: str = Field(..., description="Namespaced entity ID")


class ObjectiveEntity(EntityModel):
    title: str = ""
    parent_id: str = Field(default="", description="Parent objective ID")


class DeliverableEntity(EntityModel):
    title: str = ""
    objective_id: str = ""


class ConsiderationEntity(EntityModel):
    title: str = ""
    objective_id: str = ""
    deliverable_id: str = ""
    decision_id: str = ""


class DecisionEntity(EntityModel):
    title: str = ""
    consideration_id: str = Field(default="", description="Required, immutable once decided")


class ProblemEntity(EntityModel):
    title: str = ""
    objective_id: str = ""
    deliverable_id: str = ""


class RiskEntity(EntityModel):
    title: str = ""
    objective_id: str = ""
    deliverable_id: str = ""


class AssumptionEntity(EntityModel):
    title: str = ""
    objective_id: str = ""
    deliverable_id: str = ""


class QualityEntity(EntityModel):
    title: str = ""
    deliverable_id: str = Field(default="", description="Required")


class UseCaseActorRef(StoredModel):
    """Actor participating in a use case."""

    actor_id: str = ""
    role: str = "primary"


class UseCaseEntity(EntityModel):
    title: str = ""
    objective_id: str = Field(default="", description="Required")
    subsystem_id: str = ""
    actors: list[UseCaseActorRef] = Field(default_factory=list)


class SubsystemEntity(EntityModel):
    name: str = ""


class ActorEntity(EntityModel):
    name: str = ""


class ActivityNode(StoredModel):
    """Node of an activity diagram."""

    id: str
    type: str = "action"
    name: str = ""
    deliverable_ids: list[str] = Field(default_factory=list)


class ActivityEntity(EntityModel):
    title: str = ""
    parent_id: str = Field(default="", description="Parent activity ID")
    dependencies: list[str] = Field(default_factory=list, description="Activity IDs this one depends on")
    usecase_id: str = ""
    related_deliverables: list[str] = Field(default_factory=list)
    nodes: list[ActivityNode] = Field(default_factory=list)


ENTITY_MODELS: dict[EntityType, type[EntityModel]] = {
    EntityType.OBJECTIVE: ObjectiveEntity,
    EntityType.DELIVERABLE: DeliverableEntity,
    EntityType.CONSIDERATION: ConsiderationEntity,
    EntityType.DECISION: DecisionEntity,
    EntityType.PROBLEM: ProblemEntity,
    EntityType.RISK: RiskEntity,
    EntityType.ASSUMPTION: AssumptionEntity,
    EntityType.QUALITY: QualityEntity,
    EntityType.USECASE: UseCaseEntity,
    EntityType.SUBSYSTEM: SubsystemEntity,
    EntityType.ACTOR: ActorEntity,
    EntityType.ACTIVITY: ActivityEntity,
}
