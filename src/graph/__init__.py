"""
Project Entity Graph Module.

Entity schemas, read accessors, and the YAML-backed entity store.
"""

from src.graph.accessors import EntityAccessor, InMemoryEntityAccessor
from src.graph.schema import (
    ENTITY_MODELS,
    ActivityEntity,
    ActivityNode,
    ActorEntity,
    AssumptionEntity,
    ConsiderationEntity,
    DecisionEntity,
    DeliverableEntity,
    EntityModel,
    EntityType,
    ObjectiveEntity,
    ProblemEntity,
    QualityEntity,
    RiskEntity,
    SubsystemEntity,
    UseCaseActorRef,
    UseCaseEntity,
    validate_id,
)
from src.graph.yaml_store import YamlEntityAccessor, YamlEntityStore

__all__ = [
    # Schema
    "EntityType",
    "EntityModel",
    "ENTITY_MODELS",
    "ObjectiveEntity",
    "DeliverableEntity",
    "ConsiderationEntity",
    "DecisionEntity",
    "ProblemEntity",
    "RiskEntity",
    "AssumptionEntity",
    "QualityEntity",
    "UseCaseEntity",
    "UseCaseActorRef",
    "SubsystemEntity",
    "ActorEntity",
    "ActivityEntity",
    "ActivityNode",
    "validate_id",
    # Accessors
    "EntityAccessor",
    "InMemoryEntityAccessor",
    "YamlEntityAccessor",
    "YamlEntityStore",
]
