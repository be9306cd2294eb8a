"""
Pytest Configuration and Shared Fixtures.

This module provides shared fixtures for testing the integrity checker.
"""

from collections.abc import Callable, Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import IntegritySettings, get_settings
from src.core.context import CheckContext
from src.core.errors import StoreError
from src.graph.accessors import EntityAccessor, InMemoryEntityAccessor
from src.graph.integrity.integrity_checker import IntegrityChecker
from src.graph.schema import (
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
)

EntitiesByType = dict[EntityType, list[EntityModel]]


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings fresh from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def integrity_settings() -> IntegritySettings:
    """Default checker settings, independent of the environment."""
    return IntegritySettings(fold_parent_into_dependencies=True, log_findings=False)


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def ctx() -> CheckContext:
    """A live context."""
    return CheckContext.background()


@pytest.fixture
def cancelled_ctx() -> CheckContext:
    """A context that is already cancelled."""
    context = CheckContext()
    context.cancel()
    return context


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def healthy_project() -> EntitiesByType:
    """A project where every reference resolves and nothing is cyclic."""
    return {
        EntityType.OBJECTIVE: [
            ObjectiveEntity(id="obj-001", title="Ship v1"),
            ObjectiveEntity(id="obj-002", title="Harden storage", parent_id="obj-001"),
        ],
        EntityType.DELIVERABLE: [
            DeliverableEntity(id="del-001", title="Storage layer", objective_id="obj-002"),
        ],
        EntityType.CONSIDERATION: [
            ConsiderationEntity(
                id="con-001",
                title="File format",
                objective_id="obj-001",
                deliverable_id="del-001",
                decision_id="dec-001",
            ),
        ],
        EntityType.DECISION: [
            DecisionEntity(id="dec-001", title="Use YAML", consideration_id="con-001"),
        ],
        EntityType.PROBLEM: [
            ProblemEntity(id="prob-001", title="Slow reads", objective_id="obj-002"),
        ],
        EntityType.RISK: [
            RiskEntity(id="risk-001", title="Disk full", deliverable_id="del-001"),
        ],
        EntityType.ASSUMPTION: [
            AssumptionEntity(id="assum-001", title="Single user"),
        ],
        EntityType.QUALITY: [
            QualityEntity(id="qual-001", title="Read latency", deliverable_id="del-001"),
        ],
        EntityType.USECASE: [
            UseCaseEntity(
                id="uc-a1b2c3d4",
                title="Record a decision",
                objective_id="obj-001",
                subsystem_id="sub-a1b2c3d4",
                actors=[UseCaseActorRef(actor_id="actor-a1b2c3d4")],
            ),
        ],
        EntityType.SUBSYSTEM: [
            SubsystemEntity(id="sub-a1b2c3d4", name="Core"),
        ],
        EntityType.ACTOR: [
            ActorEntity(id="actor-a1b2c3d4", name="Maintainer"),
        ],
        EntityType.ACTIVITY: [
            ActivityEntity(
                id="act-00000001",
                title="Write decision",
                usecase_id="uc-a1b2c3d4",
                related_deliverables=["del-001"],
                nodes=[ActivityNode(id="n1", name="save", deliverable_ids=["del-001"])],
            ),
            ActivityEntity(
                id="act-00000002",
                title="Review decision",
                parent_id="act-00000001",
                dependencies=["act-00000001"],
            ),
        ],
    }


def make_accessor(entity_type: EntityType, entities: Iterable[EntityModel] = ()) -> InMemoryEntityAccessor:
    """In-memory accessor for one entity type."""
    return InMemoryEntityAccessor(entity_type, entities)


@pytest.fixture
def build_checker(integrity_settings: IntegritySettings) -> Callable[..., IntegrityChecker]:
    """Factory wiring an IntegrityChecker to in-memory accessors."""

    def build(
        entities: EntitiesByType,
        settings: IntegritySettings | None = None,
    ) -> IntegrityChecker:
        checker = IntegrityChecker(settings=settings or integrity_settings)
        for entity_type, items in entities.items():
            checker.set_accessor(entity_type, make_accessor(entity_type, items))
        return checker

    return build


@pytest.fixture
def failing_accessor() -> MagicMock:
    """An accessor whose storage is unreadable."""
    accessor = MagicMock(spec=EntityAccessor)
    accessor.get_all = AsyncMock(side_effect=StoreError("failed to read objectives/obj-001.yaml"))
    accessor.get = AsyncMock(side_effect=StoreError("failed to read objectives/obj-001.yaml"))
    return accessor
