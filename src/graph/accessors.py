"""
Entity Accessors.

Read interface the integrity checker consumes, one accessor per entity type:
- get(ctx, id): single lookup, EntityNotFoundError / InvalidIDError on failure
- get_all(ctx): full listing of the type

Includes an in-memory implementation for callers that already hold entities.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from src.core.context import CheckContext
from src.core.errors import EntityNotFoundError
from src.graph.schema import EntityModel, EntityType, validate_id


class EntityAccessor(ABC):
    """
    Abstract read access to one entity type.

    Implementations must raise EntityNotFoundError for a well-formed ID that
    does not exist, and InvalidIDError for an ID that is malformed. Any other
    exception is treated as a storage failure.
    """

    entity_type: EntityType

    @abstractmethod
    async def get(self, ctx: CheckContext, entity_id: str) -> EntityModel:
        """
        Fetch a single entity.

        Args:
            ctx: Cancellation context
            entity_id: Namespaced entity ID

        Returns:
            The entity
        """
        pass

    @abstractmethod
    async def get_all(self, ctx: CheckContext) -> list[EntityModel]:
        """
        Fetch every entity of this type.

        Args:
            ctx: Cancellation context

        Returns:
            List of entities, in no particular order
        """
        pass


class InMemoryEntityAccessor(EntityAccessor):
    """
    Accessor backed by a dict of already-materialized entities.

    Usage:
        ```python
        objectives = InMemoryEntityAccessor(
            EntityType.OBJECTIVE,
            [ObjectiveEntity(id="obj-001"), ObjectiveEntity(id="obj-002", parent_id="obj-001")],
        )
        checker.set_objective_accessor(objectives)
        ```
    """

    def __init__(
        self,
        entity_type: EntityType,
        entities: Iterable[EntityModel] = (),
        validate_ids: bool = True,
    ) -> None:
        self.entity_type = entity_type
        self._validate_ids = validate_ids
        self._entities: dict[str, EntityModel] = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity: EntityModel) -> None:
        """Insert or replace an entity."""
        self._entities[entity.id] = entity

    async def get(self, ctx: CheckContext, entity_id: str) -> EntityModel:
        if self._validate_ids:
            validate_id(self.entity_type, entity_id)

        entity = self._entities.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_type.value, entity_id)
        return entity

    async def get_all(self, ctx: CheckContext) -> list[EntityModel]:
        return list(self._entities.values())
