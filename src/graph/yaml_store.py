"""
YAML Entity Store.

Read-only access to the on-disk project layout:
- Directory entities: one YAML file per entity (objectives/obj-001.yaml)
- Single-file entities: a list under one key (actors.yaml -> actors:)

IDs are validated before any path is built, and every resolved path must stay
beneath the store's base directory.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from src.core.context import CheckContext
from src.core.errors import EntityNotFoundError, StoreError
from src.graph.accessors import EntityAccessor
from src.graph.schema import ENTITY_MODELS, EntityModel, EntityType, validate_id

logger = structlog.get_logger(__name__)


ENTITY_DIRECTORIES: dict[EntityType, str] = {
    EntityType.OBJECTIVE: "objectives",
    EntityType.DELIVERABLE: "deliverables",
    EntityType.CONSIDERATION: "considerations",
    EntityType.DECISION: "decisions",
    EntityType.PROBLEM: "problems",
    EntityType.RISK: "risks",
    EntityType.ASSUMPTION: "assumptions",
    EntityType.QUALITY: "quality",
    EntityType.USECASE: "usecases",
    EntityType.ACTIVITY: "activities",
}

# entity type -> (file name, list key)
SINGLE_FILE_ENTITIES: dict[EntityType, tuple[str, str]] = {
    EntityType.ACTOR: ("actors.yaml", "actors"),
    EntityType.SUBSYSTEM: ("subsystems.yaml", "subsystems"),
}

YAML_SUFFIXES = (".yaml", ".yml")


def resolve_safe_path(base_dir: Path, relative: str) -> Path:
    """
    Resolve a path beneath base_dir, rejecting anything that escapes it.

    Raises:
        StoreError: Null bytes, control characters, or path traversal
    """
    if "\x00" in relative:
        raise StoreError("access denied: null byte detected in path", path=relative)
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in relative):
        raise StoreError("access denied: control character detected in path", path=relative)

    base = base_dir.resolve()
    resolved = (base / relative).resolve()
    if resolved != base and base not in resolved.parents:
        raise StoreError("access denied: path is outside base directory", path=relative)
    return resolved


def read_yaml(path: Path) -> Any:
    """Parse one YAML file, mapping read and parse failures to StoreError."""
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise StoreError(f"YAML syntax error in {path}: {e}", path=str(path)) from e
    except OSError as e:
        raise StoreError(f"failed to read {path}: {e}", path=str(path)) from e


class YamlEntityAccessor(EntityAccessor):
    """Accessor for one entity type stored under a YamlEntityStore."""

    def __init__(self, base_dir: Path, entity_type: EntityType) -> None:
        self.entity_type = entity_type
        self._base_dir = base_dir
        self._model = ENTITY_MODELS[entity_type]

    async def get(self, ctx: CheckContext, entity_id: str) -> EntityModel:
        validate_id(self.entity_type, entity_id)

        if self.entity_type in SINGLE_FILE_ENTITIES:
            for entity in self._load_single_file():
                if entity.id == entity_id:
                    return entity
            raise EntityNotFoundError(self.entity_type.value, entity_id)

        directory = ENTITY_DIRECTORIES[self.entity_type]
        for suffix in YAML_SUFFIXES:
            path = resolve_safe_path(self._base_dir, f"{directory}/{entity_id}{suffix}")
            if path.is_file():
                return self._parse(read_yaml(path), path)
        raise EntityNotFoundError(self.entity_type.value, entity_id)

    async def get_all(self, ctx: CheckContext) -> list[EntityModel]:
        if self.entity_type in SINGLE_FILE_ENTITIES:
            return self._load_single_file()

        directory = resolve_safe_path(self._base_dir, ENTITY_DIRECTORIES[self.entity_type])
        if not directory.is_dir():
            return []

        entities: list[EntityModel] = []
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.suffix not in YAML_SUFFIXES:
                continue
            data = read_yaml(path)
            if data is None:
                logger.debug("Skipping empty entity file", path=str(path))
                continue
            entities.append(self._parse(data, path))
        return entities

    def _load_single_file(self) -> list[EntityModel]:
        filename, key = SINGLE_FILE_ENTITIES[self.entity_type]
        path = resolve_safe_path(self._base_dir, filename)
        if not path.is_file():
            return []

        data = read_yaml(path) or {}
        if not isinstance(data, dict):
            raise StoreError(f"expected a mapping in {path}", path=str(path))
        items = data.get(key) or []
        if not isinstance(items, list):
            raise StoreError(f"expected a list under '{key}' in {path}", path=str(path))
        return [self._parse(item, path) for item in items]

    def _parse(self, data: Any, path: Path) -> EntityModel:
        try:
            return self._model.model_validate(data)
        except ValidationError as e:
            raise StoreError(
                f"invalid {self.entity_type.value} entity in {path}: {e.error_count()} validation error(s)",
                path=str(path),
            ) from e


class YamlEntityStore:
    """
    Read-only view over a project data directory.

    Usage:
        ```python
        store = YamlEntityStore(".zeus")
        objectives = await store.accessor(EntityType.OBJECTIVE).get_all(ctx)
        ```
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)
        self._accessors: dict[EntityType, YamlEntityAccessor] = {}

    def accessor(self, entity_type: EntityType) -> YamlEntityAccessor:
        """Get (and cache) the accessor for an entity type."""
        if entity_type not in self._accessors:
            self._accessors[entity_type] = YamlEntityAccessor(self.base_dir, entity_type)
        return self._accessors[entity_type]

    def accessors(self) -> dict[EntityType, YamlEntityAccessor]:
        """Accessors for every entity type."""
        return {entity_type: self.accessor(entity_type) for entity_type in EntityType}
