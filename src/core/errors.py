"""
Shared Error Types.

Errors raised by entity accessors and by the integrity checker:
- EntityNotFoundError: lookup of an ID that does not exist
- InvalidIDError: malformed entity ID (distinct from "not found")
- StoreError: the backing store could not be read
- IntegrityCheckError: a check phase aborted on a control error
"""


class EntityNotFoundError(LookupError):
    """Raised when an entity ID does not resolve to an existing entity."""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"entity not found: {entity_type} {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidIDError(ValueError):
    """Raised when an entity ID does not match its type's pattern."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class StoreError(Exception):
    """Raised when entity data cannot be read from the backing store."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class IntegrityCheckError(Exception):
    """Raised by a full integrity run when one of its phases fails."""

    def __init__(self, phase: str, cause: BaseException):
        super().__init__(f"{phase} check failed: {cause}")
        self.phase = phase
        self.cause = cause
