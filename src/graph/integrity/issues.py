"""
Integrity Findings and Report.

Result types produced by the integrity checker:
- ReferenceViolation: broken required/declared reference (blocks validity)
- ReferenceWarning: broken optional reference or malformed ID (informational)
- CycleError: cycle in a parent or dependency graph (blocks validity)
- IntegrityResult: aggregate of one full check
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# Reference messages
MSG_REFERENCED_OBJECTIVE_NOT_FOUND = "referenced objective not found"
MSG_REFERENCED_DELIVERABLE_NOT_FOUND = "referenced deliverable not found"
MSG_REFERENCED_CONSIDERATION_NOT_FOUND = "referenced consideration not found"
MSG_REFERENCED_DECISION_NOT_FOUND = "referenced decision not found"
MSG_REFERENCED_SUBSYSTEM_NOT_FOUND = "referenced subsystem not found"
MSG_REFERENCED_ACTOR_NOT_FOUND = "referenced actor not found"
MSG_REFERENCED_USECASE_NOT_FOUND = "referenced usecase not found"
MSG_REFERENCED_ACTIVITY_NOT_FOUND = "referenced dependency activity not found"
MSG_REFERENCED_PARENT_ACTIVITY_NOT_FOUND = "referenced parent activity not found"
MSG_PARENT_OBJECTIVE_NOT_FOUND = "parent objective not found"
MSG_RELATED_DELIVERABLE_NOT_FOUND = "referenced deliverable in related_deliverables not found"
MSG_NODE_DELIVERABLE_NOT_FOUND = "referenced deliverable in node {label} not found"

# Malformed ID messages
MSG_INVALID_SUBSYSTEM_ID_FORMAT = "invalid subsystem ID format"
MSG_INVALID_ACTOR_ID_FORMAT = "invalid actor ID format"
MSG_INVALID_USECASE_ID_FORMAT = "invalid usecase ID format"
MSG_INVALID_RELATED_DELIVERABLE_FORMAT = "invalid deliverable ID format in related_deliverables"
MSG_INVALID_NODE_DELIVERABLE_FORMAT = "invalid deliverable ID format in node {label}"

# Cycle messages
MSG_CIRCULAR_PARENT_REFERENCE = "circular parent reference detected"
MSG_CIRCULAR_DEPENDENCY = "circular dependency detected"


def required_missing_message(field_name: str) -> str:
    return f"{field_name} is required but missing"


def invalid_format_message(target_type: str) -> str:
    return f"invalid {target_type} ID format"


def _format_reference(
    source_type: str,
    source_id: str,
    target_type: str,
    target_id: str,
    message: str,
) -> str:
    return f"{source_type} {source_id} → {target_type} {target_id}: {message}"


@dataclass(frozen=True)
class ReferenceViolation:
    """A reference that makes the data set invalid."""

    source_type: str
    source_id: str
    target_type: str
    target_id: str
    message: str

    def __str__(self) -> str:
        return _format_reference(
            self.source_type, self.source_id, self.target_type, self.target_id, self.message
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_type": self.source_type,
            "source_id": self.source_id,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class ReferenceWarning:
    """A reference problem that needs attention but does not invalidate."""

    source_type: str
    source_id: str
    target_type: str
    target_id: str
    message: str

    def warning(self) -> str:
        return _format_reference(
            self.source_type, self.source_id, self.target_type, self.target_id, self.message
        )

    def __str__(self) -> str:
        return self.warning()

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_type": self.source_type,
            "source_id": self.source_id,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class CycleError:
    """A cycle of entity IDs; the first and last element are the same ID."""

    entity_type: str
    cycle: list[str]
    message: str

    def __str__(self) -> str:
        return f"{self.entity_type} cycle detected: {self.cycle} - {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "cycle": list(self.cycle),
            "message": self.message,
        }


@dataclass
class IntegrityResult:
    """Result of a full integrity check."""

    valid: bool = True
    reference_errors: list[ReferenceViolation] = field(default_factory=list)
    cycle_errors: list[CycleError] = field(default_factory=list)
    warnings: list[ReferenceWarning] = field(default_factory=list)

    checked_at: datetime = field(default_factory=datetime.utcnow)
    duration_seconds: float = 0.0

    def update_validity(self) -> None:
        """Recompute validity; warnings never affect it."""
        self.valid = not self.reference_errors and not self.cycle_errors

    @property
    def issues_found(self) -> int:
        return len(self.reference_errors) + len(self.cycle_errors) + len(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "checked_at": self.checked_at.isoformat(),
            "valid": self.valid,
            "summary": {
                "issues_found": self.issues_found,
                "reference_errors": len(self.reference_errors),
                "cycle_errors": len(self.cycle_errors),
                "warnings": len(self.warnings),
            },
            "duration_seconds": round(self.duration_seconds, 2),
            "issues": {
                "reference_errors": [e.to_dict() for e in self.reference_errors],
                "cycle_errors": [e.to_dict() for e in self.cycle_errors],
                "warnings": [w.to_dict() for w in self.warnings],
            },
        }
