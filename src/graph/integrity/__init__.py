"""
Project Integrity Checking.

Provides referential integrity and consistency checking:
- Broken required references (errors)
- Broken optional references and malformed IDs (warnings)
- Parent hierarchy and dependency cycle detection
"""

from src.graph.integrity.cycle_detector import CycleDetector, detect_cycle
from src.graph.integrity.integrity_checker import (
    IntegrityChecker,
    create_integrity_checker,
)
from src.graph.integrity.issues import (
    CycleError,
    IntegrityResult,
    ReferenceViolation,
    ReferenceWarning,
)
from src.graph.integrity.reference_validator import ReferenceValidator
from src.graph.integrity.relations import (
    RELATION_GROUPS,
    IssueSeverity,
    Relation,
    RelationGroup,
)

__all__ = [
    # Checker
    "IntegrityChecker",
    "create_integrity_checker",
    # Components
    "ReferenceValidator",
    "CycleDetector",
    "detect_cycle",
    # Findings
    "IntegrityResult",
    "ReferenceViolation",
    "ReferenceWarning",
    "CycleError",
    # Relations
    "RELATION_GROUPS",
    "IssueSeverity",
    "Relation",
    "RelationGroup",
]
