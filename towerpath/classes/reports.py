# towerpath/classes/reports.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from towerpath.misc.validation_framework import ValidationSeverity


class ErrorKind(Enum):
    """Category of a failure, which decides how the engine recovers from it."""
    INPUT_VALIDATION = "input_validation"
    REACHABILITY = "reachability"
    GENERATION = "generation"
    CONFIGURATION = "configuration"
    CRITICAL = "critical"


@dataclass
class ErrorRecord:
    """A single logged failure or validation finding."""
    kind: ErrorKind
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "context": {k: _plain(v) for k, v in self.context.items()},
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return repr(value)


@dataclass
class Recommendation:
    """Advice produced by validation, for level designers rather than players."""
    category: str
    priority: str  # low|medium|high
    message: str
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass
class ValidationResult:
    """Combined structural and balance verdict for one candidate path."""
    is_valid: bool = True
    errors: List[ErrorRecord] = field(default_factory=list)
    warnings: List[ErrorRecord] = field(default_factory=list)
    balance_score: float = 1.0
    recommendations: List[Recommendation] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)
    profile: Optional[str] = None

    def add_error(self, message: str, kind: ErrorKind = ErrorKind.GENERATION,
                  severity: ValidationSeverity = ValidationSeverity.ERROR, **context):
        self.errors.append(ErrorRecord(kind, message, severity, context))
        self.is_valid = False

    def add_warning(self, message: str, kind: ErrorKind = ErrorKind.GENERATION, **context):
        self.warnings.append(ErrorRecord(kind, message, ValidationSeverity.WARNING, context))

    @property
    def has_critical(self) -> bool:
        return any(e.severity == ValidationSeverity.CRITICAL for e in self.errors)

    @property
    def error_messages(self) -> List[str]:
        return [e.message for e in self.errors]

    @property
    def warning_messages(self) -> List[str]:
        return [w.message for w in self.warnings]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Fold another result into this one. Balance score takes the lower of the two."""
        self.is_valid = self.is_valid and other.is_valid
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.recommendations.extend(other.recommendations)
        self.metrics.update(other.metrics)
        self.balance_score = min(self.balance_score, other.balance_score)
        return self

    def raise_if_invalid(self, error_class: type):
        """Raise ``error_class`` with the joined error messages if validation failed."""
        if not self.is_valid:
            raise error_class("; ".join(self.error_messages) or "Path failed validation")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "profile": self.profile,
            "balance_score": self.balance_score,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "metrics": {k: float(v) for k, v in self.metrics.items()},
        }
