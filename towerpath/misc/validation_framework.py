"""
Validation framework for towerpath boundary inputs.

Anything that enters the engine from outside (points, custom theme records,
level tables) is checked by one of these validators, which collect every
issue instead of stopping at the first one.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple, Optional, Union
from dataclasses import dataclass
from enum import Enum
import math


class ValidationSeverity(Enum):
    """Severity levels for validation issues and error records."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


BLOCKING = (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL)


@dataclass
class ValidationIssue:
    """Represents a single validation issue."""
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None
    value: Optional[Any] = None
    suggestion: Optional[str] = None

    def describe(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


@dataclass
class ValidationReport:
    """Issues collected by one validator run."""
    issues: List[ValidationIssue]

    def count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity in BLOCKING for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return self.count(ValidationSeverity.WARNING) > 0

    def get_summary(self) -> str:
        """One-line summary, e.g. ``Validation failed: 2 errors, 1 warnings``."""
        if self.is_valid and not self.has_warnings:
            return "Validation passed"
        parts = [f"{self.count(severity)} {label}"
                 for severity, label in ((ValidationSeverity.CRITICAL, "critical"),
                                         (ValidationSeverity.ERROR, "errors"),
                                         (ValidationSeverity.WARNING, "warnings"))
                 if self.count(severity)]
        verdict = "passed with" if self.is_valid else "failed:"
        return f"Validation {verdict} {', '.join(parts)}"

    def error_messages(self) -> List[str]:
        """Messages of every blocking issue, prefixed with the field when known."""
        return [issue.describe() for issue in self.issues if issue.severity in BLOCKING]


class BaseValidator(ABC):
    """Abstract base class for all validators."""

    def __init__(self):
        self.issues: List[ValidationIssue] = []

    def add_issue(self, severity: ValidationSeverity, message: str, field: Optional[str] = None,
                  value: Optional[Any] = None, suggestion: Optional[str] = None):
        self.issues.append(ValidationIssue(severity, message, field, value, suggestion))

    def validate(self, data: Any) -> ValidationReport:
        """
        Validate data and return the collected issues.

        Args:
            data: Data to validate

        Returns:
            ValidationReport with all issues found
        """
        self.issues = []
        self._validate_impl(data)
        return ValidationReport(list(self.issues))

    @abstractmethod
    def _validate_impl(self, data: Any):
        """Implement specific validation logic."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PositionValidator(BaseValidator):
    """
    Validator for 2D canvas positions given as ``(x, y)`` pairs.

    Anything that is not a pair is CRITICAL; non-numeric, non-finite and
    out-of-bounds coordinates are ERRORs.
    """

    def __init__(self, bounds: Optional[Tuple[float, float, float, float]] = None):
        """
        Args:
            bounds: Optional inclusive bounds as (min_x, max_x, min_y, max_y)
        """
        super().__init__()
        self.bounds = bounds

    def _validate_impl(self, data: Any):
        if not isinstance(data, (tuple, list)) or len(data) != 2:
            self.add_issue(ValidationSeverity.CRITICAL, f"Position must be an (x, y) pair, got {data!r}",
                           field="position", value=data)
            return

        coords_ok = True
        for name, coord in zip("xy", data):
            if not _is_number(coord):
                problem = f"must be numeric, got {type(coord).__name__}"
            elif not math.isfinite(coord):
                problem = f"must be finite, got {coord}"
            else:
                continue
            coords_ok = False
            self.add_issue(ValidationSeverity.ERROR, f"Coordinate {name} {problem}",
                           field=f"position.{name}", value=coord)

        if not (self.bounds and coords_ok):
            return
        min_x, max_x, min_y, max_y = self.bounds
        for name, coord, low, high in (("x", data[0], min_x, max_x), ("y", data[1], min_y, max_y)):
            if not low <= coord <= high:
                self.add_issue(ValidationSeverity.ERROR,
                               f"{name.upper()} coordinate {coord} outside bounds [{low}, {high}]",
                               field=f"position.{name}", value=coord,
                               suggestion=f"Use {name} between {low} and {high}")


class NumericValidator(BaseValidator):
    """Validator for finite numbers with sign and range limits."""

    def __init__(self, min_value: Optional[Union[int, float]] = None, max_value: Optional[Union[int, float]] = None,
                 allow_negative: bool = True, allow_zero: bool = True,
                 range_severity: ValidationSeverity = ValidationSeverity.WARNING):
        super().__init__()
        self.min_value = min_value
        self.max_value = max_value
        self.allow_negative = allow_negative
        self.allow_zero = allow_zero
        self.range_severity = range_severity

    def _validate_impl(self, data: Any):
        if not _is_number(data):
            self.add_issue(ValidationSeverity.ERROR, f"Value must be numeric, got {type(data).__name__}", value=data)
            return
        if not math.isfinite(data):
            self.add_issue(ValidationSeverity.ERROR, f"Value must be finite, got {data}", value=data)
            return

        if data < 0 and not self.allow_negative:
            self.add_issue(ValidationSeverity.ERROR, f"Negative values not allowed, got {data}", value=data)
        if data == 0 and not self.allow_zero:
            self.add_issue(ValidationSeverity.ERROR, "Zero value not allowed", value=data)

        if self.min_value is not None and data < self.min_value:
            self.add_issue(self.range_severity, f"Value {data} below minimum {self.min_value}", value=data,
                           suggestion=f"Use value >= {self.min_value}")
        if self.max_value is not None and data > self.max_value:
            self.add_issue(self.range_severity, f"Value {data} above maximum {self.max_value}", value=data,
                           suggestion=f"Use value <= {self.max_value}")


class DictValidator(BaseValidator):
    """
    Validator for mappings with required fields and per-field validators.

    Unknown fields are reported as WARNINGs when ``allow_extra_fields`` is off.
    """

    def __init__(self, required_fields: Optional[List[str]] = None, optional_fields: Optional[List[str]] = None,
                 field_validators: Optional[Dict[str, BaseValidator]] = None, allow_extra_fields: bool = True):
        super().__init__()
        self.required_fields = required_fields or []
        self.optional_fields = optional_fields or []
        self.field_validators = field_validators or {}
        self.allow_extra_fields = allow_extra_fields

    def _validate_impl(self, data: Any):
        if not isinstance(data, dict):
            self.add_issue(ValidationSeverity.ERROR, f"Expected a mapping, got {type(data).__name__}", value=data)
            return

        for name in self.required_fields:
            if name not in data:
                self.add_issue(ValidationSeverity.ERROR, f"Required field '{name}' missing", field=name)

        if not self.allow_extra_fields:
            known = set(self.required_fields) | set(self.optional_fields)
            for name in data:
                if name not in known:
                    self.add_issue(ValidationSeverity.WARNING, f"Unexpected field '{name}'", field=name,
                                   value=data[name], suggestion=f"Known fields: {', '.join(sorted(known))}")

        for name, validator in self.field_validators.items():
            if name not in data:
                continue
            for issue in validator.validate(data[name]).issues:
                issue.field = name if issue.field is None else f"{name}.{issue.field}"
                self.issues.append(issue)


def create_theme_validator() -> DictValidator:
    """Create a validator for custom theme records."""
    def unit_interval() -> NumericValidator:
        return NumericValidator(min_value=0.0, max_value=1.0, range_severity=ValidationSeverity.ERROR)

    def segment_bound() -> NumericValidator:
        return NumericValidator(allow_zero=False, allow_negative=False, max_value=500.0,
                                range_severity=ValidationSeverity.ERROR)

    return DictValidator(
        required_fields=['straight_bias', 'curve_complexity', 'segment_length'],
        optional_fields=['name', 'obstacle_density', 'path_width'],
        field_validators={
            'straight_bias': unit_interval(),
            'curve_complexity': unit_interval(),
            'obstacle_density': unit_interval(),
            'path_width': NumericValidator(min_value=1.0, max_value=200.0, range_severity=ValidationSeverity.ERROR),
            'segment_length': DictValidator(
                required_fields=['min', 'max'],
                field_validators={'min': segment_bound(), 'max': segment_bound()},
            ),
        },
        allow_extra_fields=False
    )


def create_level_config_validator() -> DictValidator:
    """Create a validator for one entry of an imported level table."""
    return DictValidator(
        optional_fields=[
            'path_mode', 'theme', 'allow_generation', 'preserve_layout', 'static_path',
            'entry', 'exit', 'constraints', 'balance_settings', 'validation_profile',
        ],
        field_validators={
            'entry': PositionValidator(bounds=(0.0, 1.0, 0.0, 1.0)),
            'exit': PositionValidator(bounds=(0.0, 1.0, 0.0, 1.0)),
        },
        allow_extra_fields=False
    )
