"""Result types for lookup validation."""
from dataclasses import dataclass, field
from typing import Any, List, Optional

ISSUE_ENUM = "lookup_enum"
ISSUE_CONFIDENCE = "lookup_confidence"
ISSUE_REFERENCE = "lookup_reference"


@dataclass(frozen=True)
class ValidationIssue:
    type: str
    message: str
    severity: str = "error"
    suggestions: List[str] = field(default_factory=list)
    available_options: List[str] = field(default_factory=list)
    reference_source: Optional[str] = None
    confidence: Optional[float] = None


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def severity(self) -> Optional[str]:
        if self.errors:
            return "error"
        if self.warnings:
            return "warning"
        return None

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity == "error":
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.suggestions.extend(other.suggestions)


@dataclass(frozen=True)
class EnumRule:
    """A validation rule restricting a column to the reference's key values."""
    available_options: List[str]
    message: str
    type: str = ISSUE_ENUM
    severity: str = "error"


@dataclass(frozen=True)
class ValidationStats:
    total_validated: int
    valid_count: int
    error_count: int
    warning_count: int
    success_rate: float
    common_suggestions: List[str]


@dataclass(frozen=True)
class ValidationItem:
    value: Any
    field: Any
    row_id: Optional[str] = None
    reference_table: Any = None


@dataclass(frozen=True)
class ItemValidation:
    row_id: Optional[str]
    result: ValidationResult


@dataclass(frozen=True)
class BatchValidationResult:
    results: List[ItemValidation]
    stats: ValidationStats
