"""Lookup validation: enum membership, fuzzy confidence and reference integrity."""
from .lookup_validator import ISSUE_CONFIGURATION, LookupValidator, find_similar_options
from .validation_types import (
    ISSUE_CONFIDENCE, ISSUE_ENUM, ISSUE_REFERENCE,
    BatchValidationResult, EnumRule, ItemValidation, ValidationIssue,
    ValidationItem, ValidationResult, ValidationStats,
)

__all__ = [
    'LookupValidator', 'find_similar_options',
    'ISSUE_CONFIDENCE', 'ISSUE_CONFIGURATION', 'ISSUE_ENUM', 'ISSUE_REFERENCE',
    'BatchValidationResult', 'EnumRule', 'ItemValidation', 'ValidationIssue',
    'ValidationItem', 'ValidationResult', 'ValidationStats',
]
