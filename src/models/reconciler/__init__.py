"""Reference reconciliation: exact, normalized and fuzzy matching of free-text
values against a reference table."""
from .engine import ReconciliationEngine
from .errors import ConfigurationError, LookupProcessingError, ReferenceUnavailableError
from .lookup_field import LookupFieldSpec, create_match_config
from .types import (
    BatchMetrics, BatchResult, DerivedField, MatchConfig, MatchMetrics,
    MatchResult, MatchTier, Suggestion,
)

_default_engine = ReconciliationEngine()


def resolve(input_value, reference_table, config) -> MatchResult:
    return _default_engine.resolve(input_value, reference_table, config)


__all__ = [
    'ReconciliationEngine', 'resolve',
    'ConfigurationError', 'LookupProcessingError', 'ReferenceUnavailableError',
    'LookupFieldSpec', 'create_match_config',
    'BatchMetrics', 'BatchResult', 'DerivedField', 'MatchConfig', 'MatchMetrics',
    'MatchResult', 'MatchTier', 'Suggestion',
]
