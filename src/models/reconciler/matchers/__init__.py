"""Matchers module."""
from .base import BaseMatcher, Candidate, MatchStrategy, StageOutcome
from .stage1_matchers import ExactMatcher, NormalizedMatcher
from .stage2_matchers import FuzzyMatcher, suggestion_reason

__all__ = [
    'BaseMatcher', 'Candidate', 'MatchStrategy', 'StageOutcome',
    'ExactMatcher', 'NormalizedMatcher',
    'FuzzyMatcher', 'suggestion_reason',
]
