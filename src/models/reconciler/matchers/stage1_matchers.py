"""Stage 1: literal and normalized equality."""
from typing import List

from .base import BaseMatcher, Candidate, StageOutcome
from ..config import EXACT_CONFIDENCE, NORMALIZED_CONFIDENCE
from src.utils.similarity_utils import normalize


class ExactMatcher(BaseMatcher):
    """Byte-for-byte, case-sensitive equality with the match column."""

    def match(self, query: str, candidates: List[Candidate], config) -> StageOutcome:
        for n, cand in enumerate(candidates, start=1):
            if cand.text == query:
                return StageOutcome(row=cand.row, confidence=EXACT_CONFIDENCE, comparisons=n)
        return StageOutcome(comparisons=len(candidates))


class NormalizedMatcher(BaseMatcher):
    """Equality after case, accent and whitespace folding."""

    def match(self, query: str, candidates: List[Candidate], config) -> StageOutcome:
        options = config.normalization
        norm_query = normalize(query, options)
        if not norm_query:
            return StageOutcome()
        for n, cand in enumerate(candidates, start=1):
            if normalize(cand.text, options) == norm_query:
                return StageOutcome(row=cand.row, confidence=NORMALIZED_CONFIDENCE, comparisons=n)
        return StageOutcome(comparisons=len(candidates))
