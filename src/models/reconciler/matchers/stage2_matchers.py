"""Stage 2: similarity-based matching."""
from typing import List

from .base import BaseMatcher, Candidate, StageOutcome
from ..config import FUZZY_CANDIDATE_FLOOR, FUZZY_CANDIDATE_SLACK, REASON_BANDS
from src.utils.similarity_utils import NormalizationOptions, find_best_matches, normalize


class FuzzyMatcher(BaseMatcher):
    """
    Rank every candidate with the combined similarity metric.

    The top hit is reported as the stage's best row whatever its score; the
    cascade decides whether it clears the confidence threshold.
    """

    def match(self, query: str, candidates: List[Candidate], config) -> StageOutcome:
        if not candidates:
            return StageOutcome()

        ranked = find_best_matches(
            query,
            [c.text for c in candidates],
            min_score=FUZZY_CANDIDATE_FLOOR,
            limit=config.max_suggestions + FUZZY_CANDIDATE_SLACK,
            options=config.normalization,
            scorer=self.engine.calculate_similarity,
        )
        if not ranked:
            return StageOutcome(comparisons=len(candidates))

        best = ranked[0]
        return StageOutcome(
            row=candidates[best.index].row,
            confidence=best.similarity,
            comparisons=len(candidates),
            ranked=ranked,
        )


_CASE_ONLY = NormalizationOptions(
    case_sensitive=False, trim_whitespace=False, remove_accents=False, collapse_whitespace=False
)


def suggestion_reason(confidence: float, query: str, suggestion: str) -> str:
    """Human-readable explanation of why a candidate was suggested."""
    for floor, reason in REASON_BANDS:
        if confidence >= floor:
            return reason
    if normalize(query, _CASE_ONLY) == normalize(suggestion, _CASE_ONLY):
        return "Case difference"
    if normalize(query) == normalize(suggestion):
        return "Spacing or punctuation difference"
    return "Partial match"
