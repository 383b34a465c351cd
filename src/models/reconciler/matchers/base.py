"""Base classes and data structures for matchers."""
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional

from ..types import MatchTier
from src.utils.similarity_utils import BestMatch


@dataclass(frozen=True)
class Candidate:
    """A reference row whose match cell holds a usable value."""
    index: int
    row: Mapping
    text: str


@dataclass
class StageOutcome:
    """What one matcher found: its best row (if any) and the ranked fuzzy hits."""
    row: Optional[Mapping] = None
    confidence: float = 0.0
    comparisons: int = 0
    ranked: List[BestMatch] = field(default_factory=list)


@dataclass
class MatchStrategy:
    """Defines a matching strategy."""
    name: str
    tier: MatchTier
    match_func: Callable[..., StageOutcome]
    threshold: float = 1.0


class BaseMatcher:
    """Base class for all matchers."""

    def __init__(self, engine):
        """
        Args:
            engine: Reference to the owning ReconciliationEngine
        """
        self.engine = engine

    def match(self, query: str, candidates: List[Candidate], config) -> StageOutcome:
        """
        Perform matching for one input value.

        Returns:
            StageOutcome with the best row found, or an empty outcome
        """
        raise NotImplementedError
