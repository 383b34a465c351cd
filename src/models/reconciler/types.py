"""Data structures for reference reconciliation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from .config import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_MAX_SUGGESTIONS
from .errors import ConfigurationError
from src.utils.similarity_utils import NormalizationOptions


class MatchTier(str, Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class DerivedField:
    """A reference column copied into the result under another name."""
    name: str
    source_column: str
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "DerivedField":
        source = _pick(data, "source_column", "sourceColumn", "source")
        if not data.get("name") or not source:
            raise ConfigurationError(f"Derived field needs a name and a source column: {dict(data)!r}")
        return cls(name=data["name"], source_column=source, type=data.get("type"))


def _pick(data: Mapping, *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class MatchConfig:
    """
    Per-call reconciliation settings.

    Construction fails with ConfigurationError when ``match_column`` or
    ``return_column`` is empty, when the threshold is outside [0, 1] or when
    ``max_suggestions`` is negative.
    """
    match_column: str
    return_column: str
    display_column: Optional[str] = None
    derived_fields: Tuple[DerivedField, ...] = ()
    fuzzy_enabled: bool = False
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS
    normalization: NormalizationOptions = field(default_factory=NormalizationOptions)

    def __post_init__(self):
        if not self.match_column or not self.return_column:
            raise ConfigurationError(
                "match_column and return_column are required in lookup configuration"
            )
        if not 0.0 <= float(self.confidence_threshold) <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}"
            )
        if int(self.max_suggestions) < 0:
            raise ConfigurationError(f"max_suggestions must be >= 0, got {self.max_suggestions}")
        derived = tuple(
            d if isinstance(d, DerivedField) else DerivedField.from_dict(d)
            for d in (self.derived_fields or ())
        )
        object.__setattr__(self, "derived_fields", derived)

    @classmethod
    def from_dict(cls, data: Mapping) -> "MatchConfig":
        """Build a config from snake_case or camelCase keys."""
        norm = _pick(data, "normalization", default=None) or {}
        if isinstance(norm, NormalizationOptions):
            options = norm
        else:
            options = NormalizationOptions(
                case_sensitive=bool(_pick(norm, "case_sensitive", "caseSensitive", default=False)),
                trim_whitespace=bool(_pick(norm, "trim_whitespace", "trimWhitespace", default=True)),
                remove_accents=bool(_pick(norm, "remove_accents", "removeAccents", default=True)),
                collapse_whitespace=bool(_pick(norm, "collapse_whitespace", "collapseWhitespace", default=True)),
            )
        return cls(
            match_column=_pick(data, "match_column", "matchColumn", default=""),
            return_column=_pick(data, "return_column", "returnColumn", default=""),
            display_column=_pick(data, "display_column", "displayColumn"),
            derived_fields=tuple(_pick(data, "derived_fields", "derivedFields", default=()) or ()),
            fuzzy_enabled=bool(_pick(data, "fuzzy_enabled", "fuzzyEnabled", default=False)),
            confidence_threshold=float(_pick(
                data, "confidence_threshold", "confidenceThreshold", default=DEFAULT_CONFIDENCE_THRESHOLD
            )),
            max_suggestions=int(_pick(data, "max_suggestions", "maxSuggestions", default=DEFAULT_MAX_SUGGESTIONS)),
            normalization=options,
        )

    @classmethod
    def coerce(cls, config: Any) -> "MatchConfig":
        if isinstance(config, cls):
            return config
        if isinstance(config, Mapping):
            return cls.from_dict(config)
        raise ConfigurationError(f"Expected a MatchConfig or mapping, got {type(config).__name__}")


@dataclass(frozen=True)
class Suggestion:
    value: Any
    confidence: float
    reason: str
    source_row: Optional[Mapping] = None


@dataclass(frozen=True)
class MatchMetrics:
    elapsed: float = 0.0
    comparisons: int = 0


@dataclass(frozen=True)
class MatchResult:
    """Outcome of reconciling one input value."""
    input_value: Any
    matched: bool
    confidence: float
    tier: MatchTier
    matched_value: Any = None
    display_value: Any = None
    derived_values: Dict[str, Any] = field(default_factory=dict)
    matched_row: Optional[Mapping] = None
    suggestions: Tuple[Suggestion, ...] = ()
    metrics: MatchMetrics = field(default_factory=MatchMetrics)
    error: Optional[str] = None

    @classmethod
    def no_match(cls, input_value, suggestions=(), metrics=None, error=None) -> "MatchResult":
        return cls(
            input_value=input_value,
            matched=False,
            confidence=0.0,
            tier=MatchTier.NONE,
            suggestions=tuple(suggestions),
            metrics=metrics or MatchMetrics(),
            error=error,
        )


@dataclass(frozen=True)
class BatchMetrics:
    total_elapsed: float
    average_elapsed: float
    total_comparisons: int
    matched_count: int
    total: int
    match_rate: float
    throughput: float
    tier_counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchResult:
    results: List[MatchResult]
    metrics: BatchMetrics

    def to_frame(self) -> pd.DataFrame:
        """One row per input; derived values become extra columns."""
        rows = []
        for r in self.results:
            row = {
                "input_value": r.input_value,
                "matched": r.matched,
                "tier": r.tier.value,
                "confidence": round(r.confidence, 4),
                "matched_value": r.matched_value,
                "suggestion1": r.suggestions[0].value if r.suggestions else None,
            }
            row.update(r.derived_values)
            rows.append(row)
        return pd.DataFrame(rows)
