"""Lookup field definitions supplied by the schema layer, and their translation
into a MatchConfig."""
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .config import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_MAX_SUGGESTIONS
from .types import DerivedField, MatchConfig, _pick
from src.utils.similarity_utils import NormalizationOptions


@dataclass(frozen=True)
class LookupFieldSpec:
    id: str
    name: str
    reference_id: str
    match_column: str
    return_column: str
    display_column: Optional[str] = None
    derived_fields: Tuple[DerivedField, ...] = ()
    fuzzy_enabled: bool = False
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    required: bool = False
    on_mismatch: str = "error"
    type: str = "lookup"

    @classmethod
    def from_dict(cls, data: Mapping) -> "LookupFieldSpec":
        derived = tuple(
            d if isinstance(d, DerivedField) else DerivedField.from_dict(d)
            for d in (_pick(data, "derived_fields", "derivedFields", "alsoGet", default=()) or ())
        )
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            reference_id=_pick(data, "reference_id", "referenceId", "referenceFile", default=""),
            match_column=_pick(data, "match_column", "matchColumn", default=""),
            return_column=_pick(data, "return_column", "returnColumn", default=""),
            display_column=_pick(data, "display_column", "displayColumn"),
            derived_fields=derived,
            fuzzy_enabled=bool(_pick(data, "fuzzy_enabled", "fuzzyEnabled", default=False)),
            confidence_threshold=float(_pick(
                data, "confidence_threshold", "confidenceThreshold", default=DEFAULT_CONFIDENCE_THRESHOLD
            )),
            required=bool(data.get("required", False)),
            on_mismatch=_pick(data, "on_mismatch", "onMismatch", default="error"),
            type=data.get("type", "lookup"),
        )

    @classmethod
    def coerce(cls, field) -> "LookupFieldSpec":
        return field if isinstance(field, cls) else cls.from_dict(field)


def create_match_config(field: LookupFieldSpec) -> MatchConfig:
    """Translate a lookup field definition into engine settings."""
    return MatchConfig(
        match_column=field.match_column,
        return_column=field.return_column,
        display_column=field.display_column,
        derived_fields=field.derived_fields,
        fuzzy_enabled=field.fuzzy_enabled,
        confidence_threshold=field.confidence_threshold,
        max_suggestions=DEFAULT_MAX_SUGGESTIONS,
        normalization=NormalizationOptions(),
    )
