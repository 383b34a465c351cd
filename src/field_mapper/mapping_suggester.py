"""MappingSuggester – proposes a one-to-one mapping from import columns to target fields.

Candidate (field, column) pairs are scored in three tiers, strongest first:

1. **exact** – the column equals the field's name or id, ignoring case, or
   one of the aliases the token builders produce for it (``fname`` for
   ``First Name``, ``e_mail`` for an email-typed field).
2. **structural variant** – snake_case or camelCase canonical forms agree
   (``first_name`` / ``firstName`` / ``First Name``).
3. **fuzzy** – combined edit-distance/token similarity, scaled down so it
   never outranks the tiers above.

A tier is applied to every still-unmapped field before the next tier starts,
required fields before optional ones. Within a tier pairs are taken greedily
by score. Once a column is assigned it leaves the pool, so no column ever
feeds two fields.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import (
    CAMEL_CASE_CONFIDENCE, EXACT_CONFIDENCE, FUZZY_CONFIDENCE_SCALE,
    FUZZY_MIN_CONFIDENCE, SNAKE_CASE_CONFIDENCE,
)
from src.CustomLogger.custom_logger import CustomLogger, timer_decorator
from src.utils.similarity_utils import combined_similarity, strip_affixes, to_camel_case, to_snake_case
from .token_builders import column_forms, field_aliases

logger = CustomLogger().custlogger(loglevel='WARNING')

_CAMEL_HUMP_RE = re.compile(r"[a-z][A-Z]")

Hit = Optional[Tuple[float, str]]


@dataclass(frozen=True)
class TargetField:
    id: str
    name: str
    required: bool = False
    type: Optional[str] = None

    @classmethod
    def coerce(cls, obj) -> "TargetField":
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, Mapping):
            return cls(
                id=str(obj["id"]),
                name=str(obj.get("name", obj["id"])),
                required=bool(obj.get("required", False)),
                type=obj.get("type"),
            )
        # Any object exposing id/name, e.g. a LookupFieldSpec
        return cls(
            id=str(obj.id),
            name=str(getattr(obj, "name", obj.id)),
            required=bool(getattr(obj, "required", False)),
            type=getattr(obj, "type", None),
        )


@dataclass(frozen=True)
class FieldMappingSuggestion:
    target_field_id: str
    source_column: str
    confidence: float
    match_type: str


@dataclass(frozen=True)
class MappingReport:
    mapping: Dict[str, str]
    suggestions: List[FieldMappingSuggestion]
    unmapped_columns: List[str] = field(default_factory=list)
    unmapped_required_fields: List[str] = field(default_factory=list)


def _name_forms(target: TargetField) -> List[str]:
    forms = [target.name, target.id, strip_affixes(target.id), strip_affixes(target.name)]
    return [f for f in dict.fromkeys(forms) if f and f.strip()]


def _aliases(target: TargetField):
    return field_aliases(target.name, target.id, target.type)


def _exact(target: TargetField, column: str) -> Hit:
    col = column.strip().lower()
    if col and col in (target.name.strip().lower(), target.id.strip().lower()):
        return EXACT_CONFIDENCE, "exact"
    # Plain spelling variants of the name stay in the structural tier
    if _structural(target, column) is None and column_forms(column) & _aliases(target):
        return EXACT_CONFIDENCE, "exact"
    return None


def _structural(target: TargetField, column: str) -> Hit:
    col_snake = to_snake_case(column)
    if not col_snake:
        return None
    col_camel = to_camel_case(column)
    for form in _name_forms(target):
        if to_snake_case(form) == col_snake or to_camel_case(form) == col_camel:
            if _CAMEL_HUMP_RE.search(column):
                return CAMEL_CASE_CONFIDENCE, "camel_case"
            return SNAKE_CASE_CONFIDENCE, "snake_case"
    return None


def _fuzzy(target: TargetField, column: str) -> Hit:
    col_forms = {column.strip().lower(), to_snake_case(column)} - {""}
    field_forms = {v for f in _name_forms(target) for v in (f.strip().lower(), to_snake_case(f))} - {""}
    field_forms |= _aliases(target)
    best = max(
        (combined_similarity(fv, cv) for fv in field_forms for cv in col_forms),
        default=0.0,
    )
    confidence = best * FUZZY_CONFIDENCE_SCALE
    if confidence >= FUZZY_MIN_CONFIDENCE:
        return confidence, "fuzzy"
    return None


class MappingSuggester:
    """Suggest which import column should feed each target field."""

    tiers: Sequence[Tuple[str, Callable[[TargetField, str], Hit]]] = (
        ("exact", _exact),
        ("structural", _structural),
        ("fuzzy", _fuzzy),
    )

    def _assign(self, import_columns: Sequence[str], target_fields: Sequence) -> List[FieldMappingSuggestion]:
        fields = [TargetField.coerce(f) for f in target_fields]
        columns = [str(c) for c in import_columns]
        assigned: Dict[int, FieldMappingSuggestion] = {}
        used = set()

        required = [(i, f) for i, f in enumerate(fields) if f.required]
        optional = [(i, f) for i, f in enumerate(fields) if not f.required]

        for tier_name, scorer in self.tiers:
            before = len(assigned)
            for group in (required, optional):
                pairs = []
                for f_pos, target in group:
                    if f_pos in assigned:
                        continue
                    for c_pos, column in enumerate(columns):
                        if column in used:
                            continue
                        hit = scorer(target, column)
                        if hit is not None:
                            pairs.append((-hit[0], f_pos, c_pos, target, column, hit))

                pairs.sort(key=lambda p: p[:3])
                for _, f_pos, _, target, column, (confidence, match_type) in pairs:
                    if f_pos in assigned or column in used:
                        continue
                    assigned[f_pos] = FieldMappingSuggestion(target.id, column, confidence, match_type)
                    used.add(column)

            logger.debug(f"[Mapping] {tier_name}: {len(assigned) - before} field(s) mapped")

        ordered = [assigned[pos] for pos in sorted(assigned)]
        logger.info(f"[Mapping] {len(ordered)}/{len(fields)} fields mapped from {len(columns)} columns")
        return ordered

    def suggest_mapping(self, import_columns: Sequence[str], target_fields: Sequence) -> Dict[str, str]:
        """
        Map target field ids to import column names.

        Fields with no acceptable column are simply absent from the result.
        """
        return {s.target_field_id: s.source_column for s in self._assign(import_columns, target_fields)}

    def suggest_mapping_detailed(self, import_columns: Sequence[str],
                                 target_fields: Sequence) -> List[FieldMappingSuggestion]:
        """Same assignments as :meth:`suggest_mapping`, with confidence and match type, best first."""
        return sorted(self._assign(import_columns, target_fields), key=lambda s: s.confidence, reverse=True)

    @timer_decorator
    def report(self, import_columns: Sequence[str], target_fields: Sequence) -> MappingReport:
        fields = [TargetField.coerce(f) for f in target_fields]
        suggestions = self.suggest_mapping_detailed(import_columns, fields)
        mapping = {s.target_field_id: s.source_column for s in suggestions}
        used = set(mapping.values())
        return MappingReport(
            mapping=mapping,
            suggestions=suggestions,
            unmapped_columns=[str(c) for c in import_columns if str(c) not in used],
            unmapped_required_fields=[f.id for f in fields if f.required and f.id not in mapping],
        )


_default_suggester = MappingSuggester()


def suggest_mapping(import_columns, target_fields) -> Dict[str, str]:
    return _default_suggester.suggest_mapping(import_columns, target_fields)


def suggest_mapping_detailed(import_columns, target_fields) -> List[FieldMappingSuggestion]:
    return _default_suggester.suggest_mapping_detailed(import_columns, target_fields)
