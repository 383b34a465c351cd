"""Second-opinion validation of lookup values and audits of reference tables."""
import asyncio
from collections import Counter
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .validation_types import (
    ISSUE_CONFIDENCE, ISSUE_ENUM, ISSUE_REFERENCE,
    BatchValidationResult, EnumRule, ItemValidation, ValidationIssue,
    ValidationItem, ValidationResult, ValidationStats,
)
from src.CustomLogger.custom_logger import CustomLogger
from src.CustomLogger.logging_utils import LogContext
from src.models.reconciler.config import (
    COMMON_SUGGESTIONS_LIMIT, ENUM_MAX_OPTIONS, ENUM_MAX_SUGGESTIONS,
    ENUM_SUGGESTION_THRESH, LOW_CONFIDENCE_ERROR_MARGIN, VALIDATION_BATCH_SIZE,
)
from src.models.reconciler.engine import ReconciliationEngine
from src.models.reconciler.errors import ConfigurationError
from src.models.reconciler.lookup_field import LookupFieldSpec, create_match_config
from src.models.reconciler.types import MatchConfig, MatchTier
from src.utils.reference_utils import as_rows, cell_to_str, column_names, is_empty_key, is_missing
from src.utils.similarity_utils import combined_similarity

logger = CustomLogger().custlogger(loglevel='WARNING')

ISSUE_CONFIGURATION = "lookup_configuration"


def _is_blank(value: Any) -> bool:
    return is_missing(value) or value == ""


def _unique_options(rows: List[Any], key_column: str) -> List[str]:
    """Distinct non-empty key values, first spelling wins for case variants."""
    seen = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        text = cell_to_str(row.get(key_column))
        if text and text.lower() not in seen:
            seen[text.lower()] = text
    return list(seen.values())


def _option_score(value: str, option: str) -> float:
    if value == option:
        return 1.0
    if option.startswith(value) or value.startswith(option):
        return 0.8
    if value in option or option in value:
        return 0.7
    return combined_similarity(value, option)


def find_similar_options(value: str, options: List[str], threshold: float = ENUM_SUGGESTION_THRESH) -> List[str]:
    """Options scoring at or above ``threshold`` against ``value``, best first."""
    value_lower = value.lower()
    scored = []
    for option in options:
        score = _option_score(value_lower, option.lower())
        if score >= threshold:
            scored.append((score, option))
    scored.sort(key=lambda x: x[0], reverse=True)
    return [option for _, option in scored]


class LookupValidator:
    """
    Validate lookup values after reconciliation.

    Covers three checks that can run on their own or together through
    :meth:`validate_lookup_field`:

    - enum: is the value one of the reference's key values
    - confidence: would the value only resolve through a weak fuzzy match
    - integrity: is the reference table itself usable as a lookup source

    Data-quality problems are always reported in the returned
    ValidationResult, never raised.
    """

    def __init__(self, engine: Optional[ReconciliationEngine] = None, store=None):
        self.engine = engine or ReconciliationEngine()
        self.store = store

    def validate_against_enum(self, value: Any, reference_table: Any, key_column: str,
                              reference_source: Optional[str] = None) -> ValidationResult:
        result = ValidationResult()
        if _is_blank(value):
            return result

        options = _unique_options(as_rows(reference_table), key_column)
        text = str(value)
        if text.lower() in {o.lower() for o in options}:
            return result

        similar = find_similar_options(text, options)[:ENUM_MAX_SUGGESTIONS]
        hint = ". Did you mean one of these?" if similar else ""
        result.add(ValidationIssue(
            type=ISSUE_ENUM,
            message=f'"{text}" is not a valid option{hint}',
            severity="error",
            suggestions=similar,
            available_options=options[:ENUM_MAX_OPTIONS],
            reference_source=reference_source,
        ))
        result.suggestions.extend(similar)
        return result

    def validate_confidence(self, value: Any, reference_table: Any, config: Any,
                            reference_source: Optional[str] = None) -> ValidationResult:
        """
        Flag values that only resolve through a fuzzy match below the threshold.

        The value is resolved again with fuzzy matching on and acceptance
        relaxed, so the best fuzzy candidate is always reported. Its confidence
        is then compared with the configured threshold: more than 0.2 below is
        an error, anything else below is a warning.
        """
        config = MatchConfig.coerce(config)
        result = ValidationResult()
        if _is_blank(value):
            return result

        lenient = replace(config, fuzzy_enabled=True, confidence_threshold=0.0)
        match = self.engine.resolve(value, reference_table, lenient)
        if match.tier is not MatchTier.FUZZY:
            return result

        threshold = config.confidence_threshold
        if match.confidence >= threshold:
            return result

        severity = "error" if match.confidence < threshold - LOW_CONFIDENCE_ERROR_MARGIN else "warning"
        suggested = str(match.matched_value)
        result.add(ValidationIssue(
            type=ISSUE_CONFIDENCE,
            message=f'Low confidence match ({round(match.confidence * 100)}%). Suggested match: "{suggested}"',
            severity=severity,
            suggestions=[suggested],
            reference_source=reference_source,
            confidence=match.confidence,
        ))
        if severity == "warning":
            result.suggestions.append(suggested)
        return result

    def validate_reference_integrity(self, reference_table: Any, key_column: str) -> ValidationResult:
        result = ValidationResult()
        rows = as_rows(reference_table)
        if not rows:
            result.add(ValidationIssue(type=ISSUE_REFERENCE, message="Reference data is empty"))
            return result

        records = [row for row in rows if isinstance(row, Mapping)]
        if not any(key_column in row for row in records):
            key_lower = key_column.lower()
            alternates = [
                c for c in column_names(records)
                if key_lower in str(c).lower() or str(c).lower() in key_lower
            ]
            result.add(ValidationIssue(
                type=ISSUE_REFERENCE,
                message=f'Key column "{key_column}" not found in reference data',
                suggestions=alternates,
            ))
            result.suggestions.extend(alternates)
            return result

        malformed = len(rows) - len(records)
        if malformed:
            result.add(ValidationIssue(
                type=ISSUE_REFERENCE,
                message=f"{malformed} row(s) in reference data are not records",
                severity="warning",
            ))

        keys = [cell_to_str(row.get(key_column)) for row in records if not is_empty_key(row.get(key_column))]
        seen, duplicates = set(), []
        for key in keys:
            if key.lower() in seen:
                if key not in duplicates:
                    duplicates.append(key)
            else:
                seen.add(key.lower())
        if duplicates:
            more = "..." if len(duplicates) > 3 else ""
            result.add(ValidationIssue(
                type=ISSUE_REFERENCE,
                message=f'Duplicate values found in key column "{key_column}": {", ".join(duplicates[:3])}{more}',
                severity="warning",
            ))

        empty = sum(1 for row in records if is_empty_key(row.get(key_column)))
        if empty:
            result.add(ValidationIssue(
                type=ISSUE_REFERENCE,
                message=f'{empty} row(s) have empty values in key column "{key_column}"',
                severity="warning",
            ))

        if result.warnings:
            logger.info(f"[Integrity] '{key_column}': {len(result.warnings)} warning(s)")
        return result

    def validate_lookup_field(self, value: Any, field: Any, reference_table: Any = None,
                              store=None) -> ValidationResult:
        """
        Run every applicable check for one lookup field value.

        Args:
            value: Value to validate
            field: LookupFieldSpec or an equivalent mapping
            reference_table: Reference rows; fetched from the store when omitted
            store: ReferenceStore overriding the validator's own

        Returns:
            Combined ValidationResult with deduplicated suggestions
        """
        field = LookupFieldSpec.coerce(field)
        config = create_match_config(field)
        source = field.reference_id

        if reference_table is None:
            store = store or self.store
            reference_table = store.get_reference_rows(source) if store is not None else None

        rows = as_rows(reference_table)
        if not rows:
            result = ValidationResult()
            result.add(ValidationIssue(
                type=ISSUE_REFERENCE,
                message=f"Reference data not found for {source}",
                reference_source=source,
            ))
            return result

        integrity = self.validate_reference_integrity(rows, field.match_column)
        if not integrity.valid:
            return integrity

        result = self.validate_against_enum(value, rows, field.match_column, reference_source=source)
        if field.fuzzy_enabled and not _is_blank(value):
            result.extend(self.validate_confidence(value, rows, config, reference_source=source))
        result.extend(integrity)
        result.suggestions = list(dict.fromkeys(result.suggestions))
        return result

    def generate_enum_rules(self, reference_table: Any, key_column: str) -> List[EnumRule]:
        options = _unique_options(as_rows(reference_table), key_column)
        if not options:
            return []
        more = "..." if len(options) > 5 else ""
        return [EnumRule(
            available_options=options,
            message=f"Value must be one of: {', '.join(options[:5])}{more}",
        )]

    async def batch_validate(
        self,
        items: Iterable[Any],
        on_progress: Optional[Callable[[int, int], Any]] = None,
        batch_size: int = VALIDATION_BATCH_SIZE,
        fail_fast: bool = False,
    ) -> BatchValidationResult:
        """
        Validate many lookup values, yielding to the event loop after every chunk.

        Items are ValidationItem instances or mappings with ``value``, ``field``
        and optionally ``row_id`` and ``reference_table``.
        """
        if batch_size is None or int(batch_size) < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
        batch_size = int(batch_size)

        todo = [i if isinstance(i, ValidationItem) else ValidationItem(**i) for i in items]
        total = len(todo)
        results: List[ItemValidation] = []

        with LogContext("[BatchValidate] batch_validate", logger) as ctx:
            for start in range(0, total, batch_size):
                for item in todo[start:start + batch_size]:
                    try:
                        res = self.validate_lookup_field(item.value, item.field, item.reference_table)
                    except Exception as e:
                        if fail_fast:
                            raise
                        logger.error(f"[BatchValidate] row {item.row_id}: {e}")
                        res = ValidationResult()
                        res.add(ValidationIssue(type=ISSUE_CONFIGURATION, message=str(e)))
                    results.append(ItemValidation(item.row_id, res))

                if on_progress is not None:
                    on_progress(min(start + batch_size, total), total)
                await asyncio.sleep(0)

            stats = self.get_validation_stats(results)
            ctx.info.update(items=total, valid=stats.valid_count)

        return BatchValidationResult(results=results, stats=stats)

    @staticmethod
    def get_validation_stats(results: Iterable[Any]) -> ValidationStats:
        outcomes = [r.result if isinstance(r, ItemValidation) else r for r in results]
        total = len(outcomes)
        valid = sum(1 for r in outcomes if r.valid)
        counts = Counter(s for r in outcomes for s in r.suggestions)
        return ValidationStats(
            total_validated=total,
            valid_count=valid,
            error_count=sum(len(r.errors) for r in outcomes),
            warning_count=sum(len(r.warnings) for r in outcomes),
            success_rate=valid / total if total else 0.0,
            common_suggestions=[s for s, _ in counts.most_common(COMMON_SUGGESTIONS_LIMIT)],
        )
