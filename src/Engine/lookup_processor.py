"""Apply lookup fields to imported rows."""
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from src.CustomLogger.custom_logger import CustomLogger
from src.CustomLogger.logging_utils import batch_progress_logger
from src.models.reconciler.engine import ReconciliationEngine
from src.models.reconciler.errors import LookupProcessingError, ReferenceUnavailableError
from src.models.reconciler.lookup_field import LookupFieldSpec, create_match_config
from src.models.reconciler.types import MatchResult, MatchTier
from src.utils.reference_utils import as_rows, is_missing

logger = CustomLogger().custlogger(loglevel='WARNING')

PROGRESS_EVERY = 100


@dataclass(frozen=True)
class RowLookupError:
    row_id: str
    field_name: str
    input_value: Any
    type: str  # no_match | reference_missing
    message: str
    suggestions: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class FuzzyReview:
    """A fuzzy match weak enough that a person should confirm it."""
    row_id: str
    field_name: str
    input_value: Any
    suggested_value: Any
    confidence: float


@dataclass
class LookupStats:
    total_fields: int
    total_rows: int
    exact_matches: int = 0
    normalized_matches: int = 0
    fuzzy_matches: int = 0
    no_matches: int = 0
    derived_columns: int = 0
    success_rate: float = 0.0


@dataclass(frozen=True)
class ProcessingPerformance:
    total_time: float
    avg_time_per_row: float
    throughput: float
    lookup_operations: int


@dataclass(frozen=True)
class ProcessedLookupResult:
    data: Any
    errors: List[RowLookupError]
    stats: LookupStats
    fuzzy_matches: List[FuzzyReview]
    performance: ProcessingPerformance


@dataclass(frozen=True)
class LookupProcessingOptions:
    min_confidence: float = 0.7
    max_fuzzy_matches: int = 100
    process_derived_fields: bool = True
    continue_on_error: bool = True
    on_progress: Optional[Callable[[int, int], Any]] = None
    row_id_column: str = "_rowId"


class LookupProcessor:
    """
    Run lookup fields over imported rows.

    Each lookup field's column is replaced by the matched reference value and
    the field's derived values are written into their own columns. Misses,
    missing references and weak fuzzy matches are collected rather than
    raised, unless ``continue_on_error`` is off.
    """

    def __init__(self, store, engine: Optional[ReconciliationEngine] = None):
        self.store = store
        self.engine = engine or ReconciliationEngine()

    def process_single_lookup(self, value: Any, lookup_field: Any) -> MatchResult:
        """
        Raises:
            ReferenceUnavailableError: if the field's reference table is missing or empty
        """
        lookup_field = LookupFieldSpec.coerce(lookup_field)
        rows = self.store.get_reference_rows(lookup_field.reference_id)
        if not rows:
            raise ReferenceUnavailableError(lookup_field.reference_id)
        return self.engine.resolve(value, rows, create_match_config(lookup_field))

    def process_rows(self, data: Any, lookup_fields: Sequence[Any],
                     options: Optional[LookupProcessingOptions] = None) -> ProcessedLookupResult:
        """
        Apply every lookup field to every row.

        Args:
            data: List of row mappings or a DataFrame
            lookup_fields: LookupFieldSpec instances or equivalent mappings
            options: Processing options

        Returns:
            ProcessedLookupResult whose ``data`` has the same container type as the input

        Raises:
            LookupProcessingError: on the first row error when ``continue_on_error`` is off
        """
        options = options or LookupProcessingOptions()
        t0 = time.perf_counter()
        fields = [LookupFieldSpec.coerce(f) for f in lookup_fields]
        rows = [dict(r) for r in as_rows(data)]
        stats = LookupStats(total_fields=len(fields), total_rows=len(rows))
        errors: List[RowLookupError] = []
        reviews: List[FuzzyReview] = []
        operations = 0

        if not fields:
            stats.success_rate = 1.0
            return ProcessedLookupResult(
                self._same_container(data, rows), errors, stats, reviews,
                ProcessingPerformance(time.perf_counter() - t0, 0.0, 0.0, 0),
            )

        progress_log = batch_progress_logger(len(rows), batch_size=PROGRESS_EVERY, logger=logger)
        derived_per_row = sum(len(f.derived_fields) for f in fields)

        for index, row in enumerate(rows):
            if options.on_progress is not None and index % PROGRESS_EVERY == 0:
                options.on_progress(index, len(rows))
            rid = row.get(options.row_id_column)
            row_id = f"row_{index}" if is_missing(rid) else str(rid)

            for lookup_field in fields:
                value = row.get(lookup_field.name)
                try:
                    result = self.process_single_lookup(value, lookup_field)
                except ReferenceUnavailableError as e:
                    self._record(errors, options, RowLookupError(
                        row_id, lookup_field.name, value, "reference_missing", str(e)))
                    continue
                operations += 1

                if not result.matched:
                    stats.no_matches += 1
                    self._record(errors, options, RowLookupError(
                        row_id, lookup_field.name, result.input_value, "no_match",
                        f'No match found for "{result.input_value}" in {lookup_field.reference_id}',
                        [s.value for s in result.suggestions],
                    ))
                    continue

                row[lookup_field.name] = result.matched_value
                if options.process_derived_fields:
                    row.update(result.derived_values)

                if result.tier is MatchTier.EXACT:
                    stats.exact_matches += 1
                elif result.tier is MatchTier.NORMALIZED:
                    stats.normalized_matches += 1
                else:
                    stats.fuzzy_matches += 1
                    if result.confidence < options.min_confidence and len(reviews) < options.max_fuzzy_matches:
                        reviews.append(FuzzyReview(
                            row_id, lookup_field.name, result.input_value,
                            result.matched_value, result.confidence,
                        ))

            if options.process_derived_fields:
                stats.derived_columns += derived_per_row
            progress_log(index + 1)

        if options.on_progress is not None:
            options.on_progress(len(rows), len(rows))

        attempts = len(rows) * len(fields)
        matched = stats.exact_matches + stats.normalized_matches + stats.fuzzy_matches
        stats.success_rate = matched / attempts if attempts else 0.0

        total_time = time.perf_counter() - t0
        performance = ProcessingPerformance(
            total_time=total_time,
            avg_time_per_row=total_time / len(rows) if rows else 0.0,
            throughput=len(rows) / total_time if rows and total_time > 0 else 0.0,
            lookup_operations=operations,
        )
        logger.info(
            f"[Lookup] {len(rows)} rows x {len(fields)} fields: "
            f"{matched} matched, {stats.no_matches} unmatched, {len(errors)} errors"
        )
        return ProcessedLookupResult(self._same_container(data, rows), errors, stats, reviews, performance)

    @staticmethod
    def _record(errors: List[RowLookupError], options: LookupProcessingOptions, error: RowLookupError) -> None:
        errors.append(error)
        if not options.continue_on_error:
            raise LookupProcessingError(error.message, errors)

    @staticmethod
    def _same_container(original: Any, rows: List[Dict[str, Any]]) -> Any:
        if isinstance(original, pd.DataFrame):
            return pd.DataFrame(rows)
        return rows

    @staticmethod
    def lookup_field_stats(lookup_fields: Sequence[Any]) -> Dict[str, Any]:
        fields = [LookupFieldSpec.coerce(f) for f in lookup_fields]
        return {
            "total_lookup_fields": len(fields),
            "total_derived_fields": sum(len(f.derived_fields) for f in fields),
            "lookup_fields": [
                {
                    "name": f.name,
                    "reference_id": f.reference_id,
                    "has_match_column": bool(f.match_column),
                    "has_return_column": bool(f.return_column),
                    "derived_field_count": len(f.derived_fields),
                }
                for f in fields
            ],
        }
