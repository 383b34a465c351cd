"""Reference reconciliation engine."""
import asyncio
import time
from collections import Counter
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .config import DEFAULT_BATCH_SIZE
from .errors import ConfigurationError
from .matchers.base import Candidate, MatchStrategy
from .matchers.stage1_matchers import ExactMatcher, NormalizedMatcher
from .matchers.stage2_matchers import FuzzyMatcher, suggestion_reason
from .types import (
    BatchMetrics, BatchResult, MatchConfig, MatchMetrics, MatchResult, MatchTier, Suggestion,
)
from src.CustomLogger.custom_logger import CustomLogger
from src.CustomLogger.logging_utils import performance_log
from src.utils.reference_utils import as_rows, cell_to_str, is_missing
from src.utils.similarity_utils import combined_similarity

logger = CustomLogger().custlogger(loglevel='WARNING')

ProgressCallback = Callable[[int, int], Any]


class ReconciliationEngine:
    """
    Decide which reference row a free-text value denotes.

    Matching is a cascade of three strategies, each tried only when the
    previous one found nothing:

    - exact: literal, case-sensitive equality (confidence 1.0)
    - normalized: equality after case/accent/whitespace folding (0.95)
    - fuzzy: combined similarity, accepted at or above the configured
      threshold (only when fuzzy matching is enabled)

    The engine keeps no per-call state, so one instance can be shared across
    threads and tasks as long as the reference table is not mutated while in use.
    """

    def __init__(self):
        self.exact = ExactMatcher(self)
        self.normalized = NormalizedMatcher(self)
        self.fuzzy = FuzzyMatcher(self)

    def calculate_similarity(self, a: str, b: str) -> float:
        return combined_similarity(a, b)

    def _strategies(self, config: MatchConfig) -> List[MatchStrategy]:
        strategies = [
            MatchStrategy("exact", MatchTier.EXACT, self.exact.match, threshold=1.0),
            MatchStrategy("normalized", MatchTier.NORMALIZED, self.normalized.match, threshold=0.0),
        ]
        if config.fuzzy_enabled:
            strategies.append(
                MatchStrategy("fuzzy", MatchTier.FUZZY, self.fuzzy.match,
                              threshold=config.confidence_threshold)
            )
        return strategies

    @staticmethod
    def _candidates(rows: List[Any], column: str) -> List[Candidate]:
        """Rows whose match cell holds a non-empty value; everything else is skipped."""
        out = []
        for i, row in enumerate(rows):
            if not isinstance(row, Mapping):
                continue
            text = cell_to_str(row.get(column))
            if text:
                out.append(Candidate(i, row, text))
        return out

    def resolve(self, input_value: Any, reference_table: Any, config: Any) -> MatchResult:
        """
        Reconcile one input value against a reference table.

        Args:
            input_value: Free-text value to look up
            reference_table: Sequence of row mappings or a DataFrame
            config: MatchConfig or an equivalent mapping

        Returns:
            MatchResult; a miss is reported with ``matched=False``

        Raises:
            ConfigurationError: if the configuration is unusable
        """
        t0 = time.perf_counter()
        config = MatchConfig.coerce(config)

        if is_missing(input_value) or input_value == "":
            return MatchResult.no_match(
                "" if is_missing(input_value) else input_value,
                metrics=MatchMetrics(time.perf_counter() - t0, 0),
            )

        rows = as_rows(reference_table)
        if not rows:
            return MatchResult.no_match(input_value, metrics=MatchMetrics(time.perf_counter() - t0, 0))

        query = cell_to_str(input_value)
        candidates = self._candidates(rows, config.match_column)
        comparisons = 0
        ranked = []

        for strategy in self._strategies(config):
            outcome = strategy.match_func(query, candidates, config)
            comparisons += outcome.comparisons
            if outcome.ranked:
                ranked = outcome.ranked

            if outcome.row is not None and outcome.confidence >= strategy.threshold:
                logger.debug(
                    f"[{strategy.name}] '{query}' matched "
                    f"(confidence={outcome.confidence:.3f}, comparisons={comparisons})"
                )
                suggestions = self._suggestions(query, candidates, ranked[1:], config)
                return self._success(
                    query, outcome.row, config, outcome.confidence, strategy.tier,
                    suggestions, MatchMetrics(time.perf_counter() - t0, comparisons),
                )

        suggestions = self._suggestions(query, candidates, ranked, config)
        logger.debug(f"[NoMatch] '{query}' ({len(suggestions)} suggestions)")
        return MatchResult.no_match(
            query, suggestions=suggestions, metrics=MatchMetrics(time.perf_counter() - t0, comparisons)
        )

    @staticmethod
    def _suggestions(query, candidates, ranked, config) -> List[Suggestion]:
        out = []
        for hit in ranked[:config.max_suggestions]:
            row = candidates[hit.index].row
            out.append(Suggestion(
                value=row.get(config.return_column),
                confidence=hit.similarity,
                reason=suggestion_reason(hit.similarity, query, hit.value),
                source_row=row,
            ))
        return out

    @staticmethod
    def _success(query, row, config, confidence, tier, suggestions, metrics) -> MatchResult:
        matched_value = row.get(config.return_column)

        # Key presence, not truthiness: 0 and False are real values
        derived = {
            d.name: row[d.source_column]
            for d in config.derived_fields
            if d.source_column in row
        }

        display_value = matched_value
        if config.display_column and config.display_column in row:
            display_value = row[config.display_column]

        return MatchResult(
            input_value=query,
            matched=True,
            confidence=confidence,
            tier=tier,
            matched_value=matched_value,
            display_value=display_value,
            derived_values=derived,
            matched_row=row,
            suggestions=tuple(suggestions),
            metrics=metrics,
        )

    async def resolve_batch(
        self,
        inputs: Iterable[Any],
        reference_table: Any,
        config: Any,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: Optional[ProgressCallback] = None,
        fail_fast: bool = False,
    ) -> BatchResult:
        """
        Reconcile many values, yielding to the event loop after every chunk.

        Args:
            inputs: Values to look up, processed in order
            reference_table: Sequence of row mappings or a DataFrame
            config: MatchConfig or an equivalent mapping
            batch_size: Number of inputs handled between two yield points
            on_progress: Called as ``on_progress(completed, total)`` after each chunk
            fail_fast: Re-raise the first unexpected per-item error instead of
                recording it and moving on

        Returns:
            BatchResult with ordered per-input results and aggregate metrics
        """
        config = MatchConfig.coerce(config)
        if batch_size is None or int(batch_size) < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
        batch_size = int(batch_size)

        values = list(inputs)
        rows = as_rows(reference_table)
        total = len(values)
        results: List[MatchResult] = []

        t0 = time.perf_counter()
        for start in range(0, total, batch_size):
            for value in values[start:start + batch_size]:
                try:
                    results.append(self.resolve(value, rows, config))
                except Exception as e:
                    if fail_fast:
                        raise
                    logger.error(f"[Batch] Failed to resolve {value!r}: {e}")
                    results.append(MatchResult.no_match(value, error=str(e)))

            completed = min(start + batch_size, total)
            if on_progress is not None:
                on_progress(completed, total)
            await asyncio.sleep(0)

        metrics = self._batch_metrics(results, time.perf_counter() - t0)
        performance_log(
            logger, "[Batch] resolve_batch", metrics.total_elapsed,
            values=total, match_rate=f"{metrics.match_rate:.2%}", throughput=f"{metrics.throughput:.0f}/s",
        )
        return BatchResult(results=results, metrics=metrics)

    def run_batch(self, inputs, reference_table, config, batch_size=DEFAULT_BATCH_SIZE,
                  on_progress=None, fail_fast=False) -> BatchResult:
        """Blocking wrapper around :meth:`resolve_batch` for callers without an event loop."""
        return asyncio.run(self.resolve_batch(
            inputs, reference_table, config,
            batch_size=batch_size, on_progress=on_progress, fail_fast=fail_fast,
        ))

    @staticmethod
    def _batch_metrics(results: List[MatchResult], elapsed: float) -> BatchMetrics:
        total = len(results)
        matched = sum(1 for r in results if r.matched)
        tiers = Counter(r.tier.value for r in results)
        return BatchMetrics(
            total_elapsed=elapsed,
            average_elapsed=elapsed / total if total else 0.0,
            total_comparisons=sum(r.metrics.comparisons for r in results),
            matched_count=matched,
            total=total,
            match_rate=matched / total if total else 0.0,
            throughput=total / elapsed if elapsed > 0 else 0.0,
            tier_counts=dict(tiers),
        )
