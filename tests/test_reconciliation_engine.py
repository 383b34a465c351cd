"""Tests for the reconciliation cascade and its batch driver."""
import asyncio
import dataclasses

import pandas as pd
import pytest

from src.models.reconciler import (
    ConfigurationError,
    DerivedField,
    MatchConfig,
    MatchTier,
    ReconciliationEngine,
    resolve,
)
from src.models.reconciler.matchers.stage2_matchers import suggestion_reason


# ======================================================================
# Fixtures
# ======================================================================


@pytest.fixture
def engine():
    return ReconciliationEngine()


@pytest.fixture
def departments():
    return [
        {"name": "Engineering", "code": "ENG", "head": "Ada", "budget": 0, "active": False},
        {"name": "Marketing", "code": "MKT", "head": "Bob", "budget": 10, "active": True},
        {"name": "Sales", "code": "SAL", "head": "Cy", "budget": 5, "active": True},
    ]


@pytest.fixture
def config():
    return MatchConfig(match_column="name", return_column="code")


@pytest.fixture
def fuzzy_config():
    return MatchConfig(match_column="name", return_column="code", fuzzy_enabled=True, confidence_threshold=0.7)


class Boom:
    """Input whose string conversion fails."""

    def __str__(self):
        raise RuntimeError("boom")


# ======================================================================
# Tests: cascade tiers
# ======================================================================


class TestCascade:

    def test_exact_match(self, engine, departments, config):
        result = engine.resolve("Sales", departments, config)
        assert result.matched
        assert result.tier is MatchTier.EXACT
        assert result.confidence == 1.0
        assert result.matched_value == "SAL"
        assert result.matched_row is departments[2]

    def test_exact_beats_earlier_normalized_row(self, engine, config):
        table = [{"name": "Engineering", "code": "A"}, {"name": "engineering", "code": "B"}]
        result = engine.resolve("engineering", table, config)
        assert result.tier is MatchTier.EXACT
        assert result.matched_value == "B"

    def test_normalized_match(self, engine, config):
        result = engine.resolve("engineering", [{"name": "Engineering", "code": "ENG"}], config)
        assert result.matched
        assert result.tier is MatchTier.NORMALIZED
        assert result.confidence == 0.95
        assert result.matched_value == "ENG"

    def test_normalized_folds_whitespace_and_accents(self, engine, config):
        table = [{"name": "Économie  Sociale", "code": "ECO"}]
        result = engine.resolve("  economie sociale ", table, config)
        assert result.tier is MatchTier.NORMALIZED
        assert result.matched_value == "ECO"

    def test_case_sensitive_normalization_blocks_case_fold(self, engine):
        cfg = MatchConfig.from_dict({
            "matchColumn": "name", "returnColumn": "code",
            "normalization": {"caseSensitive": True},
        })
        result = engine.resolve("engineering", [{"name": "Engineering", "code": "ENG"}], cfg)
        assert not result.matched

    def test_fuzzy_match_above_threshold(self, engine, fuzzy_config):
        result = engine.resolve("Enginering", [{"name": "Engineering", "code": "ENG"}], fuzzy_config)
        assert result.matched
        assert result.tier is MatchTier.FUZZY
        assert 0.7 < result.confidence < 0.95
        assert result.matched_value == "ENG"

    def test_fuzzy_disabled_means_no_match(self, engine, config):
        result = engine.resolve("Enginering", [{"name": "Engineering", "code": "ENG"}], config)
        assert not result.matched
        assert result.tier is MatchTier.NONE
        assert result.confidence == 0.0
        assert result.matched_value is None

    def test_fuzzy_below_threshold_only_suggests(self, engine):
        cfg = MatchConfig(match_column="name", return_column="code", fuzzy_enabled=True, confidence_threshold=0.95)
        result = engine.resolve("Enginering", [{"name": "Engineering", "code": "ENG"}], cfg)
        assert not result.matched
        assert result.suggestions[0].value == "ENG"
        assert result.suggestions[0].reason == "Very similar spelling"
        assert result.suggestions[0].confidence < 0.95

    def test_confidence_in_unit_interval(self, engine, departments, fuzzy_config):
        for value in ["Sales", "sales", "Salez", "zzz", "Marketting"]:
            result = engine.resolve(value, departments, fuzzy_config)
            assert 0.0 <= result.confidence <= 1.0
            assert result.matched == (result.tier is not MatchTier.NONE)

    def test_module_level_resolve(self, departments):
        result = resolve("Marketing", departments, {"matchColumn": "name", "returnColumn": "code"})
        assert result.matched_value == "MKT"


# ======================================================================
# Tests: empty, missing and malformed input
# ======================================================================


class TestEdgeCases:

    @pytest.mark.parametrize("value", [None, "", float("nan")])
    def test_missing_input_is_no_match_without_comparisons(self, engine, departments, fuzzy_config, value):
        result = engine.resolve(value, departments, fuzzy_config)
        assert not result.matched
        assert result.metrics.comparisons == 0
        assert result.suggestions == ()

    @pytest.mark.parametrize("table", [[], None, pd.DataFrame()])
    def test_empty_table_is_no_match(self, engine, fuzzy_config, table):
        result = engine.resolve("Sales", table, fuzzy_config)
        assert not result.matched
        assert result.metrics.comparisons == 0

    def test_missing_columns_raise(self, engine, departments):
        with pytest.raises(ConfigurationError):
            engine.resolve("Sales", departments, {"matchColumn": "", "returnColumn": "code"})
        with pytest.raises(ConfigurationError):
            MatchConfig(match_column="name", return_column="")

    def test_configuration_error_even_for_empty_input(self, engine):
        with pytest.raises(ConfigurationError):
            engine.resolve(None, [], {"matchColumn": "name"})

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ConfigurationError):
            MatchConfig(match_column="a", return_column="b", confidence_threshold=threshold)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            MatchConfig(match_column="a", return_column="b", max_suggestions=-1)

    def test_null_and_malformed_rows_skipped(self, engine, fuzzy_config):
        table = [None, "junk", {"name": None, "code": "X"}, {"name": "", "code": "Y"}, {"name": "Sales", "code": "S"}]
        assert not engine.resolve("None", table, fuzzy_config).matched
        result = engine.resolve("sales", table, fuzzy_config)
        assert result.matched_value == "S"

    def test_numeric_cells_compare_as_text(self, engine):
        table = pd.DataFrame({"id": [101, None], "label": ["a", "b"]})
        result = engine.resolve("101", table, MatchConfig(match_column="id", return_column="label"))
        assert result.matched
        assert result.matched_value == "a"

    def test_blank_input_never_matches_blank_cell(self, engine):
        table = [{"name": " ", "code": "BLANK"}, {"name": "Eng", "code": "E"}]
        cfg = MatchConfig(match_column="name", return_column="code", fuzzy_enabled=True, confidence_threshold=0.9)
        result = engine.resolve("   ", table, cfg)
        assert not result.matched
        assert result.tier is MatchTier.NONE
        assert result.suggestions == ()

    @pytest.mark.parametrize("value", ["true", True])
    def test_boolean_cells_compare_as_lowercase_text(self, engine, value):
        table = [{"flag": True, "label": "yes"}, {"flag": False, "label": "no"}]
        result = engine.resolve(value, table, MatchConfig(match_column="flag", return_column="label"))
        assert result.tier is MatchTier.EXACT
        assert result.confidence == 1.0
        assert result.matched_value == "yes"

    def test_dataframe_reference(self, engine, departments, config):
        result = engine.resolve("marketing", pd.DataFrame(departments), config)
        assert result.tier is MatchTier.NORMALIZED
        assert result.matched_value == "MKT"

    def test_result_is_immutable(self, engine, departments, config):
        result = engine.resolve("Sales", departments, config)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.matched = False


# ======================================================================
# Tests: derived values, display column, suggestions, metrics
# ======================================================================


class TestResultContent:

    def test_falsy_derived_values_kept(self, engine, departments):
        cfg = MatchConfig(
            match_column="name", return_column="code",
            derived_fields=(
                DerivedField("dept_budget", "budget"),
                {"name": "dept_active", "source_column": "active"},
                {"name": "nothing", "sourceColumn": "missing_col"},
            ),
        )
        result = engine.resolve("Engineering", departments, cfg)
        assert result.derived_values == {"dept_budget": 0, "dept_active": False}

    def test_display_column(self, engine, departments):
        cfg = MatchConfig(match_column="name", return_column="code", display_column="head")
        result = engine.resolve("Sales", departments, cfg)
        assert result.matched_value == "SAL"
        assert result.display_value == "Cy"

    def test_display_defaults_to_matched_value(self, engine, departments, config):
        assert engine.resolve("Sales", departments, config).display_value == "SAL"

    def test_suggestions_exclude_accepted_match(self, engine, fuzzy_config):
        table = [
            {"name": "Engineering", "code": "ENG"},
            {"name": "Engineers", "code": "ENR"},
            {"name": "Enginery", "code": "ERY"},
        ]
        result = engine.resolve("Enginering", table, fuzzy_config)
        assert result.matched_value == "ENG"
        assert "ENG" not in [s.value for s in result.suggestions]
        assert len(result.suggestions) <= fuzzy_config.max_suggestions

    def test_max_suggestions_zero(self, engine):
        cfg = MatchConfig(match_column="name", return_column="code", fuzzy_enabled=True,
                          confidence_threshold=0.99, max_suggestions=0)
        result = engine.resolve("Enginering", [{"name": "Engineering", "code": "ENG"}], cfg)
        assert result.suggestions == ()

    def test_comparisons_counted(self, engine, departments, config):
        assert engine.resolve("Engineering", departments, config).metrics.comparisons == 1
        assert engine.resolve("Sales", departments, config).metrics.comparisons == 3
        # exact misses all three, normalized hits the first
        assert engine.resolve("engineering", departments, config).metrics.comparisons == 4

    def test_from_dict_accepts_both_spellings(self):
        a = MatchConfig.from_dict({"matchColumn": "n", "returnColumn": "c", "fuzzyEnabled": True})
        b = MatchConfig.from_dict({"match_column": "n", "return_column": "c", "fuzzy_enabled": True})
        assert a == b


class TestSuggestionReason:

    @pytest.mark.parametrize(
        "confidence, expected",
        [(0.95, "Very similar spelling"), (0.85, "Similar spelling"), (0.75, "Possible match")],
    )
    def test_bands(self, confidence, expected):
        assert suggestion_reason(confidence, "x", "y") == expected

    def test_low_score_fallbacks(self):
        assert suggestion_reason(0.5, "abc", "ABC") == "Case difference"
        assert suggestion_reason(0.5, "a  b", "a b") == "Spacing or punctuation difference"
        assert suggestion_reason(0.5, "foo", "bar") == "Partial match"


# ======================================================================
# Tests: resolve_batch()
# ======================================================================


class TestResolveBatch:

    def test_results_in_order_with_metrics(self, engine, departments, config):
        inputs = ["Engineering", "marketing", "xyz", None]
        batch = asyncio.run(engine.resolve_batch(inputs, departments, config))
        assert [r.matched_value for r in batch.results] == ["ENG", "MKT", None, None]
        assert batch.metrics.total == 4
        assert batch.metrics.matched_count == 2
        assert batch.metrics.match_rate == 0.5
        assert batch.metrics.tier_counts == {"exact": 1, "normalized": 1, "none": 2}

    def test_empty_batch(self, engine, departments, config):
        calls = []
        batch = asyncio.run(engine.resolve_batch([], departments, config, on_progress=lambda c, t: calls.append(c)))
        assert batch.results == []
        assert batch.metrics.total == 0
        assert batch.metrics.match_rate == 0.0
        assert calls == []

    def test_progress_after_each_chunk(self, engine, departments, config):
        calls = []
        asyncio.run(engine.resolve_batch(
            ["Sales"] * 5, departments, config, batch_size=2,
            on_progress=lambda c, t: calls.append((c, t)),
        ))
        assert calls == [(2, 5), (4, 5), (5, 5)]

    def test_yields_between_chunks(self, engine, departments, config):
        progress, seen = [], []

        async def ticker():
            for _ in range(3):
                seen.append(len(progress))
                await asyncio.sleep(0)

        async def main():
            await asyncio.gather(
                engine.resolve_batch(["Sales"] * 3, departments, config, batch_size=1,
                                     on_progress=lambda c, t: progress.append(c)),
                ticker(),
            )

        asyncio.run(main())
        assert any(0 < n < 3 for n in seen)

    def test_item_failure_recorded(self, engine, departments, config):
        batch = asyncio.run(engine.resolve_batch(["Sales", Boom(), "Marketing"], departments, config))
        assert [r.matched for r in batch.results] == [True, False, True]
        assert "boom" in batch.results[1].error

    def test_fail_fast_reraises(self, engine, departments, config):
        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(engine.resolve_batch([Boom()], departments, config, fail_fast=True))

    def test_invalid_batch_size(self, engine, departments, config):
        with pytest.raises(ConfigurationError):
            asyncio.run(engine.resolve_batch(["Sales"], departments, config, batch_size=0))

    def test_float_batch_size_accepted(self, engine, departments, config):
        calls = []
        batch = asyncio.run(engine.resolve_batch(
            ["Sales"] * 3, departments, config, batch_size=2.0,
            on_progress=lambda c, t: calls.append((c, t)),
        ))
        assert [r.matched for r in batch.results] == [True, True, True]
        assert calls == [(2, 3), (3, 3)]

    def test_run_batch_and_frame(self, engine, departments):
        cfg = MatchConfig(match_column="name", return_column="code",
                          derived_fields=(DerivedField("dept_head", "head"),))
        batch = engine.run_batch(["Sales", "nope"], departments, cfg)
        frame = batch.to_frame()
        assert list(frame["matched"]) == [True, False]
        assert frame.loc[0, "dept_head"] == "Cy"
        assert frame.loc[1, "tier"] == "none"
