"""
Tests for aggir.column.leveled module.

Covers:
- LevelAlgorithm enum and LevelModifier validation
- Quantile, Quantiles and Median level ranges
- The median/quantile/quantiles convenience constructors
"""

import pytest

from aggir.column import (
    ArrayType,
    DEFAULT_LEVEL,
    DType,
    LevelAlgorithm,
    LevelModifier,
    Median,
    Quantile,
    Quantiles,
    TableColumn,
    levels_of,
    median,
    median_deterministic,
    median_exact,
    median_exact_weighted,
    median_tdigest,
    median_timing,
    median_timing_weighted,
    quantile,
    quantile_deterministic,
    quantile_exact,
    quantile_exact_weighted,
    quantile_tdigest,
    quantile_timing,
    quantile_timing_weighted,
    quantiles,
    quantiles_deterministic,
    quantiles_exact,
    quantiles_exact_weighted,
    quantiles_tdigest,
    quantiles_timing,
    quantiles_timing_weighted,
    ref,
    sum_,
)


@pytest.fixture
def weight() -> TableColumn:
    return ref("weight", DType.INT)


class TestLevelModifier:
    """Tests for LevelAlgorithm and LevelModifier."""

    def test_default_is_simple(self) -> None:
        assert LevelModifier() == LevelModifier.simple()
        assert LevelModifier().algorithm == LevelAlgorithm.SIMPLE
        assert LevelModifier().columns() == ()

    def test_weighted_classification(self) -> None:
        assert LevelAlgorithm.TIMING_WEIGHTED.is_weighted()
        assert LevelAlgorithm.EXACT_WEIGHTED.is_weighted()
        assert not LevelAlgorithm.TIMING.is_weighted()
        assert not LevelAlgorithm.DETERMINISTIC.is_weighted()

    def test_weighted_carries_weight(self, weight: TableColumn) -> None:
        modifier = LevelModifier.exact_weighted(weight)
        assert modifier.algorithm == LevelAlgorithm.EXACT_WEIGHTED
        assert modifier.weight is weight
        assert modifier.columns() == (weight,)

    def test_weighted_requires_weight(self) -> None:
        with pytest.raises(ValueError, match="requires a weight column"):
            LevelModifier(LevelAlgorithm.TIMING_WEIGHTED)

    def test_weight_must_be_integer(self, price: TableColumn) -> None:
        with pytest.raises(TypeError, match="integer column"):
            LevelModifier.timing_weighted(price)

    def test_unweighted_rejects_weight(self, weight: TableColumn) -> None:
        with pytest.raises(ValueError, match="does not take a weight column"):
            LevelModifier(LevelAlgorithm.EXACT, weight=weight)

    def test_deterministic_requires_numeric(self, user_id: TableColumn, title: TableColumn) -> None:
        assert LevelModifier.deterministic(user_id).determinator is user_id
        with pytest.raises(TypeError, match="numeric column"):
            LevelModifier.deterministic(title)

    def test_deterministic_requires_determinator(self) -> None:
        with pytest.raises(ValueError, match="requires a determinator column"):
            LevelModifier(LevelAlgorithm.DETERMINISTIC)

    def test_others_reject_determinator(self, user_id: TableColumn) -> None:
        with pytest.raises(ValueError, match="does not take a determinator column"):
            LevelModifier(LevelAlgorithm.TDIGEST, determinator=user_id)


class TestQuantile:
    """Tests for the Quantile node."""

    @pytest.mark.parametrize("level", [0.0, 0.01, 0.5, 0.9, 1.0])
    def test_levels_in_closed_range(self, price: TableColumn, level: float) -> None:
        assert Quantile(price, level).level == level

    @pytest.mark.parametrize("level", [-0.1, 1.5, float("nan")])
    def test_levels_out_of_range(self, price: TableColumn, level: float) -> None:
        with pytest.raises(ValueError, match=r"within \[0, 1\]"):
            Quantile(price, level)

    def test_quantile_scenario(self, price: TableColumn) -> None:
        """Test the 90th percentile of a float column."""
        node = quantile(price, 0.9)
        assert node.level == 0.9
        assert node.modifier == LevelModifier.simple()
        assert node.result_type == DType.FLOAT

    def test_default_level(self, price: TableColumn) -> None:
        assert quantile(price).level == DEFAULT_LEVEL == 0.5

    def test_children_include_modifier_columns(self, price: TableColumn, weight: TableColumn) -> None:
        node = quantile_timing_weighted(price, weight, 0.95)
        assert node.children() == (price, weight)
        assert node.collect_columns() == frozenset({"price", "weight"})


class TestQuantiles:
    """Tests for the Quantiles node."""

    def test_levels_stored_in_order(self, price: TableColumn) -> None:
        node = Quantiles(price, [0.1, 0.5, 0.9])
        assert node.levels == (0.1, 0.5, 0.9)
        assert node.result_type == ArrayType(DType.FLOAT)

    def test_varargs_constructor(self, price: TableColumn) -> None:
        assert quantiles(price, 0.9, 0.1).levels == (0.9, 0.1)

    def test_endpoints_allowed(self, price: TableColumn) -> None:
        assert quantiles(price, 0.0, 1.0).levels == (0.0, 1.0)

    def test_any_level_out_of_range(self, price: TableColumn) -> None:
        with pytest.raises(ValueError, match=r"within \[0, 1\]"):
            quantiles(price, 0.1, 1.2, 0.5)

    def test_empty_levels(self, price: TableColumn) -> None:
        with pytest.raises(ValueError, match="at least one level"):
            quantiles(price)


class TestMedian:
    """Tests for the Median node."""

    def test_median_default(self, price: TableColumn) -> None:
        node = median(price)
        assert isinstance(node, Median)
        assert node.level == 0.5
        assert node.result_type == DType.FLOAT

    @pytest.mark.parametrize("level", [0.0, 1.0, -0.5, 2.0])
    def test_open_interval(self, price: TableColumn, level: float) -> None:
        """Test that the endpoints are not valid median levels."""
        with pytest.raises(ValueError, match=r"within \(0, 1\)"):
            Median(price, level)


class TestLeveledConstructors:
    """Tests for the algorithm-specific constructors."""

    def test_exact(self, price: TableColumn) -> None:
        assert median_exact(price).modifier.algorithm == LevelAlgorithm.EXACT
        assert quantile_exact(price, 0.2).modifier.algorithm == LevelAlgorithm.EXACT
        assert quantiles_exact(price, 0.2, 0.4).modifier.algorithm == LevelAlgorithm.EXACT

    def test_tdigest(self, price: TableColumn) -> None:
        assert median_tdigest(price).modifier == LevelModifier.tdigest()
        assert quantile_tdigest(price).modifier == LevelModifier.tdigest()
        assert quantiles_tdigest(price, 0.5).modifier == LevelModifier.tdigest()

    def test_timing(self, amount: TableColumn) -> None:
        assert median_timing(amount).modifier == LevelModifier.timing()
        assert quantile_timing(amount).modifier == LevelModifier.timing()
        assert quantiles_timing(amount, 0.5, 0.99).modifier == LevelModifier.timing()

    def test_weighted(self, price: TableColumn, weight: TableColumn) -> None:
        assert median_exact_weighted(price, weight).modifier == LevelModifier.exact_weighted(weight)
        assert quantile_exact_weighted(price, weight).modifier.weight is weight
        assert quantiles_exact_weighted(price, weight, 0.1, 0.9).levels == (0.1, 0.9)
        assert median_timing_weighted(price, weight).modifier.algorithm == LevelAlgorithm.TIMING_WEIGHTED
        assert quantiles_timing_weighted(price, weight, 0.5).modifier.weight is weight

    def test_deterministic(self, price: TableColumn, user_id: TableColumn, title: TableColumn) -> None:
        assert median_deterministic(price, user_id).modifier.determinator is user_id
        assert quantile_deterministic(price, user_id, 0.3).level == 0.3
        assert quantiles_deterministic(price, user_id, 0.3, 0.6).levels == (0.3, 0.6)
        with pytest.raises(TypeError):
            quantile_deterministic(price, title)

    def test_level_checks_apply_to_constructors(self, price: TableColumn, weight: TableColumn) -> None:
        with pytest.raises(ValueError):
            median_exact(price, 1.0)
        with pytest.raises(ValueError):
            quantiles_exact_weighted(price, weight, 0.5, -0.5)


class TestLevelsOf:
    """Tests for the levels_of helper."""

    def test_levels_of(self, price: TableColumn) -> None:
        assert levels_of(quantile(price, 0.25)) == (0.25,)
        assert levels_of(median(price, 0.75)) == (0.75,)
        assert levels_of(quantiles(price, 0.1, 0.2)) == (0.1, 0.2)

    def test_levels_of_rejects_other_aggregates(self, price: TableColumn) -> None:
        with pytest.raises(TypeError, match="Not a leveled function"):
            levels_of(sum_(price))  # type: ignore[arg-type]
