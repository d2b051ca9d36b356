"""
Quantile-family aggregate functions.

Leveled functions are parametrized by one or more probability levels and by a
LevelModifier selecting the approximation algorithm:
- Quantile: one level in [0, 1]
- Quantiles: an ordered sequence of levels, each in [0, 1]
- Median: one level in the open interval (0, 1)

Levels are validated when the node is constructed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto

from aggir.column.aggregations import AggregateFunction
from aggir.column.expressions import (
    Column,
    TableColumn,
    T,
    V,
    require_integer,
    require_numeric,
)
from aggir.column.types import ArrayType, SqlType

# Level used when none is given
DEFAULT_LEVEL = 0.5


class LevelAlgorithm(Enum):
    """
    Algorithms available to quantile-family functions.
    """

    SIMPLE = auto()
    EXACT = auto()
    TDIGEST = auto()
    # Works for numbers; intended for page loading times in milliseconds
    TIMING = auto()
    # As TIMING, counting each value ``weight`` times
    TIMING_WEIGHTED = auto()
    EXACT_WEIGHTED = auto()
    DETERMINISTIC = auto()

    def is_weighted(self) -> bool:
        """
        Check if this algorithm reads a weight column.

        Returns
        -------
        bool
            True for TIMING_WEIGHTED and EXACT_WEIGHTED.
        """
        return self in (LevelAlgorithm.TIMING_WEIGHTED, LevelAlgorithm.EXACT_WEIGHTED)


@dataclass(frozen=True)
class LevelModifier:
    """
    Algorithm selection for a leveled function.

    Weighted algorithms carry an integer ``weight`` column; the deterministic
    algorithm carries a numeric ``determinator`` column. No other algorithm
    carries a column. Prefer the classmethod constructors.

    Parameters
    ----------
    algorithm : LevelAlgorithm
        The selected algorithm.
    weight : TableColumn[int] | None
        Weight column for weighted algorithms.
    determinator : TableColumn | None
        Column driving deterministic sampling.

    Raises
    ------
    ValueError
        If the columns present do not match the algorithm.
    TypeError
        If the weight is not an integer column or the determinator is not
        numeric.

    Examples
    --------
    >>> LevelModifier.tdigest().algorithm
    <LevelAlgorithm.TDIGEST: 3>
    """

    algorithm: LevelAlgorithm = LevelAlgorithm.SIMPLE
    weight: TableColumn[int] | None = None
    determinator: TableColumn | None = None

    def __post_init__(self) -> None:
        if self.algorithm.is_weighted():
            if self.weight is None:
                raise ValueError(f"{self.algorithm.name} requires a weight column")
            require_integer(self.weight, f"{self.algorithm.name} weight")
        elif self.weight is not None:
            raise ValueError(f"{self.algorithm.name} does not take a weight column")

        if self.algorithm is LevelAlgorithm.DETERMINISTIC:
            if self.determinator is None:
                raise ValueError("DETERMINISTIC requires a determinator column")
            require_numeric(self.determinator, "DETERMINISTIC determinator")
        elif self.determinator is not None:
            raise ValueError(f"{self.algorithm.name} does not take a determinator column")

    @classmethod
    def simple(cls) -> LevelModifier:
        return cls(LevelAlgorithm.SIMPLE)

    @classmethod
    def exact(cls) -> LevelModifier:
        return cls(LevelAlgorithm.EXACT)

    @classmethod
    def tdigest(cls) -> LevelModifier:
        return cls(LevelAlgorithm.TDIGEST)

    @classmethod
    def timing(cls) -> LevelModifier:
        return cls(LevelAlgorithm.TIMING)

    @classmethod
    def timing_weighted(cls, weight: TableColumn[int]) -> LevelModifier:
        return cls(LevelAlgorithm.TIMING_WEIGHTED, weight=weight)

    @classmethod
    def exact_weighted(cls, weight: TableColumn[int]) -> LevelModifier:
        return cls(LevelAlgorithm.EXACT_WEIGHTED, weight=weight)

    @classmethod
    def deterministic(cls, determinator: TableColumn) -> LevelModifier:
        return cls(LevelAlgorithm.DETERMINISTIC, determinator=determinator)

    def columns(self) -> tuple[TableColumn, ...]:
        """Return the columns this modifier reads, if any."""
        return tuple(c for c in (self.weight, self.determinator) if c is not None)


# ============================================================================
# Leveled functions
# ============================================================================


class LeveledAggregateFunction(AggregateFunction[V]):
    """
    Abstract base class for quantile-family functions.

    Subclasses hold a ``column`` and a ``modifier``; the modifier's columns
    are part of the node's children.
    """

    column: TableColumn
    modifier: LevelModifier

    @property
    def target_column(self) -> Column:
        return self.column

    def children(self) -> tuple[Column, ...]:
        return (self.column, *self.modifier.columns())


def _check_closed_level(level: float, function: str) -> None:
    if not 0 <= level <= 1:
        raise ValueError(f"{function} level must be within [0, 1], got {level}")


@dataclass(frozen=True)
class Quantile(LeveledAggregateFunction[T]):
    """
    Approximate or exact quantile of a column.

    Works for numbers, dates and date-times; the result has the column's type.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the quantile of.
    level : float
        Probability level, within [0, 1].
    modifier : LevelModifier
        Algorithm selection.

    Raises
    ------
    ValueError
        If ``level`` lies outside [0, 1].

    Examples
    --------
    >>> q = Quantile(TableColumn("price", DType.FLOAT), 0.9)
    >>> q.level
    0.9
    """

    column: TableColumn[T]
    level: float = DEFAULT_LEVEL
    modifier: LevelModifier = LevelModifier()

    def __post_init__(self) -> None:
        _check_closed_level(self.level, "quantile")

    @property
    def result_type(self) -> SqlType:
        return self.column.sql_type


@dataclass(frozen=True)
class Quantiles(LeveledAggregateFunction[Sequence[T]]):
    """
    Several quantiles of a column computed at once.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the quantiles of.
    levels : tuple[float, ...]
        Probability levels, each within [0, 1]. Order is preserved.
    modifier : LevelModifier
        Algorithm selection.

    Raises
    ------
    ValueError
        If no level is given or any level lies outside [0, 1].
    """

    column: TableColumn[T]
    levels: tuple[float, ...]
    modifier: LevelModifier = LevelModifier()

    def __post_init__(self) -> None:
        # Accept any iterable of levels but store a tuple
        if not isinstance(self.levels, tuple):
            object.__setattr__(self, "levels", tuple(self.levels))
        if not self.levels:
            raise ValueError("quantiles requires at least one level")
        for level in self.levels:
            _check_closed_level(level, "quantiles")

    @property
    def result_type(self) -> SqlType:
        return ArrayType(self.column.sql_type)


@dataclass(frozen=True)
class Median(LeveledAggregateFunction[T]):
    """
    Median of a column, at a level strictly between 0 and 1.

    Raises
    ------
    ValueError
        If ``level`` is not in the open interval (0, 1).
    """

    column: TableColumn[T]
    level: float = DEFAULT_LEVEL
    modifier: LevelModifier = LevelModifier()

    def __post_init__(self) -> None:
        if not 0 < self.level < 1:
            raise ValueError(f"median level must be within (0, 1), got {self.level}")

    @property
    def result_type(self) -> SqlType:
        return self.column.sql_type


# ============================================================================
# Convenience constructors
# ============================================================================


def median(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Median[T]:
    """
    Create a MEDIAN aggregation.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the median of.
    level : float
        Probability level, within (0, 1).

    Returns
    -------
    Median
        The aggregation with the default algorithm.
    """
    return Median(column, level)


def quantile(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Quantile[T]:
    """
    Create a QUANTILE aggregation.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the quantile of.
    level : float
        Probability level, within [0, 1].

    Returns
    -------
    Quantile
        The aggregation with the default algorithm.
    """
    return Quantile(column, level)


def quantiles(column: TableColumn[T], *levels: float) -> Quantiles[T]:
    """
    Create a QUANTILES aggregation.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the quantiles of.
    *levels : float
        Probability levels, each within [0, 1].

    Returns
    -------
    Quantiles
        The aggregation with the default algorithm.
    """
    return Quantiles(column, levels)


def median_exact(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Median[T]:
    return Median(column, level, LevelModifier.exact())


def quantile_exact(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.exact())


def quantiles_exact(column: TableColumn[T], *levels: float) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.exact())


def median_exact_weighted(
    column: TableColumn[T], weight: TableColumn[int], level: float = DEFAULT_LEVEL
) -> Median[T]:
    return Median(column, level, LevelModifier.exact_weighted(weight))


def quantile_exact_weighted(
    column: TableColumn[T], weight: TableColumn[int], level: float = DEFAULT_LEVEL
) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.exact_weighted(weight))


def quantiles_exact_weighted(
    column: TableColumn[T], weight: TableColumn[int], *levels: float
) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.exact_weighted(weight))


def median_tdigest(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Median[T]:
    return Median(column, level, LevelModifier.tdigest())


def quantile_tdigest(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.tdigest())


def quantiles_tdigest(column: TableColumn[T], *levels: float) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.tdigest())


def median_timing(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Median[T]:
    return Median(column, level, LevelModifier.timing())


def quantile_timing(column: TableColumn[T], level: float = DEFAULT_LEVEL) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.timing())


def quantiles_timing(column: TableColumn[T], *levels: float) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.timing())


def median_timing_weighted(
    column: TableColumn[T], weight: TableColumn[int], level: float = DEFAULT_LEVEL
) -> Median[T]:
    return Median(column, level, LevelModifier.timing_weighted(weight))


def quantile_timing_weighted(
    column: TableColumn[T], weight: TableColumn[int], level: float = DEFAULT_LEVEL
) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.timing_weighted(weight))


def quantiles_timing_weighted(
    column: TableColumn[T], weight: TableColumn[int], *levels: float
) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.timing_weighted(weight))


def median_deterministic(
    column: TableColumn[T], determinator: TableColumn, level: float = DEFAULT_LEVEL
) -> Median[T]:
    """
    Create a MEDIAN aggregation using deterministic sampling.

    Parameters
    ----------
    column : TableColumn[T]
        Column to compute the median of.
    determinator : TableColumn
        Numeric column whose hash drives the sampling.
    level : float
        Probability level, within (0, 1).

    Returns
    -------
    Median
        The aggregation.

    Raises
    ------
    TypeError
        If the determinator is not numeric.
    """
    return Median(column, level, LevelModifier.deterministic(determinator))


def quantile_deterministic(
    column: TableColumn[T], determinator: TableColumn, level: float = DEFAULT_LEVEL
) -> Quantile[T]:
    return Quantile(column, level, LevelModifier.deterministic(determinator))


def quantiles_deterministic(
    column: TableColumn[T], determinator: TableColumn, *levels: float
) -> Quantiles[T]:
    return Quantiles(column, levels, LevelModifier.deterministic(determinator))


def levels_of(function: LeveledAggregateFunction) -> tuple[float, ...]:
    """
    Return the levels of any leveled function as a tuple.

    Parameters
    ----------
    function : LeveledAggregateFunction
        A Quantile, Quantiles or Median node.

    Returns
    -------
    tuple[float, ...]
        One level for Quantile and Median, all levels for Quantiles.
    """
    if isinstance(function, Quantiles):
        return function.levels
    if isinstance(function, (Quantile, Median)):
        return (function.level,)
    raise TypeError(f"Not a leveled function: {type(function).__name__}")
