"""
Aggregate function catalog for the aggir column IR.

This module defines the concrete aggregate nodes and their result types:
- Count, Avg, Sum, SumMap, Min, Max
- Uniq, AnyResult, GroupArray, GroupUniqArray
- TimeSeries

Every node is immutable (frozen dataclass). Its result type is fixed by its
construction rule; capability bounds are checked when the node is built.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any, Generic

from aggir.column.expressions import (
    Column,
    EmptyColumn,
    ExpressionColumn,
    N,
    T,
    TableColumn,
    V,
    require_array,
    require_integer,
    require_numeric,
    require_type,
)
from aggir.column.types import ArrayType, DType, SqlType, TupleType


class SumModifier(Enum):
    """
    Overflow handling of ``sum``.
    """

    SIMPLE = auto()
    WITH_OVERFLOW = auto()


class UniqModifier(Enum):
    """
    Algorithm used by ``uniq`` to count distinct values.

    SIMPLE is the adaptive-sampling estimate, COMBINED and HLL12 are
    HyperLogLog based, EXACT counts precisely.
    """

    SIMPLE = auto()
    COMBINED = auto()
    HLL12 = auto()
    EXACT = auto()


class AnyModifier(Enum):
    """
    Which value ``any`` picks from a group.
    """

    SIMPLE = auto()  # first value encountered
    HEAVY = auto()   # a frequently occurring value
    LAST = auto()    # last value encountered


# ============================================================================
# Base Class
# ============================================================================


class AggregateFunction(ExpressionColumn[V]):
    """
    An expression that reduces the rows of a group to a single value.

    The type parameter ``V`` is the Python type of the aggregated value.
    """


# ============================================================================
# Catalog
# ============================================================================


@dataclass(frozen=True)
class Count(AggregateFunction[int]):
    """
    Count rows, or the non-null values of a column.

    Parameters
    ----------
    column : TableColumn | None
        Column whose non-null values are counted. None counts all rows.
    """

    column: TableColumn | None = None

    @property
    def target_column(self) -> Column:
        if self.column is None:
            return EmptyColumn()
        return self.column

    @property
    def result_type(self) -> SqlType:
        return DType.INT


@dataclass(frozen=True)
class Avg(AggregateFunction[float], Generic[N]):
    """
    Arithmetic mean of a numeric column.

    Raises
    ------
    TypeError
        If the column is not numeric.
    """

    column: TableColumn[N]

    def __post_init__(self) -> None:
        require_numeric(self.column, "avg")

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return DType.FLOAT


@dataclass(frozen=True)
class Sum(AggregateFunction[float], Generic[N]):
    """
    Sum of a numeric column.

    Integer sums are widened to floating point, matching how the engine
    aggregates them.

    Parameters
    ----------
    column : TableColumn[N]
        The numeric column to sum.
    modifier : SumModifier
        Overflow handling.

    Raises
    ------
    TypeError
        If the column is not numeric.
    """

    column: TableColumn[N]
    modifier: SumModifier = SumModifier.SIMPLE

    def __post_init__(self) -> None:
        require_numeric(self.column, "sum")

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return DType.FLOAT


@dataclass(frozen=True)
class SumMap(AggregateFunction[tuple[Sequence[Any], Sequence[Any]]]):
    """
    Sum values per key, where keys and values are parallel arrays.

    Parameters
    ----------
    key : TableColumn
        Array column of numeric keys.
    value : TableColumn
        Array column of numeric values, aligned with ``key``.

    Raises
    ------
    TypeError
        If either column is not an array of numbers.
    """

    key: TableColumn
    value: TableColumn

    def __post_init__(self) -> None:
        for column in (self.key, self.value):
            element = require_array(column, column.sql_type, "sumMap")
            if not element.is_numeric():
                raise TypeError(
                    f"sumMap requires an array of numbers, got {column.name!r} of type {column.sql_type}"
                )

    @property
    def target_column(self) -> Column:
        return self.key

    @property
    def result_type(self) -> SqlType:
        return TupleType((self.key.sql_type, self.value.sql_type))

    def children(self) -> tuple[Column, ...]:
        return self.key, self.value


@dataclass(frozen=True)
class Min(AggregateFunction[T]):
    """Smallest value of a column."""

    column: TableColumn[T]

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return self.column.sql_type


@dataclass(frozen=True)
class Max(AggregateFunction[T]):
    """Largest value of a column."""

    column: TableColumn[T]

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return self.column.sql_type


@dataclass(frozen=True)
class Uniq(AggregateFunction[int]):
    """
    Number of distinct values of a column.

    Parameters
    ----------
    column : TableColumn
        Column whose distinct values are counted.
    modifier : UniqModifier
        Exact or approximate counting algorithm.
    """

    column: TableColumn
    modifier: UniqModifier = UniqModifier.SIMPLE

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return DType.INT


@dataclass(frozen=True)
class AnyResult(AggregateFunction[T]):
    """
    One value of a column chosen from the group.

    Parameters
    ----------
    column : TableColumn[T]
        Column to pick the value from.
    modifier : AnyModifier
        Which value is picked.
    """

    column: TableColumn[T]
    modifier: AnyModifier = AnyModifier.SIMPLE

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return self.column.sql_type


@dataclass(frozen=True)
class GroupArray(AggregateFunction[Sequence[T]]):
    """
    Collect the values of a column into an array.

    Parameters
    ----------
    column : TableColumn[T]
        Column to collect.
    max_values : int | None
        Maximum number of values kept. None keeps all.
    """

    column: TableColumn[T]
    max_values: int | None = None

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return ArrayType(self.column.sql_type)


@dataclass(frozen=True)
class GroupUniqArray(AggregateFunction[Sequence[T]]):
    """Collect the distinct values of a column into an array."""

    column: TableColumn[T]

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return ArrayType(self.column.sql_type)


@dataclass(frozen=True)
class TimeSeries(AggregateFunction[int]):
    """
    Bucket an integer column into the slots of a time interval.

    The interval and its translation into a bucketing expression belong to
    the time-bucketing layer; this node only carries them.

    Parameters
    ----------
    column : TableColumn[int]
        Integer (timestamp-derived) column to bucket.
    interval : Any
        The interval whose slots form the buckets.
    date_column : TableColumn[datetime] | None
        Optional date column the buckets are computed from.

    Raises
    ------
    TypeError
        If ``column`` is not an integer column or ``date_column`` is not a
        date or date-time column.
    """

    column: TableColumn[int]
    interval: Any
    date_column: TableColumn[datetime] | None = None

    def __post_init__(self) -> None:
        require_integer(self.column, "timeSeries")
        if self.date_column is not None:
            require_type(self.date_column, (DType.DATE, DType.DATETIME), "timeSeries")

    @property
    def target_column(self) -> Column:
        return self.column

    @property
    def result_type(self) -> SqlType:
        return DType.INT

    def children(self) -> tuple[Column, ...]:
        if self.date_column is None:
            return (self.column,)
        return self.column, self.date_column


# ============================================================================
# Convenience constructors
# ============================================================================


def count(column: TableColumn | None = None) -> Count:
    """
    Create a COUNT aggregation.

    Parameters
    ----------
    column : TableColumn | None
        Column to count, or None to count all rows.

    Returns
    -------
    Count
        A COUNT aggregation.
    """
    return Count(column)


def average(column: TableColumn[N]) -> Avg[N]:
    """
    Create an AVG aggregation.

    Parameters
    ----------
    column : TableColumn[N]
        Numeric column to average.

    Returns
    -------
    Avg
        An AVG aggregation.
    """
    return Avg(column)


def min_(column: TableColumn[T]) -> Min[T]:
    """Create a MIN aggregation."""
    return Min(column)


def max_(column: TableColumn[T]) -> Max[T]:
    """Create a MAX aggregation."""
    return Max(column)


def sum_(column: TableColumn[N]) -> Sum[N]:
    """
    Create a SUM aggregation.

    Parameters
    ----------
    column : TableColumn[N]
        Numeric column to sum.

    Returns
    -------
    Sum
        A SUM aggregation with the default modifier.
    """
    return Sum(column)


def sum_overflown(column: TableColumn[N]) -> Sum[N]:
    """Create a SUM aggregation that wraps around on overflow."""
    return Sum(column, SumModifier.WITH_OVERFLOW)


def sum_map(key: TableColumn, value: TableColumn) -> SumMap:
    """
    Create a SUM MAP aggregation over parallel key and value arrays.

    Parameters
    ----------
    key : TableColumn
        Array column of numeric keys.
    value : TableColumn
        Array column of numeric values.

    Returns
    -------
    SumMap
        The aggregation, producing a (keys, sums) tuple.
    """
    return SumMap(key, value)


def uniq(column: TableColumn) -> Uniq:
    """Create a UNIQ aggregation with the default algorithm."""
    return Uniq(column)


def uniq_combined(column: TableColumn) -> Uniq:
    return Uniq(column, UniqModifier.COMBINED)


def uniq_exact(column: TableColumn) -> Uniq:
    return Uniq(column, UniqModifier.EXACT)


def uniq_hll12(column: TableColumn) -> Uniq:
    return Uniq(column, UniqModifier.HLL12)


def any_(column: TableColumn[T]) -> AnyResult[T]:
    """Create an ANY aggregation returning the first value encountered."""
    return AnyResult(column)


def any_heavy(column: TableColumn[T]) -> AnyResult[T]:
    return AnyResult(column, AnyModifier.HEAVY)


def any_last(column: TableColumn[T]) -> AnyResult[T]:
    return AnyResult(column, AnyModifier.LAST)


def group_array(column: TableColumn[T], max_values: int | None = None) -> GroupArray[T]:
    """
    Create a GROUP ARRAY aggregation.

    Parameters
    ----------
    column : TableColumn[T]
        Column to collect.
    max_values : int | None
        Optional cap on the number of collected values.

    Returns
    -------
    GroupArray
        The aggregation.
    """
    return GroupArray(column, max_values)


def group_uniq_array(column: TableColumn[T]) -> GroupUniqArray[T]:
    """Create a GROUP UNIQ ARRAY aggregation."""
    return GroupUniqArray(column)


def time_series(
    column: TableColumn[int],
    interval: Any,
    date_column: TableColumn[datetime] | None = None,
) -> TimeSeries:
    """
    Create a TIME SERIES bucketing aggregation.

    Parameters
    ----------
    column : TableColumn[int]
        Integer column to bucket.
    interval : Any
        Interval supplied by the time-bucketing layer.
    date_column : TableColumn[datetime] | None
        Optional date column.

    Returns
    -------
    TimeSeries
        The aggregation.
    """
    return TimeSeries(column, interval, date_column)
