"""
Aggregate function combinators.

A combinator wraps an existing aggregate function into a new one and derives
the new result type from the wrapped one:

    Combinator        Precondition                        Result
    If(condition)     none                                wrapped result
    CombinatorArray   source column is Array(V)           wrapped result over V
    ArrayForEach      iterated column is Array(V)         Array(wrapped result)
    State             none                                AggregateState(wrapped result)
    Merge             wrapped result is AggregateState(R) R

Preconditions are checked when the CombinedAggregatedFunction is built; a
violation raises TypeError and no node is created.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, fields, replace
from typing import Any, Generic, TypeVar

from aggir.column.aggregations import AggregateFunction
from aggir.column.conditions import Condition
from aggir.column.expressions import (
    Column,
    EmptyColumn,
    TableColumn,
    V,
    require_array,
    require_state,
)
from aggir.column.types import ArrayType, SqlType, StateType

logger = logging.getLogger(__name__)

R = TypeVar("R")


class StateResult(Generic[V]):
    """
    Marker type of a partial aggregation state that merges into a ``V``.

    Only used in type annotations, to thread result types through
    ``state()`` and ``merge()``. It is never instantiated; the runtime
    counterpart of the type is :class:`aggir.column.types.StateType`.
    """

    __slots__ = ()

    def __new__(cls, *args: Any, **kwargs: Any) -> StateResult[V]:
        raise TypeError("StateResult is a type marker and cannot be instantiated")


# ============================================================================
# Combinators
# ============================================================================


@dataclass(frozen=True)
class Combinator(ABC):
    """
    Abstract base class for all combinators.

    A combinator is a type-level transformation from the wrapped aggregate
    to the combined aggregate.
    """

    @abstractmethod
    def output_type(self, target: AggregateFunction) -> SqlType:
        """
        Compute the result type of ``target`` wrapped by this combinator.

        Parameters
        ----------
        target : AggregateFunction
            The aggregate being wrapped.

        Returns
        -------
        SqlType
            The result type of the combined aggregate.

        Raises
        ------
        TypeError
            If ``target`` does not satisfy the combinator's precondition.
        """
        pass

    def collect_columns(self) -> frozenset[str]:
        """Names of table columns read by the combinator itself."""
        return frozenset()


@dataclass(frozen=True)
class If(Combinator):
    """
    Aggregate only the rows matching ``condition``.

    Parameters
    ----------
    condition : Condition
        The row filter.
    """

    condition: Condition

    def output_type(self, target: AggregateFunction) -> SqlType:
        return target.result_type

    def collect_columns(self) -> frozenset[str]:
        return self.condition.collect_columns()


@dataclass(frozen=True)
class CombinatorArray(Combinator):
    """
    Aggregate the elements of an array column across all rows.

    The innermost aggregate must read an ``Array(V)`` column. The combined
    aggregate has the type the wrapped chain would have over a column of
    ``V``. Over ``Array(int)``, ``max`` yields ``int`` and ``state(max)``
    yields ``AggregateState(int)``; ``uniq`` yields ``int`` for any ``V``.
    """

    def output_type(self, target: AggregateFunction) -> SqlType:
        return over_elements(target).result_type


@dataclass(frozen=True)
class ArrayForEach(Combinator):
    """
    Aggregate an array column position by position.

    For rows ``[x1, y1, z1]``, ``[x2, y2]`` and ``[x3, y3, z3]`` the combined
    aggregate yields ``[f(x1, x2, x3), f(y1, y2, y3), f(z1, z3)]``. Missing
    trailing elements are absent from their slice, not zero.

    Parameters
    ----------
    column : TableColumn
        The array column being iterated.
    """

    column: TableColumn

    def output_type(self, target: AggregateFunction) -> SqlType:
        require_array(self.column, self.column.sql_type, "ForEach combinator")
        return ArrayType(target.result_type)

    def collect_columns(self) -> frozenset[str]:
        return frozenset({self.column.name})


@dataclass(frozen=True)
class State(Combinator):
    """
    Capture the intermediate aggregation state instead of the final value.
    """

    def output_type(self, target: AggregateFunction) -> SqlType:
        return StateType(target.result_type)


@dataclass(frozen=True)
class Merge(Combinator):
    """
    Combine previously captured states into the final value.

    The wrapped aggregate must produce an ``AggregateState(R)``; the combined
    aggregate produces an ``R``.
    """

    def output_type(self, target: AggregateFunction) -> SqlType:
        return require_state(target.result_type, "Merge combinator")


# ============================================================================
# Combined aggregate
# ============================================================================


@dataclass(frozen=True)
class CombinedAggregatedFunction(AggregateFunction[R]):
    """
    An aggregate function derived from another by a combinator.

    It reads no column of its own: its value is entirely derived from
    ``target`` and ``combinator``.

    Parameters
    ----------
    combinator : Combinator
        The transformation applied.
    target : AggregateFunction
        The wrapped aggregate.

    Raises
    ------
    TypeError
        If ``target`` does not satisfy the combinator's precondition.
    """

    combinator: Combinator
    target: AggregateFunction
    _result_type: SqlType = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        result_type = self.combinator.output_type(self.target)
        object.__setattr__(self, "_result_type", result_type)
        logger.debug(
            f"Wrapped {type(self.target).__name__} with "
            f"{type(self.combinator).__name__}: {self.target.result_type} -> {result_type}"
        )

    @property
    def target_column(self) -> Column:
        return EmptyColumn()

    @property
    def result_type(self) -> SqlType:
        return self._result_type

    def children(self) -> tuple[Column, ...]:
        return (self.target,)

    def combinators(self) -> tuple[Combinator, ...]:
        """
        Return the combinators from the innermost to this one.

        Returns
        -------
        tuple[Combinator, ...]
            Combinators in the order they were applied.
        """
        inner = self.target.combinators() if isinstance(self.target, CombinedAggregatedFunction) else ()
        return (*inner, self.combinator)

    def base_function(self) -> AggregateFunction:
        """Return the innermost aggregate that is not a combined function."""
        return base_function(self)

    def _collect_columns_recursive(self, columns: set[str]) -> None:
        columns |= self.combinator.collect_columns()
        super()._collect_columns_recursive(columns)


def base_function(aggregated: AggregateFunction) -> AggregateFunction:
    """
    Unwrap nested combined functions down to the plain aggregate.

    Parameters
    ----------
    aggregated : AggregateFunction
        Any aggregate, combined or not.

    Returns
    -------
    AggregateFunction
        The innermost aggregate.
    """
    while isinstance(aggregated, CombinedAggregatedFunction):
        aggregated = aggregated.target
    return aggregated


def source_column(aggregated: AggregateFunction) -> Column:
    """Return the column read by the innermost aggregate."""
    return base_function(aggregated).target_column


def over_elements(aggregated: AggregateFunction) -> AggregateFunction:
    """
    Rebuild an aggregate over the elements of its array source column.

    The innermost aggregate is rebuilt over a reference with the source
    column's name and its element type, and every combinator above it is
    applied again, so each precondition is checked against element types.

    Parameters
    ----------
    aggregated : AggregateFunction
        An aggregate, possibly combined, whose source column is ``Array(V)``.

    Returns
    -------
    AggregateFunction
        The same chain over a ``V`` column.

    Raises
    ------
    TypeError
        If the innermost aggregate reads no column, reads a non-array column
        or is not built from a single ``column``.
    """
    if isinstance(aggregated, CombinedAggregatedFunction):
        return replace(aggregated, target=over_elements(aggregated.target))

    column = aggregated.target_column
    if not isinstance(column, TableColumn):
        raise TypeError(
            f"Array combinator requires an aggregate over an array column, "
            f"got {type(aggregated).__name__} without a column"
        )
    element_type = require_array(column, column.sql_type, "Array combinator")
    if "column" not in {field_.name for field_ in fields(aggregated)}:
        raise TypeError(f"Array combinator cannot be applied to {type(aggregated).__name__}")
    return replace(aggregated, column=TableColumn(column.name, element_type))


# ============================================================================
# Convenience constructors
# ============================================================================


def agg_if(condition: Condition, aggregated: AggregateFunction[R]) -> CombinedAggregatedFunction[R]:
    """
    Restrict an aggregate to the rows matching a condition.

    Parameters
    ----------
    condition : Condition
        The row filter.
    aggregated : AggregateFunction[R]
        The aggregate to restrict.

    Returns
    -------
    CombinedAggregatedFunction[R]
        The conditional aggregate, with the same result type.
    """
    return CombinedAggregatedFunction(If(condition), aggregated)


def array(aggregated: AggregateFunction[Any]) -> CombinedAggregatedFunction[Any]:
    """
    Apply an aggregate to the elements of its array column.

    Parameters
    ----------
    aggregated : AggregateFunction
        An aggregate over an ``Array(V)`` column.

    Returns
    -------
    CombinedAggregatedFunction
        The aggregate over all elements, producing a ``V``.

    Raises
    ------
    TypeError
        If the aggregate does not read an array column.
    """
    return CombinedAggregatedFunction(CombinatorArray(), aggregated)


def for_each(
    column: TableColumn[Sequence[V]],
    func: Callable[[TableColumn[V]], AggregateFunction[R]],
) -> CombinedAggregatedFunction[Sequence[R]]:
    """
    Aggregate an array column per position across rows.

    ``func`` is not applied to the array column itself. It receives a
    reference with the same name but the element type, and the aggregate
    it returns is wrapped with the ForEach combinator.

    Parameters
    ----------
    column : TableColumn[Sequence[V]]
        The array column.
    func : Callable[[TableColumn[V]], AggregateFunction[R]]
        Builds the per-position aggregate from an element-typed reference.

    Returns
    -------
    CombinedAggregatedFunction[Sequence[R]]
        One aggregated value per array position.

    Raises
    ------
    TypeError
        If ``column`` is not an array column.

    Examples
    --------
    >>> tags = TableColumn("tags", ArrayType(DType.INT))
    >>> for_each(tags, sum_).result_type
    ArrayType(element=<DType.FLOAT: 'float'>)
    """
    element_type = require_array(column, column.sql_type, "forEach")
    element: TableColumn[V] = TableColumn(column.name, element_type)
    return CombinedAggregatedFunction(ArrayForEach(column), func(element))


def state(aggregated: AggregateFunction[R]) -> CombinedAggregatedFunction[StateResult[R]]:
    """
    Capture the partial aggregation state of an aggregate.

    Parameters
    ----------
    aggregated : AggregateFunction[R]
        The aggregate whose state is captured.

    Returns
    -------
    CombinedAggregatedFunction[StateResult[R]]
        An aggregate producing ``AggregateState(R)``.
    """
    return CombinedAggregatedFunction(State(), aggregated)


def merge(aggregated: AggregateFunction[StateResult[R]]) -> CombinedAggregatedFunction[R]:
    """
    Merge captured aggregation states into the final value.

    Parameters
    ----------
    aggregated : AggregateFunction[StateResult[R]]
        An aggregate producing ``AggregateState(R)``.

    Returns
    -------
    CombinedAggregatedFunction[R]
        An aggregate producing ``R``.

    Raises
    ------
    TypeError
        If ``aggregated`` does not produce an aggregation state.
    """
    return CombinedAggregatedFunction(Merge(), aggregated)
