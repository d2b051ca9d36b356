"""
Column and expression node hierarchy for the aggir column IR.

This module defines the base abstractions every expression tree is built from:
- Column: Identity of anything referenceable in a query
- EmptyColumn: The absent target of nodes that do not read a column
- TableColumn: A typed reference to a physical column (leaf of every tree)
- ExpressionColumn: A computed node over exactly one target column

It also holds the capability checks constructors use to reject columns whose
SQL type does not fit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, TypeVar

from aggir.column.types import ArrayType, DType, SqlType, StateType, as_sql_type

# Python value type of a column or expression
T = TypeVar("T")
V = TypeVar("V")
O = TypeVar("O")  # noqa: E741
# Value types satisfying the numeric capability bound
N = TypeVar("N", int, float, Decimal)


class Column(ABC):
    """
    Abstract identity of something referenceable in a query.

    Columns are immutable and may be shared by any number of expression
    trees. Every column exposes a ``name``.
    """

    name: str

    @abstractmethod
    def children(self) -> tuple[Column, ...]:
        """
        Return child nodes.

        Returns
        -------
        tuple[Column, ...]
            Columns or expressions this node is computed from. Empty for leaves.
        """
        pass

    def collect_columns(self) -> frozenset[str]:
        """
        Collect the names of all table columns referenced by this node.

        Returns
        -------
        frozenset[str]
            Names of every TableColumn leaf reachable from this node.
        """
        columns: set[str] = set()
        self._collect_columns_recursive(columns)
        return frozenset(columns)

    def _collect_columns_recursive(self, columns: set[str]) -> None:
        if isinstance(self, TableColumn):
            columns.add(self.name)
        for child in self.children():
            child._collect_columns_recursive(columns)


@dataclass(frozen=True)
class EmptyColumn(Column):
    """
    The absent column.

    Used as the target of ``count()`` without arguments and of combined
    aggregate functions, whose value is derived from another aggregate.
    """

    name: str = ""

    def children(self) -> tuple[Column, ...]:
        return ()


@dataclass(frozen=True)
class TableColumn(Column, Generic[T]):
    """
    A typed reference to a physical column.

    The type parameter ``T`` is the Python value type for static checkers;
    ``sql_type`` is the descriptor constructors validate against.

    Parameters
    ----------
    name : str
        The column name.
    sql_type : SqlType
        The SQL type of the values held by the column.

    Examples
    --------
    >>> price = TableColumn("price", DType.FLOAT)
    >>> price.name
    'price'
    >>> tags = TableColumn("tags", ArrayType(DType.INT))
    >>> tags.sql_type.to_string()
    'Array(int)'
    """

    name: str
    sql_type: SqlType

    def children(self) -> tuple[Column, ...]:
        return ()

    def to_string(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.to_string()


class ExpressionColumn(Column, Generic[O]):
    """
    Abstract computed node wrapping exactly one target column.

    Subclasses declare which column they are computed over and the SQL type
    of the value they produce. Constructing a node never inspects the values
    of its target; it only records the reference.
    """

    @property
    @abstractmethod
    def target_column(self) -> Column:
        """The column this expression is computed over."""
        pass

    @property
    @abstractmethod
    def result_type(self) -> SqlType:
        """The SQL type of the value this expression produces."""
        pass

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.target_column.name

    @property
    def sql_type(self) -> SqlType:
        return self.result_type

    def children(self) -> tuple[Column, ...]:
        if isinstance(self.target_column, EmptyColumn):
            return ()
        return (self.target_column,)


# ============================================================================
# Capability checks
# ============================================================================


def require_numeric(column: TableColumn, function: str) -> None:
    """
    Reject a column whose type does not support arithmetic.

    Raises
    ------
    TypeError
        If the column's SQL type is not numeric.
    """
    if not column.sql_type.is_numeric():
        raise TypeError(
            f"{function} requires a numeric column, got {column.name!r} of type {column.sql_type}"
        )


def require_integer(column: TableColumn, function: str) -> None:
    """
    Reject a column that does not hold integers.

    Raises
    ------
    TypeError
        If the column's SQL type is not INT.
    """
    if not column.sql_type.is_integer():
        raise TypeError(
            f"{function} requires an integer column, got {column.name!r} of type {column.sql_type}"
        )


def require_array(column: Column, sql_type: SqlType, function: str) -> SqlType:
    """
    Reject a non-array type and return the element type of an array type.

    Parameters
    ----------
    column : Column
        The column the type belongs to (used in the error message).
    sql_type : SqlType
        The type to check.
    function : str
        Name of the function imposing the requirement.

    Returns
    -------
    SqlType
        The element type of the array.

    Raises
    ------
    TypeError
        If ``sql_type`` is not an ArrayType.
    """
    if not isinstance(sql_type, ArrayType):
        raise TypeError(
            f"{function} requires an array column, got {column.name!r} of type {sql_type}"
        )
    return sql_type.element


def require_state(sql_type: SqlType, function: str) -> SqlType:
    """
    Reject a non-state type and return the type the state merges into.

    Raises
    ------
    TypeError
        If ``sql_type`` is not a StateType.
    """
    if not isinstance(sql_type, StateType):
        raise TypeError(f"{function} requires an aggregation state, got {sql_type}")
    return sql_type.inner


def require_type(column: TableColumn, allowed: tuple[DType, ...], function: str) -> None:
    """
    Reject a column whose type is not one of ``allowed``.

    Raises
    ------
    TypeError
        If the column's SQL type is not listed.
    """
    if column.sql_type not in allowed:
        expected = ", ".join(dtype.value for dtype in allowed)
        raise TypeError(
            f"{function} requires a column of type {expected}, "
            f"got {column.name!r} of type {column.sql_type}"
        )


# ============================================================================
# Convenience constructors
# ============================================================================


def ref(name: str, sql_type: SqlType | str) -> TableColumn:
    """
    Create a typed column reference.

    Parameters
    ----------
    name : str
        Column name.
    sql_type : SqlType | str
        The column's type, as a descriptor or a DType value string.

    Returns
    -------
    TableColumn
        A leaf column reference.

    Examples
    --------
    >>> ref("user_id", "int")
    TableColumn(name='user_id', sql_type=<DType.INT: 'int'>)
    """
    return TableColumn(name, as_sql_type(sql_type))
