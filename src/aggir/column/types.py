"""
SQL type descriptors for the aggir column IR.

This module defines the runtime type tags carried by every column and
expression node:
- DType: Enumeration of scalar SQL value types
- ArrayType, TupleType, StateType: Composite descriptors
- Schema: Ordered collection of column names and their types
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Union
from uuid import UUID

if TYPE_CHECKING:
    from aggir.column.expressions import TableColumn


class DType(Enum):
    """
    Scalar SQL value types a column can hold.

    These are the leaves of every type descriptor; arrays, tuples and
    aggregation states are built on top of them.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"
    UUID = "uuid"

    def to_python_type(self) -> type:
        """
        Return the corresponding Python type.

        Returns
        -------
        type
            The Python type values of this DType decode to.
        """
        mapping = {
            DType.STRING: str,
            DType.INT: int,
            DType.FLOAT: float,
            DType.DECIMAL: Decimal,
            DType.BOOL: bool,
            DType.DATE: date,
            DType.DATETIME: datetime,
            DType.UUID: UUID,
        }
        return mapping[self]

    def is_numeric(self) -> bool:
        """
        Check if values of this type support arithmetic.

        Returns
        -------
        bool
            True for INT, FLOAT and DECIMAL.
        """
        return self in (DType.INT, DType.FLOAT, DType.DECIMAL)

    def is_integer(self) -> bool:
        """Check if this is the integer type."""
        return self is DType.INT

    def is_temporal(self) -> bool:
        """Check if this is a date or date-time type."""
        return self in (DType.DATE, DType.DATETIME)

    def to_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class ArrayType:
    """
    A sequence of values of a single element type.

    Parameters
    ----------
    element : SqlType
        Type of every element in the sequence.

    Examples
    --------
    >>> ArrayType(DType.INT).to_string()
    'Array(int)'
    """

    element: SqlType

    def is_numeric(self) -> bool:
        return False

    def is_integer(self) -> bool:
        return False

    def to_string(self) -> str:
        return f"Array({self.element.to_string()})"

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class TupleType:
    """
    A fixed-length positional tuple of types.

    Parameters
    ----------
    elements : tuple[SqlType, ...]
        The type of each position, in order.
    """

    elements: tuple[SqlType, ...]

    def is_numeric(self) -> bool:
        return False

    def is_integer(self) -> bool:
        return False

    def to_string(self) -> str:
        inner = ", ".join(element.to_string() for element in self.elements)
        return f"Tuple({inner})"

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class StateType:
    """
    An opaque, mergeable partial-aggregation state.

    The state never holds a value inside the IR; it only records which
    logical type the state will produce once merged.

    Parameters
    ----------
    inner : SqlType
        The type produced by merging the state.

    Examples
    --------
    >>> StateType(DType.FLOAT).to_string()
    'AggregateState(float)'
    """

    inner: SqlType

    def is_numeric(self) -> bool:
        return False

    def is_integer(self) -> bool:
        return False

    def to_string(self) -> str:
        return f"AggregateState({self.inner.to_string()})"

    def __str__(self) -> str:
        return self.to_string()


SqlType = Union[DType, ArrayType, TupleType, StateType]


def as_sql_type(value: SqlType | str) -> SqlType:
    """
    Normalize a type given either as a descriptor or a DType value string.

    Parameters
    ----------
    value : SqlType | str
        A descriptor, or a string such as ``"int"`` or ``"string"``.

    Returns
    -------
    SqlType
        The descriptor.

    Raises
    ------
    ValueError
        If the string does not name a DType.
    """
    if isinstance(value, str):
        return DType(value)
    return value


@dataclass(frozen=True)
class Schema:
    """
    An ordered collection of column names and their SQL types.

    Schema is immutable. It is the usual way to obtain typed column
    references for a table without spelling out every type by hand.

    Parameters
    ----------
    columns : tuple[tuple[str, SqlType], ...]
        Ordered sequence of (column_name, sql_type) pairs.

    Examples
    --------
    >>> schema = Schema.from_dict({"id": DType.INT, "tags": ArrayType(DType.INT)})
    >>> schema.column_names()
    ['id', 'tags']
    >>> schema.column("tags").sql_type
    ArrayType(element=<DType.INT: 'int'>)

    Raises
    ------
    ValueError
        If the column names are not unique.
    """

    columns: tuple[tuple[str, SqlType], ...]

    def __post_init__(self) -> None:
        names = [name for name, _ in self.columns]
        if len(names) != len(set(names)):
            duplicates = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate column names: {set(duplicates)}")

    @classmethod
    def from_dict(cls, d: dict[str, SqlType | str]) -> Schema:
        """
        Create schema from a dictionary.

        Parameters
        ----------
        d : dict[str, SqlType | str]
            Mapping of column names to types. Types can be descriptors or
            DType value strings like "int", "string", etc.

        Returns
        -------
        Schema
            A Schema object.
        """
        return cls(tuple((name, as_sql_type(sql_type)) for name, sql_type in d.items()))

    def column_names(self) -> list[str]:
        """Return list of column names in order."""
        return [name for name, _ in self.columns]

    def type_of(self, col: str) -> SqlType:
        """
        Get the SQL type of a specific column.

        Raises
        ------
        KeyError
            If the column does not exist.
        """
        for name, sql_type in self.columns:
            if name == col:
                return sql_type
        raise KeyError(f"Column not found: {col}")

    def has_column(self, col: str) -> bool:
        return col in self.column_names()

    def column(self, col: str) -> TableColumn:
        """
        Get a typed reference to a column of this schema.

        Parameters
        ----------
        col : str
            Column name.

        Returns
        -------
        TableColumn
            A leaf reference carrying the column's type.

        Raises
        ------
        KeyError
            If the column does not exist.
        """
        from aggir.column.expressions import TableColumn

        return TableColumn(col, self.type_of(col))

    def to_dict(self) -> dict[str, str]:
        """Convert schema to a mapping of column names to type strings."""
        return {name: sql_type.to_string() for name, sql_type in self.columns}

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[tuple[str, SqlType]]:
        return iter(self.columns)

    def __contains__(self, col: str) -> bool:
        return self.has_column(col)
