"""
Condition AST used by conditional aggregation.

The ``If`` combinator filters the rows an aggregate sees with a predicate.
This module defines that predicate tree:
- Literals (constants)
- Comparisons between a column and a column or literal
- Boolean combinations (AND, OR) and negation (NOT)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, auto
from typing import Any
from uuid import UUID

from aggir.column.expressions import Column
from aggir.column.types import DType, SqlType


class ComparisonOp(Enum):
    """
    Comparison operators for conditions.
    """

    EQ = auto()   # ==
    NE = auto()   # !=
    LT = auto()   # <
    LE = auto()   # <=
    GT = auto()   # >
    GE = auto()   # >=

    def symbol(self) -> str:
        """
        Get the symbolic representation of this operator.

        Returns
        -------
        str
            The symbol (e.g., "==", "<=").
        """
        symbols = {
            ComparisonOp.EQ: "==",
            ComparisonOp.NE: "!=",
            ComparisonOp.LT: "<",
            ComparisonOp.LE: "<=",
            ComparisonOp.GT: ">",
            ComparisonOp.GE: ">=",
        }
        return symbols[self]


class BooleanOp(Enum):
    """
    Boolean connectives for combining conditions.
    """

    AND = auto()
    OR = auto()

    def symbol(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    """
    A constant literal value.

    Parameters
    ----------
    value : Any
        The literal value.
    sql_type : SqlType
        The SQL type of the literal.

    Examples
    --------
    >>> Literal(42, DType.INT).to_string()
    '42'
    >>> Literal("hello", DType.STRING).to_string()
    "'hello'"
    """

    value: Any
    sql_type: SqlType

    def to_string(self) -> str:
        if self.value is None:
            return "NULL"
        elif self.sql_type in (DType.STRING, DType.DATE, DType.DATETIME, DType.UUID):
            escaped = str(self.value).replace("\\", "\\\\").replace("'", "\\'")
            return f"'{escaped}'"
        else:
            return str(self.value)

    def __str__(self) -> str:
        return self.to_string()

    @classmethod
    def of(cls, value: Any) -> Literal:
        """
        Create a Literal with inferred SQL type.

        Parameters
        ----------
        value : Any
            The value to wrap.

        Returns
        -------
        Literal
            A Literal with automatically inferred type.

        Raises
        ------
        TypeError
            If the value type is not supported, or the value is None and
            so carries no type.
        """
        if isinstance(value, bool):
            return cls(value, DType.BOOL)
        elif isinstance(value, int):
            return cls(value, DType.INT)
        elif isinstance(value, float):
            return cls(value, DType.FLOAT)
        elif isinstance(value, Decimal):
            return cls(value, DType.DECIMAL)
        elif isinstance(value, str):
            return cls(value, DType.STRING)
        # datetime is a subclass of date, so it is tested first
        elif isinstance(value, datetime):
            return cls(value, DType.DATETIME)
        elif isinstance(value, date):
            return cls(value, DType.DATE)
        elif isinstance(value, UUID):
            return cls(value, DType.UUID)
        elif value is None:
            raise TypeError("Cannot infer the type of NULL; use Literal(None, sql_type)")
        else:
            raise TypeError(f"Cannot create Literal from type: {type(value)}")


Operand = Column | Literal


@dataclass(frozen=True)
class Condition(ABC):
    """
    Abstract base class for all row predicates.
    """

    @abstractmethod
    def operands(self) -> tuple[Operand | Condition, ...]:
        """Return the direct operands of this condition."""
        pass

    @abstractmethod
    def to_string(self) -> str:
        pass

    def __str__(self) -> str:
        return self.to_string()

    def collect_columns(self) -> frozenset[str]:
        """
        Collect the names of all table columns this condition reads.

        Returns
        -------
        frozenset[str]
            Names of referenced table columns.
        """
        columns: set[str] = set()
        for operand in self.operands():
            if isinstance(operand, (Column, Condition)):
                columns |= operand.collect_columns()
        return frozenset(columns)


@dataclass(frozen=True)
class Comparison(Condition):
    """
    A comparison between two operands.

    Parameters
    ----------
    op : ComparisonOp
        The comparison operator.
    left : Operand
        The left operand.
    right : Operand
        The right operand.

    Examples
    --------
    >>> Comparison(ComparisonOp.GT, TableColumn("age", DType.INT), Literal(18, DType.INT)).to_string()
    '(age > 18)'
    """

    op: ComparisonOp
    left: Operand
    right: Operand

    def operands(self) -> tuple[Operand | Condition, ...]:
        return self.left, self.right

    def to_string(self) -> str:
        return f"({_operand_string(self.left)} {self.op.symbol()} {_operand_string(self.right)})"


@dataclass(frozen=True)
class BooleanCondition(Condition):
    """
    Two or more conditions joined by AND or OR.

    Parameters
    ----------
    op : BooleanOp
        The connective.
    conditions : tuple[Condition, ...]
        The combined conditions, in order.
    """

    op: BooleanOp
    conditions: tuple[Condition, ...]

    def operands(self) -> tuple[Operand | Condition, ...]:
        return self.conditions

    def to_string(self) -> str:
        joined = f" {self.op.symbol()} ".join(c.to_string() for c in self.conditions)
        return f"({joined})"


@dataclass(frozen=True)
class Negation(Condition):
    """
    Boolean negation of a condition.
    """

    condition: Condition

    def operands(self) -> tuple[Operand | Condition, ...]:
        return (self.condition,)

    def to_string(self) -> str:
        return f"(NOT {self.condition.to_string()})"


def _operand_string(operand: Operand) -> str:
    if isinstance(operand, Literal):
        return operand.to_string()
    return operand.name


def _as_operand(value: Any) -> Operand:
    if isinstance(value, (Column, Literal)):
        return value
    return Literal.of(value)


# ============================================================================
# Convenience constructors
# ============================================================================


def eq(left: Column, right: Any) -> Comparison:
    """
    Create an equality comparison (==).

    Parameters
    ----------
    left : Column
        Left operand.
    right : Any
        Right operand; plain Python values are wrapped as literals.

    Returns
    -------
    Comparison
        A comparison representing left == right.
    """
    return Comparison(ComparisonOp.EQ, left, _as_operand(right))


def ne(left: Column, right: Any) -> Comparison:
    """Create a not-equal comparison (!=)."""
    return Comparison(ComparisonOp.NE, left, _as_operand(right))


def lt(left: Column, right: Any) -> Comparison:
    """Create a less-than comparison (<)."""
    return Comparison(ComparisonOp.LT, left, _as_operand(right))


def le(left: Column, right: Any) -> Comparison:
    """Create a less-than-or-equal comparison (<=)."""
    return Comparison(ComparisonOp.LE, left, _as_operand(right))


def gt(left: Column, right: Any) -> Comparison:
    """Create a greater-than comparison (>)."""
    return Comparison(ComparisonOp.GT, left, _as_operand(right))


def ge(left: Column, right: Any) -> Comparison:
    """Create a greater-than-or-equal comparison (>=)."""
    return Comparison(ComparisonOp.GE, left, _as_operand(right))


def and_(*conditions: Condition) -> BooleanCondition:
    """
    Create a boolean AND of two or more conditions.

    Raises
    ------
    ValueError
        If fewer than two conditions are given.
    """
    if len(conditions) < 2:
        raise ValueError("and_ requires at least two conditions")
    return BooleanCondition(BooleanOp.AND, conditions)


def or_(*conditions: Condition) -> BooleanCondition:
    """
    Create a boolean OR of two or more conditions.

    Raises
    ------
    ValueError
        If fewer than two conditions are given.
    """
    if len(conditions) < 2:
        raise ValueError("or_ requires at least two conditions")
    return BooleanCondition(BooleanOp.OR, conditions)


def not_(condition: Condition) -> Negation:
    """Create a boolean NOT."""
    return Negation(condition)
