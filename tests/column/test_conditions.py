"""
Tests for aggir.column.conditions module.

Covers:
- Literal type inference and rendering
- Comparisons, boolean combinations and negation
- Column collection from condition trees
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest

from aggir.column import (
    BooleanCondition,
    BooleanOp,
    Comparison,
    ComparisonOp,
    DType,
    Literal,
    Negation,
    TableColumn,
    and_,
    eq,
    ge,
    gt,
    le,
    lt,
    ne,
    not_,
    or_,
)


class TestLiteral:
    """Tests for the Literal class."""

    def test_literal_of_scalars(self) -> None:
        """Test type inference for Python scalars."""
        assert Literal.of(42).sql_type == DType.INT
        assert Literal.of(3.14).sql_type == DType.FLOAT
        assert Literal.of("hello").sql_type == DType.STRING
        assert Literal.of(True).sql_type == DType.BOOL
        assert Literal.of(Decimal("1.5")).sql_type == DType.DECIMAL

    def test_literal_of_temporal(self) -> None:
        """Test that datetimes are not mistaken for dates."""
        assert Literal.of(datetime(2024, 1, 1, 12, 0)).sql_type == DType.DATETIME
        assert Literal.of(date(2024, 1, 1)).sql_type == DType.DATE

    def test_literal_of_uuid(self) -> None:
        value = UUID("12345678-1234-5678-1234-567812345678")
        assert Literal.of(value).sql_type == DType.UUID

    def test_literal_of_unsupported(self) -> None:
        with pytest.raises(TypeError, match="Cannot create Literal"):
            Literal.of([1, 2])

    def test_to_string(self) -> None:
        assert Literal(42, DType.INT).to_string() == "42"
        assert Literal("hello", DType.STRING).to_string() == "'hello'"
        assert Literal.of(date(2024, 1, 1)).to_string() == "'2024-01-01'"
        assert Literal(None, DType.INT).to_string() == "NULL"

    def test_literal_of_none_needs_a_type(self) -> None:
        """Test that NULL must be given an explicit type."""
        with pytest.raises(TypeError, match="Cannot infer the type of NULL"):
            Literal.of(None)

    def test_quotes_are_escaped(self) -> None:
        """Test that embedded quotes and backslashes cannot end the literal."""
        assert Literal.of("O'Brien").to_string() == r"'O\'Brien'"
        assert Literal.of("a\\b").to_string() == r"'a\\b'"
        assert Literal.of("x' OR '1'='1").to_string() == r"'x\' OR \'1\'=\'1'"


class TestComparison:
    """Tests for comparison conditions."""

    def test_constructors(self, amount: TableColumn) -> None:
        """Test that each constructor records its operator."""
        assert eq(amount, 1).op == ComparisonOp.EQ
        assert ne(amount, 1).op == ComparisonOp.NE
        assert lt(amount, 1).op == ComparisonOp.LT
        assert le(amount, 1).op == ComparisonOp.LE
        assert gt(amount, 1).op == ComparisonOp.GT
        assert ge(amount, 1).op == ComparisonOp.GE

    def test_plain_values_become_literals(self, amount: TableColumn) -> None:
        comparison = gt(amount, 18)
        assert comparison.right == Literal(18, DType.INT)

    def test_column_to_column(self, amount: TableColumn, user_id: TableColumn) -> None:
        comparison = eq(amount, user_id)
        assert comparison.right is user_id
        assert comparison.to_string() == "(amount == user_id)"
        assert comparison.collect_columns() == frozenset({"amount", "user_id"})

    def test_to_string(self, title: TableColumn) -> None:
        assert str(eq(title, "Inception")) == "(title == 'Inception')"
        assert eq(title, "O'Brien").to_string() == r"(title == 'O\'Brien')"

    def test_symbols(self) -> None:
        assert ComparisonOp.LE.symbol() == "<="
        assert ComparisonOp.NE.symbol() == "!="


class TestBooleanConditions:
    """Tests for AND, OR and NOT."""

    def test_and(self, amount: TableColumn, price: TableColumn) -> None:
        condition = and_(gt(amount, 0), lt(price, 10.5))
        assert isinstance(condition, BooleanCondition)
        assert condition.op == BooleanOp.AND
        assert condition.to_string() == "((amount > 0) AND (price < 10.5))"

    def test_or_keeps_order(self, amount: TableColumn) -> None:
        first, second, third = eq(amount, 1), eq(amount, 2), eq(amount, 3)
        condition = or_(first, second, third)
        assert condition.conditions == (first, second, third)

    def test_requires_two_conditions(self, amount: TableColumn) -> None:
        with pytest.raises(ValueError, match="at least two conditions"):
            and_(gt(amount, 0))
        with pytest.raises(ValueError):
            or_()

    def test_not(self, amount: TableColumn) -> None:
        condition = not_(eq(amount, 0))
        assert isinstance(condition, Negation)
        assert condition.to_string() == "(NOT (amount == 0))"

    def test_collect_columns_nested(self, amount: TableColumn, price: TableColumn, title: TableColumn) -> None:
        condition = or_(and_(gt(amount, 0), lt(price, 5)), not_(eq(title, "x")))
        assert condition.collect_columns() == frozenset({"amount", "price", "title"})

    def test_conditions_are_hashable(self, amount: TableColumn) -> None:
        assert hash(gt(amount, 0)) == hash(Comparison(ComparisonOp.GT, amount, Literal(0, DType.INT)))
