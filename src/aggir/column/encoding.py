"""
Encoding functions.

Passthrough expressions converting a column between encodings (hex, UUID,
bitmask). They carry no composition logic: each wraps one column and declares
a fixed result type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aggir.column.expressions import (
    Column,
    ExpressionColumn,
    O,
    TableColumn,
    require_integer,
    require_type,
)
from aggir.column.types import ArrayType, DType, SqlType

_HEX_COMPATIBLE = (DType.STRING, DType.INT, DType.FLOAT, DType.DECIMAL, DType.DATE, DType.DATETIME)
_STRING_LIKE = (DType.STRING, DType.UUID)


class EncodingFunction(ExpressionColumn[O]):
    """
    Base class for encoding functions over a single ``column``.
    """

    column: TableColumn

    @property
    def target_column(self) -> Column:
        return self.column


@dataclass(frozen=True)
class Hex(EncodingFunction[str]):
    """Hexadecimal representation of a string, number or date."""

    column: TableColumn

    def __post_init__(self) -> None:
        require_type(self.column, _HEX_COMPATIBLE, "hex")

    @property
    def result_type(self) -> SqlType:
        return DType.STRING


@dataclass(frozen=True)
class Unhex(EncodingFunction[O]):
    """
    Decode a hexadecimal string.

    Parameters
    ----------
    column : TableColumn[str]
        String column holding hexadecimal digits.
    decoded_type : SqlType
        Type the decoded bytes are read as.
    """

    column: TableColumn[str]
    decoded_type: SqlType = DType.STRING

    def __post_init__(self) -> None:
        require_type(self.column, (DType.STRING,), "unhex")

    @property
    def result_type(self) -> SqlType:
        return self.decoded_type


@dataclass(frozen=True)
class UUIDStringToNum(EncodingFunction[int]):
    """Convert a UUID in text form to its numeric form."""

    column: TableColumn

    def __post_init__(self) -> None:
        require_type(self.column, _STRING_LIKE, "UUIDStringToNum")

    @property
    def result_type(self) -> SqlType:
        return DType.INT


@dataclass(frozen=True)
class UUIDNumToString(EncodingFunction[str]):
    """Convert a UUID in numeric form to its text form."""

    column: TableColumn

    def __post_init__(self) -> None:
        require_type(self.column, _STRING_LIKE, "UUIDNumToString")

    @property
    def result_type(self) -> SqlType:
        return DType.STRING


@dataclass(frozen=True)
class BitmaskToList(EncodingFunction[str]):
    """Comma-separated list of the powers of two composing an integer."""

    column: TableColumn[int]

    def __post_init__(self) -> None:
        require_integer(self.column, "bitmaskToList")

    @property
    def result_type(self) -> SqlType:
        # TODO: settle the result type once the encoding layer defines it
        return DType.STRING


@dataclass(frozen=True)
class BitmaskToArray(EncodingFunction[list[int]]):
    """Array of the powers of two composing an integer."""

    column: TableColumn[int]

    def __post_init__(self) -> None:
        require_integer(self.column, "bitmaskToArray")

    @property
    def result_type(self) -> SqlType:
        return ArrayType(DType.INT)


# ============================================================================
# Convenience constructors
# ============================================================================


def hex_(column: TableColumn) -> Hex:
    return Hex(column)


def unhex(column: TableColumn[str], decoded_type: SqlType = DType.STRING) -> Unhex[Any]:
    return Unhex(column, decoded_type)


def uuid_string_to_num(column: TableColumn) -> UUIDStringToNum:
    return UUIDStringToNum(column)


def uuid_num_to_string(column: TableColumn) -> UUIDNumToString:
    return UUIDNumToString(column)


def bitmask_to_list(column: TableColumn[int]) -> BitmaskToList:
    return BitmaskToList(column)


def bitmask_to_array(column: TableColumn[int]) -> BitmaskToArray:
    return BitmaskToArray(column)
