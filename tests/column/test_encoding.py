"""
Tests for aggir.column.encoding module.
"""

import pytest

from aggir.column import (
    ArrayType,
    BitmaskToArray,
    BitmaskToList,
    DType,
    Hex,
    TableColumn,
    Unhex,
    bitmask_to_array,
    bitmask_to_list,
    hex_,
    ref,
    unhex,
    uuid_num_to_string,
    uuid_string_to_num,
)


class TestHex:
    """Tests for Hex and Unhex."""

    def test_hex_of_supported_types(self, title: TableColumn, amount: TableColumn, created_at: TableColumn) -> None:
        for column in (title, amount, created_at):
            node = hex_(column)
            assert isinstance(node, Hex)
            assert node.result_type == DType.STRING
            assert node.name == column.name

    def test_hex_rejects_arrays(self, tags: TableColumn) -> None:
        with pytest.raises(TypeError, match="hex requires a column of type"):
            hex_(tags)

    def test_unhex_default_string(self, title: TableColumn) -> None:
        node = unhex(title)
        assert isinstance(node, Unhex)
        assert node.result_type == DType.STRING

    def test_unhex_decoded_type(self, title: TableColumn) -> None:
        assert unhex(title, DType.INT).result_type == DType.INT

    def test_unhex_requires_string(self, amount: TableColumn) -> None:
        with pytest.raises(TypeError, match="unhex"):
            unhex(amount)


class TestUUID:
    """Tests for the UUID conversions."""

    def test_uuid_string_to_num(self, title: TableColumn) -> None:
        assert uuid_string_to_num(title).result_type == DType.INT

    def test_uuid_num_to_string(self) -> None:
        column = ref("session", DType.UUID)
        assert uuid_num_to_string(column).result_type == DType.STRING

    def test_uuid_rejects_numbers(self, price: TableColumn) -> None:
        with pytest.raises(TypeError):
            uuid_string_to_num(price)


class TestBitmask:
    """Tests for the bitmask conversions."""

    def test_bitmask_to_list(self, amount: TableColumn) -> None:
        node = bitmask_to_list(amount)
        assert isinstance(node, BitmaskToList)
        assert node.result_type == DType.STRING

    def test_bitmask_to_array(self, amount: TableColumn) -> None:
        node = bitmask_to_array(amount)
        assert isinstance(node, BitmaskToArray)
        assert node.result_type == ArrayType(DType.INT)
        assert node.children() == (amount,)

    def test_bitmask_requires_integer(self, price: TableColumn) -> None:
        with pytest.raises(TypeError, match="integer column"):
            bitmask_to_array(price)
        with pytest.raises(TypeError, match="integer column"):
            bitmask_to_list(price)
