"""
Pytest configuration and shared fixtures for aggir tests.
"""

import pytest

from aggir.column import (
    ArrayType,
    DType,
    Schema,
    TableColumn,
    ref,
)


@pytest.fixture
def price() -> TableColumn:
    """A floating-point price column."""
    return ref("price", DType.FLOAT)


@pytest.fixture
def amount() -> TableColumn:
    """An integer amount column."""
    return ref("amount", DType.INT)


@pytest.fixture
def user_id() -> TableColumn:
    """An integer user id column."""
    return ref("user_id", DType.INT)


@pytest.fixture
def title() -> TableColumn:
    """A string column."""
    return ref("title", DType.STRING)


@pytest.fixture
def tags() -> TableColumn:
    """An array-of-integers column."""
    return ref("tags", ArrayType(DType.INT))


@pytest.fixture
def created_at() -> TableColumn:
    """A date-time column."""
    return ref("created_at", DType.DATETIME)


@pytest.fixture
def sample_schema() -> Schema:
    """Create a sample schema for testing."""
    return Schema.from_dict({
        "id": DType.INT,
        "title": DType.STRING,
        "price": DType.FLOAT,
        "tags": ArrayType(DType.INT),
        "created_at": DType.DATETIME,
    })

