"""
Serialization of expression trees.

Expression trees are handed to the SQL renderer as nested dictionaries. This
module converts any node of the IR (columns, aggregates, combinators,
conditions, modifiers) into a JSON-compatible structure.
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from aggir.column.expressions import ExpressionColumn
from aggir.column.types import ArrayType, DType, StateType, TupleType


def to_dict(node: Any) -> dict[str, Any]:
    """
    Convert an IR node to a dictionary.

    Every dataclass node becomes ``{"type": <class name>, <field>: ...}``.
    Expression nodes additionally carry their ``result_type``.

    Parameters
    ----------
    node : Any
        A column, expression, combinator, condition or modifier.

    Returns
    -------
    dict[str, Any]
        JSON-compatible representation of the node and its subtree.

    Raises
    ------
    TypeError
        If ``node`` is not a dataclass node.

    Examples
    --------
    >>> to_dict(TableColumn("price", DType.FLOAT))
    {'type': 'TableColumn', 'name': 'price', 'sql_type': 'float'}
    """
    if not is_dataclass(node) or isinstance(node, type):
        raise TypeError(f"Cannot serialize non-node value of type: {type(node)}")
    return _serialize_value(node)


def to_json(node: Any, indent: int | None = 2) -> str:
    """
    Serialize an IR node to JSON.

    Parameters
    ----------
    node : Any
        The node to serialize.
    indent : int | None
        JSON indentation level. None for compact output.

    Returns
    -------
    str
        JSON string representation.
    """
    return json.dumps(to_dict(node), indent=indent)


def _serialize_value(value: Any) -> Any:
    """
    Serialize a value for JSON output.

    Parameters
    ----------
    value : Any
        The value to serialize.

    Returns
    -------
    Any
        JSON-serializable representation.
    """
    if value is None:
        return None
    if isinstance(value, (DType, ArrayType, TupleType, StateType)):
        return value.to_string()
    if isinstance(value, Enum):
        return {"__type__": type(value).__name__, "value": value.name}
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {"type": type(value).__name__}
        for field_ in fields(value):
            if not field_.init:
                continue
            result[field_.name] = _serialize_value(getattr(value, field_.name))
        if isinstance(value, ExpressionColumn):
            result["result_type"] = value.result_type.to_string()
        return result

    return str(value)
