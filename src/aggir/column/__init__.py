"""
aggir column IR.

This package provides typed expression nodes for analytic aggregate functions.
It includes SQL type descriptors, column references, the aggregate catalog,
quantile-family functions, combinators, row conditions, encoding functions and
tree serialization.

Example Usage
-------------
>>> from aggir.column import ArrayType, DType, for_each, merge, ref, state, sum_
>>>
>>> amount = ref("amount", DType.INT)
>>> merged = merge(state(sum_(amount)))
>>> merged.result_type
<DType.FLOAT: 'float'>
>>>
>>> tags = ref("tags", ArrayType(DType.INT))
>>> for_each(tags, sum_).result_type
ArrayType(element=<DType.FLOAT: 'float'>)
"""

# Types
from aggir.column.types import ArrayType, DType, Schema, SqlType, StateType, TupleType

# Column hierarchy
from aggir.column.expressions import (
    Column,
    EmptyColumn,
    ExpressionColumn,
    TableColumn,
    ref,
)

# Conditions
from aggir.column.conditions import (
    BooleanCondition,
    BooleanOp,
    Comparison,
    ComparisonOp,
    Condition,
    Literal,
    Negation,
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

# Aggregate catalog
from aggir.column.aggregations import (
    # Modifiers
    AnyModifier,
    SumModifier,
    UniqModifier,
    # Nodes
    AggregateFunction,
    AnyResult,
    Avg,
    Count,
    GroupArray,
    GroupUniqArray,
    Max,
    Min,
    Sum,
    SumMap,
    TimeSeries,
    Uniq,
    # Convenience constructors
    any_,
    any_heavy,
    any_last,
    average,
    count,
    group_array,
    group_uniq_array,
    max_,
    min_,
    sum_,
    sum_map,
    sum_overflown,
    time_series,
    uniq,
    uniq_combined,
    uniq_exact,
    uniq_hll12,
)

# Quantile family
from aggir.column.leveled import (
    DEFAULT_LEVEL,
    LevelAlgorithm,
    LevelModifier,
    LeveledAggregateFunction,
    Median,
    Quantile,
    Quantiles,
    levels_of,
    median,
    median_deterministic,
    median_exact,
    median_exact_weighted,
    median_tdigest,
    median_timing,
    median_timing_weighted,
    quantile,
    quantile_deterministic,
    quantile_exact,
    quantile_exact_weighted,
    quantile_tdigest,
    quantile_timing,
    quantile_timing_weighted,
    quantiles,
    quantiles_deterministic,
    quantiles_exact,
    quantiles_exact_weighted,
    quantiles_tdigest,
    quantiles_timing,
    quantiles_timing_weighted,
)

# Combinators
from aggir.column.combinators import (
    ArrayForEach,
    CombinatorArray,
    Combinator,
    CombinedAggregatedFunction,
    If,
    Merge,
    State,
    StateResult,
    agg_if,
    array,
    base_function,
    for_each,
    merge,
    over_elements,
    state,
)

# Encoding functions
from aggir.column.encoding import (
    BitmaskToArray,
    BitmaskToList,
    EncodingFunction,
    Hex,
    UUIDNumToString,
    UUIDStringToNum,
    Unhex,
    bitmask_to_array,
    bitmask_to_list,
    hex_,
    unhex,
    uuid_num_to_string,
    uuid_string_to_num,
)

# Serialization
from aggir.column.serialization import to_dict, to_json

__all__ = [
    # Types
    "ArrayType",
    "DType",
    "Schema",
    "SqlType",
    "StateType",
    "TupleType",
    # Column hierarchy
    "Column",
    "EmptyColumn",
    "ExpressionColumn",
    "TableColumn",
    "ref",
    # Conditions
    "BooleanCondition",
    "BooleanOp",
    "Comparison",
    "ComparisonOp",
    "Condition",
    "Literal",
    "Negation",
    "and_",
    "eq",
    "ge",
    "gt",
    "le",
    "lt",
    "ne",
    "not_",
    "or_",
    # Aggregate modifiers
    "AnyModifier",
    "SumModifier",
    "UniqModifier",
    # Aggregate nodes
    "AggregateFunction",
    "AnyResult",
    "Avg",
    "Count",
    "GroupArray",
    "GroupUniqArray",
    "Max",
    "Min",
    "Sum",
    "SumMap",
    "TimeSeries",
    "Uniq",
    # Aggregate constructors
    "any_",
    "any_heavy",
    "any_last",
    "average",
    "count",
    "group_array",
    "group_uniq_array",
    "max_",
    "min_",
    "sum_",
    "sum_map",
    "sum_overflown",
    "time_series",
    "uniq",
    "uniq_combined",
    "uniq_exact",
    "uniq_hll12",
    # Quantile family
    "DEFAULT_LEVEL",
    "LevelAlgorithm",
    "LevelModifier",
    "LeveledAggregateFunction",
    "Median",
    "Quantile",
    "Quantiles",
    "levels_of",
    "median",
    "median_deterministic",
    "median_exact",
    "median_exact_weighted",
    "median_tdigest",
    "median_timing",
    "median_timing_weighted",
    "quantile",
    "quantile_deterministic",
    "quantile_exact",
    "quantile_exact_weighted",
    "quantile_tdigest",
    "quantile_timing",
    "quantile_timing_weighted",
    "quantiles",
    "quantiles_deterministic",
    "quantiles_exact",
    "quantiles_exact_weighted",
    "quantiles_tdigest",
    "quantiles_timing",
    "quantiles_timing_weighted",
    # Combinators
    "ArrayForEach",
    "CombinatorArray",
    "Combinator",
    "CombinedAggregatedFunction",
    "If",
    "Merge",
    "State",
    "StateResult",
    "agg_if",
    "array",
    "base_function",
    "for_each",
    "merge",
    "over_elements",
    "state",
    # Encoding functions
    "BitmaskToArray",
    "BitmaskToList",
    "EncodingFunction",
    "Hex",
    "UUIDNumToString",
    "UUIDStringToNum",
    "Unhex",
    "bitmask_to_array",
    "bitmask_to_list",
    "hex_",
    "unhex",
    "uuid_num_to_string",
    "uuid_string_to_num",
    # Serialization
    "to_dict",
    "to_json",
]
