from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Action(str, Enum):
    RENAME_DIMENSION_KEYS = "rename_dimension_keys"
    RENAME_METRICS = "rename_metrics"
    MULTIPLY_INT = "multiply_int"
    DIVIDE_INT = "divide_int"
    MULTIPLY_FLOAT = "multiply_float"
    CONVERT_VALUES = "convert_values"
    COPY_METRICS = "copy_metrics"
    SPLIT_METRIC = "split_metric"
    AGGREGATE_METRIC = "aggregate_metric"
    CALCULATE_NEW_METRIC = "calculate_new_metric"


class MetricValueType(str, Enum):
    INT = "int"
    DOUBLE = "double"


class AggregationMethod(str, Enum):
    COUNT = "count"
    SUM = "sum"


class MetricOperator(str, Enum):
    DIVISION = "/"


class Rule(BaseModel):
    """One translation instruction. Only the fields its action needs are read."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: Action
    # rename_dimension_keys, rename_metrics, copy_metrics, split_metric
    mapping: Optional[Dict[str, str]] = None
    # multiply_int, divide_int: metric name -> factor
    scale_factors_int: Optional[Dict[str, int]] = None
    # multiply_float: metric name -> factor
    scale_factors_float: Optional[Dict[str, float]] = None
    metric_name: str = ""
    # split_metric key, copy_metrics filter key
    dimension_key: str = ""
    dimension_values: Optional[FrozenSet[str]] = None
    types_mapping: Optional[Dict[str, MetricValueType]] = None
    aggregation_method: Optional[AggregationMethod] = None
    dimensions: List[str] = []
    operand1_metric: str = ""
    operand2_metric: str = ""
    operator: Optional[MetricOperator] = None

    @field_validator("dimension_values", mode="before")
    @classmethod
    def _allowed_values(cls, v: Any) -> Any:
        # {"value": true} form keeps only enabled values
        if isinstance(v, dict):
            return frozenset(k for k, enabled in v.items() if enabled)
        return v
