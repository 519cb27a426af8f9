import copy
import math
from typing import Callable, Dict, List, Optional

import structlog

from metric_translator.models.datapoint import DataPoint, Value
from metric_translator.models.rules import Action, MetricOperator, MetricValueType, Rule
from metric_translator.translator.aggregation import aggregate_datapoints

logger = structlog.get_logger(__name__)

Batch = List[DataPoint]
ActionHandler = Callable[[Rule, Batch], Batch]


def rename_dimension_keys(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        for d in dp.dimensions:
            if d.key in tr.mapping:
                d.key = tr.mapping[d.key]
    return batch


def rename_metrics(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        if dp.metric in tr.mapping:
            dp.metric = tr.mapping[dp.metric]
    return batch


def multiply_int(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        multiplier = tr.scale_factors_int.get(dp.metric)
        if multiplier is not None and dp.value.int_value is not None:
            dp.value.int_value = dp.value.int_value * multiplier
    return batch


def divide_int(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        divisor = tr.scale_factors_int.get(dp.metric)
        if divisor is not None and dp.value.int_value is not None:
            dp.value.int_value = truncating_div(dp.value.int_value, divisor)
    return batch


def multiply_float(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        multiplier = tr.scale_factors_float.get(dp.metric)
        if multiplier is not None and dp.value.double_value is not None:
            dp.value.double_value = dp.value.double_value * multiplier
    return batch


def convert_values(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        new_type = tr.types_mapping.get(dp.metric)
        if new_type is not None:
            convert_metric_value(dp, new_type)
    return batch


def copy_metrics(tr: Rule, batch: Batch) -> Batch:
    copies = []
    for dp in batch:
        new_metric = tr.mapping.get(dp.metric)
        if new_metric is None:
            continue
        new_dp = copy_metric(tr, dp, new_metric)
        if new_dp is not None:
            copies.append(new_dp)
    batch.extend(copies)
    return batch


def split_metric(tr: Rule, batch: Batch) -> Batch:
    for dp in batch:
        if dp.metric == tr.metric_name:
            split_datapoint(dp, tr.dimension_key, tr.mapping)
    return batch


def aggregate_metric(tr: Rule, batch: Batch) -> Batch:
    to_aggregate = []
    others = []
    for dp in batch:
        if dp.metric == tr.metric_name:
            to_aggregate.append(dp)
        else:
            # may include datapoints added by earlier rules, e.g. copies
            others.append(dp)
    if not to_aggregate:
        return others
    return others + aggregate_datapoints(to_aggregate, tr.dimensions, tr.aggregation_method)


def calculate_new_metric(tr: Rule, batch: Batch) -> Batch:
    operand1 = operand2 = None
    for dp in batch:
        if operand1 is None and dp.metric == tr.operand1_metric:
            operand1 = dp
        elif operand2 is None and dp.metric == tr.operand2_metric:
            operand2 = dp
    new_dp = calculate_datapoint(tr, operand1, operand2)
    if new_dp is not None:
        batch.append(new_dp)
    return batch


ACTION_HANDLERS: Dict[Action, ActionHandler] = {
    Action.RENAME_DIMENSION_KEYS: rename_dimension_keys,
    Action.RENAME_METRICS: rename_metrics,
    Action.MULTIPLY_INT: multiply_int,
    Action.DIVIDE_INT: divide_int,
    Action.MULTIPLY_FLOAT: multiply_float,
    Action.CONVERT_VALUES: convert_values,
    Action.COPY_METRICS: copy_metrics,
    Action.SPLIT_METRIC: split_metric,
    Action.AGGREGATE_METRIC: aggregate_metric,
    Action.CALCULATE_NEW_METRIC: calculate_new_metric,
}


def truncating_div(dividend: int, divisor: int) -> int:
    """Integer division rounding toward zero"""
    quotient = abs(dividend) // abs(divisor)
    return -quotient if (dividend < 0) != (divisor < 0) else quotient


def convert_metric_value(dp: DataPoint, new_type: MetricValueType) -> None:
    if new_type == MetricValueType.INT:
        val = dp.value.double_value
        if val is None:
            logger.debug('only datapoint of "double" type can be converted to int', metric=dp.metric)
            return
        if not math.isfinite(val):
            logger.debug("non-finite double value cannot be converted to int", metric=dp.metric, value=val)
            return
        dp.value = Value(int_value=int(val))
    elif new_type == MetricValueType.DOUBLE:
        val = dp.value.int_value
        if val is None:
            logger.debug('only datapoint of "int" type can be converted to double', metric=dp.metric)
            return
        dp.value = Value(double_value=float(val))


def copy_metric(tr: Rule, dp: DataPoint, new_metric: str) -> Optional[DataPoint]:
    if tr.dimension_key:
        d = dp.find_dimension(tr.dimension_key)
        if d is None or d.value not in tr.dimension_values:
            return None
    new_dp = copy.deepcopy(dp)
    new_dp.metric = new_metric
    return new_dp


def split_datapoint(dp: DataPoint, dimension_key: str, mapping: Dict[str, str]) -> None:
    """Rename dp to mapping[value of dimension_key] and drop that dimension.

    Only the first dimension with the key is considered. The datapoint is left
    as is when the key is missing or its value is not mapped.
    """
    for i, d in enumerate(dp.dimensions):
        if d.key != dimension_key:
            continue
        new_name = mapping.get(d.value)
        if new_name is None:
            return
        dp.metric = new_name
        del dp.dimensions[i]
        return


def calculate_datapoint(
    tr: Rule, operand1: Optional[DataPoint], operand2: Optional[DataPoint]
) -> Optional[DataPoint]:
    log = logger.bind(metric_name=tr.metric_name)
    if operand1 is None:
        log.warning(
            "calculate_new_metric: no matching datapoint found for operand1 to calculate new metric",
            operand1_metric=tr.operand1_metric,
        )
        return None
    if operand1.value.int_value is None:
        log.warning("calculate_new_metric: operand1 has no int value", operand1_metric=tr.operand1_metric)
        return None
    if operand2 is None:
        log.warning(
            "calculate_new_metric: no matching datapoint found for operand2 to calculate new metric",
            operand2_metric=tr.operand2_metric,
        )
        return None
    if operand2.value.int_value is None:
        log.warning("calculate_new_metric: operand2 has no int value", operand2_metric=tr.operand2_metric)
        return None
    if tr.operator == MetricOperator.DIVISION and operand2.value.int_value == 0:
        log.warning("calculate_new_metric: attempt to divide by zero, skipping", operand2_metric=tr.operand2_metric)
        return None

    if tr.operator == MetricOperator.DIVISION:
        result = operand1.value.int_value / operand2.value.int_value
    else:
        log.warning("calculate_new_metric: unsupported operator", operator=str(tr.operator))
        return None

    new_dp = copy.deepcopy(operand1)
    new_dp.metric = tr.metric_name
    new_dp.value = Value(double_value=result)
    return new_dp
