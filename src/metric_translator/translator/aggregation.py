import copy
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from metric_translator.models.datapoint import DataPoint, Dimension, MetricType, Value
from metric_translator.models.rules import AggregationMethod

logger = structlog.get_logger(__name__)


def aggregation_key(dimensions: Sequence[Dimension], dimension_keys: Sequence[str]) -> Optional[Tuple[str, ...]]:
    """Compose a grouping key from the values of dimension_keys, in order.

    Returns None when the datapoint lacks any of the keys.
    """
    key = []
    for dk in dimension_keys:
        found = _first_with_key(dimensions, dk)
        if found is None:
            return None
        key.append(found.value)
    return tuple(key)


def filter_dimensions(dimensions: Sequence[Dimension], dimension_keys: Sequence[str]) -> List[Dimension]:
    result = []
    for dk in dimension_keys:
        found = _first_with_key(dimensions, dk)
        if found is not None:
            result.append(Dimension(key=found.key, value=found.value))
    return result


def aggregate_datapoints(
    dps: Sequence[DataPoint],
    dimension_keys: Sequence[str],
    method: AggregationMethod,
) -> List[DataPoint]:
    """Reduce datapoints of one metric to one datapoint per distinct dimension_keys values.

    The datapoints are assumed to share timestamp, metric type and source;
    the first member of each group is used as the template for the result.
    """
    groups: Dict[Tuple[str, ...], List[DataPoint]] = {}
    for dp in dps:
        key = aggregation_key(dp.dimensions, dimension_keys)
        if key is None:
            logger.debug(
                "datapoint is dropped, dimension to aggregate by is not found",
                metric=dp.metric,
                dimensions=list(dimension_keys),
            )
            continue
        groups.setdefault(key, []).append(dp)

    result = []
    for members in groups.values():
        dp = copy.deepcopy(members[0])
        dp.dimensions = filter_dimensions(dp.dimensions, dimension_keys)
        if method == AggregationMethod.COUNT:
            dp.metric_type = MetricType.GAUGE
            dp.value = Value(int_value=len(members))
        elif method == AggregationMethod.SUM:
            dp.value = _sum_values(members)
        result.append(dp)
    return result


def _sum_values(members: Sequence[DataPoint]) -> Value:
    # int and double contributions are accumulated separately
    total = Value()
    for dp in members:
        if dp.value.int_value is not None:
            total.int_value = (total.int_value or 0) + dp.value.int_value
        if dp.value.double_value is not None:
            total.double_value = (total.double_value or 0.0) + dp.value.double_value
    return total


def _first_with_key(dimensions: Sequence[Dimension], key: str) -> Optional[Dimension]:
    for d in dimensions:
        if d.key == key:
            return d
    return None
