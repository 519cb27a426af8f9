from typing import Any, List, Optional

import structlog

from .base import BaseExtractor
from metric_translator.models.datapoint import DataPoint, Dimension, MetricType, Value
from metric_translator.utils.json_path import PathNotFound, find_first
from metric_translator.utils.time import to_millis

logger = structlog.get_logger(__name__)


class RecordExtractor(BaseExtractor):
    """Reads datapoint records such as

        {"metric": "cpu.pct", "timestamp": "2024-01-02T00:00:00Z",
         "value": 0.42, "dimensions": {"host": "a"}}

    from the list found at base_path. Bad records are skipped.
    """

    def __init__(self, base_path: str = "$.datapoints"):
        self.base_path = base_path

    def extract(self, raw_data: Any) -> List[DataPoint]:
        if isinstance(raw_data, list):
            records = raw_data
        else:
            try:
                records = find_first(raw_data, self.base_path)
            except PathNotFound as e:
                logger.warning("no datapoint records found", base_path=self.base_path, error=str(e))
                return []
        if not isinstance(records, list):
            logger.warning("datapoint records are not a list", base_path=self.base_path)
            return []

        results = []
        for i, record in enumerate(records):
            dp = self.extract_record(record)
            if dp is None:
                logger.warning("datapoint record skipped", index=i)
                continue
            results.append(dp)
        return results

    @staticmethod
    def extract_record(record: Any) -> Optional[DataPoint]:
        if not isinstance(record, dict) or not record.get("metric"):
            return None
        timestamp = to_millis(record.get("timestamp"))
        if timestamp is None:
            return None
        try:
            value = _extract_value(record.get("value"))
            metric_type = MetricType(record["metric_type"]) if record.get("metric_type") else None
            dimensions = _extract_dimensions(record.get("dimensions"))
        except (TypeError, ValueError) as e:
            logger.debug("invalid datapoint record", metric=record.get("metric"), error=str(e))
            return None
        return DataPoint(
            metric=str(record["metric"]),
            timestamp=timestamp,
            value=value,
            dimensions=dimensions,
            metric_type=metric_type,
            source=record.get("source") or "",
        )


def _extract_value(raw: Any) -> Value:
    if isinstance(raw, dict):
        int_value = raw.get("int_value")
        double_value = raw.get("double_value")
        return Value(
            int_value=_as_int(int_value) if int_value is not None else None,
            double_value=float(double_value) if double_value is not None else None,
        )
    return Value.of(raw)


def _as_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("boolean is not an int value")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    raise ValueError(f"int_value must be integral, got {raw!r}")


def _extract_dimensions(raw: Any) -> List[Dimension]:
    if not raw:
        return []
    if isinstance(raw, dict):
        return [Dimension(key=str(k), value=str(v)) for k, v in raw.items()]
    if not isinstance(raw, list):
        raise TypeError(f"unsupported dimensions: {raw!r}")
    dims = []
    for d in raw:
        if isinstance(d, dict) and "key" in d:
            dims.append(Dimension(key=str(d["key"]), value=str(d.get("value", ""))))
    return dims
