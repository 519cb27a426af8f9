from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class MetricType(Enum):
    GAUGE = "GAUGE"
    COUNTER = "COUNTER"
    ENUM = "ENUM"
    CUMULATIVE_COUNTER = "CUMULATIVE_COUNTER"


@dataclass
class Value:
    int_value: Optional[int] = None
    double_value: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.int_value is None and self.double_value is None

    @classmethod
    def of(cls, raw: Any) -> "Value":
        """Build a value from a plain python number, keeping its representation"""
        if raw is None:
            return cls()
        if isinstance(raw, bool):
            raise TypeError("boolean is not a metric value")
        if isinstance(raw, int):
            return cls(int_value=raw)
        if isinstance(raw, float):
            return cls(double_value=raw)
        raise TypeError(f"unsupported metric value: {raw!r}")


@dataclass
class Dimension:
    key: str
    value: str


@dataclass
class DataPoint:
    metric: str
    timestamp: int
    value: Value = field(default_factory=Value)
    dimensions: List[Dimension] = field(default_factory=list)
    metric_type: Optional[MetricType] = None
    source: str = ""

    def find_dimension(self, key: str) -> Optional[Dimension]:
        for d in self.dimensions:
            if d.key == key:
                return d
        return None

    def to_dict(self) -> Dict[str, Any]:
        value: Dict[str, Any] = {}
        if self.value.int_value is not None:
            value["int_value"] = self.value.int_value
        if self.value.double_value is not None:
            value["double_value"] = self.value.double_value
        return {
            "metric": self.metric,
            "timestamp": self.timestamp,
            "value": value,
            "dimensions": [{"key": d.key, "value": d.value} for d in self.dimensions],
            "metric_type": self.metric_type.value if self.metric_type else None,
            "source": self.source,
        }
