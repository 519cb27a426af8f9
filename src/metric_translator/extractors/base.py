from abc import ABC, abstractmethod
from typing import Any, List

from metric_translator.models.datapoint import DataPoint


class BaseExtractor(ABC):
    @abstractmethod
    def extract(self, raw_data: Any) -> List[DataPoint]:
        """Extract datapoints from raw data"""
        pass
