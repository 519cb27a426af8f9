import json
import math
import sys
from typing import List, Optional

import structlog

from metric_translator.errors import ConfigError
from metric_translator.extractors.records import RecordExtractor
from metric_translator.models.datapoint import DataPoint
from metric_translator.translator.translator import MetricTranslator
from metric_translator.utils.config import load_json, load_rules
from metric_translator.utils.log import configure_logging

logger = structlog.get_logger(__name__)

USAGE = "usage: metric-translate RULES_FILE BATCH_FILE"


def translate_file(rules_path: str, batch_path: str, selector: Optional[str] = None) -> List[DataPoint]:
    translator = MetricTranslator(load_rules(rules_path, selector))
    datapoints = RecordExtractor().extract(load_json(batch_path))
    logger.debug(f"Extracted {len(datapoints)} datapoints from {batch_path}")
    return translator.transform(datapoints)


def serializable(datapoints: List[DataPoint]) -> List[DataPoint]:
    """Drop datapoints whose double value has no JSON representation (NaN, inf)"""
    results = []
    for dp in datapoints:
        double_value = dp.value.double_value
        if double_value is not None and not math.isfinite(double_value):
            logger.warning("Non-finite datapoint value dropped from output", metric=dp.metric, value=double_value)
            continue
        results.append(dp)
    return results


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()
    if len(argv) != 2:
        print(USAGE, file=sys.stderr)
        return 2

    rules_path, batch_path = argv
    try:
        results = translate_file(rules_path, batch_path)
    except ConfigError as e:
        logger.error("Invalid translation configuration", error=str(e))
        return 1

    print(json.dumps([dp.to_dict() for dp in serializable(results)], indent=2, allow_nan=False))
    logger.info(f"Translated batch into {len(results)} datapoints")
    return 0


if __name__ == "__main__":
    sys.exit(main())
