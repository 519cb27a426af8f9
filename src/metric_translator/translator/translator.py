from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Union

import structlog

from metric_translator.models.datapoint import DataPoint
from metric_translator.models.rules import Action, Rule
from metric_translator.translator.actions import ACTION_HANDLERS
from metric_translator.translator.validation import coerce_rules, validate_translation_rules

logger = structlog.get_logger(__name__)


class MetricTranslator:
    """Applies an ordered list of translation rules to batches of datapoints.

    Rules are validated once here; a ConfigError means no translator exists.
    The translator keeps no state between batches, so one instance can be shared
    by threads translating different batches.
    """

    def __init__(self, rules: Iterable[Union[Rule, Mapping[str, Any]]]):
        rules = coerce_rules(rules)
        validate_translation_rules(rules)
        self.rules = tuple(rules)
        # used for dimension renaming in metadata
        self.dimensions_map = _create_dimensions_map(self.rules)
        logger.debug("metric translator created", rules=len(self.rules))

    def transform(self, datapoints: List[DataPoint]) -> List[DataPoint]:
        processed = datapoints
        for tr in self.rules:
            processed = ACTION_HANDLERS[tr.action](tr, processed)
        return processed

    def translate_dimension(self, orig: str) -> str:
        return self.dimensions_map.get(orig, orig)


def _create_dimensions_map(rules: Iterable[Rule]) -> Mapping[str, str]:
    for tr in rules:
        if tr.action == Action.RENAME_DIMENSION_KEYS:
            return MappingProxyType(dict(tr.mapping))
    return MappingProxyType({})
