from typing import Any, Iterable, List, Mapping, Union

import structlog
from pydantic import ValidationError

from metric_translator.errors import ConfigError
from metric_translator.models.rules import Action, AggregationMethod, MetricOperator, MetricValueType, Rule

logger = structlog.get_logger(__name__)


def coerce_rules(raw_rules: Iterable[Union[Rule, Mapping[str, Any]]]) -> List[Rule]:
    """Turn raw rule dicts into Rule models, reporting schema errors as ConfigError"""
    rules = []
    for i, raw in enumerate(raw_rules):
        if isinstance(raw, Rule):
            rules.append(raw)
            continue
        try:
            rules.append(Rule.model_validate(raw))
        except ValidationError as e:
            raise ConfigError(f"invalid translation rule #{i}: {e}") from e
    return rules


def validate_translation_rules(rules: Iterable[Rule]) -> None:
    rename_dimension_keys_found = False
    for tr in rules:
        action = tr.action
        if action == Action.RENAME_DIMENSION_KEYS:
            _require_mapping(tr)
            if rename_dimension_keys_found:
                raise ConfigError(f'only one "{action.value}" translation rule can be specified')
            rename_dimension_keys_found = True
        elif action == Action.RENAME_METRICS:
            _require_mapping(tr)
        elif action == Action.MULTIPLY_INT:
            _require_int_factors(tr)
        elif action == Action.DIVIDE_INT:
            _require_int_factors(tr)
            for metric, divisor in tr.scale_factors_int.items():
                if divisor == 0:
                    raise ConfigError(
                        f'"scale_factors_int" for "{action.value}" translation rule has 0 value for "{metric}" metric'
                    )
        elif action == Action.MULTIPLY_FLOAT:
            if tr.scale_factors_float is None:
                raise ConfigError(f'field "scale_factors_float" is required for "{action.value}" translation rule')
        elif action == Action.COPY_METRICS:
            _require_mapping(tr)
            if tr.dimension_key and not tr.dimension_values:
                raise ConfigError(
                    f'"dimension_values" has to be provided if "dimension_key" is set '
                    f'for "{action.value}" translation rule'
                )
        elif action == Action.SPLIT_METRIC:
            if not tr.metric_name or not tr.dimension_key or tr.mapping is None:
                raise ConfigError(
                    f'fields "metric_name", "dimension_key", and "mapping" are required '
                    f'for "{action.value}" translation rule'
                )
        elif action == Action.CONVERT_VALUES:
            if tr.types_mapping is None:
                raise ConfigError(f'field "types_mapping" is required for "{action.value}" translation rule')
            for metric, value_type in tr.types_mapping.items():
                if value_type not in (MetricValueType.INT, MetricValueType.DOUBLE):
                    raise ConfigError(f'invalid value type "{value_type}" set for metric "{metric}" in "types_mapping"')
        elif action == Action.AGGREGATE_METRIC:
            if not tr.metric_name or tr.aggregation_method is None or not tr.dimensions:
                raise ConfigError(
                    f'fields "metric_name", "dimensions", and "aggregation_method" are required '
                    f'for "{action.value}" translation rule'
                )
            if tr.aggregation_method not in (AggregationMethod.COUNT, AggregationMethod.SUM):
                raise ConfigError(
                    f'invalid "aggregation_method": "{tr.aggregation_method}" provided '
                    f'for "{action.value}" translation rule'
                )
        elif action == Action.CALCULATE_NEW_METRIC:
            if not (tr.metric_name and tr.operand1_metric and tr.operand2_metric and tr.operator):
                raise ConfigError(
                    f'fields "metric_name", "operand1_metric", "operand2_metric", and "operator" are required '
                    f'for "{action.value}" translation rule'
                )
            if tr.operator != MetricOperator.DIVISION:
                raise ConfigError(f'invalid operator "{tr.operator}" for "{action.value}" translation rule')
        else:
            raise ConfigError(f'unknown "action" value: "{action}"')
    logger.debug("translation rules validated")


def _require_mapping(tr: Rule) -> None:
    if tr.mapping is None:
        raise ConfigError(f'field "mapping" is required for "{tr.action.value}" translation rule')


def _require_int_factors(tr: Rule) -> None:
    if tr.scale_factors_int is None:
        raise ConfigError(f'field "scale_factors_int" is required for "{tr.action.value}" translation rule')
