import pytest

from conftest import dims, make_dp
from metric_translator.errors import ConfigError
from metric_translator.models.datapoint import Value
from metric_translator.translator.translator import MetricTranslator


def test_rename_then_scale():
    translator = MetricTranslator(
        [
            {"action": "rename_metrics", "mapping": {"cpu.pct": "cpu.usage"}},
            {"action": "multiply_float", "scale_factors_float": {"cpu.usage": 100.0}},
        ]
    )
    out = translator.transform([make_dp("cpu.pct", 0.42)])
    assert len(out) == 1
    assert out[0].metric == "cpu.usage"
    assert out[0].value.double_value == pytest.approx(42.0)


def test_rules_apply_in_order():
    batch = [make_dp("cpu.pct", 0.42)]
    # scaling is configured for the new name, so it only applies after the rename
    reversed_rules = MetricTranslator(
        [
            {"action": "multiply_float", "scale_factors_float": {"cpu.usage": 100.0}},
            {"action": "rename_metrics", "mapping": {"cpu.pct": "cpu.usage"}},
        ]
    )
    out = reversed_rules.transform(batch)
    assert out[0].metric == "cpu.usage"
    assert out[0].value.double_value == 0.42


def test_aggregate_keeps_other_points_first(cpu_cores_batch):
    translator = MetricTranslator(
        [
            {"action": "copy_metrics", "mapping": {"machine_cpu_cores": "machine_cpu_cores.raw"}},
            {
                "action": "aggregate_metric",
                "metric_name": "machine_cpu_cores",
                "aggregation_method": "count",
                "dimensions": ["host"],
            },
        ]
    )
    out = translator.transform([make_dp("uptime", 5)] + cpu_cores_batch)
    assert [dp.metric for dp in out] == [
        "uptime",
        "machine_cpu_cores.raw",
        "machine_cpu_cores.raw",
        "machine_cpu_cores.raw",
        "machine_cpu_cores",
        "machine_cpu_cores",
    ]
    assert [dp.value.int_value for dp in out[-2:]] == [2, 1]


def test_derived_metric_after_scaling():
    translator = MetricTranslator(
        [
            {"action": "divide_int", "scale_factors_int": {"memory.used": 1024, "memory.total": 1024}},
            {
                "action": "calculate_new_metric",
                "metric_name": "memory.utilization",
                "operand1_metric": "memory.used",
                "operand2_metric": "memory.total",
                "operator": "/",
            },
        ]
    )
    out = translator.transform(
        [make_dp("memory.used", 10240, [("host", "h1")]), make_dp("memory.total", 40960, [("host", "h1")])]
    )
    assert out[-1].metric == "memory.utilization"
    assert out[-1].value == Value(double_value=0.25)
    assert dims(out[-1]) == [("host", "h1")]


def test_rename_dimension_keys_rule_feeds_dimension_lookup():
    translator = MetricTranslator(
        [
            {"action": "rename_metrics", "mapping": {}},
            {"action": "rename_dimension_keys", "mapping": {"k8s.pod.uid": "kubernetes_pod_uid"}},
        ]
    )
    assert translator.translate_dimension("k8s.pod.uid") == "kubernetes_pod_uid"
    assert translator.translate_dimension("host") == "host"


def test_dimension_lookup_without_rename_rule():
    translator = MetricTranslator([])
    assert translator.translate_dimension("k8s.pod.uid") == "k8s.pod.uid"
    assert translator.transform([]) == []


def test_translator_is_stateless_between_batches():
    translator = MetricTranslator([{"action": "multiply_int", "scale_factors_int": {"m": 2}}])
    assert translator.transform([make_dp("m", 3)])[0].value.int_value == 6
    assert translator.transform([make_dp("m", 3)])[0].value.int_value == 6


def test_failed_construction_produces_no_translator():
    translator = None
    with pytest.raises(ConfigError):
        translator = MetricTranslator([{"action": "divide_int", "scale_factors_int": {"m": 0}}])
    assert translator is None
