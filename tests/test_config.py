import json

import pytest

from metric_translator.errors import ConfigError
from metric_translator.models.rules import Action
from metric_translator.run_translate import main
from metric_translator.utils.config import load_rules


RULES = [
    {"action": "rename_metrics", "mapping": {"cpu.pct": "cpu.usage"}},
    {"action": "multiply_float", "scale_factors_float": {"cpu.usage": 100.0}},
]


@pytest.fixture
def rules_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(RULES))
    return path


@pytest.fixture
def batch_file(tmp_path):
    path = tmp_path / "batch.json"
    path.write_text(json.dumps({"datapoints": [{"metric": "cpu.pct", "timestamp": 1, "value": 0.5}]}))
    return path


def test_load_rules_from_list(rules_file):
    rules = load_rules(str(rules_file))
    assert [tr.action for tr in rules] == [Action.RENAME_METRICS, Action.MULTIPLY_FLOAT]


def test_load_rules_with_selector(tmp_path):
    path = tmp_path / "collector.json"
    path.write_text(json.dumps({"exporters": {"signalfx": {"translation_rules": RULES}}}))
    rules = load_rules(str(path), "$.exporters.signalfx.translation_rules")
    assert len(rules) == 2


def test_load_rules_from_env(rules_file, monkeypatch):
    monkeypatch.setenv("TRANSLATION_RULES_PATH", str(rules_file))
    assert len(load_rules()) == 2


@pytest.mark.parametrize(
    "content,selector,message",
    [
        ("{not json", "$", "invalid JSON"),
        (json.dumps({"rules": RULES}), "$", "must be a list"),
        (json.dumps({"rules": RULES}), "$.translation_rules", "no translation rules"),
        (json.dumps([{"action": "divide_int", "scale_factors_int": {"m": 0}}]), "$", "has 0 value"),
    ],
)
def test_load_rules_errors(tmp_path, content, selector, message):
    path = tmp_path / "rules.json"
    path.write_text(content)
    with pytest.raises(ConfigError, match=message):
        load_rules(str(path), selector)


def test_load_rules_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_rules(str(tmp_path / "missing.json"))


def test_cli_translates_batch(rules_file, batch_file, capsys):
    assert main([str(rules_file), str(batch_file)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out) == 1
    assert out[0]["metric"] == "cpu.usage"
    assert out[0]["value"]["double_value"] == pytest.approx(50.0)


def test_cli_rejects_bad_config(tmp_path, batch_file):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([{"action": "rename_metrics"}]))
    assert main([str(path), str(batch_file)]) == 1


def test_cli_usage(capsys):
    assert main([]) == 2
    assert "usage" in capsys.readouterr().err


def test_cli_unknown_log_level_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("LOG_LEVEL", "VERBOSE")
    assert main([]) == 2
    assert "usage" in capsys.readouterr().err


def test_cli_drops_non_finite_values_from_output(rules_file, tmp_path, capsys):
    path = tmp_path / "batch.json"
    path.write_text(
        '{"datapoints": [{"metric": "cpu.pct", "timestamp": 1, "value": NaN},'
        ' {"metric": "cpu.pct", "timestamp": 2, "value": 0.5}]}'
    )
    assert main([str(rules_file), str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [dp["timestamp"] for dp in out] == [2]
