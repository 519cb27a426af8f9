"""
Pytest configuration and fixtures for all tests.
"""
import pytest
import structlog

from metric_translator.models.datapoint import DataPoint, Dimension, Value


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test (e.g. the CLI) applied."""
    yield
    structlog.reset_defaults()


def make_dp(metric, value=None, dimensions=None, timestamp=1700000000000, **kwargs):
    """Build a datapoint; dimensions is a list of (key, value) pairs."""
    return DataPoint(
        metric=metric,
        timestamp=timestamp,
        value=Value.of(value),
        dimensions=[Dimension(key=k, value=v) for k, v in (dimensions or [])],
        **kwargs,
    )


def dims(dp):
    return [(d.key, d.value) for d in dp.dimensions]


@pytest.fixture
def cpu_cores_batch():
    """Per-cpu datapoints for two hosts."""
    return [
        make_dp("machine_cpu_cores", 0.22, [("cpu", "cpu1"), ("host", "host1")]),
        make_dp("machine_cpu_cores", 0.11, [("cpu", "cpu2"), ("host", "host1")]),
        make_dp("machine_cpu_cores", 0.33, [("cpu", "cpu1"), ("host", "host2")]),
    ]
