from prometheus_client import REGISTRY

from intervalrunner import __version__
from intervalrunner.metrics import SchedulerMetrics, safe_get


class SafeGetMetrics(SchedulerMetrics):
    def __init__(self) -> None:
        super().__init__(name="safe get test", version=__version__)


def test_safe_get() -> None:
    first = safe_get(SafeGetMetrics)
    second = safe_get(SafeGetMetrics)

    assert first is second


def test_metric_names(metrics_name: str) -> None:
    metrics = SchedulerMetrics(name=metrics_name, version="1.2.3")

    metrics.iterations.inc()
    metrics.last_iteration.set(7)

    assert REGISTRY.get_sample_value(f"{metrics_name}_iterations_total") == 1
    assert REGISTRY.get_sample_value(f"{metrics_name}_last_iteration") == 7
    assert REGISTRY.get_sample_value(f"{metrics_name}_info_info", {"version": "1.2.3", "name": metrics_name}) == 1
