#  Copyright 2026 The interval-runner authors
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

"""
Prometheus metrics for the scheduler loop.

The ``SchedulerMetrics`` class holds the metrics reported by a running scheduler. Since Prometheus doesn't allow
multiple metrics with the same name, create it through ``safe_get``:

.. code-block:: python

    metrics = safe_get(SchedulerMetrics, name="my_runner", version="1.0.0")
    run(task, 5, metrics=metrics)

The metrics can be served over HTTP with the ``metrics.server`` section of the config file.
"""

from typing import Any, Dict, Type, TypeVar

from prometheus_client import Counter, Gauge, Histogram, Info

_metrics_singularities: Dict[type, Any] = {}

T = TypeVar("T")


def safe_get(cls: Type[T], *args: Any, **kwargs: Any) -> T:
    """
    A factory for instances of metrics collections.

    Creates an instance of the given class on the first call and stores it, any subsequent calls with the same class
    as argument will return the same instance.

    .. code-block:: python

        >>> a = safe_get(SchedulerMetrics)  # This will create a new instance of SchedulerMetrics
        >>> b = safe_get(SchedulerMetrics)  # This will return the same instance
        >>> a is b
        True

    Args:
        cls: Metrics class to either create or get a cached version of

    Returns:
        An instance of given class
    """
    if cls not in _metrics_singularities:
        _metrics_singularities[cls] = cls(*args, **kwargs)

    return _metrics_singularities[cls]


class SchedulerMetrics:
    """
    Metrics collection for a scheduler run.

    The collection includes the following metrics:
     * start_time:              Startup time (unix epoch)
     * finish_time:             Finish time (unix epoch) of the last graceful stop
     * iterations:              Number of completed task invocations
     * failures:                Number of task invocations that failed
     * iteration_duration:      Time spent inside the task, per invocation
     * last_iteration:          Iteration number of the latest invocation

    **Note that only one instance of this class (or any subclass) can exist simultaneously**

    Args:
        name: Name of the runner, used to prefix metric names
        version: Version reported in the info metric
    """

    def __init__(self, name: str = "interval_runner", version: str = "unknown") -> None:
        name = name.strip().replace(" ", "_").replace("-", "_")

        self.start_time = Gauge(f"{name}_start_time", "Timestamp (seconds) of when the scheduler last started")
        self.finish_time = Gauge(f"{name}_finish_time", "Timestamp (seconds) of when the scheduler last stopped cleanly")

        self.iterations = Counter(f"{name}_iterations", "Number of completed task invocations")
        self.failures = Counter(f"{name}_failures", "Number of failed task invocations")
        self.iteration_duration = Histogram(f"{name}_iteration_duration_seconds", "Time spent running the task")
        self.last_iteration = Gauge(f"{name}_last_iteration", "Iteration number of the latest task invocation")

        self.info = Info(f"{name}_info", "Information about the running scheduler")
        self.info.info({"version": version, "name": name})
