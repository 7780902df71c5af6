import signal
from collections.abc import Callable, Generator
from threading import RLock
from time import monotonic
from typing import Any
from uuid import uuid4

import pytest

from intervalrunner.scheduler import Scheduler


class RecordingTask:
    """
    Task recording the iterations it is called with. ``behaviour`` decides the return value for each iteration, and
    ``stop_at`` stops the scheduler from inside the task on the given iteration.
    """

    def __init__(self, behaviour: Callable[[int], Any] | None = None, stop_at: int | None = None) -> None:
        self.iterations: list[int] = []
        self.called_times: list[float] = []
        self.behaviour = behaviour
        self.stop_at = stop_at
        self.scheduler: Scheduler | None = None
        self.lock = RLock()

    def __call__(self, iteration: int) -> Any:
        with self.lock:
            self.iterations.append(iteration)
            self.called_times.append(monotonic())

        if self.stop_at is not None and iteration >= self.stop_at and self.scheduler is not None:
            self.scheduler.stop()

        return self.behaviour(iteration) if self.behaviour else None

    @property
    def delays(self) -> list[float]:
        return [b - a for a, b in zip(self.called_times, self.called_times[1:])]


@pytest.fixture
def metrics_name() -> str:
    return f"test_{uuid4().hex}"


@pytest.fixture
def restore_signal_handlers() -> Generator[dict[signal.Signals, Any], None, None]:
    handlers = {sig: signal.getsignal(sig) for sig in (signal.SIGTERM, signal.SIGINT)}
    yield handlers
    for sig, handler in handlers.items():
        signal.signal(sig, handler)
