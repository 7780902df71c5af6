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
Module containing the scheduler loop.

The scheduler calls a task over and over, with a fixed pause between each call, until the process receives a
termination signal. A task is any callable taking the iteration number (starting at 1) as its only argument. What the
task returns decides how long to wait before the next call:

 * ``None``: wait for the default interval
 * A duration (seconds as ``int`` or ``float``, a ``timedelta`` or a ``TimeIntervalConfig``): wait for that long
   instead, for this iteration only
 * One of ``ContinueDefault``, ``ContinueWithOverride`` or ``Fail``, if you prefer to be explicit

A task that raises an exception (or returns ``Fail``) stops the scheduler for good. There are no retries, a task that
wants to be resilient to errors must handle them itself.

.. code-block:: python

    from intervalrunner import run

    def poll(iteration: int) -> float | None:
        if not fetch_updates():
            return 30  # Back off for this iteration
        return None

    run(poll, 5)  # Never returns
"""

import contextlib
import logging
import math
import signal
import sys
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from threading import TIMEOUT_MAX
from time import monotonic
from typing import Callable, Iterable, NoReturn, Optional, Union

import arrow
from typing_extensions import assert_never

from intervalrunner.configtools.elements import TimeIntervalConfig
from intervalrunner.exceptions import InvalidArgumentError, TaskFailedError
from intervalrunner.metrics import SchedulerMetrics
from intervalrunner.threading import DEFAULT_SIGNALS, CancellationToken, SignalSubscription

__all__ = [
    "DEFAULT_SIGNALS",
    "ContinueDefault",
    "ContinueWithOverride",
    "Duration",
    "Fail",
    "Failed",
    "Outcome",
    "RunResult",
    "Scheduler",
    "SchedulerState",
    "Stopped",
    "Task",
    "run",
    "to_seconds",
]

_logger = logging.getLogger(__name__)

Duration = Union[int, float, timedelta, TimeIntervalConfig]


@dataclass(frozen=True)
class ContinueDefault:
    """
    Wait for the default interval before the next iteration.
    """


@dataclass(frozen=True)
class ContinueWithOverride:
    """
    Wait for ``delay`` seconds before the next iteration, instead of the default interval.
    """

    delay: float

    def __post_init__(self) -> None:
        _check_waitable(self.delay)
        if self.delay < 0:
            raise InvalidArgumentError(f"Override delay can't be negative, got {self.delay}")


@dataclass(frozen=True)
class Fail:
    """
    Stop the scheduler because of ``error``.
    """

    error: BaseException


Outcome = Union[ContinueDefault, ContinueWithOverride, Fail]
Task = Callable[[int], Union[None, Duration, Outcome]]


@dataclass(frozen=True)
class Stopped:
    """
    The scheduler stopped gracefully after a termination signal, having completed ``iterations`` task invocations.
    """

    iterations: int


@dataclass(frozen=True)
class Failed:
    """
    The task failed on ``iteration``. ``error`` wraps the exception raised by the task.
    """

    iteration: int
    error: TaskFailedError


RunResult = Union[Stopped, Failed]


class SchedulerState(Enum):
    IDLE = "idle"
    WAITING = "waiting"
    RUNNING = "running"
    SLEEPING = "sleeping"
    TERMINATED_SUCCESS = "terminated-success"
    TERMINATED_FAILURE = "terminated-failure"


def _check_waitable(seconds: float) -> float:
    if not math.isfinite(seconds):
        raise InvalidArgumentError(f"Duration must be finite, got {seconds}")
    if seconds > TIMEOUT_MAX:
        raise InvalidArgumentError(f"Duration can be at most {TIMEOUT_MAX} seconds, got {seconds}")
    return seconds


def to_seconds(duration: Duration) -> float:
    """
    Convert a duration to a number of seconds.

    Raises:
        InvalidArgumentError: If ``duration`` is not a supported duration type, is not finite or is too long to wait on
    """
    if isinstance(duration, TimeIntervalConfig):
        return _check_waitable(duration.seconds)
    if isinstance(duration, timedelta):
        return _check_waitable(duration.total_seconds())
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        try:
            return _check_waitable(float(duration))
        except OverflowError as e:
            raise InvalidArgumentError(f"Duration can be at most {TIMEOUT_MAX} seconds, got {duration}") from e
    raise InvalidArgumentError(f"Can't use {duration!r} of type {type(duration).__name__} as a duration")


class Scheduler:
    """
    Runs a task repeatedly, one invocation at a time, until cancelled.

    Cancellation happens either through a termination signal (hang-up, quit, terminate or interrupt by default), or by
    calling ``stop``. It is only checked between iterations, so a task invocation that has started is always allowed to
    finish. A cancellation that arrives while the scheduler is sleeping cuts the sleep short.

    Signal handlers are installed when ``run`` starts and the previous handlers are restored when it returns.

    Args:
        task: Function to call on every iteration, taking the iteration number as argument.
        default_interval: Time to sleep between iterations, unless the task returns an override. Must be positive.
        cancellation_token: Parent token. The scheduler stops if it is cancelled. A new token is created if omitted.
        handle_signals: Subscribe to termination signals while running. Signals can only be handled from the main
            thread.
        signals: Which signals to treat as a request to stop.
        metrics: Metrics collection to report iterations to.
        logger: Logger to use, defaults to the module logger.
    """

    def __init__(
        self,
        task: Task,
        default_interval: Duration,
        *,
        cancellation_token: Optional[CancellationToken] = None,
        handle_signals: bool = True,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
        metrics: Optional[SchedulerMetrics] = None,
        logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
    ) -> None:
        interval = to_seconds(default_interval)
        if interval <= 0:
            raise InvalidArgumentError(f"Default interval must be positive, got {default_interval}")

        self._task = task
        self._default_interval = interval
        self._cancellation_token = (
            cancellation_token.create_child_token() if cancellation_token else CancellationToken()
        )
        self._handle_signals = handle_signals
        self._signals = tuple(signals)
        self._metrics = metrics
        self.logger = logger or _logger

        self._iteration = 1
        self._state = SchedulerState.IDLE

    @property
    def default_interval(self) -> float:
        return self._default_interval

    @property
    def iteration(self) -> int:
        """
        The iteration number the next (or current) task invocation gets.
        """
        return self._iteration

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._cancellation_token

    def stop(self) -> None:
        """
        Ask the scheduler to stop once the current iteration is done. Has the same effect as a termination signal.
        """
        self._cancellation_token.cancel()

    def _invoke(self, iteration: int) -> Outcome:
        start = monotonic()
        try:
            result = self._task(iteration)

            if result is None:
                return ContinueDefault()
            if isinstance(result, (ContinueDefault, ContinueWithOverride, Fail)):
                return result
            return ContinueWithOverride(to_seconds(result))

        except Exception as e:
            return Fail(e)

        finally:
            if self._metrics:
                self._metrics.iteration_duration.observe(monotonic() - start)
                self._metrics.last_iteration.set(iteration)

    def _loop(self) -> RunResult:
        while True:
            self._state = SchedulerState.WAITING
            if self._cancellation_token.is_cancelled:
                self._state = SchedulerState.TERMINATED_SUCCESS
                self.logger.info(f"Stopping scheduler after {self._iteration - 1} iterations")
                if self._metrics:
                    self._metrics.finish_time.set_to_current_time()
                return Stopped(iterations=self._iteration - 1)

            iteration = self._iteration
            self._state = SchedulerState.RUNNING
            self.logger.debug(f"Starting iteration {iteration}")
            outcome = self._invoke(iteration)

            delay: float
            match outcome:
                case Fail(error=error):
                    self._state = SchedulerState.TERMINATED_FAILURE
                    if self._metrics:
                        self._metrics.failures.inc()
                    return Failed(iteration=iteration, error=TaskFailedError(iteration, error))

                case ContinueWithOverride(delay=override):
                    delay = override

                case ContinueDefault():
                    delay = self._default_interval

                case _:
                    assert_never(outcome)

            if self._metrics:
                self._metrics.iterations.inc()

            self._state = SchedulerState.SLEEPING
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(
                    f"Iteration {iteration} done. Next run at {arrow.utcnow().shift(seconds=delay).isoformat()}"
                )
            self._cancellation_token.wait(delay)
            self._iteration += 1

    def run(self) -> RunResult:
        """
        Run the task until cancelled or until the task fails.

        Task failures are returned, not raised, as a ``Failed`` result carrying the original exception.

        Returns:
            ``Stopped`` after a graceful stop, ``Failed`` if the task failed.
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError("A scheduler can only be run once")

        if self._metrics:
            self._metrics.start_time.set_to_current_time()
        self.logger.info(f"Starting scheduler with a default interval of {self._default_interval} seconds")

        subscription = (
            SignalSubscription(self._cancellation_token, self._signals)
            if self._handle_signals
            else contextlib.nullcontext()
        )
        with subscription:
            return self._loop()


def run(task: Task, default_interval: Duration, **kwargs: object) -> NoReturn:
    """
    Run ``task`` every ``default_interval`` until the process is asked to stop, then exit the process.

    Exits with status 0 once the current iteration is over if the process receives a termination signal. If the task
    fails, the stack trace is logged and the process exits with status 1.

    Args:
        task: Function to call on every iteration, taking the iteration number as argument.
        default_interval: Time to sleep between iterations, unless the task returns an override.
        kwargs: Passed on to ``Scheduler``.
    """
    scheduler = Scheduler(task, default_interval, **kwargs)  # type: ignore[arg-type]
    result = scheduler.run()

    match result:
        case Stopped():
            sys.exit(0)

        case Failed(error=error):
            scheduler.logger.critical(str(error), exc_info=error)
            sys.exit(1)

        case _:
            assert_never(result)
