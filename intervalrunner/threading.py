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
Synchronization primitives shared between the scheduler loop and signal handlers.
"""

import logging
import signal
from threading import Condition
from time import monotonic
from types import FrameType, TracebackType
from typing import Any, Dict, Iterable, Optional, Tuple, Type

_logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: Tuple[signal.Signals, ...] = tuple(
    getattr(signal, name) for name in ("SIGHUP", "SIGQUIT", "SIGTERM", "SIGINT") if hasattr(signal, name)
)


class CancellationToken:
    """
    Abstraction for a hierarchical cancellation token.

    The token is a flag that can be set exactly once, and that any number of threads (or a signal handler) can wait
    for. Setting it more than once has no further effect. Use ``create_child_token`` to create a token that will be
    cancelled if the parent is cancelled, but can be canceled alone without affecting the parent token.
    """

    def __init__(self, condition: Optional[Condition] = None) -> None:
        self._cv: Condition = condition or Condition()
        self._is_cancelled_int: bool = False
        self._parent: Optional["CancellationToken"] = None

    def __repr__(self) -> str:
        cls = self.__class__
        status = "cancelled" if self.is_cancelled else "not cancelled"
        return f"<{cls.__module__}.{cls.__qualname__} at {id(self):#x}: {status}>"

    @property
    def is_cancelled(self) -> bool:
        """
        ``True`` if the token has been cancelled, or if some parent token has been cancelled.
        """
        return self._is_cancelled_int or self._parent is not None and self._parent.is_cancelled

    def cancel(self) -> None:
        """
        Cancel the token, notifying any waiting threads.
        """
        # No point in cancelling if a parent token is already canceled.
        if self.is_cancelled:
            return

        with self._cv:
            self._is_cancelled_int = True
            self._cv.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the token is cancelled, or until ``timeout`` seconds have passed.

        Args:
            timeout: Maximum number of seconds to wait. Waits forever if ``None``.

        Returns:
            ``True`` if the token was cancelled, ``False`` if the wait timed out.
        """
        endtime = None
        if timeout is not None:
            endtime = monotonic() + timeout

        with self._cv:
            while not self.is_cancelled:
                if endtime is None:
                    self._cv.wait()
                    continue

                remaining_time = endtime - monotonic()
                if remaining_time <= 0.0:
                    return False
                self._cv.wait(remaining_time)
        return True

    def create_child_token(self) -> "CancellationToken":
        child = CancellationToken(self._cv)
        child._parent = self
        return child


class SignalSubscription:
    """
    Context manager that cancels a token when the process receives one of the given signals.

    Handlers are installed on enter, and the previous handlers are put back on exit no matter how the block is left.
    Signals that can't be registered (unsupported on the platform, or when not running in the main thread) are logged
    and skipped.

    .. code-block:: python

        token = CancellationToken()
        with SignalSubscription(token):
            while not token.is_cancelled:
                ...

    Args:
        cancellation_token: Token to cancel on signal delivery.
        signals: Signals to subscribe to. Defaults to hang-up, quit, terminate and interrupt.
    """

    def __init__(
        self,
        cancellation_token: CancellationToken,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        self._cancellation_token = cancellation_token
        self._signals = list(signals)
        self._previous_handlers: Dict[signal.Signals, Any] = {}

    @property
    def active(self) -> bool:
        return bool(self._previous_handlers)

    def _handler(self, sig_num: int, frame: Optional[FrameType]) -> None:
        if self._cancellation_token.is_cancelled:
            return
        _logger.warning(f"{signal.Signals(sig_num).name} received, stopping after the current iteration")
        self._cancellation_token.cancel()

    def __enter__(self) -> "SignalSubscription":
        for sig in self._signals:
            try:
                self._previous_handlers[sig] = signal.signal(sig, self._handler)
            except (ValueError, OSError) as e:
                _logger.warning(f"Could not register handler for {sig.name}: {e!s}")
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        while self._previous_handlers:
            sig, previous = self._previous_handlers.popitem()
            # None means the previous handler was not installed from Python
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
