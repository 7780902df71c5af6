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
A minimal periodic task runner: call a function at a fixed interval until the process is told to stop.
"""

__version__ = "1.0.0"

from .scheduler import (
    ContinueDefault,
    ContinueWithOverride,
    Fail,
    Failed,
    Scheduler,
    SchedulerState,
    Stopped,
    run,
)
from .threading import CancellationToken, SignalSubscription

__all__ = [
    "CancellationToken",
    "ContinueDefault",
    "ContinueWithOverride",
    "Fail",
    "Failed",
    "Scheduler",
    "SchedulerState",
    "SignalSubscription",
    "Stopped",
    "run",
]
