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
import logging
import math
import re
import time
from dataclasses import dataclass, field
from datetime import timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from threading import TIMEOUT_MAX
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from prometheus_client import start_http_server

from intervalrunner.exceptions import InvalidConfigError

_logger = logging.getLogger(__name__)


class TimeIntervalConfig(yaml.YAMLObject):
    """
    Configuration parameter for setting a time interval, such as ``200ms``, ``30s``, ``5m``, ``2h`` or ``1d``. A plain
    number is read as seconds.
    """

    def __init__(self, expression: Union[str, int, float]) -> None:
        self._interval, self._expression = TimeIntervalConfig._parse_expression(str(expression))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeIntervalConfig):
            return NotImplemented
        return self._interval == other._interval

    def __hash__(self) -> int:
        return hash(self._interval)

    @classmethod
    def _parse_expression(cls, expression: str) -> Tuple[float, str]:
        # First, try to parse pure number and assume seconds
        try:
            seconds = float(expression)
        except ValueError:
            pass
        else:
            if not math.isfinite(seconds):
                raise InvalidConfigError(f"Interval must be a finite number, got {expression}")
            return seconds, f"{expression}s"

        match = re.fullmatch(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)", expression.strip())
        if not match:
            raise InvalidConfigError(f"Invalid interval pattern: {expression}")

        number, unit = match.groups()
        numeric_unit = {"ms": 0.001, "s": 1, "m": 60, "h": 60 * 60, "d": 60 * 60 * 24}[unit]

        return float(number) * numeric_unit, expression

    @property
    def seconds(self) -> float:
        return self._interval

    @property
    def timedelta(self) -> timedelta:
        return timedelta(seconds=self._interval)

    def __float__(self) -> float:
        return float(self._interval)

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return self._expression


class CastableInt(int):
    """
    Represents an integer in a config schema. Difference from regular int is that the
    value if this type can be either a string or an integer in the yaml file.
    """

    def __new__(cls, value: Any) -> "CastableInt":
        # Booleans and floats are rejected rather than implicitly truncated
        if isinstance(value, bool) or not isinstance(value, (int, str, bytes)):
            raise ValueError(f"CastableInt cannot be created form value {value!r} of type {type(value)!r}.")

        return super().__new__(cls, value)


class PortNumber(CastableInt):
    """
    A valid port number (0 to 65535), given as either str or int.
    """

    def __new__(cls, value: Any) -> "PortNumber":
        value = super().__new__(cls, value)

        if not (0 <= value <= 65535):
            raise ValueError(f"Port number must be between 0 and 65535. Got: {value}.")

        return value


@dataclass
class _ConsoleLoggingConfig:
    level: str = "INFO"


@dataclass
class _FileLoggingConfig:
    path: str
    level: str = "INFO"
    retention: int = 7


@dataclass
class LoggingConfig:
    """
    Logging settings, such as log levels and path to log file. ``fields`` are key/value pairs attached to every message
    logged by the application, for example ``application`` or ``network``.
    """

    console: Optional[_ConsoleLoggingConfig] = field(default_factory=_ConsoleLoggingConfig)
    file: Optional[_FileLoggingConfig] = None
    fields: Dict[str, str] = field(default_factory=dict)

    def setup_logging(self, suppress_console: bool = False) -> None:
        """
        Sets up the default logger in the logging package to be configured as defined in this config object

        Args:
            suppress_console: Don't log to console regardless of config.
        """
        fmt = logging.Formatter(
            "%(asctime)s.%(msecs)03d UTC [%(levelname)-8s] %(threadName)s - %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )
        # Set logging to UTC
        fmt.converter = time.gmtime

        root = logging.getLogger()

        if self.console and not suppress_console and not root.hasHandlers():
            console_handler = logging.StreamHandler()
            console_handler.setLevel(self.console.level)
            console_handler.setFormatter(fmt)

            root.addHandler(console_handler)

            if root.getEffectiveLevel() > console_handler.level:
                root.setLevel(console_handler.level)

        if self.file:
            path = Path(self.file.path)
            path.parent.mkdir(parents=True, exist_ok=True)

            for handler in root.handlers:
                if getattr(handler, "baseFilename", None) == str(path.absolute()):
                    return

            file_handler = TimedRotatingFileHandler(
                filename=path,
                when="midnight",
                utc=True,
                backupCount=self.file.retention,
            )
            file_handler.setLevel(self.file.level)
            file_handler.setFormatter(fmt)

            root.addHandler(file_handler)

            if root.getEffectiveLevel() > file_handler.level:
                root.setLevel(file_handler.level)


@dataclass
class SchedulerConfig:
    """
    How often the task runs, and whether termination signals stop the loop gracefully.
    """

    interval: TimeIntervalConfig = TimeIntervalConfig("1s")
    handle_signals: bool = True

    def __post_init__(self) -> None:
        if self.interval.seconds <= 0:
            raise InvalidConfigError(f"Scheduler interval must be positive, got {self.interval}")
        if self.interval.seconds > TIMEOUT_MAX:
            raise InvalidConfigError(f"Scheduler interval can be at most {TIMEOUT_MAX} seconds, got {self.interval}")


@dataclass
class _PromServerConfig:
    port: PortNumber = PortNumber(9000)
    host: str = "0.0.0.0"


@dataclass
class MetricsConfig:
    """
    Optional Prometheus HTTP server exposing the scheduler metrics.
    """

    server: Optional[_PromServerConfig] = None

    def start_server(self) -> None:
        if self.server:
            start_http_server(self.server.port, self.server.host)
            _logger.info(f"Serving metrics on {self.server.host}:{self.server.port}")


@dataclass
class BaseConfig:
    """
    Root of a config file, containing ``LoggingConfig``, ``SchedulerConfig`` and ``MetricsConfig``
    """

    version: Optional[Union[str, int]] = None
    logger: LoggingConfig = field(default_factory=LoggingConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
